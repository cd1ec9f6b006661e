"""
Application services of the POS core.
"""

from .pos_service import PosService

__all__ = ["PosService"]
