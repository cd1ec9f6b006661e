"""
CampusCoffee: management of coffee Points of Sale (POS) on campus.
"""

__version__ = "0.1.0"
