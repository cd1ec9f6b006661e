"""
Core data models for POS management.

All models use Pydantic for runtime validation and are immutable.
"""

from .osm_node import OsmNode
from .pos import AUDIT_FIELDS, Address, CampusType, PosRecord, PosType, parse_pos

__all__ = [
    "AUDIT_FIELDS",
    "Address",
    "CampusType",
    "OsmNode",
    "PosRecord",
    "PosType",
    "parse_pos",
]
