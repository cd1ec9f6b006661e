"""
Interfaces the POS core consumes.

Storage and geodata adapters implement these; the services only depend on
the abstract classes.
"""

from abc import ABC, abstractmethod

from .models import CampusType, OsmNode, PosRecord


class ConstraintViolation(Exception):
    """
    Raised by a store when a write breaks a declared data rule.

    Attributes:
        constraint_name: Identifier of the violated constraint, None if unknown
        message: Storage-level error text
    """

    def __init__(self, constraint_name: str | None, message: str = ""):
        self.constraint_name = constraint_name
        self.message = message
        super().__init__(message or f"Constraint violated: {constraint_name}")


class PosStore(ABC):
    """
    Storage port for POS records.

    Writes assign audit timestamps and return them with the stored record.
    """

    @abstractmethod
    def insert(self, pos: PosRecord) -> PosRecord:
        """
        Store a new POS.

        Returns:
            The stored POS with id, created_at and updated_at set (same instant)

        Raises:
            ConstraintViolation: If a constraint such as the unique name is broken
        """
        pass

    @abstractmethod
    def update(self, pos_id: int, pos: PosRecord) -> PosRecord | None:
        """
        Overwrite the mutable fields of an existing POS.

        Returns:
            The stored POS with refreshed updated_at, or None if ``pos_id`` does not exist

        Raises:
            ConstraintViolation: If a constraint such as the unique name is broken
        """
        pass

    @abstractmethod
    def find_by_id(self, pos_id: int) -> PosRecord | None:
        pass

    @abstractmethod
    def find_all(self) -> list[PosRecord]:
        """Return all POS ordered by ascending id."""
        pass

    @abstractmethod
    def find_by_campus(self, campus: CampusType) -> list[PosRecord]:
        """Return the POS on ``campus`` ordered by ascending id."""
        pass


class OsmDataService(ABC):
    """Geodata port for importing OpenStreetMap nodes."""

    @abstractmethod
    def fetch_node(self, node_id: int) -> OsmNode:
        """
        Fetch a node from OpenStreetMap.

        Raises:
            OsmNodeNotFoundError: If no node with ``node_id`` exists
        """
        pass
