"""Domain errors raised by the POS core."""


class CampusCoffeeError(Exception):
    """Base class for domain failures."""

    error_code = "CAMPUS_COFFEE_ERROR"


class InvalidHouseNumberError(CampusCoffeeError, ValueError):
    """Raised when a house number is not digits optionally followed by letters."""

    error_code = "INVALID_HOUSE_NUMBER"

    def __init__(self, house_number: object):
        self.house_number = house_number
        super().__init__(
            f"Invalid house number {house_number!r}: expected digits "
            "optionally followed by letters (e.g. '21' or '21a')"
        )


class ValidationError(CampusCoffeeError, ValueError):
    """Raised when a POS payload violates construction-time invariants."""

    error_code = "VALIDATION_ERROR"

    def __init__(self, message: str, errors: list[dict] | None = None):
        self.message = message
        self.errors = errors or []
        super().__init__(message)


class DuplicateNameError(CampusCoffeeError):
    """Raised when a POS name is already taken by another record."""

    error_code = "DUPLICATE_NAME"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"POS with name '{name}' already exists")


class NotFoundError(CampusCoffeeError):
    """Raised when a referenced POS does not exist."""

    error_code = "NOT_FOUND"

    def __init__(self, pos_id: int, message: str | None = None):
        self.pos_id = pos_id
        super().__init__(message or f"POS with ID {pos_id} does not exist")


class OsmNodeNotFoundError(NotFoundError):
    """Raised when the geodata source has no node with the given ID."""

    error_code = "OSM_NODE_NOT_FOUND"

    def __init__(self, node_id: int):
        self.node_id = node_id
        super().__init__(node_id, f"OpenStreetMap node with ID {node_id} does not exist")
