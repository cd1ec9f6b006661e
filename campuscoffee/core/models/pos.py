"""
PosRecord model representing a Point of Sale on campus.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from ..address import SplitHouseNumber, is_valid_house_number, merge_house_number, split_house_number
from ..exceptions import InvalidHouseNumberError, ValidationError

# Assigned by the storage boundary, never by callers.
AUDIT_FIELDS = {"id", "created_at", "updated_at"}


class PosType(str, Enum):
    """Kind of Point of Sale."""

    CAFE = "CAFE"
    VENDING_MACHINE = "VENDING_MACHINE"
    BAKERY = "BAKERY"
    CAFETERIA = "CAFETERIA"


class CampusType(str, Enum):
    """Campus a Point of Sale belongs to."""

    ALTSTADT = "ALTSTADT"
    BERGHEIM = "BERGHEIM"
    INF = "INF"


class Address(BaseModel):
    """
    Street address embedded in a POS.

    A malformed house number raises InvalidHouseNumberError inside the
    validator, so constructing an Address reports it as a pydantic
    ValidationError on the ``house_number`` field.

    Attributes:
        street: Street name (e.g. "Hauptstr.")
        house_number: House number with optional suffix (e.g. "21a")
        postal_code: Postal code, kept as text
        city: City name
    """

    street: str = Field(..., min_length=1, max_length=255)
    house_number: str = Field(..., min_length=1, max_length=32)
    postal_code: str = Field(..., min_length=1, max_length=16)
    city: str = Field(..., min_length=1, max_length=255)

    @field_validator("street", "postal_code", "city")
    @classmethod
    def check_not_blank(cls, v):
        if not v.strip():
            raise ValueError("must not be blank")
        return v

    @field_validator("house_number")
    @classmethod
    def check_house_number(cls, v):
        if not is_valid_house_number(v):
            raise InvalidHouseNumberError(v)
        return v

    def split_house_number(self) -> SplitHouseNumber:
        """Return the house number in its persisted, split form."""
        return split_house_number(self.house_number)

    @classmethod
    def from_split(
        cls,
        street: str,
        house_number: SplitHouseNumber,
        postal_code: str,
        city: str,
    ) -> "Address":
        """Build an address from persisted columns."""
        return cls(
            street=street,
            house_number=merge_house_number(house_number),
            postal_code=postal_code,
            city=city,
        )

    class Config:
        frozen = True


class PosRecord(BaseModel):
    """
    Immutable snapshot of a Point of Sale.

    Derive modified snapshots with ``with_changes``; the model itself is frozen.

    Attributes:
        id: Storage identity, None until first persisted
        name: Unique display name
        description: Free text description
        type: Kind of POS
        campus: Campus the POS is located on
        address: Street address
        created_at: When the POS was first stored (UTC, set by storage)
        updated_at: When the POS was last written (UTC, set by storage)
    """

    id: int | None = Field(default=None, gt=0)
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    type: PosType
    campus: CampusType
    address: Address
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("name")
    @classmethod
    def check_name_not_blank(cls, v):
        if not v.strip():
            raise ValueError("name must not be blank")
        return v

    @field_validator("created_at", "updated_at")
    @classmethod
    def normalize_to_utc(cls, v):
        """Naive timestamps are taken as UTC; aware ones are converted."""
        if v is None:
            return v
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    def with_changes(self, **changes: Any) -> "PosRecord":
        """
        Return a new, re-validated snapshot with the given fields replaced.

        Raises:
            pydantic.ValidationError: If the derived snapshot is invalid
        """
        data = self.model_dump()
        data.update(changes)
        return type(self).model_validate(data)

    def mutable_fields(self) -> dict[str, Any]:
        """Fields a caller may change through an update."""
        return {
            "name": self.name,
            "description": self.description,
            "type": self.type,
            "campus": self.campus,
            "address": self.address,
        }

    def same_content(self, other: "PosRecord") -> bool:
        """Compare two snapshots ignoring identity and audit timestamps."""
        return self.model_dump(exclude=AUDIT_FIELDS) == other.model_dump(exclude=AUDIT_FIELDS)

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "name": "Café Central",
                "description": "Espresso bar next to the main library",
                "type": "CAFE",
                "campus": "ALTSTADT",
                "address": {
                    "street": "Hauptstr.",
                    "house_number": "5",
                    "postal_code": "69117",
                    "city": "Heidelberg",
                },
            }
        }


def parse_pos(payload: dict[str, Any]) -> PosRecord:
    """
    Build a PosRecord from untrusted input.

    Args:
        payload: Field values, e.g. loaded from JSON or YAML

    Returns:
        Validated PosRecord

    Raises:
        ValidationError: If the payload violates any model invariant
            (a malformed house number included; it shows up as an error
            located at ``address.house_number``, not as InvalidHouseNumberError)
    """
    try:
        return PosRecord.model_validate(payload)
    except PydanticValidationError as e:
        errors = e.errors(include_url=False)
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in errors)
        raise ValidationError(f"Invalid POS: {fields}", errors=errors) from e
