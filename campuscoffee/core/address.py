"""
House number normalization.

Converts between the free-form house number of an address ("21a") and the
split form stored in the ``pos`` table (numeric part, alphabetic suffix and
the count of leading zeros, so "007" survives a round trip).
"""

import re

from pydantic import BaseModel, Field, field_validator

from .exceptions import InvalidHouseNumberError

# ASCII digits only: str(int(...)) must reproduce the digit run.
HOUSE_NUMBER_RE = re.compile(r"(?P<digits>[0-9]+)(?P<suffix>[^\W\d_]*)")


class SplitHouseNumber(BaseModel):
    """
    Persisted shape of a house number.

    Attributes:
        numeric: Value of the leading digit run
        suffix: Trailing letters, verbatim (None if there are none)
        leading_zeros: Number of zeros in front of the significant digits
    """

    numeric: int = Field(..., ge=0)
    suffix: str | None = None
    leading_zeros: int = Field(default=0, ge=0)

    @field_validator("suffix")
    @classmethod
    def check_suffix_alphabetic(cls, v):
        """An empty suffix means no suffix; anything else must be letters."""
        if v is None or v == "":
            return None
        if not v.isalpha():
            raise ValueError(f"House number suffix must be alphabetic, got {v!r}")
        return v

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "numeric": 21,
                "suffix": "a",
                "leading_zeros": 0,
            }
        }


def _match_house_number(house_number: object) -> re.Match | None:
    if not isinstance(house_number, str):
        return None
    match = HOUSE_NUMBER_RE.fullmatch(house_number)
    if match is None:
        return None
    # [^\W\d_] also admits numeric symbols such as "²" or "½"
    suffix = match.group("suffix")
    if suffix and not suffix.isalpha():
        return None
    return match


def is_valid_house_number(house_number: object) -> bool:
    """Return True if ``house_number`` can be split."""
    return _match_house_number(house_number) is not None


def split_house_number(house_number: str) -> SplitHouseNumber:
    """
    Split a house number into its numeric part and suffix.

    Args:
        house_number: Free-form house number such as "5", "21a" or "007"

    Returns:
        SplitHouseNumber that merges back to the identical string

    Raises:
        InvalidHouseNumberError: If the value is not digits followed by optional letters
    """
    match = _match_house_number(house_number)
    if match is None:
        raise InvalidHouseNumberError(house_number)

    digits = match.group("digits")
    significant = digits.lstrip("0") or "0"

    return SplitHouseNumber(
        numeric=int(significant),
        suffix=match.group("suffix") or None,
        leading_zeros=len(digits) - len(significant),
    )


def merge_house_number(split: SplitHouseNumber) -> str:
    """
    Rebuild the free-form house number from its split form.

    Args:
        split: Split house number as stored

    Returns:
        The original house number string
    """
    return f"{'0' * split.leading_zeros}{split.numeric}{split.suffix or ''}"
