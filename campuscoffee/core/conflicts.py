"""
Classification of storage constraint violations.

Decides whether a failed write collided with the unique POS name constraint
and turns that case into a DuplicateNameError. Every other failure is
re-raised untouched.
"""

import re
from typing import NoReturn

from .exceptions import DuplicateNameError

# Default PostgreSQL name for UNIQUE (name) on table pos, plus common explicit spellings.
POS_NAME_CONSTRAINT = "pos_name_key"
POS_NAME_CONSTRAINT_RE = re.compile(r"^(?:uq_pos_name|pos_name_(?:key|unique|uq))$", re.IGNORECASE)

_CONSTRAINT_IN_MESSAGE_RE = re.compile(r'constraint\s+"(?P<name>[^"]+)"', re.IGNORECASE)


def constraint_identifier(error: BaseException) -> str | None:
    """
    Extract the violated constraint's identifier from a storage error.

    Looks at, in order: a ``constraint_name`` attribute, a psycopg-style
    ``diag.constraint_name`` and finally a ``constraint "<name>"`` fragment in
    the error message.

    Args:
        error: The storage-level failure

    Returns:
        The constraint identifier, or None if it cannot be determined
    """
    name = getattr(error, "constraint_name", None)
    if name:
        return name

    diag = getattr(error, "diag", None)
    if diag is not None:
        name = getattr(diag, "constraint_name", None)
        if name:
            return name

    match = _CONSTRAINT_IN_MESSAGE_RE.search(str(error))
    if match:
        return match.group("name")

    cause = error.__cause__
    if cause is not None and cause is not error:
        return constraint_identifier(cause)

    return None


def is_name_constraint(identifier: str | None) -> bool:
    """Return True if ``identifier`` names the unique POS name constraint."""
    return bool(identifier) and POS_NAME_CONSTRAINT_RE.match(identifier) is not None


def raise_for_constraint_violation(error: BaseException, name: str) -> NoReturn:
    """
    Translate a failed write into the matching domain error.

    Args:
        error: The storage-level failure
        name: The POS name the write tried to store

    Raises:
        DuplicateNameError: If ``error`` is a violation of the unique name constraint
        BaseException: ``error`` itself, unchanged, in every other case
    """
    if is_name_constraint(constraint_identifier(error)):
        raise DuplicateNameError(name) from error
    raise error
