"""
POS service: create-or-update orchestration and read queries.

This is the public surface of the core. Every operation either returns a
stored PosRecord (or a list of them) or raises one of the errors from
``campuscoffee.core.exceptions``; storage failures that cannot be
classified propagate unchanged.
"""

from typing import Any, NoReturn

from campuscoffee.observability.logger import get_logger
from campuscoffee.observability.metrics import (
    pos_storage_duration_seconds,
    record_query,
    record_upsert,
    track_duration,
)

from ..conflicts import constraint_identifier, is_name_constraint, raise_for_constraint_violation
from ..exceptions import NotFoundError, ValidationError
from ..models import CampusType, PosRecord, parse_pos
from ..ports import ConstraintViolation, PosStore

logger = get_logger(__name__)


class PosService:
    """
    Creates, updates and looks up Points of Sale.

    Name uniqueness and audit timestamps are enforced by the store; this
    service decides between create and update, checks existence before an
    update and translates name collisions into DuplicateNameError.
    """

    def __init__(self, store: PosStore):
        """
        Initialize POS service.

        Args:
            store: Storage port holding the POS records
        """
        self.store = store

    # =======================
    # QUERIES
    # =======================

    def get_all(self) -> list[PosRecord]:
        """Return all POS ordered by ascending id."""
        record_query("all")
        with track_duration(pos_storage_duration_seconds, operation="find_all"):
            return self.store.find_all()

    def get_by_id(self, pos_id: int) -> PosRecord:
        """
        Return the POS with the given id.

        Raises:
            NotFoundError: If no POS with ``pos_id`` exists
        """
        record_query("by_id")
        pos = self._find(pos_id)
        if pos is None:
            raise NotFoundError(pos_id)
        return pos

    def get_by_campus(self, campus: CampusType | str) -> list[PosRecord]:
        """
        Return the POS located on ``campus``, ordered by ascending id.

        An empty list means no POS is registered for the campus.

        Raises:
            ValidationError: If ``campus`` is not a known campus
        """
        try:
            campus = CampusType(campus)
        except ValueError as e:
            raise ValidationError(f"Unknown campus: {campus!r}") from e
        record_query("by_campus")

        with track_duration(pos_storage_duration_seconds, operation="find_by_campus"):
            return self.store.find_by_campus(campus)

    # =======================
    # UPSERT
    # =======================

    def upsert(self, pos: PosRecord | dict[str, Any]) -> PosRecord:
        """
        Create a POS (no id) or update an existing one (id set).

        Args:
            pos: POS to store, as a model or an unvalidated payload

        Returns:
            The stored POS with id, created_at and updated_at populated

        Raises:
            ValidationError: If a payload violates the model invariants
            NotFoundError: If an update references a POS that does not exist
            DuplicateNameError: If another POS already uses the name
        """
        existing = None
        if not isinstance(pos, PosRecord):
            pos_id = _payload_id(pos)
            if pos_id is not None:
                existing = self._find_for_update(pos_id)
            pos = parse_pos(pos)

        if pos.id is None:
            return self._create(pos)
        return self._update(pos, existing)

    def _create(self, pos: PosRecord) -> PosRecord:
        try:
            with track_duration(pos_storage_duration_seconds, operation="insert"):
                created = self.store.insert(pos)
        except ConstraintViolation as e:
            self._reject_write("create", e, pos.name)

        record_upsert("create", "success")
        logger.info(
            f"Created POS '{created.name}' with ID {created.id}",
            extra={"pos_id": created.id, "campus": created.campus.value}
        )
        return created

    def _update(self, pos: PosRecord, existing: PosRecord | None = None) -> PosRecord:
        if existing is None:
            existing = self._find_for_update(pos.id)

        merged = existing.with_changes(**pos.mutable_fields())

        try:
            with track_duration(pos_storage_duration_seconds, operation="update"):
                updated = self.store.update(pos.id, merged)
        except ConstraintViolation as e:
            self._reject_write("update", e, merged.name)

        # Deleted between lookup and write
        if updated is None:
            record_upsert("update", "not_found")
            raise NotFoundError(pos.id)

        record_upsert("update", "success")
        logger.info(
            f"Updated POS '{updated.name}' with ID {updated.id}",
            extra={"pos_id": updated.id, "campus": updated.campus.value}
        )
        return updated

    def _find_for_update(self, pos_id: int) -> PosRecord:
        existing = self._find(pos_id)
        if existing is None:
            record_upsert("update", "not_found")
            raise NotFoundError(pos_id)
        return existing

    def _reject_write(self, operation: str, error: ConstraintViolation, name: str) -> NoReturn:
        identifier = constraint_identifier(error)
        if is_name_constraint(identifier):
            record_upsert(operation, "conflict")
            logger.warning(
                f"Rejected {operation} of POS '{name}': name already exists",
                extra={"constraint": identifier}
            )
        else:
            record_upsert(operation, "error")
            logger.error(
                f"Storage constraint violated during {operation} of POS '{name}': {error}",
                extra={"constraint": identifier}
            )
        raise_for_constraint_violation(error, name)

    def _find(self, pos_id: int) -> PosRecord | None:
        with track_duration(pos_storage_duration_seconds, operation="find_by_id"):
            return self.store.find_by_id(pos_id)


def _payload_id(payload: dict[str, Any]) -> int | None:
    """
    Id of an update payload, or None for a create.

    Ids that are not integers are left for ``parse_pos`` to reject.
    """
    raw_id = payload.get("id") if isinstance(payload, dict) else None
    if isinstance(raw_id, bool):
        return None
    if isinstance(raw_id, int):
        return raw_id
    if isinstance(raw_id, str) and raw_id.strip().isdecimal():
        return int(raw_id)
    return None
