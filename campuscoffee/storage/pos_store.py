"""
PostgreSQL implementation of the POS storage port.

House numbers are persisted split (numeric part, suffix, leading zeros);
audit timestamps are assigned by the database inside the write statement
and returned with the row.
"""

from typing import Any

import psycopg

from campuscoffee.core.address import SplitHouseNumber
from campuscoffee.core.models import Address, CampusType, PosRecord, PosType
from campuscoffee.core.ports import ConstraintViolation, PosStore
from campuscoffee.observability.logger import get_logger

from .connection import DatabaseConnectionPool

logger = get_logger(__name__)

POS_COLUMNS = """
    id, name, description, type, campus,
    street, house_number, house_number_suffix, house_number_leading_zeros,
    postal_code, city, created_at, updated_at
"""


class PostgresPosStore(PosStore):
    """
    Stores POS records in the ``pos`` table.

    Every write is a single statement in its own transaction, so the
    timestamps it assigns come from one database-observed instant.
    """

    def __init__(self, pool: DatabaseConnectionPool):
        """
        Initialize POS store.

        Args:
            pool: Database connection pool
        """
        self.pool = pool

    def insert(self, pos: PosRecord) -> PosRecord:
        query = f"""
            INSERT INTO pos (
                name, description, type, campus,
                street, house_number, house_number_suffix, house_number_leading_zeros,
                postal_code, city, created_at, updated_at
            )
            VALUES (
                %(name)s, %(description)s, %(type)s, %(campus)s,
                %(street)s, %(house_number)s, %(house_number_suffix)s, %(house_number_leading_zeros)s,
                %(postal_code)s, %(city)s, now(), now()
            )
            RETURNING {POS_COLUMNS}
        """

        row = self._write(query, self._to_params(pos))
        logger.debug(f"Inserted pos row id={row['id']}")
        return self._to_record(row)

    def update(self, pos_id: int, pos: PosRecord) -> PosRecord | None:
        # GREATEST keeps updated_at from moving backwards if the server clock does
        query = f"""
            UPDATE pos SET
                name = %(name)s,
                description = %(description)s,
                type = %(type)s,
                campus = %(campus)s,
                street = %(street)s,
                house_number = %(house_number)s,
                house_number_suffix = %(house_number_suffix)s,
                house_number_leading_zeros = %(house_number_leading_zeros)s,
                postal_code = %(postal_code)s,
                city = %(city)s,
                updated_at = GREATEST(now(), updated_at)
            WHERE id = %(id)s
            RETURNING {POS_COLUMNS}
        """

        params = self._to_params(pos)
        params["id"] = pos_id

        row = self._write(query, params)
        if row is None:
            return None
        return self._to_record(row)

    def find_by_id(self, pos_id: int) -> PosRecord | None:
        query = f"SELECT {POS_COLUMNS} FROM pos WHERE id = %s"
        result = self.pool.execute_query(query, (pos_id,))
        return self._to_record(result[0]) if result else None

    def find_all(self) -> list[PosRecord]:
        query = f"SELECT {POS_COLUMNS} FROM pos ORDER BY id"
        return [self._to_record(row) for row in self.pool.execute_query(query)]

    def find_by_campus(self, campus: CampusType) -> list[PosRecord]:
        query = f"SELECT {POS_COLUMNS} FROM pos WHERE campus = %s ORDER BY id"
        rows = self.pool.execute_query(query, (CampusType(campus).value,))
        return [self._to_record(row) for row in rows]

    def _write(self, query: str, params: dict[str, Any]) -> dict | None:
        """
        Run a write statement, surfacing constraint failures as ConstraintViolation.
        """
        try:
            return self.pool.execute_returning(query, params)
        except psycopg.IntegrityError as e:
            constraint_name = e.diag.constraint_name if e.diag is not None else None
            raise ConstraintViolation(constraint_name, str(e)) from e

    @staticmethod
    def _to_params(pos: PosRecord) -> dict[str, Any]:
        split = pos.address.split_house_number()
        return {
            "name": pos.name,
            "description": pos.description,
            "type": pos.type.value,
            "campus": pos.campus.value,
            "street": pos.address.street,
            "house_number": split.numeric,
            "house_number_suffix": split.suffix,
            "house_number_leading_zeros": split.leading_zeros,
            "postal_code": pos.address.postal_code,
            "city": pos.address.city,
        }

    @staticmethod
    def _to_record(row: dict[str, Any]) -> PosRecord:
        house_number = SplitHouseNumber(
            numeric=row["house_number"],
            suffix=row["house_number_suffix"],
            leading_zeros=row["house_number_leading_zeros"],
        )
        return PosRecord(
            id=row["id"],
            name=row["name"],
            description=row["description"],
            type=PosType(row["type"]),
            campus=CampusType(row["campus"]),
            address=Address.from_split(
                street=row["street"],
                house_number=house_number,
                postal_code=row["postal_code"],
                city=row["city"],
            ),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
