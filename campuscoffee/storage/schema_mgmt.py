"""
DDL for the POS table.

The ``pos_name_key`` constraint is what enforces name uniqueness across
concurrent writers; ``campuscoffee.core.conflicts`` recognizes it by name.
"""

from campuscoffee.core.conflicts import POS_NAME_CONSTRAINT
from campuscoffee.core.models import CampusType, PosType
from campuscoffee.observability.logger import get_logger

from .connection import DatabaseConnectionPool

logger = get_logger(__name__)


def _enum_values(enum_cls) -> str:
    return ", ".join(f"'{member.value}'" for member in enum_cls)


POS_TABLE_DDL = f"""
    CREATE TABLE IF NOT EXISTS pos (
        id BIGSERIAL PRIMARY KEY,
        name VARCHAR(255) NOT NULL,
        description TEXT,
        type VARCHAR(32) NOT NULL CHECK (type IN ({_enum_values(PosType)})),
        campus VARCHAR(32) NOT NULL CHECK (campus IN ({_enum_values(CampusType)})),
        street VARCHAR(255) NOT NULL,
        house_number INTEGER NOT NULL CHECK (house_number >= 0),
        house_number_suffix VARCHAR(16),
        house_number_leading_zeros SMALLINT NOT NULL DEFAULT 0 CHECK (house_number_leading_zeros >= 0),
        postal_code VARCHAR(16) NOT NULL,
        city VARCHAR(255) NOT NULL,
        created_at TIMESTAMPTZ NOT NULL,
        updated_at TIMESTAMPTZ NOT NULL,
        CONSTRAINT {POS_NAME_CONSTRAINT} UNIQUE (name)
    );
    CREATE INDEX IF NOT EXISTS ix_pos_campus ON pos (campus);
"""


class SchemaManager:
    """
    Creates and inspects the POS table.
    """

    def __init__(self, pool: DatabaseConnectionPool):
        self.pool = pool

    def create_schema(self) -> None:
        """Create the ``pos`` table and its indexes if they do not exist."""
        self.pool.execute_command(POS_TABLE_DDL)
        logger.info("POS schema is in place")

    def table_exists(self) -> bool:
        result = self.pool.execute_query("SELECT to_regclass('public.pos') IS NOT NULL AS present")
        return bool(result and result[0]["present"])
