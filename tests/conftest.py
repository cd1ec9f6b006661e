"""
Pytest configuration and fixtures for CampusCoffee tests

Unit tests run against an in-memory PosStore; integration tests run the
PostgreSQL store against a throwaway container.
"""
import threading
from datetime import datetime, timedelta, timezone
from typing import Generator

import pytest

from campuscoffee.core.conflicts import POS_NAME_CONSTRAINT
from campuscoffee.core.models import Address, CampusType, PosRecord, PosType
from campuscoffee.core.ports import ConstraintViolation, PosStore
from campuscoffee.core.services import PosService


# =======================
# PYTEST CONFIGURATION
# =======================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests that don't require external services"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that require Docker containers"
    )


@pytest.fixture(autouse=True)
def _restore_campuscoffee_logger():
    """Undo logger level/handler changes a test (e.g. the CLI's setup_logger) leaves behind"""
    import logging

    logger = logging.getLogger("campuscoffee")
    level, handlers, propagate = logger.level, list(logger.handlers), logger.propagate
    yield
    logger.setLevel(level)
    logger.handlers[:] = handlers
    logger.propagate = propagate


# =======================
# IN-MEMORY STORE
# =======================

class InMemoryPosStore(PosStore):
    """
    PosStore keeping records in a dict.

    Mirrors the PostgreSQL store: the name constraint is checked under a lock
    and timestamps are assigned on write, strictly increasing.
    """

    def __init__(self):
        self._rows: dict[int, PosRecord] = {}
        self._next_id = 1
        self._lock = threading.Lock()
        self._last_timestamp = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def _now(self) -> datetime:
        now = datetime.now(timezone.utc)
        if now <= self._last_timestamp:
            now = self._last_timestamp + timedelta(microseconds=1)
        self._last_timestamp = now
        return now

    def _check_name(self, name: str, own_id: int | None = None) -> None:
        for row in self._rows.values():
            if row.name == name and row.id != own_id:
                raise ConstraintViolation(
                    POS_NAME_CONSTRAINT,
                    f'duplicate key value violates unique constraint "{POS_NAME_CONSTRAINT}"',
                )

    def insert(self, pos: PosRecord) -> PosRecord:
        with self._lock:
            self._check_name(pos.name)
            now = self._now()
            stored = pos.with_changes(id=self._next_id, created_at=now, updated_at=now)
            self._rows[stored.id] = stored
            self._next_id += 1
            return stored

    def update(self, pos_id: int, pos: PosRecord) -> PosRecord | None:
        with self._lock:
            existing = self._rows.get(pos_id)
            if existing is None:
                return None
            self._check_name(pos.name, own_id=pos_id)
            stored = existing.with_changes(**pos.mutable_fields(), updated_at=self._now())
            self._rows[pos_id] = stored
            return stored

    def find_by_id(self, pos_id: int) -> PosRecord | None:
        return self._rows.get(pos_id)

    def find_all(self) -> list[PosRecord]:
        return [self._rows[key] for key in sorted(self._rows)]

    def find_by_campus(self, campus: CampusType) -> list[PosRecord]:
        return [pos for pos in self.find_all() if pos.campus == campus]


@pytest.fixture
def memory_store() -> InMemoryPosStore:
    return InMemoryPosStore()


@pytest.fixture
def pos_service(memory_store) -> PosService:
    return PosService(memory_store)


# =======================
# SAMPLE DATA
# =======================

@pytest.fixture
def cafe_central() -> PosRecord:
    """The unsaved 'Café Central' POS on campus Altstadt"""
    return PosRecord(
        name="Café Central",
        type=PosType.CAFE,
        campus=CampusType.ALTSTADT,
        address=Address(
            street="Hauptstr.",
            house_number="5",
            postal_code="69117",
            city="Heidelberg",
        ),
    )


@pytest.fixture
def mensa_inf() -> PosRecord:
    """An unsaved cafeteria on campus INF"""
    return PosRecord(
        name="Mensa im Neuenheimer Feld",
        description="Cafeteria with coffee bar",
        type=PosType.CAFETERIA,
        campus=CampusType.INF,
        address=Address(
            street="Im Neuenheimer Feld",
            house_number="304",
            postal_code="69120",
            city="Heidelberg",
        ),
    )


# =======================
# DATABASE FIXTURES (Testcontainers)
# =======================

@pytest.fixture(scope="session")
def postgres_container():
    """
    Start PostgreSQL container for integration tests

    Yields:
        PostgresContainer instance
    """
    from testcontainers.postgres import PostgresContainer

    with PostgresContainer(
        image="postgres:16.2-alpine",
        username="test_campuscoffee",
        password="test_password",
        dbname="test_campuscoffee",
        driver=None,
    ) as postgres:
        yield postgres


@pytest.fixture(scope="session")
def db_pool(postgres_container) -> Generator:
    """
    Open a connection pool against the container and create the POS table

    Yields:
        DatabaseConnectionPool
    """
    from campuscoffee.storage.connection import DatabaseConnectionPool
    from campuscoffee.storage.schema_mgmt import SchemaManager

    pool = DatabaseConnectionPool(
        host=postgres_container.get_container_host_ip(),
        port=int(postgres_container.get_exposed_port(5432)),
        database="test_campuscoffee",
        user="test_campuscoffee",
        password="test_password",
        max_size=5,
    )
    pool.open()
    SchemaManager(pool).create_schema()

    yield pool

    pool.close()


@pytest.fixture
def clean_db(db_pool):
    """
    Provide an empty POS table for each test

    Yields:
        DatabaseConnectionPool with a truncated pos table
    """
    db_pool.execute_command("TRUNCATE TABLE pos RESTART IDENTITY")
    yield db_pool
