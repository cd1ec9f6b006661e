"""
Admin CLI for managing Points of Sale.

Usage:
    python -m campuscoffee.cli.admin_cli init-db
    python -m campuscoffee.cli.admin_cli list [--campus <campus>]
    python -m campuscoffee.cli.admin_cli get --id <pos_id>
    python -m campuscoffee.cli.admin_cli upsert --file <path.yaml|path.json>
    python -m campuscoffee.cli.admin_cli osm-node --node-id <node_id>
"""

import argparse
import json
import sys
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any

import yaml

from campuscoffee.config import ConfigError, Settings, load_settings
from campuscoffee.core.exceptions import (
    DuplicateNameError,
    NotFoundError,
    ValidationError,
)
from campuscoffee.core.models import PosRecord
from campuscoffee.core.services import PosService
from campuscoffee.observability.logger import ROOT_LOGGER_NAME, get_logger, log_operation, setup_logger
from campuscoffee.storage.connection import DatabaseConnectionPool
from campuscoffee.storage.osm_data_service import StubOsmDataService
from campuscoffee.storage.pos_store import PostgresPosStore
from campuscoffee.storage.schema_mgmt import SchemaManager

logger = get_logger(__name__)

EXIT_ERROR = 1
EXIT_VALIDATION = 2
EXIT_CONFLICT = 3
EXIT_NOT_FOUND = 4


def format_timestamp(ts: datetime | None) -> str:
    """Format timestamp for display."""
    return ts.strftime("%Y-%m-%d %H:%M:%S") if ts else "N/A"


def load_payload(path: str | Path) -> dict[str, Any]:
    """
    Read a POS payload from a JSON or YAML file.

    Raises:
        FileNotFoundError: If the file does not exist
        ValidationError: If the file does not contain a mapping
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Payload file not found: {path}")

    with open(path, encoding="utf-8") as f:
        if path.suffix.lower() == ".json":
            payload = json.load(f)
        else:
            payload = yaml.safe_load(f)

    if not isinstance(payload, dict):
        raise ValidationError(f"Payload in {path} must be a mapping of POS fields")
    return payload


def resolve_settings(args) -> Settings:
    """Combine config file, environment and command line database options."""
    settings = load_settings(args.config, env_file=args.env_file)
    overrides = {
        "host": args.db_host,
        "port": args.db_port,
        "name": args.db_name,
        "user": args.db_user,
        "password": args.db_password,
    }
    database = settings.database.model_copy(
        update={key: value for key, value in overrides.items() if value is not None}
    )
    return settings.model_copy(update={"database": database})


@contextmanager
def open_pool(settings: Settings):
    pool = DatabaseConnectionPool.from_settings(settings.database)
    pool.open()
    try:
        yield pool
    finally:
        pool.close()


@contextmanager
def open_service(settings: Settings):
    """Yield a PosService backed by PostgreSQL."""
    with open_pool(settings) as pool:
        yield PosService(PostgresPosStore(pool))


def print_pos_table(records: list[PosRecord]) -> None:
    print(f"\n{'ID':<6} {'Name':<30} {'Type':<16} {'Campus':<10} {'Address':<40} {'Updated'}")
    print(f"{'-' * 120}")
    for pos in records:
        address = (
            f"{pos.address.street} {pos.address.house_number}, "
            f"{pos.address.postal_code} {pos.address.city}"
        )
        print(
            f"{pos.id:<6} {pos.name:<30} {pos.type.value:<16} {pos.campus.value:<10} "
            f"{address:<40} {format_timestamp(pos.updated_at)}"
        )
    print(f"\nTotal: {len(records)}\n")


def print_pos_json(pos: PosRecord) -> None:
    print(pos.model_dump_json(indent=2))


def init_db_command(args, settings: Settings) -> None:
    with open_pool(settings) as pool:
        SchemaManager(pool).create_schema()
    print("POS table is ready.")


def list_command(args, settings: Settings) -> None:
    with open_service(settings) as service:
        if args.campus:
            records = service.get_by_campus(args.campus)
        else:
            records = service.get_all()

    if not records:
        print(f"\nNo POS found{f' on campus {args.campus}' if args.campus else ''}.")
        return
    print_pos_table(records)


def get_command(args, settings: Settings) -> None:
    with open_service(settings) as service:
        pos = service.get_by_id(args.id)
    print_pos_json(pos)


def upsert_command(args, settings: Settings) -> None:
    payload = load_payload(args.file)
    with open_service(settings) as service:
        pos = service.upsert(payload)
    print_pos_json(pos)


def osm_node_command(args, settings: Settings) -> None:
    node = StubOsmDataService().fetch_node(args.node_id)
    print(node.model_dump_json(indent=2))


COMMANDS = {
    "init-db": init_db_command,
    "list": list_command,
    "get": get_command,
    "upsert": upsert_command,
    "osm-node": osm_node_command,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="CampusCoffee admin CLI - manage Points of Sale",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("--config", help="Path to YAML configuration file")
    parser.add_argument("--env-file", help="Path to .env file")
    parser.add_argument("--db-host", help="Database host (default: DB_HOST or localhost)")
    parser.add_argument("--db-port", type=int, help="Database port (default: DB_PORT or 5432)")
    parser.add_argument("--db-name", help="Database name (default: DB_NAME or campuscoffee)")
    parser.add_argument("--db-user", help="Database user (default: DB_USER or campuscoffee)")
    parser.add_argument("--db-password", help="Database password (default: DB_PASSWORD)")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("init-db", help="Create the POS table if it does not exist")

    list_parser = subparsers.add_parser("list", help="List Points of Sale")
    list_parser.add_argument(
        "--campus",
        type=str.upper,
        help="Only show POS on this campus (ALTSTADT, BERGHEIM, INF)"
    )

    get_parser = subparsers.add_parser("get", help="Show a single Point of Sale")
    get_parser.add_argument("--id", type=int, required=True, help="POS ID")

    upsert_parser = subparsers.add_parser(
        "upsert",
        help="Create a POS (no id in payload) or update one (id in payload)"
    )
    upsert_parser.add_argument(
        "--file",
        required=True,
        help="Path to YAML or JSON file containing the POS"
    )

    osm_parser = subparsers.add_parser("osm-node", help="Fetch a node from OpenStreetMap")
    osm_parser.add_argument("--node-id", type=int, required=True, help="OpenStreetMap node ID")

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(EXIT_ERROR)

    try:
        settings = resolve_settings(args)
    except (ConfigError, FileNotFoundError) as e:
        print(f"\nError: {e}")
        sys.exit(EXIT_ERROR)

    setup_logger(ROOT_LOGGER_NAME, level=settings.logging.level, format_type=settings.logging.format)

    try:
        with log_operation(args.command, logger=logger):
            COMMANDS[args.command](args, settings)

    except ValidationError as e:
        print(f"\nInvalid input: {e}")
        for err in e.errors:
            location = ".".join(str(p) for p in err.get("loc", ()))
            print(f"  - {location}: {err.get('msg')}")
        sys.exit(EXIT_VALIDATION)

    except DuplicateNameError as e:
        print(f"\nConflict: {e}")
        sys.exit(EXIT_CONFLICT)

    except NotFoundError as e:
        print(f"\nNot found: {e}")
        sys.exit(EXIT_NOT_FOUND)

    except (FileNotFoundError, ValueError) as e:
        print(f"\nError: {e}")
        sys.exit(EXIT_ERROR)

    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        sys.exit(130)


if __name__ == "__main__":
    main()
