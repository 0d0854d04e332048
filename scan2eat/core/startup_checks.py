from __future__ import annotations

import logging
from pathlib import Path

from alembic.config import Config
from alembic.script import ScriptDirectory
from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from scan2eat.core.config import DATABASE_URL, IS_PROD, IS_TEST

logger = logging.getLogger(__name__)
STARTUP_PREFIX = "[STARTUP]"
MIGRATIONS_PREFIX = "[MIGRATIONS]"


def validate_database_environment() -> None:
    if IS_PROD and DATABASE_URL.startswith("sqlite"):
        logger.critical("%s SQLite is forbidden in production", STARTUP_PREFIX)
        raise RuntimeError("SQLite is forbidden in production environment")


def verify_database_connection(*, engine: Engine) -> None:
    """Fails startup when the store is unreachable; there is no degraded mode."""
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.critical("%s database unreachable: %s", STARTUP_PREFIX, exc.__class__.__name__)
        raise RuntimeError("Database connection failed") from exc
    logger.info("%s database connection verified", STARTUP_PREFIX)


def ensure_migrations_applied(*, engine: Engine, alembic_config_path: Path) -> None:
    if IS_TEST:
        logger.info("%s skipped migration check in test environment", MIGRATIONS_PREFIX)
        return

    if not alembic_config_path.exists():
        logger.critical("%s alembic config not found path=%s", MIGRATIONS_PREFIX, alembic_config_path)
        raise RuntimeError("alembic config not found")

    alembic_cfg = Config(str(alembic_config_path))
    script_directory = ScriptDirectory.from_config(alembic_cfg)
    expected_heads = set(script_directory.get_heads())

    with engine.connect() as connection:
        inspector = inspect(connection)
        if "alembic_version" not in inspector.get_table_names():
            logger.critical("%s alembic_version table missing", MIGRATIONS_PREFIX)
            raise RuntimeError("Database has no migration state")

        current_rows = connection.exec_driver_sql("SELECT version_num FROM alembic_version").fetchall()

    current_heads = {row[0] for row in current_rows if row and row[0]}
    if current_heads != expected_heads:
        logger.critical(
            "%s pending migration detected current=%s expected=%s",
            MIGRATIONS_PREFIX,
            sorted(current_heads),
            sorted(expected_heads),
        )
        raise RuntimeError("Pending migrations detected")

    logger.info("%s migration state verified", MIGRATIONS_PREFIX)
