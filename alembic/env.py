"""
Alembic environment for the catalog schema.

Script location and file template come from [tool.alembic] in
pyproject.toml; the database URL comes from application settings, so
migrations always target the same database the service uses.
"""

import asyncio
import logging
import sys
import tomllib
from pathlib import Path

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from alembic import context

project_dir = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_dir))

from fair_directory.core.config import settings  # noqa: E402
from fair_directory.core.database import Base, resolve_database_url  # noqa: E402
import fair_directory.models  # noqa: E402,F401

config = context.config
target_metadata = Base.metadata

logging.basicConfig(level=logging.WARNING, format="%(levelname)-5.5s [%(name)s] %(message)s")
logging.getLogger("alembic").setLevel(logging.INFO)


def _apply_pyproject_options() -> None:
    pyproject = project_dir / "pyproject.toml"
    if not pyproject.exists():
        return
    with pyproject.open("rb") as f:
        options = tomllib.load(f).get("tool", {}).get("alembic", {})
    for key in ("script_location", "file_template", "prepend_sys_path", "version_path_separator"):
        if key in options:
            config.set_main_option(key, options[key])


_apply_pyproject_options()

# ini-style interpolation: a literal "%" in a password must be doubled
config.set_main_option(
    "sqlalchemy.url",
    resolve_database_url(settings.DATABASE_URL).replace("%", "%%"),
)

COMPARE_OPTIONS = {"compare_type": True, "compare_server_default": True}


def run_migrations_offline() -> None:
    """Emit SQL for review instead of executing it."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **COMPARE_OPTIONS,
    )
    with context.begin_transaction():
        context.run_migrations()


def _migrate(connection: Connection) -> None:
    context.configure(connection=connection, target_metadata=target_metadata, **COMPARE_OPTIONS)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    """Apply migrations over a short-lived, unpooled async engine."""
    engine = async_engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_migrate)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
