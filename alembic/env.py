"""Migrations for the drill engine schema.

Alembic talks to the database through a blocking driver, so the async URL
the service runs on is mapped to its sync counterpart before connecting.
"""
from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

from drill_engine.db.base import Base  # noqa: E402
from drill_engine.core.config import get_settings  # noqa: E402

target_metadata = Base.metadata

SYNC_DRIVER_FOR = {
    "sqlite+aiosqlite": "sqlite",
    "postgresql+asyncpg": "postgresql+psycopg2",
}


def migration_url() -> str:
    """``alembic -x url=...`` beats the service setting, which beats alembic.ini."""
    url = context.get_x_argument(as_dictionary=True).get("url") or get_settings().database_url
    if not url:
        return config.get_main_option("sqlalchemy.url")
    scheme, sep, rest = url.partition("://")
    return f"{SYNC_DRIVER_FOR.get(scheme, scheme)}{sep}{rest}"


def configure_context(url: str, **options) -> None:
    # SQLite cannot ALTER most constraints in place
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        render_as_batch=url.startswith("sqlite"),
        **options,
    )


def run_migrations_offline() -> None:
    url = migration_url()
    configure_context(url, url=url, literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    url = migration_url()
    section = config.get_section(config.config_ini_section) or {}
    section["sqlalchemy.url"] = url
    engine = engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool)

    with engine.connect() as connection:
        configure_context(url, connection=connection)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
