import logging
from collections.abc import Collection, Mapping
from logging.config import fileConfig
from typing import Any

from alembic import context
from alembic.runtime.migration import MigrationContext, MigrationInfo
from bill.core.config import settings
from bill.core.utils import convert_async_db_url_to_sync
from bill.models import Base  # Registers every model on the metadata
from sqlalchemy import engine_from_config, pool

logger = logging.getLogger("alembic.env")

config = context.config

# Migrations run on a sync driver; a URL set on the config (tests) wins over settings
if not config.get_main_option("sqlalchemy.url"):
    config.set_main_option("sqlalchemy.url", convert_async_db_url_to_sync(settings.DATABASE_URL))

if config.config_file_name is not None and config.get_main_option("configure_logger", "true") != "false":
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Emit the migration SQL to stdout instead of executing it."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def _log_applied(
    ctx: MigrationContext,
    step: MigrationInfo,
    heads: Collection[Any],
    run_args: Mapping[str, Any],
) -> None:
    logger.info("%s %s", "Applied" if step.is_upgrade else "Reverted", step.up_revision_id)


def run_migrations_online() -> None:
    """Apply migrations over a dedicated, unpooled connection."""
    engine = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with engine.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            on_version_apply=_log_applied,
        )
        logger.info(
            "Schema at %s, scripts at %s",
            context.get_context().get_current_revision() or "base",
            context.get_head_revision() or "base",
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
