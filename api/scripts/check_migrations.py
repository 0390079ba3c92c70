"""Fail if the Alembic migrations are out of sync with the portfolio models."""

from __future__ import annotations

import asyncio

from alembic.autogenerate import compare_metadata
from alembic.migration import MigrationContext
from loguru import logger
from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine

from devfolio import models  # noqa: F401  # Ensure models are registered
from devfolio.config import settings
from devfolio.database import Base, engine_options, migrate_db
from devfolio.logging_config import configure_logging


def _compare(connection) -> list[object]:
    context = MigrationContext.configure(connection, opts={"compare_type": True})
    return compare_metadata(context, Base.metadata)


async def main() -> int:
    configure_logging()
    await migrate_db()

    engine = create_async_engine(settings.database_url, **engine_options(settings.database_url))
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
        diffs = await conn.run_sync(_compare)
    await engine.dispose()

    if diffs:
        logger.error("Detected schema differences between models and migrations:")
        for diff in diffs:
            logger.error(f"  {diff}")
        return 1

    logger.info("No schema differences detected.")
    return 0


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
