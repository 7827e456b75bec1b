"""Fail if Alembic migrations are out of sync with SQLAlchemy models."""

from __future__ import annotations

import asyncio

from alembic.autogenerate import compare_metadata
from alembic.migration import MigrationContext
from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine

from church_social.config import settings
from church_social.database import Base, init_db
import church_social.models  # noqa: F401  # Ensure models are registered


def _compare(connection) -> list[object]:
    context = MigrationContext.configure(connection, opts={"compare_type": True})
    return compare_metadata(context, Base.metadata)


async def main(db_url: str | None = None) -> int:
    url = db_url or settings.database_url
    await init_db(url)

    engine = create_async_engine(url)
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
        diffs = await conn.run_sync(_compare)
    await engine.dispose()

    if diffs:
        print("Detected schema differences between models and migrations:")
        for diff in diffs:
            print(diff)
        return 1

    print("No schema differences detected.")
    return 0


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
