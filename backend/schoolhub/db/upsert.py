"""
Dialect-specific INSERT constructs.

Both PostgreSQL and SQLite support ``INSERT ... ON CONFLICT``; the generic
``sqlalchemy.insert`` does not expose it, so pick the construct matching the
session's engine.
"""

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

_INSERT_CONSTRUCTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def upsert_insert(db: AsyncSession, model):
    dialect = db.get_bind().dialect.name
    try:
        insert = _INSERT_CONSTRUCTS[dialect]
    except KeyError:
        raise RuntimeError(f"ON CONFLICT inserts are not supported on {dialect}") from None
    return insert(model)
