"""Dialect-aware INSERT ... ON CONFLICT construction.

PostgreSQL and SQLite both support ON CONFLICT with the same SQLAlchemy API,
but each dialect ships its own ``insert`` construct.
"""

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def insert_for(session: AsyncSession, table):
    """Return a dialect-specific ``insert(table)`` supporting ``on_conflict_*``."""
    dialect = session.get_bind().dialect.name
    try:
        return _INSERTS[dialect](table)
    except KeyError:
        raise RuntimeError(f"ON CONFLICT upserts are not supported on dialect '{dialect}'") from None
