# Overview: Dialect INSERT constructs that carry ON CONFLICT clauses.

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from .extensions import db


_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


def dialect_insert(model):
    """
    INSERT for the session's database that supports on_conflict_do_nothing
    and on_conflict_do_update, so an upsert is one statement.

    Raises:
        NotImplementedError: the bound database is neither PostgreSQL nor SQLite
    """
    dialect = db.session.get_bind().dialect.name
    try:
        insert = _INSERTS[dialect]
    except KeyError:
        raise NotImplementedError(f"Upserts are not supported on {dialect}")
    return insert(model)
