import json

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine, Session

from .settings import Settings


def _json_serializer(value) -> str:
    # store non-ascii tags and comments as readable text
    return json.dumps(value, ensure_ascii=False)


def _casefold(value):
    return value.casefold() if isinstance(value, str) else value


def _register_sqlite_functions(dbapi_connection, connection_record):
    # SQLite's lower() only folds ASCII, search needs full Unicode folding
    dbapi_connection.create_function("casefold", 1, _casefold, deterministic=True)


def make_engine(settings: Settings) -> Engine:
    kwargs = {"echo": settings.DB_ECHO, "json_serializer": _json_serializer}
    if settings.DATABASE_URL.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in settings.DATABASE_URL or settings.DATABASE_URL == "sqlite://":
            kwargs["poolclass"] = StaticPool
    engine = create_engine(settings.DATABASE_URL, **kwargs)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _register_sqlite_functions)
    return engine


def init_db(engine: Engine):
    # registers the tables on SQLModel.metadata
    from edublog import models  # noqa: F401

    SQLModel.metadata.create_all(engine)


def get_db(request: Request):
    with Session(request.app.state.engine) as session:
        yield session
