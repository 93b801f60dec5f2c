from __future__ import annotations

from sqlalchemy import create_engine, event, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from ..config import get_settings

# ---------- engines per database URL ----------
_engines: dict[str, Engine] = {}
_sessions: dict[str, sessionmaker] = {}


def _enable_sqlite_fks(dbapi_conn, _record) -> None:
    cur = dbapi_conn.cursor()
    cur.execute("PRAGMA foreign_keys = ON")
    cur.close()


def make_engine(url: str) -> Engine:
    """Build an engine. SQLite connections enforce foreign keys and may be shared across threads."""
    kwargs: dict = {"pool_pre_ping": True}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
    eng = create_engine(url, **kwargs)
    if url.startswith("sqlite"):
        event.listen(eng, "connect", _enable_sqlite_fks)
    return eng


def get_engine(url: str | None = None) -> Engine:
    url = url or get_settings().database_url
    eng = _engines.get(url)
    if eng is None:
        eng = make_engine(url)
        _engines[url] = eng
    return eng


def get_sessionmaker(url: str | None = None) -> sessionmaker:
    url = url or get_settings().database_url
    sm = _sessions.get(url)
    if sm is None:
        sm = sessionmaker(bind=get_engine(url), autoflush=False, expire_on_commit=False)
        _sessions[url] = sm
    return sm


def init_db(url: str | None = None) -> Engine:
    """Create the request tables on the configured database. Import inside to avoid circulars."""
    from . import models  # noqa: F401
    eng = get_engine(url)
    models.Base.metadata.create_all(bind=eng)
    return eng


def table_names(url: str | None = None) -> list[str]:
    return sorted(inspect(get_engine(url)).get_table_names())


def dispose_engines() -> None:
    """Dispose cached engines and sessions (used between tests and on shutdown)."""
    for eng in list(_engines.values()):
        eng.dispose()
    _engines.clear()
    _sessions.clear()
