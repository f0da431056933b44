from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker, Session

from .models import Base


def _ensure_sqlite_dir(database_url: str) -> None:
    """
    For file-backed SQLite URLs, make sure the parent directory exists.
    """
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite" or not url.database or url.database == ":memory:":
        return
    parent = Path(url.database).parent
    if parent and not parent.exists():
        parent.mkdir(parents=True, exist_ok=True)


def get_engine(database_url: str, echo: bool = False) -> Engine:
    _ensure_sqlite_dir(database_url)
    return create_engine(database_url, echo=echo, future=True)


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, future=True, expire_on_commit=False)


def get_session(engine: Engine) -> Session:
    return make_session_factory(engine)()


def ensure_schema(engine: Engine) -> None:
    Base.metadata.create_all(engine)
