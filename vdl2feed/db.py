"""Read-only access to the aircraft reference store."""

from __future__ import annotations

import logging
from pathlib import Path

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()

logger = logging.getLogger("vdl2feed.db")


class ReferenceStoreError(RuntimeError):
    """Raised when the aircraft reference store cannot be opened."""


def build_engine(path: str | Path, *, readonly: bool = True) -> Engine:
    """Create a SQLite engine for the reference store.

    The read-only variant uses a SQLite URI so the file is never created or
    modified by this process.
    """

    resolved = Path(path).expanduser().resolve()
    if readonly:
        url = f"sqlite:///file:{resolved.as_posix()}?mode=ro&uri=true"
    else:
        url = f"sqlite:///{resolved.as_posix()}"
    return create_engine(url, connect_args={"check_same_thread": False})


def open_reference_store(path: str | Path) -> sessionmaker:
    """Open the reference store once at startup and return a session factory.

    Raises ReferenceStoreError if the file is missing or the aircraft table
    cannot be queried.
    """

    db_path = Path(path)
    if not db_path.is_file():
        raise ReferenceStoreError(f"Reference database not found: {db_path}")

    engine = build_engine(db_path, readonly=True)
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT icao FROM aircraft LIMIT 1"))
    except SQLAlchemyError as exc:
        engine.dispose()
        raise ReferenceStoreError(
            f"Unable to open reference database {db_path}: {exc}"
        ) from exc

    logger.info("Opened SQLite DB: %s", db_path)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_reference_schema(path: str | Path) -> Engine:
    """Create the aircraft table in a writable database.

    Used by tooling and tests that need to build a reference store; the
    running service only ever opens the store read-only.
    """

    import vdl2feed.db_models  # noqa: F401 - models are imported for side effects

    engine = build_engine(path, readonly=False)
    Base.metadata.create_all(bind=engine)
    return engine


__all__ = [
    "Base",
    "ReferenceStoreError",
    "build_engine",
    "init_reference_schema",
    "open_reference_store",
]
