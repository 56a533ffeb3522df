"""Engine, session factory and the transactional boundary for writes."""
from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Generator, Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from .config import get_settings

settings = get_settings()

_connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}
engine = create_engine(settings.database_url, connect_args=_connect_args)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

# Serialises logical writes inside one process. Bed claims and request
# transitions are also conditional UPDATEs, which hold across processes.
_write_lock = threading.RLock()
_TX_FLAG = "hostel_tx_active"


class Base(DeclarativeBase):
    pass


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """Run a block as one atomic unit: commit on success, roll back on error.

    Nested blocks on the same session join the outermost one, so an engine
    operation can call another one without committing half of the work.
    """

    with _write_lock:
        if db.info.get(_TX_FLAG):
            yield db
            return
        db.info[_TX_FLAG] = True
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.info.pop(_TX_FLAG, None)
