"""Transaction boundaries for service-layer operations."""
from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.orm import Session


@contextmanager
def atomic(session: Session) -> Iterator[Session]:
    """Commit everything done inside the block, or nothing.

    Version bumps and read-mark writes are issued on the same session as the
    structural change they accompany, so a failure anywhere rolls back both.
    """
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise


__all__ = ["atomic"]
