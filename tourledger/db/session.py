"""Unit-of-work helper wrapping store failures in :class:`StoreUnavailableError`."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from tourledger.errors import StoreUnavailableError

logger = logging.getLogger(__name__)


@contextmanager
def unit_of_work(session_factory: sessionmaker, operation: str) -> Iterator[Session]:
    """Yield a session inside ``session_factory.begin()``.

    The transaction commits when the block exits cleanly and rolls back on
    any exception. Store errors (including commit failures) are re-raised as
    :class:`StoreUnavailableError`; domain errors pass through untouched.
    """

    try:
        with session_factory.begin() as session:
            yield session
    except SQLAlchemyError as exc:
        logger.error(f"{operation}: store failure: {exc}")
        raise StoreUnavailableError(f"{operation} failed: store unavailable") from exc
