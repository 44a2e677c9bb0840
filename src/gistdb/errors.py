"""Error taxonomy raised by the repository modules."""

import logging

from prometheus_client import Counter
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session


logger = logging.getLogger(__name__)

STORE_ERROR_COUNTER = Counter(
    "store_errors_total", "Total failed store operations", ["operation"]
)


class GistDBError(Exception):
    """Base class for errors raised by gistdb."""


class NotFoundError(GistDBError):
    """A lookup matched no row."""


class ConflictError(GistDBError):
    """An insert or update violated a uniqueness constraint."""


class StoreError(GistDBError):
    """The store was unreachable or rejected the query."""


# older sqlite3 modules expose no error name, only the message
_SQLITE_UNIQUE_PREFIX = "UNIQUE constraint failed"


def _is_unique_violation(exc: IntegrityError) -> bool:
    """Tell uniqueness/primary-key violations apart from FK and NOT NULL failures."""
    orig = exc.orig
    if getattr(orig, "sqlite_errorname", None) in (
        "SQLITE_CONSTRAINT_UNIQUE",
        "SQLITE_CONSTRAINT_PRIMARYKEY",
    ):
        return True
    if getattr(orig, "pgcode", None) == "23505":
        return True
    args = getattr(orig, "args", ())
    if args and args[0] == 1062:
        return True
    return str(orig).startswith(_SQLITE_UNIQUE_PREFIX)


def handle_store_error(session: Session, operation: str, exc: SQLAlchemyError) -> None:
    """Rollback the transaction and raise the matching gistdb error."""
    session.rollback()
    STORE_ERROR_COUNTER.labels(operation=operation).inc()
    if isinstance(exc, IntegrityError) and _is_unique_violation(exc):
        logger.warning("%s rejected by unique constraint: %s", operation, exc.orig)
        raise ConflictError(f"{operation}: already exists") from exc
    logger.exception("%s failed", operation, exc_info=exc)
    raise StoreError(f"{operation}: database error") from exc
