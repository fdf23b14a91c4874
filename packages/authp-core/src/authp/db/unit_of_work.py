"""Commit helper that reports unique-key clashes as status errors."""

from __future__ import annotations

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from authp.status import Status

log = structlog.get_logger(__name__)

_PG_UNIQUE_VIOLATION = "23505"
_UNIQUE_MARKERS = ("UNIQUE constraint failed", "duplicate key value violates unique constraint")


def is_unique_violation(exc: IntegrityError) -> bool:
    """True when the driver error behind ``exc`` is a unique/primary key clash."""
    orig = exc.orig
    if getattr(orig, "sqlstate", None) == _PG_UNIQUE_VIOLATION:
        return True
    if getattr(orig, "pgcode", None) == _PG_UNIQUE_VIOLATION:
        return True
    text = str(orig)
    return any(marker in text for marker in _UNIQUE_MARKERS)


async def save_changes_with_unique_check(session: AsyncSession) -> Status:
    """Commit everything staged on ``session`` as one transaction.

    A unique-constraint violation rolls the transaction back and comes back
    as a status error; any other database error propagates.
    """
    status = Status()
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        if not is_unique_violation(exc):
            raise
        detail = str(exc.orig).splitlines()[0] if exc.orig is not None else str(exc)
        log.warning("unique_constraint_failed", detail=detail)
        return status.add_error(f"Unique constraint failed: {detail}")
    return status
