"""Shared utility functions used by services and blueprints.

parse_date:      returns None on bad input (callers substitute defaults)
parse_time:      returns None on bad input
uk_date:         DD/MM/YYYY rendering used in payloads and audit text
daterange:       inclusive calendar-day iterator
commit_or_raise: commit the session, translating datastore failures to StorageError
"""
import logging
from datetime import date, datetime, time, timedelta

from sqlalchemy.exc import SQLAlchemyError

from app.core.exceptions import StorageError
from app.models import db

logger = logging.getLogger(__name__)


def parse_date(value):
    """Parse a date string (ISO or DD/MM/YYYY) to a date object.

    Returns None for empty/invalid input. Supports:
    - YYYY-MM-DD (ISO format)
    - YYYY-MM-DDTHH:MM:SS (datetime ISO → .date())
    - DD/MM/YYYY (UK format used by the site dashboards)
    """
    if not value:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass
    try:
        return datetime.strptime(text, "%d/%m/%Y").date()
    except ValueError:
        return None


def parse_time(value):
    """Parse HH:MM or HH:MM:SS. Returns None for empty/invalid input."""
    if not value:
        return None
    if isinstance(value, time):
        return value
    text = str(value).strip()
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(text, fmt).time()
        except ValueError:
            continue
    return None


def uk_date(value) -> str:
    return value.strftime("%d/%m/%Y") if value else ""


def daterange(start: date, end: date):
    """Yield every date from start to end inclusive. Empty when start > end."""
    for offset in range((end - start).days + 1):
        yield start + timedelta(days=offset)


# ── Database commit helper ───────────────────────────────────────────────────

def commit_or_raise(operation: str):
    """Commit the current SQLAlchemy session or raise StorageError.

    Usage::

        activity = activity_service.add_activity(ctx, data)
        commit_or_raise("add_activity")

    Rolls the session back before raising so the request can still render
    an error response.
    """
    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception("Database commit failed during %s", operation)
        raise StorageError(operation) from exc
