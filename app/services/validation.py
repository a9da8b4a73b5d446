"""
Field validation and default substitution for activity and contractor input.

Invalid optional values are replaced by a documented default instead of being
rejected. Only required text fields and oversized counts raise ValidationError.

    Field                Accepted                          Default on bad input
    ─────────────────    ──────────────────────────────    ─────────────────────
    priority             low | medium | high | critical    medium
    contractor status    Active | Standby | Delayed |      Active
                         Complete | Offsite
    date                 YYYY-MM-DD, DD/MM/YYYY            today
    time                 HH:MM, HH:MM:SS                   08:00
    labor_count          integer 0..10000                  0 (above 10000: ValidationError)
    contractor ids       list / JSON array / "1,2,3"       [] (bad entries dropped)

    title                non-empty                         ValidationError
    contractor name      non-empty                         ValidationError
    contractor trade     non-empty                         ValidationError
"""

import json
import logging
from datetime import date

from app.core.exceptions import ValidationError
from app.models.briefing import (
    DEFAULT_ACTIVITY_TIME,
    DEFAULT_PRIORITY,
    PRIORITY_LEVELS,
    normalise_contractor_ids,
)
from app.models.contractor import CONTRACTOR_STATUSES, DEFAULT_CONTRACTOR_STATUS
from app.utils.helpers import parse_date, parse_time

logger = logging.getLogger(__name__)

REQUIRED = "ERR_VALIDATION_REQUIRED"

# Fits a 32-bit INTEGER column with room to spare
MAX_LABOR_COUNT = 10_000


def clean_text(value, max_len: int | None = None) -> str:
    text = "" if value is None else str(value).strip()
    return text[:max_len] if max_len else text


def require_text(data: dict, field: str, label: str | None = None, max_len: int | None = None) -> str:
    """Return the stripped value of a required text field or raise."""
    text = clean_text(data.get(field), max_len)
    if not text:
        label = label or field
        raise ValidationError(f"{label} is required", details={field: "required"}, code=REQUIRED)
    return text


def coerce_priority(value) -> str:
    priority = clean_text(value).lower()
    if priority not in PRIORITY_LEVELS:
        if priority:
            logger.debug("Unknown priority %r replaced by %s", value, DEFAULT_PRIORITY)
        return DEFAULT_PRIORITY
    return priority


def coerce_contractor_status(value) -> str:
    status = clean_text(value)
    for known in CONTRACTOR_STATUSES:
        if status.lower() == known.lower():
            return known
    if status:
        logger.debug("Unknown contractor status %r replaced by %s", value, DEFAULT_CONTRACTOR_STATUS)
    return DEFAULT_CONTRACTOR_STATUS


def coerce_date(value, today: date | None = None) -> date:
    parsed = parse_date(value)
    if parsed is None:
        fallback = today or date.today()
        if value:
            logger.debug("Invalid date %r replaced by %s", value, fallback)
        return fallback
    return parsed


def coerce_time(value):
    return parse_time(value) or DEFAULT_ACTIVITY_TIME


def coerce_labor_count(value) -> int:
    """Headcount for an activity; bad input becomes 0, oversized input raises."""
    if isinstance(value, bool):
        return 0
    try:
        count = int(value)
    except (TypeError, ValueError, OverflowError):
        return 0
    if count > MAX_LABOR_COUNT:
        raise ValidationError(
            f"labor_count may not exceed {MAX_LABOR_COUNT}", details={"labor_count": "too large"},
        )
    return max(count, 0)


def coerce_contractor_ids(value) -> list[int]:
    """Accept a list, a JSON array string, or a comma-joined string."""
    if value is None or value == "":
        return []
    if isinstance(value, str):
        text = value.strip()
        if text.startswith("["):
            try:
                value = json.loads(text)
            except json.JSONDecodeError:
                return []
        else:
            value = text.split(",")
    if not isinstance(value, (list, tuple)):
        value = [value]
    return normalise_contractor_ids(value)


def clean_activity_fields(data: dict) -> dict:
    """Validate a full activity payload (add and full-replace update).

    Returns the column values except briefing_id / date, which the
    activity service resolves against the project.
    """
    area = clean_text(data.get("area"), 255)
    return {
        "title": require_text(data, "title", "Title", 255),
        "description": clean_text(data.get("description")),
        "area": area or None,
        "priority": coerce_priority(data.get("priority")),
        "labor_count": coerce_labor_count(data.get("labor_count", 0)),
        "contractor_ids": coerce_contractor_ids(data.get("contractor_ids", data.get("contractors"))),
        "assigned_to": clean_text(data.get("assigned_to"), 100),
        "time": coerce_time(data.get("time")),
    }
