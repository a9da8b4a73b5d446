"""Activity store: CRUD over activities inside project briefings.

Transaction policy: functions use flush(), never commit().
Caller (route handler) is responsible for committing. The one exception is
briefing auto-creation, which get_or_create_briefing commits on its own.

Operations:
- list_activities:            area asc, priority desc, title asc (case-insensitive)
- list_activities_for_date:   listing payload with resolved contractors
- get_activity:               project-scoped; cross-project is NotFound
- add_activity:               by briefing_id or by date (briefing auto-created)
- update_activity:            full replace of every field
- delete_activity:            returns the prior snapshot
"""
import logging
from datetime import date, datetime, timezone

from sqlalchemy import case, func, nulls_first

from app.core.exceptions import NotFoundError, ValidationError
from app.models import db
from app.models.audit import write_audit
from app.models.briefing import PRIORITY_RANK, Activity, Briefing
from app.services import briefing_service, contractor_service
from app.services.contractor_resolution import reverse_lookup, serialize_activity
from app.services.validation import clean_activity_fields, coerce_date

logger = logging.getLogger(__name__)


def _priority_rank():
    return case(PRIORITY_RANK, value=Activity.priority, else_=0)


def ordered(query):
    """Apply the product ordering: area asc (NULL first), priority desc, title asc.

    Area and title compare case-insensitively; exact case breaks ties.
    """
    return query.order_by(
        nulls_first(func.lower(Activity.area).asc()),
        _priority_rank().desc(),
        func.lower(Activity.title).asc(),
        Activity.title.asc(),
        Activity.id.asc(),
    )


# ── Queries ──────────────────────────────────────────────────────────────


def list_activities(briefing_id: int) -> list[Activity]:
    return ordered(Activity.query.filter_by(briefing_id=briefing_id)).all()


def get_activity(activity_id: int, project_id: int) -> Activity:
    """Fetch an activity whose briefing belongs to ``project_id``."""
    activity = (
        Activity.query.join(Briefing, Activity.briefing_id == Briefing.id)
        .filter(Activity.id == activity_id, Briefing.project_id == project_id)
        .first()
    )
    if activity is None:
        raise NotFoundError("Activity", activity_id, project_id)
    return activity


def list_activities_for_date(project_id: int, day: date) -> dict:
    """Build the day listing: activities with resolved contractors plus summaries.

    Absence of a briefing is not an error; the lists are simply empty.
    """
    lookup_maps = contractor_service.build_lookup_maps(project_id)
    briefing = briefing_service.find_briefing(project_id, day)
    previous = briefing_service.previous_briefing(project_id, day)

    activities = list_activities(briefing.id) if briefing else []
    items = [serialize_activity(a, lookup_maps) for a in activities]

    by_area: dict[str, list] = {}
    contractor_names: list[str] = []
    for item in items:
        by_area.setdefault(item["area"] or "Unspecified", []).append(item)
        for name in item["contractor_names"]:
            if name not in contractor_names:
                contractor_names.append(name)

    return {
        "date": day.isoformat(),
        "briefing_id": briefing.id if briefing else None,
        "activities": items,
        "activities_by_area": by_area,
        "activities_by_contractor": reverse_lookup(activities, lookup_maps),
        "count": len(items),
        "total_labor": sum(item["labor_count"] for item in items),
        "total_contractors": len(contractor_names),
        "contractor_names": contractor_names,
        "prev_briefing_exists": previous is not None,
        "prev_briefing_id": previous.id if previous else None,
    }


# ── Commands ─────────────────────────────────────────────────────────────


def _resolve_briefing(ctx, data: dict) -> Briefing:
    """Briefing for a write: explicit briefing_id (validated) or date (auto-created)."""
    briefing_id = data.get("briefing_id")
    if briefing_id not in (None, ""):
        try:
            briefing_id = int(briefing_id)
        except (TypeError, ValueError):
            briefing_id = 0
        briefing = (
            Briefing.query_for_project(ctx.project_id).filter_by(id=briefing_id).first()
            if briefing_id > 0 else None
        )
        if briefing is None:
            raise ValidationError(
                "Invalid briefing for this project", details={"briefing_id": "invalid"},
            )
        return briefing
    return briefing_service.get_or_create_briefing(ctx, coerce_date(data.get("date")))


def _filter_contractors(project_id: int, contractor_ids: list[int]) -> list[int]:
    live = contractor_service.existing_contractor_ids(project_id, contractor_ids)
    kept = [cid for cid in contractor_ids if cid in live]
    if len(kept) != len(contractor_ids):
        logger.debug(
            "Dropped unknown contractor ids",
            extra={"project_id": project_id, "dropped": len(contractor_ids) - len(kept)},
        )
    return kept


def add_activity(ctx, data: dict) -> Activity:
    """Create an activity.

    Raises:
        ValidationError: title empty, labor_count too large, or briefing_id
            not in the project.

    Returns:
        Activity instance (already flushed).
    """
    fields = clean_activity_fields(data)
    briefing = _resolve_briefing(ctx, data)
    contractor_ids = _filter_contractors(ctx.project_id, fields.pop("contractor_ids"))

    activity = Activity(briefing_id=briefing.id, date=briefing.date, **fields)
    activity.contractor_ids = contractor_ids
    db.session.add(activity)
    db.session.flush()

    write_audit(
        entity_type="activity", entity_id=activity.id, action="activity.create",
        ctx=ctx, diff={"title": activity.title, "date": briefing.date.isoformat()},
    )
    logger.info(
        "Activity created",
        extra={"project_id": ctx.project_id, "activity_id": activity.id, "briefing_id": briefing.id},
    )
    return activity


def update_activity(ctx, activity_id: int, data: dict) -> Activity:
    """Full replace: every field is overwritten from ``data``.

    Missing optional fields fall back to their defaults, not to the stored
    value. The activity may move to another briefing of the same project.
    """
    activity = get_activity(activity_id, ctx.project_id)
    fields = clean_activity_fields(data)
    if data.get("briefing_id") in (None, "") and not data.get("date"):
        briefing = activity.briefing
    else:
        briefing = _resolve_briefing(ctx, data)
    contractor_ids = _filter_contractors(ctx.project_id, fields.pop("contractor_ids"))
    before = activity.to_dict()

    for name, value in fields.items():
        setattr(activity, name, value)
    activity.briefing_id = briefing.id
    activity.date = briefing.date
    activity.contractor_ids = contractor_ids
    activity.updated_at = datetime.now(timezone.utc)
    db.session.flush()

    write_audit(
        entity_type="activity", entity_id=activity.id, action="activity.update",
        ctx=ctx, diff={"before": before, "after": activity.to_dict()},
    )
    return activity


def delete_activity(ctx, activity_id: int) -> dict:
    """Delete an activity.

    Returns:
        {"deleted": True, "prior": <pre-deletion record>}
    """
    activity = get_activity(activity_id, ctx.project_id)
    prior = activity.to_dict()
    db.session.delete(activity)
    db.session.flush()
    write_audit(
        entity_type="activity", entity_id=activity_id, action="activity.delete",
        ctx=ctx, diff={"prior": prior},
    )
    return {"deleted": True, "prior": prior}
