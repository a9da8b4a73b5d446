"""Briefing store — one briefing per (project, calendar date).

Transaction policy: get_or_create_briefing commits the new briefing itself
(it is an upsert that must survive a failure later in the caller's request).
Every other function only reads.
"""
import logging
from datetime import date, timedelta

from sqlalchemy.exc import IntegrityError

from app.core.exceptions import NotFoundError
from app.models import db
from app.models.audit import write_audit
from app.models.briefing import DEFAULT_SAFETY_INFO, Briefing
from app.utils.helpers import commit_or_raise, uk_date

logger = logging.getLogger(__name__)


def find_briefing(project_id: int, day: date) -> Briefing | None:
    """Read-only lookup; never creates."""
    return Briefing.query_for_project(project_id).filter_by(date=day).first()


def get_briefing(project_id: int, briefing_id: int) -> Briefing:
    briefing = Briefing.query_for_project(project_id).filter_by(id=briefing_id).first()
    if briefing is None:
        raise NotFoundError("Briefing", briefing_id, project_id)
    return briefing


def previous_briefing(project_id: int, day: date) -> Briefing | None:
    if day == date.min:
        return None
    return find_briefing(project_id, day - timedelta(days=1))


def _default_content(day: date, template: Briefing | None) -> dict:
    safety_info = DEFAULT_SAFETY_INFO
    notes = f"Daily briefing notes for {uk_date(day)}"
    if template is not None:
        safety_info = template.safety_info or safety_info
        notes = template.notes or notes
    return {
        "overview": f"Daily briefing for {uk_date(day)}",
        "safety_info": safety_info,
        "notes": notes,
    }


def get_or_create_briefing(ctx, day: date, template: Briefing | None = None) -> Briefing:
    """Return the project's briefing for ``day``, creating a draft if absent.

    Concurrent first writers race on ``uq_briefings_project_date``: the loser's
    insert fails inside its SAVEPOINT, which is rolled back, and the winner's
    row is re-read.

    Args:
        ctx: RequestContext (project and actor).
        day: Calendar date of the briefing.
        template: Optional briefing whose safety_info / notes seed a new one.

    Returns:
        The persisted Briefing.
    """
    existing = find_briefing(ctx.project_id, day)
    if existing is not None:
        return existing

    briefing = Briefing(
        project_id=ctx.project_id,
        date=day,
        status="draft",
        created_by=ctx.actor_id,
        **_default_content(day, template),
    )
    try:
        with db.session.begin_nested():
            db.session.add(briefing)
    except IntegrityError:
        winner = find_briefing(ctx.project_id, day)
        if winner is None:
            raise
        logger.debug(
            "Briefing insert lost race, using existing row",
            extra={"project_id": ctx.project_id, "briefing_id": winner.id},
        )
        return winner

    write_audit(
        entity_type="briefing", entity_id=briefing.id, action="briefing.create",
        ctx=ctx, diff={"date": day.isoformat(), "details": f"Created new briefing for {uk_date(day)}"},
    )
    commit_or_raise("create_briefing")
    logger.info(
        "Briefing created",
        extra={"project_id": ctx.project_id, "briefing_id": briefing.id, "date": day.isoformat()},
    )
    return briefing
