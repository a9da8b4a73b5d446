"""Day-copy operator: duplicate one day's activity set onto another date.

Transaction policy: the target briefing is committed by
get_or_create_briefing as soon as it is resolved; copied activities are
flushed and committed by the route handler.

Steps (any refusal stops the copy before a row is inserted):
  1. source briefing must exist                -> NoSourceDataError
  2. target briefing resolved or created        (committed side effect)
  3. target briefing must hold no activities    -> TargetNotEmptyError
  4. source briefing must hold activities       -> NothingToCopyError
  5. each source activity inserted in its own SAVEPOINT
  6. activity.copy_day audit row
"""
import logging
from datetime import date, datetime, timezone

from sqlalchemy.exc import SQLAlchemyError

from app.core.exceptions import (
    NoSourceDataError,
    NothingToCopyError,
    TargetNotEmptyError,
    ValidationError,
)
from app.models import db
from app.models.audit import write_audit
from app.models.briefing import Activity
from app.services import briefing_service
from app.services.activity_service import list_activities
from app.utils.helpers import uk_date

logger = logging.getLogger(__name__)


def _clone(source: Activity, briefing_id: int, target_date: date) -> Activity:
    now = datetime.now(timezone.utc)
    return Activity(
        briefing_id=briefing_id,
        date=target_date,
        time=source.time,
        title=source.title,
        description=source.description,
        area=source.area,
        priority=source.priority,
        labor_count=source.labor_count,
        contractors=source.contractors,
        assigned_to=source.assigned_to,
        created_at=now,
        updated_at=now,
    )


def copy_day(ctx, source_date: date, target_date: date) -> dict:
    """Copy every activity of ``source_date`` onto ``target_date``.

    Copy never merges: a target that already has activities is refused.
    A failed insert is logged and skipped; earlier inserts are kept.

    Returns:
        {"copied_count", "failed_count", "source_date", "target_date",
         "source_briefing_id", "target_briefing_id"}
    """
    if source_date == target_date:
        raise ValidationError(
            "Source and target dates must differ",
            details={"target_date": "same as source"},
        )

    source = briefing_service.find_briefing(ctx.project_id, source_date)
    if source is None:
        raise NoSourceDataError(
            f"No briefing found for {uk_date(source_date)}",
            source_date=source_date.isoformat(),
        )

    target = briefing_service.get_or_create_briefing(ctx, target_date, template=source)

    if list_activities(target.id):
        raise TargetNotEmptyError(
            f"The briefing for {uk_date(target_date)} already has activities",
            target_date=target_date.isoformat(),
            target_briefing_id=target.id,
        )

    source_activities = list_activities(source.id)
    if not source_activities:
        raise NothingToCopyError(
            f"No activities to copy from {uk_date(source_date)}",
            source_date=source_date.isoformat(),
        )

    copied = 0
    for activity in source_activities:
        try:
            with db.session.begin_nested():
                db.session.add(_clone(activity, target.id, target_date))
        except SQLAlchemyError:
            logger.warning(
                "Activity copy failed",
                extra={"project_id": ctx.project_id, "activity_id": activity.id},
                exc_info=True,
            )
            continue
        copied += 1

    write_audit(
        entity_type="briefing", entity_id=target.id, action="activity.copy_day",
        ctx=ctx,
        diff={
            "count": copied,
            "source_date": source_date.isoformat(),
            "target_date": target_date.isoformat(),
            "actor": ctx.actor_name,
        },
    )
    logger.info(
        "Copied day activities",
        extra={
            "project_id": ctx.project_id,
            "source_date": source_date.isoformat(),
            "target_date": target_date.isoformat(),
            "copied_count": copied,
        },
    )
    return {
        "copied_count": copied,
        "failed_count": len(source_activities) - copied,
        "source_date": source_date.isoformat(),
        "target_date": target_date.isoformat(),
        "source_briefing_id": source.id,
        "target_briefing_id": target.id,
    }
