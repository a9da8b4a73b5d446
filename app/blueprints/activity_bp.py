"""
Activity Blueprint.

Endpoints:
    GET    /api/v1/activities?date=YYYY-MM-DD   — day listing (defaults to today)
    GET    /api/v1/activities/<id>              — single activity
    POST   /api/v1/activities                   — create (briefing_id or date)
    PUT    /api/v1/activities/<id>              — full replace
    DELETE /api/v1/activities/<id>              — delete, returns prior record
    POST   /api/v1/activities/copy-day          — copy one day's activities to another

Layer contract:
    - No ORM calls here — all DB work delegated to the services.
    - Commits happen here via commit_or_raise, never in the services.
"""

import logging
from datetime import date

from flask import Blueprint

from app.blueprints import current_ctx, date_arg, json_body
from app.core.exceptions import ValidationError
from app.services import activity_service, contractor_service, day_copy_service
from app.services.contractor_resolution import serialize_activity
from app.utils.errors import api_ok
from app.utils.helpers import commit_or_raise, parse_date

logger = logging.getLogger(__name__)

activity_bp = Blueprint("activity_bp", __name__, url_prefix="/api/v1/activities")


def _serialized(activity, project_id):
    return serialize_activity(activity, contractor_service.build_lookup_maps(project_id))


@activity_bp.route("", methods=["GET"])
def list_activities():
    ctx = current_ctx()
    day = date_arg("date", date.today())
    return api_ok(activity_service.list_activities_for_date(ctx.project_id, day))


@activity_bp.route("/<int:activity_id>", methods=["GET"])
def get_activity(activity_id: int):
    ctx = current_ctx()
    activity = activity_service.get_activity(activity_id, ctx.project_id)
    return api_ok({"activity": _serialized(activity, ctx.project_id)})


@activity_bp.route("", methods=["POST"])
def create_activity():
    """Create an activity.

    Body (JSON):
        title (str, required)
        briefing_id (int) or date (YYYY-MM-DD | DD/MM/YYYY); date defaults to today
        time, description, area, priority, labor_count, contractor_ids, assigned_to
    """
    ctx = current_ctx()
    activity = activity_service.add_activity(ctx, json_body())
    commit_or_raise("add_activity")
    return api_ok(
        {"activity": _serialized(activity, ctx.project_id), "message": "Activity added successfully"},
        status=201,
    )


@activity_bp.route("/<int:activity_id>", methods=["PUT"])
def update_activity(activity_id: int):
    ctx = current_ctx()
    activity = activity_service.update_activity(ctx, activity_id, json_body())
    commit_or_raise("update_activity")
    return api_ok(
        {"activity": _serialized(activity, ctx.project_id), "message": "Activity updated successfully"}
    )


@activity_bp.route("/<int:activity_id>", methods=["DELETE"])
def delete_activity(activity_id: int):
    ctx = current_ctx()
    result = activity_service.delete_activity(ctx, activity_id)
    commit_or_raise("delete_activity")
    return api_ok({**result, "message": "Activity deleted successfully"})


@activity_bp.route("/copy-day", methods=["POST"])
def copy_day():
    """Copy all activities from source_date to target_date.

    Body (JSON):
        source_date (str, required)
        target_date (str, required)
    """
    ctx = current_ctx()
    data = json_body()
    source_date = parse_date(data.get("source_date"))
    target_date = parse_date(data.get("target_date"))
    missing = {
        field: "required"
        for field, value in (("source_date", source_date), ("target_date", target_date))
        if value is None
    }
    if missing:
        raise ValidationError(
            "source_date and target_date are required dates",
            details=missing,
            code="ERR_VALIDATION_REQUIRED",
        )

    result = day_copy_service.copy_day(ctx, source_date, target_date)
    commit_or_raise("copy_day")
    return api_ok({
        **result,
        "message": f"Copied {result['copied_count']} activities",
    })
