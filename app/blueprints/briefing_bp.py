"""
Briefing Blueprint.

Endpoints:
    GET  /api/v1/briefings?date=YYYY-MM-DD  — read-only lookup, 404 when absent
    GET  /api/v1/briefings/<id>             — one briefing of the caller's project
    POST /api/v1/briefings                  — get-or-create for {"date": ...}
"""

from datetime import date

from flask import Blueprint

from app.blueprints import current_ctx, date_arg, json_body
from app.core.exceptions import NotFoundError
from app.services import briefing_service
from app.services.validation import coerce_date
from app.utils.errors import api_ok

briefing_bp = Blueprint("briefing_bp", __name__, url_prefix="/api/v1/briefings")


@briefing_bp.route("", methods=["GET"])
def find_briefing():
    ctx = current_ctx()
    day = date_arg("date", date.today())
    briefing = briefing_service.find_briefing(ctx.project_id, day)
    if briefing is None:
        raise NotFoundError("Briefing", day.isoformat(), ctx.project_id)
    previous = briefing_service.previous_briefing(ctx.project_id, day)
    return api_ok({
        "briefing": briefing.to_dict(),
        "prev_briefing_exists": previous is not None,
    })


@briefing_bp.route("/<int:briefing_id>", methods=["GET"])
def get_briefing(briefing_id):
    ctx = current_ctx()
    briefing = briefing_service.get_briefing(ctx.project_id, briefing_id)
    previous = briefing_service.previous_briefing(ctx.project_id, briefing.date)
    return api_ok({
        "briefing": briefing.to_dict(),
        "prev_briefing_exists": previous is not None,
    })


@briefing_bp.route("", methods=["POST"])
def get_or_create_briefing():
    """Idempotent; the service commits a newly created briefing itself."""
    ctx = current_ctx()
    day = coerce_date(json_body().get("date"))
    briefing = briefing_service.get_or_create_briefing(ctx, day)
    return api_ok({"briefing": briefing.to_dict()})
