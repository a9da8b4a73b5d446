"""
Statistics Blueprint — read-only resource aggregation.

Endpoints:
    GET /api/v1/stats/daily?date=                  — one day
    GET /api/v1/stats/range?start=&end=            — inclusive range (default: last 7 days)
    GET /api/v1/stats/weekly?date=                 — Monday..Sunday week
    GET /api/v1/stats/contractor-daily?end=&days=  — rolling contractor labour
    GET /api/v1/stats/areas                        — lifetime area usage
"""

from datetime import date

from flask import Blueprint, current_app, request

from app.blueprints import current_ctx, date_arg
from app.core.exceptions import ValidationError
from app.services import stats_service
from app.utils.errors import api_ok

stats_bp = Blueprint("stats_bp", __name__, url_prefix="/api/v1/stats")


@stats_bp.route("/daily", methods=["GET"])
def daily():
    ctx = current_ctx()
    day = date_arg("date", date.today())
    return api_ok({"stats": stats_service.daily_totals(ctx.project_id, day)})


@stats_bp.route("/range", methods=["GET"])
def date_range():
    ctx = current_ctx()
    end = date_arg("end", date.today())
    start = date_arg("start", None) or stats_service.shift_date(end, -6, "end")
    stats = stats_service.range_totals(
        ctx.project_id, start, end, max_days=current_app.config.get("MAX_RANGE_DAYS", 366),
    )
    return api_ok({"stats": stats})


@stats_bp.route("/weekly", methods=["GET"])
def weekly():
    ctx = current_ctx()
    day = date_arg("date", date.today())
    return api_ok({"stats": stats_service.weekly_totals(ctx.project_id, day)})


@stats_bp.route("/contractor-daily", methods=["GET"])
def contractor_daily():
    ctx = current_ctx()
    end = date_arg("end", date.today())
    raw_days = request.args.get("days")
    if raw_days in (None, ""):
        window = current_app.config.get("DEFAULT_WINDOW_DAYS", 7)
    else:
        try:
            window = int(raw_days)
        except ValueError:
            raise ValidationError("days must be an integer", details={"days": raw_days})
    series = stats_service.rolling_contractor_daily(
        ctx.project_id, end, window, max_days=current_app.config.get("MAX_WINDOW_DAYS", 92),
    )
    return api_ok({"end_date": end.isoformat(), "window_days": window, "days": series})


@stats_bp.route("/areas", methods=["GET"])
def areas():
    ctx = current_ctx()
    return api_ok({"areas": stats_service.area_usage_stats(ctx.project_id)})
