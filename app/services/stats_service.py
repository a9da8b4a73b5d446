"""
Resource statistics over briefings and activities.

Read-only aggregation for the dashboard and reports. All date filtering uses
the owning briefing's date. Contractor labour is *attributed*, not split: an
activity with N resolved contractors counts its full labor_count against each
of them.

Functions:
  - daily_totals            single day headline numbers
  - range_totals            inclusive date range with zero-filled series
  - weekly_totals           Monday..Sunday week around a date
  - rolling_contractor_daily  per-day contractor labour over a window
  - area_usage_stats        lifetime per-area usage
"""

import logging
from collections import defaultdict
from datetime import date, timedelta

from sqlalchemy import func

from app.core.exceptions import ValidationError
from app.models import db
from app.models.briefing import Activity, Briefing
from app.services import contractor_service
from app.services.contractor_resolution import resolve_activity_contractors
from app.utils.helpers import daterange

logger = logging.getLogger(__name__)

MAX_WINDOW_DAYS = 92
MAX_RANGE_DAYS = 366


def shift_date(day: date, days: int, field: str) -> date:
    """``day + days``, with calendar overflow reported as a ValidationError."""
    try:
        return day + timedelta(days=days)
    except OverflowError:
        raise ValidationError(f"{field} is outside the supported calendar", details={field: "out of range"})


def _activities_between(project_id: int, start: date, end: date):
    """(Activity, briefing date) pairs for the project, oldest day first."""
    return (
        db.session.query(Activity, Briefing.date)
        .join(Briefing, Activity.briefing_id == Briefing.id)
        .filter(
            Briefing.project_id == project_id,
            Briefing.date >= start,
            Briefing.date <= end,
        )
        .order_by(Briefing.date.asc(), Activity.id.asc())
        .all()
    )


def _briefing_days(project_id: int, start: date, end: date) -> set[date]:
    rows = (
        db.session.query(Briefing.date)
        .filter(
            Briefing.project_id == project_id,
            Briefing.date >= start,
            Briefing.date <= end,
        )
        .all()
    )
    return {r.date for r in rows}


def _labor(activity: Activity) -> int:
    return int(activity.labor_count or 0)


# ── Daily ────────────────────────────────────────────────────────────────


def daily_totals(project_id: int, day: date) -> dict:
    """Headline numbers for one day. Zeros when the day has no briefing."""
    lookup_maps = contractor_service.build_lookup_maps(project_id)
    rows = _activities_between(project_id, day, day)

    total_labor = 0
    by_area = defaultdict(lambda: {"labor": 0, "activities": 0})
    by_contractor = {}

    for activity, _ in rows:
        labor = _labor(activity)
        total_labor += labor
        if activity.area:
            by_area[activity.area]["labor"] += labor
            by_area[activity.area]["activities"] += 1
        for info in resolve_activity_contractors(activity, lookup_maps):
            entry = by_contractor.setdefault(info["id"], {
                "contractor_id": info["id"],
                "name": info["name"],
                "trade": info["trade"],
                "labor": 0,
                "activities": 0,
            })
            entry["labor"] += labor
            entry["activities"] += 1

    area_rows = sorted(
        ({"area": area, **values} for area, values in by_area.items()),
        key=lambda r: (-r["labor"], r["area"]),
    )
    contractor_rows = sorted(by_contractor.values(), key=lambda r: (-r["labor"], r["name"]))

    return {
        "date": day.isoformat(),
        "total_labor": total_labor,
        "total_activities": len(rows),
        "total_unique_contractors": len({r["name"] for r in contractor_rows}),
        "active_contractors": contractor_service.count_active_contractors(project_id),
        "by_area": area_rows,
        "by_contractor": contractor_rows,
    }


# ── Range ────────────────────────────────────────────────────────────────


def _empty_range(start: date, end: date) -> dict:
    return {
        "start_date": start.isoformat(),
        "end_date": end.isoformat(),
        "daily_series": [],
        "contractor_breakdown": [],
        "area_breakdown": [],
        "totals": {"total_labor": 0, "total_activities": 0, "total_areas": 0, "total_days": 0},
        "period_summary": {"labor_per_day": 0, "activities_per_day": 0},
        "contractor_summary": [],
        "area_summary": [],
    }


def range_totals(
    project_id: int, start_date: date, end_date: date, max_days: int = MAX_RANGE_DAYS,
) -> dict:
    """Aggregate an inclusive date range.

    ``daily_series`` has exactly one entry per calendar date, zero-filled.
    ``contractor_breakdown`` has one row per (activity, resolved contractor),
    each carrying the activity's full labor_count.

    An inverted range (start after end) returns the empty shape. A range
    longer than ``max_days`` raises ValidationError.
    """
    if start_date > end_date:
        logger.debug(
            "Inverted stats range",
            extra={"project_id": project_id, "start": start_date.isoformat(), "end": end_date.isoformat()},
        )
        return _empty_range(start_date, end_date)
    span = (end_date - start_date).days + 1
    if span > max_days:
        raise ValidationError(
            f"Date range may cover at most {max_days} days",
            details={"start": start_date.isoformat(), "end": end_date.isoformat()},
        )

    lookup_maps = contractor_service.build_lookup_maps(project_id)
    rows = _activities_between(project_id, start_date, end_date)
    total_days = len(_briefing_days(project_id, start_date, end_date))

    series = {d: {"date": d.isoformat(), "labor": 0, "activities": 0} for d in daterange(start_date, end_date)}
    area_by_day = {}
    area_summary = {}
    contractor_breakdown = []
    contractor_summary = {}
    total_labor = 0

    for activity, day in rows:
        labor = _labor(activity)
        total_labor += labor
        series[day]["labor"] += labor
        series[day]["activities"] += 1

        if activity.area:
            cell = area_by_day.setdefault((day, activity.area), {
                "date": day.isoformat(), "area": activity.area, "labor": 0, "activities": 0,
            })
            cell["labor"] += labor
            cell["activities"] += 1

            summary = area_summary.setdefault(activity.area, {
                "area": activity.area, "total_labor": 0, "total_activities": 0, "_days": set(),
            })
            summary["total_labor"] += labor
            summary["total_activities"] += 1
            summary["_days"].add(day)

        for info in resolve_activity_contractors(activity, lookup_maps):
            contractor_breakdown.append({
                "date": day.isoformat(),
                "activity_id": activity.id,
                "contractor_id": info["id"],
                "contractor_name": info["name"],
                "trade": info["trade"],
                "area": activity.area,
                "labor_count": labor,
            })
            entry = contractor_summary.setdefault(info["id"], {
                "contractor_id": info["id"],
                "name": info["name"],
                "trade": info["trade"],
                "status": info["status"],
                "total_assignments": 0,
                "total_labor": 0,
                "_days": set(),
                "_areas": set(),
            })
            entry["total_assignments"] += 1
            entry["total_labor"] += labor
            entry["_days"].add(day)
            if activity.area:
                entry["_areas"].add(activity.area)

    contractors = []
    for entry in contractor_summary.values():
        days, areas = entry.pop("_days"), entry.pop("_areas")
        contractors.append({**entry, "days_worked": len(days), "areas_worked": sorted(areas)})
    contractors.sort(key=lambda r: (-r["total_assignments"], r["name"]))

    areas = []
    for entry in area_summary.values():
        days = entry.pop("_days")
        areas.append({**entry, "days_active": len(days)})
    areas.sort(key=lambda r: (-r["total_labor"], r["area"]))

    return {
        "start_date": start_date.isoformat(),
        "end_date": end_date.isoformat(),
        "daily_series": list(series.values()),
        "contractor_breakdown": contractor_breakdown,
        "area_breakdown": sorted(area_by_day.values(), key=lambda r: (r["date"], r["area"])),
        "totals": {
            "total_labor": total_labor,
            "total_activities": len(rows),
            "total_areas": len(area_summary),
            "total_days": total_days,
        },
        "period_summary": {
            "labor_per_day": round(total_labor / total_days, 2) if total_days else 0,
            "activities_per_day": round(len(rows) / total_days, 2) if total_days else 0,
        },
        "contractor_summary": contractors,
        "area_summary": areas,
    }


def weekly_totals(project_id: int, day: date) -> dict:
    """range_totals over the Monday..Sunday week that contains ``day``."""
    monday = shift_date(day, -day.weekday(), "date")
    return range_totals(project_id, monday, shift_date(monday, 6, "date"))


# ── Rolling / lifetime ───────────────────────────────────────────────────


def rolling_contractor_daily(
    project_id: int, end_date: date, window_days: int = 7, max_days: int = MAX_WINDOW_DAYS,
) -> list[dict]:
    """Contractor name → attributed labour for each day of the window.

    Returns one entry per day of [end_date - (window_days - 1), end_date],
    oldest first. Days without a briefing carry an empty map.
    """
    if window_days < 1 or window_days > max_days:
        raise ValidationError(
            f"window_days must be between 1 and {max_days}", details={"days": window_days},
        )
    start = shift_date(end_date, -(window_days - 1), "end")
    lookup_maps = contractor_service.build_lookup_maps(project_id)

    per_day = {d: {} for d in daterange(start, end_date)}
    for activity, day in _activities_between(project_id, start, end_date):
        labor = _labor(activity)
        bucket = per_day[day]
        for info in resolve_activity_contractors(activity, lookup_maps):
            bucket[info["name"]] = bucket.get(info["name"], 0) + labor

    return [{"date": d.isoformat(), "contractors": m} for d, m in per_day.items()]


def area_usage_stats(project_id: int) -> list[dict]:
    """Lifetime usage per area, most used first."""
    rows = (
        db.session.query(
            Activity.area,
            func.count(Activity.id).label("activity_count"),
            func.coalesce(func.sum(Activity.labor_count), 0).label("total_labor"),
            func.min(Briefing.date).label("first_used"),
            func.max(Briefing.date).label("last_used"),
        )
        .join(Briefing, Activity.briefing_id == Briefing.id)
        .filter(
            Briefing.project_id == project_id,
            Activity.area.isnot(None),
            Activity.area != "",
        )
        .group_by(Activity.area)
        .all()
    )

    # Month buckets are derived in Python to stay portable across SQLite and PostgreSQL.
    months = defaultdict(set)
    for area, day in (
        db.session.query(Activity.area, Briefing.date)
        .join(Briefing, Activity.briefing_id == Briefing.id)
        .filter(Briefing.project_id == project_id, Activity.area.isnot(None), Activity.area != "")
        .distinct()
    ):
        months[area].add((day.year, day.month))

    result = [
        {
            "area": r.area,
            "activity_count": r.activity_count,
            "total_labor": int(r.total_labor or 0),
            "distinct_months_active": len(months[r.area]),
            "first_used": r.first_used.isoformat() if r.first_used else None,
            "last_used": r.last_used.isoformat() if r.last_used else None,
        }
        for r in rows
    ]
    result.sort(key=lambda r: (-r["activity_count"], r["area"]))
    return result
