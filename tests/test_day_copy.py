"""
Tests: day-copy operator.

Refusals must leave the target's activity set untouched; a successful copy
duplicates every source activity with the target date.
"""

from datetime import date

import pytest

from app.core.exceptions import (
    NoSourceDataError,
    NothingToCopyError,
    TargetNotEmptyError,
    ValidationError,
)
from app.models.audit import AuditLog
from app.models.briefing import Activity
from app.services import activity_service, briefing_service, contractor_service, day_copy_service
from app.services.day_copy_service import copy_day

SOURCE = date(2024, 3, 14)
TARGET = date(2024, 3, 15)


def _activity(ctx, title, day=SOURCE, **fields):
    return activity_service.add_activity(ctx, {"title": title, "date": day.isoformat(), **fields})


def test_copies_every_activity(ctx):
    acme = contractor_service.add_contractor(ctx, {"name": "Acme", "trade": "Concrete"})
    _activity(ctx, "Pour", area="Core", labor_count=5, priority="high", contractor_ids=[acme.id])
    _activity(ctx, "Cure", labor_count=1, time="14:30")

    result = copy_day(ctx, SOURCE, TARGET)

    assert result["copied_count"] == 2
    assert result["failed_count"] == 0
    target = briefing_service.find_briefing(ctx.project_id, TARGET)
    copies = activity_service.list_activities(target.id)
    assert sorted(a.title for a in copies) == ["Cure", "Pour"]
    pour = next(a for a in copies if a.title == "Pour")
    assert pour.date == TARGET
    assert pour.contractor_ids == [acme.id]
    assert pour.priority == "high"
    assert AuditLog.query.filter_by(action="activity.copy_day").count() == 1


def test_source_rows_untouched(ctx):
    original = _activity(ctx, "Pour", labor_count=5)
    original_id = original.id
    copy_day(ctx, SOURCE, TARGET)
    assert Activity.query.filter_by(id=original_id).one().date == SOURCE
    assert Activity.query.count() == 2


def test_target_inherits_source_safety_and_notes(ctx):
    source = briefing_service.get_or_create_briefing(ctx, SOURCE)
    source.safety_info = "Exclusion zone around crane"
    _activity(ctx, "Lift")
    copy_day(ctx, SOURCE, TARGET)
    target = briefing_service.find_briefing(ctx.project_id, TARGET)
    assert target.safety_info == "Exclusion zone around crane"


def test_no_source_briefing(ctx):
    with pytest.raises(NoSourceDataError):
        copy_day(ctx, SOURCE, TARGET)
    assert briefing_service.find_briefing(ctx.project_id, TARGET) is None


def test_refuses_non_empty_target(ctx):
    _activity(ctx, "Source task")
    _activity(ctx, "Already here", day=TARGET)

    with pytest.raises(TargetNotEmptyError):
        copy_day(ctx, SOURCE, TARGET)

    target = briefing_service.find_briefing(ctx.project_id, TARGET)
    assert [a.title for a in activity_service.list_activities(target.id)] == ["Already here"]


def test_empty_source_leaves_committed_target_briefing(ctx):
    briefing_service.get_or_create_briefing(ctx, SOURCE)
    with pytest.raises(NothingToCopyError):
        copy_day(ctx, SOURCE, TARGET)
    # Target briefing is created before the empty-source check.
    assert briefing_service.find_briefing(ctx.project_id, TARGET) is not None


def test_same_day_rejected(ctx):
    _activity(ctx, "Loop")
    with pytest.raises(ValidationError):
        copy_day(ctx, SOURCE, SOURCE)


def test_copy_is_project_scoped(ctx, other_ctx):
    _activity(ctx, "Mine")
    with pytest.raises(NoSourceDataError):
        copy_day(other_ctx, SOURCE, TARGET)


def test_failed_row_is_skipped_and_others_kept(ctx, monkeypatch):
    for title in ("a", "b", "c"):
        _activity(ctx, title)
    real_clone = day_copy_service._clone

    def clone_with_bad_row(source, briefing_id, target_date):
        clone = real_clone(source, briefing_id, target_date)
        if source.title == "b":
            clone.title = None  # violates NOT NULL on insert
        return clone

    monkeypatch.setattr(day_copy_service, "_clone", clone_with_bad_row)

    result = copy_day(ctx, SOURCE, TARGET)

    assert result["copied_count"] == 2
    assert result["failed_count"] == 1
    target = briefing_service.find_briefing(ctx.project_id, TARGET)
    assert [a.title for a in activity_service.list_activities(target.id)] == ["a", "c"]
    audit = AuditLog.query.filter_by(action="activity.copy_day").one()
    assert audit.diff["count"] == 2
