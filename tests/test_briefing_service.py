"""Tests: briefing store (get-or-create, lookups, conflict recovery)."""

from datetime import date

import pytest

from app.core.exceptions import NotFoundError
from app.models.audit import AuditLog
from app.models.briefing import DEFAULT_SAFETY_INFO, Briefing
from app.services import briefing_service

DAY = date(2024, 3, 15)


def test_get_or_create_is_idempotent(ctx):
    first = briefing_service.get_or_create_briefing(ctx, DAY)
    second = briefing_service.get_or_create_briefing(ctx, DAY)
    assert first.id == second.id
    assert Briefing.query.count() == 1
    assert AuditLog.query.filter_by(action="briefing.create").count() == 1


def test_new_briefing_has_default_content(ctx):
    b = briefing_service.get_or_create_briefing(ctx, DAY)
    assert b.status == "draft"
    assert b.overview == "Daily briefing for 15/03/2024"
    assert b.notes == "Daily briefing notes for 15/03/2024"
    assert b.safety_info == DEFAULT_SAFETY_INFO
    assert b.created_by == ctx.actor_id


def test_template_carries_safety_and_notes(ctx):
    source = briefing_service.get_or_create_briefing(ctx, DAY)
    source.safety_info = "Hard hats on level 3"
    source.notes = "Crane inspection at 10:00"
    target = briefing_service.get_or_create_briefing(ctx, date(2024, 3, 16), template=source)
    assert target.safety_info == "Hard hats on level 3"
    assert target.notes == "Crane inspection at 10:00"
    assert target.overview == "Daily briefing for 16/03/2024"


def test_find_briefing_never_creates(ctx):
    assert briefing_service.find_briefing(ctx.project_id, DAY) is None
    assert Briefing.query.count() == 0


def test_one_briefing_per_project_and_date(ctx, other_ctx):
    a = briefing_service.get_or_create_briefing(ctx, DAY)
    b = briefing_service.get_or_create_briefing(other_ctx, DAY)
    assert a.id != b.id


def test_conflicting_insert_rereads_winner(ctx, monkeypatch):
    winner = briefing_service.get_or_create_briefing(ctx, DAY)
    real_find = briefing_service.find_briefing
    calls = {"n": 0}

    def stale_lookup(project_id, day):
        # First lookup misses, as if another request inserted concurrently.
        calls["n"] += 1
        if calls["n"] == 1:
            return None
        return real_find(project_id, day)

    monkeypatch.setattr(briefing_service, "find_briefing", stale_lookup)
    result = briefing_service.get_or_create_briefing(ctx, DAY)

    assert result.id == winner.id
    assert Briefing.query.filter_by(project_id=ctx.project_id, date=DAY).count() == 1


def test_previous_briefing(ctx):
    prev = briefing_service.get_or_create_briefing(ctx, date(2024, 3, 14))
    assert briefing_service.previous_briefing(ctx.project_id, DAY).id == prev.id
    assert briefing_service.previous_briefing(ctx.project_id, date(2024, 3, 14)) is None


def test_get_briefing_cross_project_not_found(ctx, other_ctx):
    b = briefing_service.get_or_create_briefing(ctx, DAY)
    with pytest.raises(NotFoundError):
        briefing_service.get_briefing(other_ctx.project_id, b.id)


def test_previous_briefing_on_first_calendar_day(ctx):
    briefing_service.get_or_create_briefing(ctx, date.min)
    assert briefing_service.previous_briefing(ctx.project_id, date.min) is None
