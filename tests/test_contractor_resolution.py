"""Tests: resolving embedded contractor id lists against the registry."""

from datetime import date

from app.models import db as _db
from app.models.briefing import Activity
from app.services import briefing_service, contractor_service
from app.services.contractor_resolution import (
    resolve_activity_contractors,
    reverse_lookup,
    serialize_activity,
)

DAY = date(2024, 3, 15)


def _raw_activity(ctx, title, contractor_ids, labor_count=1):
    """Insert bypassing the service so dangling ids can be stored."""
    briefing = briefing_service.get_or_create_briefing(ctx, DAY)
    a = Activity(briefing_id=briefing.id, date=DAY, title=title, labor_count=labor_count)
    a.contractor_ids = contractor_ids
    _db.session.add(a)
    _db.session.flush()
    return a


def test_dangling_id_is_skipped(ctx):
    known = contractor_service.add_contractor(ctx, {"name": "Known", "trade": "Electrical"})
    a = _raw_activity(ctx, "Wiring", [known.id, 99])
    maps = contractor_service.build_lookup_maps(ctx.project_id)

    resolved = resolve_activity_contractors(a, maps)
    assert [r["name"] for r in resolved] == ["Known"]
    assert resolved[0]["trade"] == "Electrical"
    assert set(resolved[0]) >= {"id", "name", "trade", "status", "contact_name", "phone", "email"}


def test_serialize_keeps_stored_ids(ctx):
    known = contractor_service.add_contractor(ctx, {"name": "Known", "trade": "Electrical"})
    a = _raw_activity(ctx, "Wiring", [99, known.id])
    data = serialize_activity(a, contractor_service.build_lookup_maps(ctx.project_id))

    assert data["stored_contractor_ids"] == [99, known.id]
    assert data["contractor_ids"] == [known.id]
    assert data["contractor_names"] == ["Known"]


def test_deleted_contractor_disappears_from_resolution(ctx):
    gone = contractor_service.add_contractor(ctx, {"name": "Gone", "trade": "Plumbing"})
    gone_id = gone.id
    a = _raw_activity(ctx, "Pipes", [gone_id])
    contractor_service.delete_contractor(ctx, gone_id)

    maps = contractor_service.build_lookup_maps(ctx.project_id)
    assert resolve_activity_contractors(a, maps) == []
    assert a.contractor_ids == [gone_id]


def test_reverse_lookup(ctx):
    x = contractor_service.add_contractor(ctx, {"name": "X", "trade": "T"})
    y = contractor_service.add_contractor(ctx, {"name": "Y", "trade": "T"})
    a1 = _raw_activity(ctx, "One", [x.id, y.id])
    a2 = _raw_activity(ctx, "Two", [x.id, 42])

    index = reverse_lookup([a1, a2], contractor_service.build_lookup_maps(ctx.project_id))
    assert index == {x.id: [a1.id, a2.id], y.id: [a1.id]}
