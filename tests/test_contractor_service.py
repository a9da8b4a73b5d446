"""
Tests: contractor registry service.

Service functions are called directly with a RequestContext; the autouse
`session` fixture recreates tables after every test.
"""

import pytest

from app.core.exceptions import DuplicateNameError, NotFoundError, ValidationError
from app.models.audit import AuditLog
from app.models.contractor import Contractor
from app.services import contractor_service


def _add(ctx, name, trade="Groundworks", **extra):
    return contractor_service.add_contractor(ctx, {"name": name, "trade": trade, **extra})


class TestAddContractor:
    def test_creates_with_defaults(self, ctx):
        c = _add(ctx, "Acme Civils", status="nonsense")
        assert c.id is not None
        assert c.project_id == ctx.project_id
        assert c.status == "Active"
        assert c.created_by == "Site Manager"

    def test_duplicate_name_is_case_insensitive(self, ctx):
        _add(ctx, "Acme")
        with pytest.raises(DuplicateNameError):
            _add(ctx, "ACME")
        assert Contractor.query_for_project(ctx.project_id).count() == 1

    def test_same_name_allowed_in_other_project(self, ctx, other_ctx):
        _add(ctx, "Acme")
        _add(other_ctx, "Acme")
        assert Contractor.query.count() == 2

    @pytest.mark.parametrize("payload", [
        {"name": "", "trade": "Roofing"},
        {"name": "Roof Co", "trade": "  "},
    ])
    def test_name_and_trade_required(self, ctx, payload):
        with pytest.raises(ValidationError):
            contractor_service.add_contractor(ctx, payload)

    def test_invalid_email_rejected(self, ctx):
        with pytest.raises(ValidationError):
            _add(ctx, "Mail Co", email="not-an-email")

    def test_writes_audit_row(self, ctx):
        c = _add(ctx, "Audit Co")
        row = AuditLog.query.filter_by(action="contractor.create").one()
        assert row.entity_id == str(c.id)
        assert row.actor == "Site Manager"


class TestListing:
    def test_status_priority_then_name(self, ctx):
        _add(ctx, "Zed", status="Offsite")
        _add(ctx, "Bravo", status="Standby")
        _add(ctx, "Alpha", status="Standby")
        _add(ctx, "Charlie", status="Active")
        names = [c.name for c in contractor_service.list_contractors(ctx.project_id)]
        assert names == ["Charlie", "Alpha", "Bravo", "Zed"]

    def test_name_order_ignores_case(self, ctx):
        for name in ("Zeta", "acme", "Bolt"):
            _add(ctx, name)
        names = [c.name for c in contractor_service.list_contractors(ctx.project_id)]
        assert names == ["acme", "Bolt", "Zeta"]

    def test_lookup_maps_are_int_keyed(self, ctx):
        c = _add(ctx, "Map Co", trade="Scaffolding")
        maps = contractor_service.build_lookup_maps(ctx.project_id)
        assert maps.id_to_name[c.id] == "Map Co"
        assert maps.id_to_trade[c.id] == "Scaffolding"
        assert maps.id_to_info[c.id]["status"] == "Active"

    def test_lookup_maps_scoped_to_project(self, ctx, other_ctx):
        foreign = _add(other_ctx, "Elsewhere")
        maps = contractor_service.build_lookup_maps(ctx.project_id)
        assert foreign.id not in maps.id_to_name

    def test_count_active_contractors(self, ctx):
        _add(ctx, "One")
        _add(ctx, "Two")
        _add(ctx, "Three", status="Complete")
        assert contractor_service.count_active_contractors(ctx.project_id) == 2


class TestUpdateDelete:
    def test_update_keeps_name_when_blank(self, ctx):
        c = _add(ctx, "Keep Me")
        updated = contractor_service.update_contractor(
            ctx, c.id, {"name": "", "trade": "Drylining", "status": "Delayed"},
        )
        assert updated.name == "Keep Me"
        assert updated.trade == "Drylining"
        assert updated.status == "Delayed"

    def test_rename_onto_existing_name_rejected(self, ctx):
        _add(ctx, "First")
        second = _add(ctx, "Second")
        with pytest.raises(DuplicateNameError):
            contractor_service.update_contractor(ctx, second.id, {"name": "first"})

    def test_cross_project_get_is_not_found(self, ctx, other_ctx):
        c = _add(ctx, "Mine")
        with pytest.raises(NotFoundError):
            contractor_service.get_contractor(other_ctx.project_id, c.id)

    def test_delete_returns_prior_snapshot(self, ctx):
        c = _add(ctx, "Gone Soon")
        cid = c.id
        prior = contractor_service.delete_contractor(ctx, cid)
        assert prior["name"] == "Gone Soon"
        assert Contractor.query.filter_by(id=cid).first() is None
