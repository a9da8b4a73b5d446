"""
Tests: field validation and default substitution.

Pure functions; no database access beyond the autouse app context.
"""

from datetime import date, time

import pytest

from app.core.exceptions import ValidationError
from app.models.briefing import dump_contractor_ids, normalise_contractor_ids, parse_contractor_ids
from app.services.validation import (
    clean_activity_fields,
    coerce_contractor_ids,
    coerce_contractor_status,
    coerce_date,
    coerce_labor_count,
    coerce_priority,
    coerce_time,
    require_text,
)
from app.utils.helpers import daterange, parse_date


class TestDefaults:
    def test_unknown_priority_becomes_medium(self):
        assert coerce_priority("urgent") == "medium"
        assert coerce_priority(None) == "medium"

    def test_priority_is_case_insensitive(self):
        assert coerce_priority(" HIGH ") == "high"

    def test_unknown_contractor_status_becomes_active(self):
        assert coerce_contractor_status("Retired") == "Active"

    def test_contractor_status_matches_case_insensitively(self):
        assert coerce_contractor_status("standby") == "Standby"

    def test_bad_date_falls_back_to_today(self):
        fallback = date(2024, 3, 15)
        assert coerce_date("not-a-date", today=fallback) == fallback

    def test_uk_and_iso_dates_parse(self):
        assert coerce_date("15/03/2024") == date(2024, 3, 15)
        assert coerce_date("2024-03-15") == date(2024, 3, 15)

    def test_bad_time_falls_back_to_eight(self):
        assert coerce_time("25:99") == time(8, 0)
        assert coerce_time("07:30:00") == time(7, 30)

    @pytest.mark.parametrize("raw,expected", [
        ("5", 5), (3, 3), (-2, 0), ("abc", 0), (None, 0), (True, 0),
    ])
    def test_labor_count(self, raw, expected):
        assert coerce_labor_count(raw) == expected

    @pytest.mark.parametrize("raw", [10_001, "10001", 10**20])
    def test_labor_count_above_limit_rejected(self, raw):
        with pytest.raises(ValidationError) as exc:
            coerce_labor_count(raw)
        assert exc.value.details == {"labor_count": "too large"}

    def test_labor_count_limit_and_infinity(self):
        assert coerce_labor_count(10_000) == 10_000
        assert coerce_labor_count(float("inf")) == 0


class TestContractorIds:
    def test_dedupes_and_keeps_order(self):
        assert normalise_contractor_ids([3, "1", 3, "x", 0, -1, 2]) == [3, 1, 2]

    def test_accepts_json_and_comma_strings(self):
        assert coerce_contractor_ids("[4, 5]") == [4, 5]
        assert coerce_contractor_ids("4, 5,4") == [4, 5]

    def test_legacy_text_parses_to_empty(self):
        assert parse_contractor_ids("Smith Builders, Acme") == []
        assert parse_contractor_ids(None) == []

    def test_empty_list_stored_as_null(self):
        assert dump_contractor_ids([]) is None
        assert dump_contractor_ids([2, 2, 9]) == "[2, 9]"


class TestRequiredFields:
    def test_missing_title_raises_required(self):
        with pytest.raises(ValidationError) as exc_info:
            clean_activity_fields({"title": "   "})
        assert exc_info.value.code == "ERR_VALIDATION_REQUIRED"
        assert "title" in exc_info.value.details

    def test_require_text_strips(self):
        assert require_text({"name": "  Acme  "}, "name") == "Acme"

    def test_clean_activity_fields_applies_defaults(self):
        fields = clean_activity_fields({"title": "Pour slab", "priority": "bogus", "area": ""})
        assert fields["priority"] == "medium"
        assert fields["area"] is None
        assert fields["labor_count"] == 0
        assert fields["time"] == time(8, 0)
        assert fields["contractor_ids"] == []


def test_parse_date_rejects_garbage():
    assert parse_date("31/02/2024") is None


def test_daterange_is_inclusive_and_empty_when_inverted():
    assert list(daterange(date(2024, 1, 1), date(2024, 1, 3))) == [
        date(2024, 1, 1), date(2024, 1, 2), date(2024, 1, 3),
    ]
    assert list(daterange(date(2024, 1, 3), date(2024, 1, 1))) == []
