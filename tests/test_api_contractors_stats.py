"""Tests: contractor registry and statistics endpoints."""


def _contractor(client, headers, name, trade="General", **extra):
    return client.post(
        "/api/v1/contractors", json={"name": name, "trade": trade, **extra}, headers=headers,
    )


class TestContractorEndpoints:
    def test_create_and_list(self, client, api_headers):
        res = _contractor(client, api_headers, "Acme", status="Standby")
        assert res.status_code == 201
        _contractor(client, api_headers, "Bolt")

        body = client.get("/api/v1/contractors", headers=api_headers).get_json()
        assert [c["name"] for c in body["contractors"]] == ["Bolt", "Acme"]
        assert body["active_count"] == 1

    def test_duplicate_name_conflict(self, client, api_headers):
        _contractor(client, api_headers, "Acme")
        res = _contractor(client, api_headers, "acme")
        assert res.status_code == 409
        assert res.get_json()["code"] == "ERR_CONFLICT_DUPLICATE"

    def test_missing_trade(self, client, api_headers):
        res = client.post("/api/v1/contractors", json={"name": "No Trade"}, headers=api_headers)
        assert res.status_code == 400

    def test_update_get_delete(self, client, api_headers):
        cid = _contractor(client, api_headers, "Acme").get_json()["contractor"]["id"]
        res = client.put(
            f"/api/v1/contractors/{cid}", json={"trade": "Steel", "status": "Delayed"}, headers=api_headers,
        )
        assert res.get_json()["contractor"]["status"] == "Delayed"
        assert client.get(f"/api/v1/contractors/{cid}", headers=api_headers).status_code == 200
        assert client.delete(f"/api/v1/contractors/{cid}", headers=api_headers).status_code == 200
        assert client.get(f"/api/v1/contractors/{cid}", headers=api_headers).status_code == 404


class TestStatsEndpoints:
    def _seed(self, client, headers):
        cid = _contractor(client, headers, "Acme").get_json()["contractor"]["id"]
        client.post("/api/v1/activities", json={
            "title": "Pour", "date": "2024-03-14", "area": "Core",
            "labor_count": 5, "contractor_ids": [cid],
        }, headers=headers)

    def test_daily(self, client, api_headers):
        self._seed(client, api_headers)
        stats = client.get("/api/v1/stats/daily?date=2024-03-14", headers=api_headers).get_json()["stats"]
        assert stats["total_labor"] == 5
        assert stats["by_contractor"][0]["name"] == "Acme"

    def test_range(self, client, api_headers):
        self._seed(client, api_headers)
        res = client.get("/api/v1/stats/range?start=2024-03-13&end=2024-03-15", headers=api_headers)
        stats = res.get_json()["stats"]
        assert [d["labor"] for d in stats["daily_series"]] == [0, 5, 0]

    def test_weekly(self, client, api_headers):
        self._seed(client, api_headers)
        stats = client.get("/api/v1/stats/weekly?date=2024-03-14", headers=api_headers).get_json()["stats"]
        assert stats["start_date"] == "2024-03-11"

    def test_contractor_daily_default_window(self, client, api_headers):
        self._seed(client, api_headers)
        body = client.get("/api/v1/stats/contractor-daily?end=2024-03-14", headers=api_headers).get_json()
        assert body["window_days"] == 7
        assert len(body["days"]) == 7
        assert body["days"][-1]["contractors"] == {"Acme": 5}

    def test_contractor_daily_invalid_window(self, client, api_headers):
        res = client.get("/api/v1/stats/contractor-daily?days=0", headers=api_headers)
        assert res.status_code == 400
        assert res.get_json()["code"] == "ERR_VALIDATION_INVALID"

    def test_contractor_daily_window_above_limit(self, client, api_headers):
        res = client.get("/api/v1/stats/contractor-daily?days=1000000", headers=api_headers)
        assert res.status_code == 400
        assert res.get_json()["code"] == "ERR_VALIDATION_INVALID"

    def test_contractor_daily_window_before_calendar_start(self, client, api_headers):
        res = client.get("/api/v1/stats/contractor-daily?end=0001-01-02&days=5", headers=api_headers)
        assert res.status_code == 400

    def test_weekly_past_calendar_end(self, client, api_headers):
        res = client.get("/api/v1/stats/weekly?date=9999-12-31", headers=api_headers)
        assert res.status_code == 400
        assert res.get_json()["ok"] is False

    def test_range_longer_than_limit(self, client, api_headers):
        res = client.get("/api/v1/stats/range?start=0001-01-01&end=9999-12-31", headers=api_headers)
        assert res.status_code == 400

    def test_range_default_start_near_calendar_start(self, client, api_headers):
        res = client.get("/api/v1/stats/range?end=0001-01-03", headers=api_headers)
        assert res.status_code == 400

    def test_areas(self, client, api_headers):
        self._seed(client, api_headers)
        areas = client.get("/api/v1/stats/areas", headers=api_headers).get_json()["areas"]
        assert areas[0]["area"] == "Core"
