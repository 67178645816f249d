"""Tests for API routes."""

import pytest
from fastapi.testclient import TestClient

from mafialog.api.app import create_app
from mafialog.core.timeline import Timeline


@pytest.fixture
def client(parsed_timeline):
    """Create a test client over the parsed sample log."""
    app = create_app(parsed_timeline)
    return TestClient(app)


class TestAppFactory:
    def test_unfinalized_timeline_rejected(self):
        with pytest.raises(ValueError):
            create_app(Timeline())


class TestStatusEndpoint:
    def test_get_status(self, client):
        response = client.get("/api/status")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["log_name"] == "Brad-20200221"
        assert data["character_class"] == "Sauceror"
        assert data["ascension_path"] == "Standard"
        assert data["last_turn"] == 3
        assert data["day_count"] == 2


class TestSummaryEndpoint:
    def test_get_summary(self, client):
        response = client.get("/api/log/summary")
        assert response.status_code == 200
        data = response.json()
        assert data["total_turns"] == 3
        assert data["meat"]["encounter_meat"] == 37
        assert data["stat_gain"]["mysticality"] == 23
        assert data["skills_cast"] == {"saucegeyser": 3}
        assert data["turns_per_day"] == {"1": 2, "2": 1}


class TestTurnsEndpoint:
    def test_list_turns(self, client):
        response = client.get("/api/log/turns")
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 4
        assert data["turns"][1]["area_name"] == "The Haunted Pantry"
        assert data["turns"][1]["familiar"] == "Mosquito"
        # Stats include the key lime pie eaten after the fight
        assert data["turns"][1]["stat_gain"]["mysticality"] == 23

    def test_filter_by_day(self, client):
        data = client.get("/api/log/turns", params={"day": 2}).json()
        assert data["total"] == 1
        assert data["turns"][0]["area_name"] == "The Sleazy Back Alley"

    def test_filter_by_area(self, client):
        data = client.get("/api/log/turns", params={"area": "the haunted pantry"}).json()
        assert [t["turn_number"] for t in data["turns"]] == [1, 2]

    def test_pagination(self, client):
        data = client.get("/api/log/turns", params={"page": 2, "page_size": 3}).json()
        assert data["total"] == 4
        assert len(data["turns"]) == 1
        assert data["page"] == 2

    def test_page_size_limit(self, client):
        response = client.get("/api/log/turns", params={"page_size": 501})
        assert response.status_code == 400


class TestIntervalsEndpoint:
    def test_list_intervals(self, client):
        data = client.get("/api/log/intervals").json()
        assert [i["area_name"] for i in data["intervals"]] == [
            "Ascension Start",
            "The Haunted Pantry",
            "The Sleazy Back Alley",
        ]
        assert data["intervals"][1]["total_turns"] == 2

    def test_copied_only(self, client):
        data = client.get("/api/log/intervals", params={"copied_only": True}).json()
        assert data["total"] == 0


class TestLimitedUsesEndpoint:
    def test_get_limited_uses(self, client):
        data = client.get("/api/log/limited-uses").json()
        assert data["uses"][0]["counter"] == "Pillkeeper"
        assert data["uses"][0]["use"] == "Rainbowolin"
        assert data["per_day"][0] == {"day": 1, "uses": {"Pillkeeper": 1}, "over_limit": []}


class TestHistoryEndpoints:
    def test_days(self, client):
        data = client.get("/api/log/days").json()
        assert data == [
            {"day_number": 1, "turn_number": 0},
            {"day_number": 2, "turn_number": 3},
        ]

    def test_levels(self, client):
        data = client.get("/api/log/levels").json()
        assert data[-1] == {"level_number": 2, "turn_number": 3}

    def test_equipment(self, client):
        data = client.get("/api/log/equipment").json()
        assert data[-1]["hat"] == "helmet turtle"

    def test_familiars(self, client):
        data = client.get("/api/log/familiars").json()
        assert data[-1]["familiar_name"] == "Mosquito"

    def test_pulls(self, client):
        data = client.get("/api/log/pulls").json()
        assert data == [
            {"item_name": "ring of conflict", "amount": 1, "turn_number": 3, "day_number": 2}
        ]


class TestSubIntervalEndpoint:
    def test_sub_interval(self, client):
        response = client.get("/api/log/sub-interval", params={"start": 1, "end": 2})
        assert response.status_code == 200
        data = response.json()
        assert data["summary"]["total_turns"] == 2
        assert [i["area_name"] for i in data["intervals"]] == ["The Haunted Pantry"]

    def test_invalid_range(self, client):
        response = client.get("/api/log/sub-interval", params={"start": 5, "end": 2})
        assert response.status_code == 400
