"""Tests for the coverage API endpoints."""

import pytest


class TestHealthEndpoints:
    """Tests for health and root endpoints."""

    def test_root(self, client):
        """Test root endpoint returns API info."""
        response = client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Coverage Engine API"
        assert "version" in data

    def test_health(self, client):
        """Test health check endpoint."""
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestCoverageEndpoints:
    """Tests for /api/v1/coverage."""

    def test_list_coverages(self, client):
        response = client.get("/api/v1/coverage/coverages")
        assert response.status_code == 200
        data = response.json()
        assert len(data) == 8
        cover1 = next(c for c in data if c["id"] == "cover-1")
        assert cover1["name"] == "Cover 1"
        assert cover1["is_man"] is True

    def test_align_by_formation(self, client):
        response = client.post("/api/v1/coverage/align", json={
            "coverage": "cover_3",
            "formation": "trips_left",
            "los": 25,
        })
        assert response.status_code == 200
        data = response.json()
        assert data["coverage"] == "cover-3"
        assert data["rotation"] == "sky"
        assert len(data["defenders"]) == 7
        assert all(d["position"]["y"] > 25 for d in data["defenders"])
        fs = next(d for d in data["defenders"] if d["id"] == "FS")
        assert fs["position"]["y"] == pytest.approx(40.0)
        assert data["validation"]["is_valid"] is True

    def test_align_with_explicit_offense(self, client):
        response = client.post("/api/v1/coverage/align", json={
            "coverage": "cover-1",
            "formation": None,
            "offense": [
                {"id": "QB", "player_type": "QB", "x": 26.67, "y": 20},
                {"id": "X", "player_type": "WR", "x": 8.0, "y": 25},
                {"id": "Z", "player_type": "WR", "x": 45.0, "y": 25},
                {"id": "Y", "player_type": "TE", "x": 30.0, "y": 25},
            ],
        })
        assert response.status_code == 200
        data = response.json()
        targets = [
            d["responsibility"]["target_id"] for d in data["defenders"]
            if d["responsibility"]["type"] == "man"
        ]
        assert sorted(targets) == ["X", "Y", "Z"]

    def test_align_with_personnel(self, client):
        response = client.post("/api/v1/coverage/align", json={
            "coverage": "tampa-2",
            "personnel": {"cb": 2, "s": 2, "lb": 3, "nb": 0},
        })
        assert response.status_code == 200
        assert response.json()["personnel"]["lb"] == 3

    def test_align_unknown_coverage(self, client):
        response = client.post("/api/v1/coverage/align", json={"coverage": "cover-9"})
        assert response.status_code == 400
        assert "Unknown coverage" in response.json()["detail"]

    def test_align_unknown_formation(self, client):
        response = client.post("/api/v1/coverage/align", json={"formation": "wishbone"})
        assert response.status_code == 400

    def test_align_rejects_off_field_player(self, client):
        response = client.post("/api/v1/coverage/align", json={
            "offense": [{"id": "X", "player_type": "WR", "x": 70.0, "y": 25}],
        })
        assert response.status_code == 422

    def test_validate_tampa2_with_dime(self, client):
        response = client.post("/api/v1/coverage/validate", json={
            "coverage": "tampa_2",
            "formation": "spread",
        })
        assert response.status_code == 200
        data = response.json()
        assert data["is_valid"] is True
        assert any(
            w["severity"] == "high" and "at least 3 LBs" in w["message"]
            for w in data["warnings"]
        )
        assert data["stats"]["total_defenders"] == 7

    def test_motion(self, client):
        response = client.post("/api/v1/coverage/motion", json={
            "coverage": "cover-3",
            "formation": "spread",
            "player_id": "Z",
            "motion_type": "jet",
        })
        assert response.status_code == 200
        data = response.json()
        assert data["response"] == "buzz"
        assert data["adjustments"][0]["defender_id"] == "SS"
        assert data["adjustments"][0]["position"]["y"] == pytest.approx(33.0)

    def test_motion_unknown_player(self, client):
        response = client.post("/api/v1/coverage/motion", json={"player_id": "WR9"})
        assert response.status_code == 400

    def test_motion_unknown_type(self, client):
        response = client.post("/api/v1/coverage/motion", json={"player_id": "Z", "motion_type": "warp"})
        assert response.status_code == 400

    def test_personnel(self, client):
        response = client.post("/api/v1/coverage/personnel", json={"formation": "heavy"})
        assert response.status_code == 200
        data = response.json()
        assert data["grouping"] == "22"
        assert data["matched"] == {"cb": 2, "s": 2, "lb": 3, "nb": 0}
        assert data["package"] == "Base"
        assert data["suggested"] is None

    def test_personnel_with_coverage(self, client):
        response = client.post("/api/v1/coverage/personnel", json={
            "formation": "spread",
            "coverage": "cover-1",
        })
        assert response.status_code == 200
        assert response.json()["suggested"] == {"cb": 3, "s": 1, "lb": 1, "nb": 2}
