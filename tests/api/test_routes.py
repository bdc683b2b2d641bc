"""Tests for the HTTP and WebSocket API."""

import time

import pytest
from fastapi.testclient import TestClient

from mwisim.api.dependencies import get_game_data, get_market, get_simulation_service
from mwisim.api.main import app
from mwisim.api.services.simulation_service import SimulationService
from mwisim.errors import DataUnavailable


FIELD = "/actions/combat/test_field"
LAIR = "/actions/combat/test_lair"


def config_json(zone_hrid: str = FIELD, **extra) -> dict:
    return {"players": [{"hrid": "player1"}], "zoneHrid": zone_hrid, "seed": 1, **extra}


@pytest.fixture
def service():
    service = SimulationService(max_workers=2, max_runs=2)
    yield service
    service.shutdown()


@pytest.fixture
def client(game_data, market, service):
    app.dependency_overrides[get_game_data] = lambda: game_data
    app.dependency_overrides[get_market] = lambda: market
    app.dependency_overrides[get_simulation_service] = lambda: service
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


def wait_for(client, run_id: str, timeout: float = 60.0) -> dict:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        data = client.get(f"/api/simulation/{run_id}").json()
        if data["status"] in ("complete", "error", "cancelled"):
            return data
        time.sleep(0.05)
    raise AssertionError(f"Run {run_id} did not finish")


class TestRootEndpoints:
    """Tests for root endpoints."""

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestDataRoutes:
    """Reference data routes."""

    def test_zones(self, client):
        zones = client.get("/api/data/zones").json()
        hrids = {zone["hrid"] for zone in zones}
        assert FIELD in hrids
        assert "/actions/combat/test_crypt" in hrids

    def test_zones_without_dungeons(self, client):
        zones = client.get("/api/data/zones", params={"include_dungeons": False}).json()
        assert all(not zone["is_dungeon"] for zone in zones)

    def test_zone(self, client):
        zone = client.get("/api/data/zones/actions/combat/test_crypt").json()
        assert zone["is_dungeon"]
        assert zone["max_waves"] == 2
        assert zone["monster_hrids"] == ["/monsters/test_dummy"]

    def test_unknown_zone(self, client):
        assert client.get("/api/data/zones/actions/combat/nowhere").status_code == 404

    def test_data_unavailable(self, client):
        def missing():
            raise DataUnavailable("Game data not found")

        app.dependency_overrides[get_game_data] = missing
        response = client.get("/api/data/zones")
        assert response.status_code == 503
        assert response.json()["error"] == "DataUnavailable"


class TestBlockingRun:
    """POST /api/simulation/run."""

    def test_run(self, client):
        response = client.post("/api/simulation/run", json=config_json())
        assert response.status_code == 200
        data = response.json()
        assert data["encounters"] == 1200
        assert data["killsPerHour"]["encounters"] == pytest.approx(1200)
        assert data["profit"] == pytest.approx(data["revenue"] - data["expense"])

    def test_configuration_error(self, client):
        response = client.post("/api/simulation/run", json=config_json("/actions/combat/nowhere"))
        assert response.status_code == 422
        assert response.json()["error"] == "ConfigurationError"

    def test_duration_out_of_range(self, client):
        response = client.post("/api/simulation/run", json=config_json(durationHours=49))
        assert response.status_code == 422

    def test_malformed_body(self, client):
        response = client.post("/api/simulation/run", json={"players": []})
        assert response.status_code == 422

    def test_simulation_fault(self, client):
        response = client.post("/api/simulation/run", json=config_json("/actions/combat/test_void"))
        assert response.status_code == 500
        assert response.json()["tick"] == 0


class TestBackgroundRuns:
    """Start, poll, stream and cancel."""

    def test_start_and_poll(self, client):
        response = client.post("/api/simulation/start", json=config_json())
        assert response.status_code == 202
        run_id = response.json()["run_id"]

        data = wait_for(client, run_id)
        assert data["status"] == "complete"
        assert data["progress"] == 1.0
        assert data["result"]["encounters"] == 1200

    def test_start_rejects_invalid_config(self, client):
        response = client.post("/api/simulation/start", json=config_json(difficultyTier=9))
        assert response.status_code == 422

    def test_stream(self, client):
        run_id = client.post("/api/simulation/start", json=config_json()).json()["run_id"]

        messages = []
        with client.websocket_connect(f"/api/simulation/{run_id}/stream") as websocket:
            while True:
                message = websocket.receive_json()
                messages.append(message)
                if message["type"] != "progress":
                    break

        progress = [m["progress"] for m in messages if m["type"] == "progress"]
        assert progress == sorted(progress)
        assert progress[-1] == 1.0
        assert messages[-1]["type"] == "complete"
        assert messages[-1]["result"]["encounters"] == 1200

    def test_cancel(self, client):
        run_id = client.post("/api/simulation/start", json=config_json(durationHours=48)).json()["run_id"]
        response = client.delete(f"/api/simulation/{run_id}")
        assert response.status_code == 200

        with client.websocket_connect(f"/api/simulation/{run_id}/stream") as websocket:
            message = websocket.receive_json()
            while message["type"] == "progress":
                message = websocket.receive_json()
        assert message == {"type": "cancelled"}

        data = wait_for(client, run_id)
        assert data["status"] == "cancelled"
        assert data["result"] is None

    def test_run_limit(self, client):
        run_ids = [
            client.post("/api/simulation/start", json=config_json(durationHours=48)).json()["run_id"]
            for _ in range(2)
        ]
        response = client.post("/api/simulation/start", json=config_json())
        assert response.status_code == 429
        for run_id in run_ids:
            client.delete(f"/api/simulation/{run_id}")
            wait_for(client, run_id)

    def test_unknown_run(self, client):
        assert client.get("/api/simulation/missing").status_code == 404
        assert client.delete("/api/simulation/missing").status_code == 404


class TestOptimizerRoutes:
    """POST /api/optimizer/run."""

    def test_run(self, client):
        response = client.post("/api/optimizer/run", json={
            "players": [{"hrid": "player1"}],
            "targets": [{"zone_hrid": LAIR}, {"zone_hrid": FIELD}],
            "goal": "profit",
            "seed": 1,
        })
        assert response.status_code == 200
        data = response.json()
        assert data["goal"] == "profit"
        assert [r["zone_hrid"] for r in data["results"]] == [FIELD, LAIR]
        assert data["results"][0]["rank"] == 1

    def test_party_too_large(self, client):
        response = client.post("/api/optimizer/run", json={
            "players": [{"hrid": "player1"}, {"hrid": "player2"}],
            "targets": [{"zone_hrid": FIELD}],
        })
        assert response.status_code == 422
