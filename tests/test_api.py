"""HTTP API against a container wired from the shipped config and manifest"""

import asyncio
import pytest
from fastapi.testclient import TestClient

from api.dependencies import set_service_container
from api.main import create_app
from managers.asset_manager import AssetManager
from managers.config_manager import ConfigManager
from services.event_broadcaster import EventBroadcaster
from services.service_container import ServiceContainer

IPHONE = "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X)"


@pytest.fixture
def services():
    config_manager = ConfigManager()
    config_manager.load()
    broadcaster = EventBroadcaster()
    container = ServiceContainer.build(config_manager, AssetManager(), broadcaster=broadcaster)
    broadcaster.attach(container.event_bus)
    set_service_container(container)
    yield container
    set_service_container(None)


@pytest.fixture
def loaded(services):
    scene = services.asset_manager.load_manifest(services.config_manager.model_path)
    asyncio.run(services.viewer.load_model(scene))
    return services


@pytest.fixture
def client():
    return TestClient(create_app())


def put_state(client, part, state):
    return client.put(f"/api/v1/book/parts/{part}/state", json={"state": state})


def test_health_reports_model(client, loaded):
    body = client.get("/api/health").json()
    assert body["status"] == "healthy"
    assert body["model_loaded"] is True


def test_no_container_is_unavailable(client):
    set_service_container(None)
    assert client.get("/api/health").json()["model_loaded"] is False
    assert client.get("/api/v1/book/parts").status_code == 503


def test_model_not_loaded(client, services):
    response = client.get("/api/v1/book/parts")
    assert response.status_code == 503
    assert response.json()["error"]["code"] == "MODEL_NOT_LOADED"


def test_list_parts(client, loaded):
    body = client.get("/api/v1/book/parts").json()

    assert [p["part"] for p in body["parts"]] == ["LATCH", "FRONT_COVER", "PAGE_0", "PAGE_1", "PAGE_2"]
    assert all(p["state"] == "CLOSED" for p in body["parts"])
    assert body["book_open"] is False

    page = client.get("/api/v1/book/parts/page_1").json()
    assert page["clips"] == ["page_2_turn"]
    assert page["index"] == 1


def test_clips_are_classified(client, loaded):
    clips = {c["name"]: c for c in client.get("/api/v1/book/clips").json()["clips"]}
    assert clips["spline_bend"]["kind"] == "ANCILLARY"
    assert clips["page_3_turn"]["page_number"] == 3
    assert clips["latch_open"]["page_number"] is None


def test_accepted_request_reports_transition(client, loaded):
    response = put_state(client, "LATCH", "open")
    assert response.status_code == 200

    body = response.json()
    assert body["outcome"] == "ACCEPTED"
    assert body["part"]["state"] == "CLOSED"
    assert body["part"]["transitioning"] is True
    assert body["part"]["direction"] == "FORWARD"

    playbacks = client.get("/api/v1/book/playbacks").json()["playbacks"]
    assert [p["clip_name"] for p in playbacks] == ["latch_open"]
    assert playbacks[0]["running_for"] >= 0.0

    status = client.get("/api/v1/system/status").json()
    assert status["cascade"]["request"] == "LATCH → OPEN"


def test_rejected_request_is_not_an_error(client, loaded):
    response = put_state(client, "PAGE_0", "OPEN")
    assert response.status_code == 200
    assert response.json()["outcome"] == "REJECTED"

    assert put_state(client, "PAGE_0", "CLOSED").json()["outcome"] == "NOOP"


def test_unknown_part_and_invalid_state(client, loaded):
    response = put_state(client, "PAGE_9", "OPEN")
    assert response.status_code == 404
    error = response.json()["error"]
    assert error["code"] == "PART_NOT_FOUND"
    assert "PAGE_2" in error["details"]["valid_parts"]

    assert put_state(client, "SPINE", "OPEN").status_code == 404

    response = put_state(client, "LATCH", "ajar")
    assert response.status_code == 422
    assert response.json()["error"]["code"] == "INVALID_PART_STATE"

    response = client.put("/api/v1/book/parts/LATCH/state", json={})
    assert response.status_code == 422
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_camera_defaults_per_viewport(client, loaded):
    desktop = client.get("/api/v1/camera").json()
    assert desktop["viewport"] == "DESKTOP"
    assert desktop["min_distance"] is None

    mobile = client.get("/api/v1/camera", headers={"User-Agent": IPHONE}).json()
    assert mobile["viewport"] == "MOBILE"
    assert mobile["min_distance"] < mobile["max_distance"]
    assert mobile["view"] != desktop["view"]


def test_camera_clamp(client, loaded):
    view = {"position": [20.0, 0.0, 10.0], "target": [20.0, 0.0, 0.0], "fov": 45.0}
    body = client.post("/api/v1/camera/clamp", json=view).json()
    assert body["clamped"] is True
    assert body["view"]["target"] != view["target"]

    origin = [-9.121, 0.358, -3.984]
    inside = {"position": [-9.0, 0.4, 10.0], "target": origin, "fov": 45.0}
    assert client.post("/api/v1/camera/clamp", json=inside).json()["clamped"] is False


def test_event_stream_replays_recent_events(client, loaded):
    with client.websocket_connect("/ws/events") as websocket:
        message = websocket.receive_json()
    assert message["channel"] == "event"
    assert message["type"] == "MODEL_LOADED"


def test_toggle_and_reload(client, loaded):
    toggled = client.post("/api/v1/book/parts/FRONT_COVER/toggle").json()
    assert toggled["outcome"] == "ACCEPTED"
    assert loaded.state_machine.active_chain is not None

    body = client.post("/api/v1/book/reload").json()
    assert body["model"] == "book"
    assert body["parts"] == ["LATCH", "FRONT_COVER", "PAGE_0", "PAGE_1", "PAGE_2"]
    assert body["missing_tracks"] == 0
    assert loaded.state_machine.active_chain is None
    assert client.get("/api/v1/book/playbacks").json()["playbacks"] == []


def test_logger_listings(client, services):
    assert client.get("/api/v1/logger/levels").json() == {"levels": ["DEBUG", "INFO", "WARN", "ERROR"]}
    assert "CASCADE" in client.get("/api/v1/logger/categories").json()["categories"]

    services.broadcaster.log("10:30:45", "WARN", "CASCADE", "Request rejected: PAGE_1 → OPEN")
    lines = client.get("/api/v1/logger/recent").json()
    assert lines[-1]["message"] == "Request rejected: PAGE_1 → OPEN"
