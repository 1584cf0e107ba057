import logging

import pytest
from fastapi.testclient import TestClient

from vdl2feed.config import Settings
from vdl2feed.main import create_app, create_feed_app, load_runtime
from vdl2feed.runtime import FeedRuntime

SCENARIO = b'{"vdl2":{"avlc":{"src":{"addr":"A12345"}},"t":{"sec":1700000000}}}'


@pytest.fixture
def runtime(pipeline, tmp_path):
    config = Settings(
        log_dir=str(tmp_path / "logs"),
        unknown_dir=str(tmp_path / "unknown"),
        cors_origins="*",
    )
    return FeedRuntime(pipeline=pipeline, settings=config)


@pytest.fixture
def client(runtime):
    app = create_app(runtime, start_listeners=False)
    with TestClient(app) as test_client:
        yield test_client


def test_summary_reflects_ingested_messages(client, runtime):
    runtime.pipeline.handle_datagram(SCENARIO)
    runtime.pipeline.handle_datagram(b'{"vdl2":{"avlc":{"src":{"addr":"123456"}}}}')

    response = client.get("/api/events/summary")

    assert response.status_code == 200
    body = response.json()
    assert body["totalPackets"] == 2
    assert body["uniqueAircraft"] == 2
    assert body["uniqueFlights"] == 0
    assert {"owner": "Acme Air", "count": 1} in body["topOwners"]
    assert {"owner": "Unknown", "count": 1} in body["topOwners"]
    assert {"model": "B738", "count": 1} in body["topModels"]


def test_summary_empty_at_startup(client):
    body = client.get("/api/events/summary").json()

    assert body == {
        "totalPackets": 0,
        "uniqueAircraft": 0,
        "uniqueFlights": 0,
        "topOwners": [],
        "topModels": [],
    }


def test_timeline_returns_minute_buckets(client, runtime):
    for _ in range(3):
        runtime.pipeline.handle_datagram(SCENARIO)

    response = client.get("/api/events/timeline")

    assert response.status_code == 200
    buckets = response.json()
    assert len(buckets) == 1
    assert buckets[0]["count"] == 3
    assert len(buckets[0]["time"]) == len("YYYY-MM-DDTHH:MM")


def test_timeline_rejects_out_of_range_window(client):
    assert client.get("/api/events/timeline", params={"minutes": 0}).status_code == 422
    assert client.get("/api/events/timeline", params={"minutes": 5000}).status_code == 422


def test_health_reports_subscribers(client):
    body = client.get("/healthz").json()

    assert body["status"] == "ok"
    assert body["subscribers"] == 0


def test_websocket_subscriber_receives_published_message(client, runtime):
    with client.websocket_connect("/ws") as ws:
        client.portal.call(runtime.pipeline.handle_datagram, SCENARIO)
        message = ws.receive_json()

    assert message["db"]["reg"] == "N123"
    assert message["timestamp_iso"] == "2023-11-14T22:13:20.000Z"


def test_two_subscribers_each_get_one_copy(client, runtime):
    with client.websocket_connect("/ws") as first, client.websocket_connect("/ws") as second:
        assert client.portal.call(len, runtime.broadcaster) == 2
        client.portal.call(runtime.pipeline.handle_datagram, SCENARIO)

        assert first.receive_json()["db"]["ownop"] == "Acme Air"
        assert second.receive_json()["db"]["ownop"] == "Acme Air"


def test_feed_app_serves_websocket_at_root(runtime):
    feed_app = create_feed_app(runtime)

    with TestClient(feed_app) as feed_client:
        with feed_client.websocket_connect("/") as ws:
            feed_client.portal.call(runtime.pipeline.handle_datagram, SCENARIO)
            assert ws.receive_json()["db"]["icaotype"] == "B738"


def test_missing_reference_store_exits(tmp_path, caplog):
    config = Settings(
        reference_db_path=str(tmp_path / "missing.db"),
        log_dir=str(tmp_path / "logs"),
        unknown_dir=str(tmp_path / "unknown"),
    )

    with caplog.at_level(logging.CRITICAL, logger="vdl2feed"):
        with pytest.raises(SystemExit) as excinfo:
            load_runtime(config)

    assert excinfo.value.code == 1
    assert "missing.db" in caplog.text
    assert not (tmp_path / "logs").exists()


def test_query_endpoints_allow_cross_origin_reads(client):
    response = client.get("/api/events/summary", headers={"Origin": "http://dashboard.test"})

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"


def test_cors_preflight_allows_get(client):
    response = client.options(
        "/api/events/timeline",
        headers={"Origin": "http://dashboard.test", "Access-Control-Request-Method": "GET"},
    )

    assert response.status_code == 200
    assert "GET" in response.headers["access-control-allow-methods"]
