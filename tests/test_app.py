import httpx
import pytest
from fastapi.testclient import TestClient

from neo_impact import app as app_module
from neo_impact.catalog import NeoWsClient
from neo_impact.config import CatalogConfig

from conftest import make_record

BASE = "https://api.nasa.gov/neo/rest/v1"


@pytest.fixture
def api(feed_payload, record):
    def handler(request):
        path = request.url.path
        if path.endswith("/feed/today"):
            return httpx.Response(200, json=feed_payload)
        if path.endswith("/neo/2000433"):
            return httpx.Response(200, json=record)
        if path.endswith("/neo/down"):
            return httpx.Response(503, text="maintenance")
        return httpx.Response(404, json={"code": 404})

    config = CatalogConfig(api_key="k")
    client = NeoWsClient(config, http=httpx.Client(transport=httpx.MockTransport(handler), base_url=BASE))
    app_module.app.dependency_overrides[app_module.get_config] = lambda: config
    app_module.app.dependency_overrides[app_module.get_client] = lambda: client
    yield TestClient(app_module.app)
    app_module.app.dependency_overrides.clear()


def test_health(api):
    assert api.get("/health").json() == {"status": "ok"}


def test_assess_endpoint(api):
    r = api.post("/impact/assess", json={"diameter_km": 1.0, "velocity_km_s": 20.0, "miss_distance_km": 0.0})
    assert r.status_code == 200
    body = r.json()
    assert body["severity"]["category"] == "CONTINENTAL"
    assert body["energy"]["energy_j"] == pytest.approx(3.1416e20, rel=1e-4)


def test_assess_threshold_override(api):
    payload = {"diameter_km": 0.1, "velocity_km_s": 20.0, "miss_distance_km": 10_000.0}
    assert api.post("/impact/assess", json=payload).json()["severity"]["is_impact"] is False
    payload["impact_threshold_km"] = 12_742.0
    assert api.post("/impact/assess", json=payload).json()["severity"]["is_impact"] is True


def test_assess_rejects_negative_values(api):
    r = api.post("/impact/assess", json={"diameter_km": -1.0, "velocity_km_s": 20.0, "miss_distance_km": 0.0})
    assert r.status_code == 422


def test_neo_today(api):
    r = api.get("/neo/today", params={"limit": 2})
    assert r.status_code == 200
    body = r.json()
    assert body["count"] == 2
    assert [o["name"] for o in body["objects"]] == ["nearest", "near"]
    assert "assessment" in body["objects"][0]


def test_neo_assess(api):
    body = api.get("/neo/2000433/assess").json()
    assert body["id"] == "2000433"
    assert body["missing_fields"] == []
    assert body["assessment"]["severity"]["category"] == "SAFE_FLYBY"


def test_neo_assess_not_found(api):
    assert api.get("/neo/unknown/assess").status_code == 404


def test_catalog_outage_reported_as_502(api):
    r = api.get("/neo/down/assess")
    assert r.status_code == 502
    assert "unavailable" in r.json()["detail"]


def test_record_without_miss_distance_not_flagged(feed_payload):
    feed_payload["near_earth_objects"]["2026-10-17"] = [make_record(neo_id="9", name="gap", miss=None)]
    feed_payload["near_earth_objects"]["2026-10-18"] = []
    config = CatalogConfig(api_key="k")
    client = NeoWsClient(config, http=httpx.Client(
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json=feed_payload)), base_url=BASE))
    app_module.app.dependency_overrides[app_module.get_config] = lambda: config
    app_module.app.dependency_overrides[app_module.get_client] = lambda: client
    try:
        obj = TestClient(app_module.app).get("/neo/today").json()["objects"][0]
    finally:
        app_module.app.dependency_overrides.clear()
    assert obj["missing_fields"] == ["miss_distance"]
    assert obj["assessment"]["severity"]["category"] == "SAFE_FLYBY"
    assert obj["assessment"]["severity"]["is_impact"] is False


def test_shutdown_closes_shared_client(monkeypatch):
    http = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200, json={})), base_url=BASE)
    monkeypatch.setattr(app_module, "_client", NeoWsClient(CatalogConfig(api_key="k"), http=http))
    with TestClient(app_module.app) as tc:
        assert tc.get("/health").status_code == 200
    assert app_module._client is None
    assert http.is_closed
