"""
Integration tests for the PropTrail HTTP API.

These tests verify the HTTP contract: status codes, response envelopes and
the mapping of service outcomes (rejection, absence, bad format) to HTTP.
Each test gets a fresh app wired to a fresh service with a pinned clock.
"""

from __future__ import annotations

from collections.abc import Generator
from datetime import timedelta
from typing import Any, Final

import pytest
from fastapi.testclient import TestClient

from conftest import NOW
from proptrail import __version__ as PKG_VERSION
from proptrail.api.app import create_app
from proptrail.api.service_registry import HistoryServiceRegistry, get_history_service
from proptrail.core.clock import FixedClock
from proptrail.history import HistoryService

ALLOWED_ENVS: Final[set[str]] = {"dev", "test", "prod"}

AGENT: Final[dict[str, Any]] = {"type": "agent", "id": "agent-7", "name": "Dana Realty"}


@pytest.fixture  # type: ignore[misc]
def client() -> Generator[TestClient, None, None]:
    """Clean API client backed by its own service instance."""
    HistoryServiceRegistry.reset()
    app = create_app(HistoryService(clock=FixedClock(NOW)))
    with TestClient(app) as c:
        yield c
    HistoryServiceRegistry.reset()


def _create(client: TestClient, **overrides: Any) -> dict[str, Any]:
    body: dict[str, Any] = {
        "property_id": "prop-1",
        "type": "price_change",
        "title": "Price reduced",
        "description": "Dropped to attract offers",
        "data": {"kind": "price", "old_price": 450000, "new_price": 425000},
        "source": AGENT,
    }
    body.update(overrides)
    resp = client.post("/history", json=body)
    assert resp.status_code == 201, resp.text
    event: dict[str, Any] = resp.json()["event"]
    return event


def test_health_endpoint_contract(client: TestClient) -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert data["environment"] in ALLOWED_ENVS
    assert data["version"] == PKG_VERSION


def test_the_registry_serves_the_installed_service(client: TestClient) -> None:
    assert get_history_service() is HistoryServiceRegistry.get_instance()


def test_create_and_fetch(client: TestClient) -> None:
    event = _create(client)
    assert event["data"]["change_amount"] == -25000

    resp = client.get(f"/history/{event['id']}")
    assert resp.status_code == 200
    assert resp.json()["event"] == event


def test_create_rejection_lists_field_errors(client: TestClient) -> None:
    resp = client.post("/history", json={"property_id": "prop-1", "type": "sold"})

    assert resp.status_code == 400
    body = resp.json()
    assert body["success"] is False
    assert [e["field"] for e in body["errors"]] == ["title", "description", "source"]


def test_unknown_event_is_404(client: TestClient) -> None:
    assert client.get("/history/evt_missing").status_code == 404
    assert client.put("/history/evt_missing", json={"title": "x"}).status_code == 404
    assert client.delete("/history/evt_missing").status_code == 404


def test_update_and_delete(client: TestClient) -> None:
    event = _create(client)

    resp = client.put(f"/history/{event['id']}", json={"title": "Second cut", "is_public": True})
    assert resp.status_code == 200
    assert resp.json()["event"]["title"] == "Second cut"
    assert resp.json()["event"]["timestamp"] == event["timestamp"]

    bad = client.put(f"/history/{event['id']}", json={"description": "  "})
    assert bad.status_code == 400

    immutable = client.put(f"/history/{event['id']}", json={"type": "sold"})
    assert immutable.status_code == 422

    assert client.delete(f"/history/{event['id']}").status_code == 200
    assert client.get(f"/history/{event['id']}").status_code == 404


def test_timeline_endpoint(client: TestClient) -> None:
    for _ in range(3):
        _create(client)
    _create(client, type="note_added", data=None, title="Note")

    resp = client.get(
        "/history", params={"property_id": "prop-1", "limit": 2, "event_type": "price_change"}
    )

    assert resp.status_code == 200
    timeline = resp.json()["timeline"]
    assert len(timeline["events"]) == 2
    assert timeline["pagination"] == {"page": 1, "limit": 2, "total": 3, "has_more": True}
    assert timeline["summary"]["event_types"] == {"price_change": 3}


def test_timeline_source_and_date_filters(client: TestClient) -> None:
    _create(client)
    _create(client, source={"type": "mls", "id": "mls-1", "name": "Regional MLS"})

    by_source = client.get("/history", params={"property_id": "prop-1", "source": "mls"})
    assert by_source.status_code == 200
    events = by_source.json()["timeline"]["events"]
    assert [e["source"]["type"] for e in events] == ["mls"]

    window = {"property_id": "prop-1", "start": (NOW - timedelta(hours=1)).isoformat()}
    end = (NOW + timedelta(hours=1)).isoformat()
    inside = client.get("/history", params={**window, "end": end})
    assert inside.json()["timeline"]["pagination"]["total"] == 2

    later = {
        "property_id": "prop-1",
        "start": (NOW + timedelta(days=1)).isoformat(),
        "end": (NOW + timedelta(days=2)).isoformat(),
    }
    assert client.get("/history", params=later).json()["timeline"]["pagination"]["total"] == 0

    assert client.get("/history", params=window).status_code == 400


def test_timeline_limit_is_bounded(client: TestClient) -> None:
    resp = client.get("/history", params={"property_id": "prop-1", "limit": 100000})
    assert resp.status_code == 422


def test_search_endpoint(client: TestClient) -> None:
    _create(client, property_id="a")
    _create(client, property_id="b", type="note_added", data=None, title="Roof")

    resp = client.post("/history/search?page=1&limit=5", json={"keywords": "price"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == 1
    assert body["events"][0]["property_id"] == "a"
    assert body["facets"]["event_types"] == {"price_change": 1}


def test_property_history_and_analytics(client: TestClient) -> None:
    _create(client)

    history = client.get("/properties/prop-1/history")
    assert history.status_code == 200
    assert history.json()["total_events"] == 1

    analytics = client.get("/properties/prop-1/analytics")
    assert analytics.status_code == 200
    assert analytics.json()["key_metrics"]["price_changes"] == 1

    assert client.get("/properties/ghost/history").status_code == 404
    assert client.get("/properties/ghost/analytics").status_code == 404


def test_export_endpoint(client: TestClient) -> None:
    _create(client)

    csv_resp = client.get("/properties/prop-1/export", params={"format": "csv"})
    assert csv_resp.status_code == 200
    assert csv_resp.headers["content-type"].startswith("text/csv")
    assert "property-prop-1-timeline.csv" in csv_resp.headers["content-disposition"]
    assert len(csv_resp.text.split("\n")) == 2

    pdf_resp = client.get("/properties/prop-1/export", params={"format": "pdf"})
    assert pdf_resp.headers["content-type"] == "application/pdf"

    bad = client.get("/properties/prop-1/export", params={"format": "xml"})
    assert bad.status_code == 400
    assert bad.json()["supported"] == ["json", "csv", "pdf"]


def test_export_needs_a_complete_date_range(client: TestClient) -> None:
    resp = client.get(
        "/properties/prop-1/export", params={"start": "2024-01-01T00:00:00Z"}
    )
    assert resp.status_code == 400


def test_import_endpoint(client: TestClient) -> None:
    payload = (
        "property_id,type,title,description\n"
        "prop-7,note_added,Called,Left a voicemail\n"
        "prop-7,nonsense,Bad,Row\n"
    )
    resp = client.post(
        "/history/import", json={"payload": payload, "options": {"source": "csv"}}
    )

    assert resp.status_code == 200
    report = resp.json()
    assert len(report["imported"]) == 1
    assert [r["row"] for r in report["rejected"]] == [2]
    assert client.get("/properties/prop-7/history").status_code == 200

    unsupported = client.post(
        "/history/import", json={"payload": "", "options": {"source": "xlsx"}}
    )
    assert unsupported.status_code == 400
