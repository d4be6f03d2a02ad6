"""Integration tests for the analyze-journal endpoint."""

from __future__ import annotations

from fastapi.testclient import TestClient

from serenity.api.schemas.journal import DriftAnalysis, EntryScore
from serenity.core.settings import Settings
from serenity.main import app
from serenity.services.contracts import GatewayClientProtocol
from serenity.services.gateway_client import GatewayError
from serenity.streaming.transport import CannedResponseTransport
from tests.helpers import FakeGatewayClient, build_test_container

ENTRIES = {
    "entries": [
        {"content": "Couldn't sleep.", "created_at": "2026-02-01T22:00:00Z"},
        {"content": "Had coffee with a friend.", "created_at": "2026-02-02T10:00:00Z"},
    ]
}

ANALYSIS = DriftAnalysis(
    entry_scores=[
        EntryScore(index=1, sentiment=0.3, emotion="anxious"),
        EntryScore(index=2, sentiment=0.7, emotion="grateful"),
    ],
    drift_direction="improving",
    summary="You seem to be finding more connection lately.",
)


def _client(settings: Settings, gateway: FakeGatewayClient) -> TestClient:
    app.state.container = build_test_container(
        {
            Settings: settings,
            GatewayClientProtocol: gateway,
            CannedResponseTransport: CannedResponseTransport(),
        }
    )
    return TestClient(app)


def test_analyze_journal_returns_structured_analysis(test_settings: Settings) -> None:
    gateway = FakeGatewayClient(analysis=ANALYSIS)
    client = _client(test_settings, gateway)

    response = client.post("/api/analyze-journal", json=ENTRIES)

    assert response.status_code == 200
    assert response.json() == ANALYSIS.model_dump()
    assert [entry.content for entry in gateway.analyze_calls[0]] == ["Couldn't sleep.", "Had coffee with a friend."]


def test_analyze_journal_rejects_missing_entries(test_settings: Settings) -> None:
    gateway = FakeGatewayClient(analysis=ANALYSIS)
    client = _client(test_settings, gateway)

    response = client.post("/api/analyze-journal", json={})

    assert response.status_code == 400
    assert response.json() == {"error": "No entries provided"}
    assert gateway.analyze_calls == []


def test_analyze_journal_maps_rate_limit(test_settings: Settings) -> None:
    gateway = FakeGatewayClient(error=GatewayError(status_code=429, message="Rate limit exceeded, try again later."))
    client = _client(test_settings, gateway)

    response = client.post("/api/analyze-journal", json=ENTRIES)

    assert response.status_code == 429
    assert response.json() == {"error": "Rate limit exceeded, try again later."}


def test_analyze_journal_reports_invalid_entries(test_settings: Settings) -> None:
    client = _client(test_settings, FakeGatewayClient(analysis=ANALYSIS))

    response = client.post("/api/analyze-journal", json={"entries": [{"content": "no timestamp"}]})

    assert response.status_code == 400
    assert response.json()["error"].startswith("Invalid request: entries.0.created_at")
