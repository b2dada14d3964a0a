from __future__ import annotations

from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from historycache.config import Cluster, HistoryConfig, WebAuthConfig, WebConfig
from historycache.history import FetchTicket, HistoryService, ScopeProvider
from historycache.providers import InMemoryListingProvider
from historycache.web import create_app

from tests.utils import make_items

ACCOUNT = "Acct1"
SCOPE = "https://api.devnet.example.com"


@pytest.fixture()
def history_service() -> Iterator[HistoryService]:
    provider = InMemoryListingProvider({ACCOUNT: make_items(3)})
    with HistoryService(provider, ScopeProvider(SCOPE, Cluster.DEVNET), HistoryConfig(page_size=2)) as service:
        yield service


@pytest.fixture()
def client(history_service: HistoryService) -> TestClient:
    return TestClient(create_app(history_service))


def test_health_check(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_scope(client: TestClient) -> None:
    response = client.get("/scope")
    assert response.json() == {"url": SCOPE, "cluster": "devnet"}


def test_missing_history_returns_404(client: TestClient) -> None:
    response = client.get(f"/histories/{ACCOUNT}")
    assert response.status_code == 404
    assert response.json() == {"detail": f"No history cached for '{ACCOUNT}'."}


def test_fetch_then_read(client: TestClient, history_service: HistoryService) -> None:
    response = client.post(f"/histories/{ACCOUNT}/fetch")
    assert response.status_code == 202
    assert response.json() == {"status": "scheduled"}
    history_service.orchestrator.wait_all(timeout=5)

    entry = client.get(f"/histories/{ACCOUNT}").json()
    assert entry["status"] == "fetched"
    assert [record["signature"] for record in entry["data"]["fetched"]] == ["sig0", "sig1"]

    listing = client.get("/histories").json()
    assert set(listing) == {ACCOUNT}


def test_fetch_reports_complete_history(client: TestClient, history_service: HistoryService) -> None:
    for _ in range(2):
        client.post(f"/histories/{ACCOUNT}/fetch")
        history_service.orchestrator.wait_all(timeout=5)

    response = client.post(f"/histories/{ACCOUNT}/fetch")
    assert response.json() == {"status": "complete"}

    refreshed = client.post(f"/histories/{ACCOUNT}/fetch", params={"refresh": "true"})
    assert refreshed.json() == {"status": "scheduled"}


def test_closed_service_returns_503() -> None:
    provider = InMemoryListingProvider({})
    service = HistoryService(provider, ScopeProvider(SCOPE))
    client = TestClient(create_app(service))

    response = client.get("/histories")

    assert response.status_code == 503
    assert response.json() == {"detail": "History cache is not running."}


def test_auth_enforced(history_service: HistoryService) -> None:
    config = WebConfig(auth=WebAuthConfig(enabled=True, token="s3cret"))
    client = TestClient(create_app(history_service, config))

    assert client.get("/histories").status_code == 401
    assert client.get("/histories", headers={"X-Api-Token": "wrong"}).status_code == 401
    assert client.get("/histories", headers={"X-Api-Token": "s3cret"}).status_code == 200
    assert client.get("/health").status_code == 200


def test_scope_switch_during_fetch_returns_409(
    client: TestClient, history_service: HistoryService, monkeypatch: pytest.MonkeyPatch
) -> None:
    def switch_then_begin(scope: str, key: str, before: str | None = None) -> FetchTicket:
        history_service.scope_provider.switch("https://api.testnet.example.com", Cluster.TESTNET)
        return original_begin(scope, key, before)

    original_begin = history_service.store.begin
    monkeypatch.setattr(history_service.store, "begin", switch_then_begin)

    response = client.post(f"/histories/{ACCOUNT}/fetch")

    assert response.status_code == 409
    assert response.json() == {"detail": "Active scope changed; retry the request."}
    assert history_service.scope == "https://api.testnet.example.com"
