import pytest
from cachetools import TTLCache
from fastapi.testclient import TestClient

import server
from models import HoldingsConfig


@pytest.fixture
def client(monkeypatch):
    calls = []

    async def fetch(client, cfg, wallet, chain):
        calls.append((wallet, chain))
        if chain == "arb":
            raise RuntimeError("rate limited")
        return [{"id": "eth", "symbol": "ETH", "price": 2000.0, "amount": 0.5 if wallet == "w1" else 0.25}]

    cfg = HoldingsConfig(wallets=("w1", "w2"), chains=("eth", "arb"), cache_ttl_sec=60)
    monkeypatch.setattr(server, "FETCHER", fetch)
    monkeypatch.setattr(server, "CACHE", None)
    monkeypatch.setattr(server, "_config", lambda: cfg)
    c = TestClient(server.app)
    c.calls = calls
    return c


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"ok": True}


def test_root_redirects(client):
    resp = client.get("/", follow_redirects=False)
    assert resp.status_code == 302
    assert resp.headers["location"] == "/holdings"


def test_holdings_payload(client):
    resp = client.get("/holdings")
    assert resp.status_code == 200
    data = resp.json()
    assert [w["wallet"] for w in data["wallets"]] == ["w1", "w2"]
    assert [w["total_usd_value"] for w in data["wallets"]] == [1000.0, 500.0]
    assert data["wallets"][0]["chains"][1] == {"chain": "arb", "token_count": 0, "usd_value": 0.0, "tokens": []}
    top = data["portfolio_topline"]
    assert len(top) == 1
    assert top[0]["value_usd"] == 1500.0
    assert top[0]["occurrences"] == 2


def test_holdings_cached(client):
    client.get("/holdings")
    first = len(client.calls)
    client.get("/holdings")
    assert len(client.calls) == first == 4


def test_holdings_query_overrides(client):
    resp = client.get("/holdings", params={"wallets": "w9,w8", "chains": "ETH", "raw": "false"})
    assert resp.status_code == 200
    data = resp.json()
    assert [w["wallet"] for w in data["wallets"]] == ["w9", "w8"]
    assert [c["chain"] for c in data["wallets"][0]["chains"]] == ["eth"]
    assert "tokens" not in data["wallets"][0]["chains"][0]
    assert sorted(client.calls) == [("w8", "eth"), ("w9", "eth")]


def test_holdings_internal_error(client, monkeypatch, caplog):
    def boom(*args, **kwargs):
        raise RuntimeError("merge exploded")

    monkeypatch.setattr("holdings.merge_portfolio", boom)
    resp = client.get("/holdings")
    assert resp.status_code == 500
    assert resp.json() == {"error": "failed_to_build_holdings"}
    assert "merge exploded" in caplog.text


class Clock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_holdings_cache_expires(client, monkeypatch):
    clock = Clock()
    monkeypatch.setattr(server, "CACHE", TTLCache(maxsize=4, ttl=60, timer=clock))

    client.get("/holdings")
    clock.now += 59
    client.get("/holdings")
    assert len(client.calls) == 4

    clock.now += 2
    client.get("/holdings")
    assert len(client.calls) == 8


def test_zero_ttl_disables_cache(client, monkeypatch):
    cfg = HoldingsConfig(wallets=("w1",), chains=("eth",), cache_ttl_sec=0)
    monkeypatch.setattr(server, "_config", lambda: cfg)
    client.get("/holdings")
    client.get("/holdings")
    assert client.calls == [("w1", "eth"), ("w1", "eth")]
    assert server.CACHE is None
