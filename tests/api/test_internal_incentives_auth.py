from __future__ import annotations

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from incentive_ledger.api.routes import internal_helpers
from incentive_ledger.main import app


def _settings(*, allowlist: str) -> SimpleNamespace:
    return SimpleNamespace(
        internal_api_token="internal-secret",
        internal_api_allowlist=allowlist,
        internal_api_trusted_proxies="",
    )


@pytest.mark.parametrize(
    ("method", "path", "body"),
    [
        ("post", "/internal/rewards/redeem/1", {"user_id": 1}),
        ("post", "/internal/challenges/join/1", {"user_id": 1}),
        ("post", "/internal/points/bonus", {"user_id": 1, "amount": 5, "description": "x"}),
        ("get", "/internal/incentives", None),
    ],
)
def test_internal_routes_reject_missing_token(monkeypatch, method: str, path: str, body) -> None:
    monkeypatch.setattr(internal_helpers, "get_settings", lambda: _settings(allowlist="127.0.0.1/32"))

    client = TestClient(app, client=("127.0.0.1", 5100))
    response = client.request(method.upper(), path, json=body)

    assert response.status_code == 403
    assert response.json() == {"detail": {"code": "E_FORBIDDEN"}}


def test_internal_routes_reject_disallowed_ip(monkeypatch) -> None:
    monkeypatch.setattr(internal_helpers, "get_settings", lambda: _settings(allowlist="192.168.0.0/16"))

    client = TestClient(app, client=("10.0.0.25", 5100))
    response = client.post(
        "/internal/rewards/redeem/1",
        json={"user_id": 1},
        headers={"X-Internal-Token": "internal-secret"},
    )

    assert response.status_code == 403
    assert response.json() == {"detail": {"code": "E_FORBIDDEN"}}
