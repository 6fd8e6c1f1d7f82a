from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from tripwage.core.config import get_settings
from tripwage.main import app


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{tmp_path / 'api.db'}")
    monkeypatch.setenv("BACKEND_SELECTION", "B")
    get_settings.cache_clear()
    with TestClient(app) as c:
        yield c
    get_settings.cache_clear()


def _register(client, username="dee", email="dee@example.com", password="secret1"):
    resp = client.post(
        "/api/auth/register",
        json={"username": username, "email": email, "password": password, "confirm_password": password},
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


def _auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def test_register_and_login(client):
    body = _register(client)
    assert body["token_type"] == "bearer"
    assert body["user"]["email"] == "dee@example.com"
    assert "password_hash" not in body["user"]

    resp = client.post("/api/auth/login", json={"email": "dee@example.com", "password": "secret1"})
    assert resp.status_code == 200
    assert resp.json()["access_token"]

    resp = client.post("/api/auth/login", json={"email": "dee@example.com", "password": "wrong"})
    assert resp.status_code == 401


def test_register_duplicate_email(client):
    _register(client)
    resp = client.post(
        "/api/auth/register",
        json={"username": "other", "email": "dee@example.com", "password": "secret1"},
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Email already in use"


def test_orders_require_a_token(client):
    assert client.get("/api/orders").status_code == 401
    assert client.get("/api/orders", headers=_auth("garbage")).status_code == 401


def test_order_lifecycle(client):
    headers = _auth(_register(client)["access_token"])

    resp = client.post(
        "/api/orders",
        headers=headers,
        json={
            "date": "2024-05-01",
            "order_number": "991",
            "payment_type": "cash",
            "order_value": 18,
            "payment_amount": 20,
            "distance_km": 3,
        },
    )
    assert resp.status_code == 201, resp.text
    order = resp.json()
    assert order["payment_type"] == "cash"

    assert [o["id"] for o in client.get("/api/orders", headers=headers).json()] == [order["id"]]
    assert len(client.get("/api/orders/date/2024-05-01", headers=headers).json()) == 1
    assert client.get("/api/orders/date/2024-05-02", headers=headers).json() == []

    resp = client.get(
        "/api/orders/range", headers=headers, params={"start_date": "2024-04-01", "end_date": "2024-05-31"}
    )
    assert len(resp.json()) == 1

    resp = client.put(f"/api/orders/{order['id']}", headers=headers, json={"notes": "back door"})
    assert resp.status_code == 200
    assert resp.json()["notes"] == "back door"
    assert resp.json()["order_value"] == 18

    resp = client.delete(f"/api/orders/{order['id']}", headers=headers)
    assert resp.json() == {"deleted": True}
    assert client.get(f"/api/orders/{order['id']}", headers=headers).status_code == 404


def test_orders_of_another_user_are_forbidden(client):
    owner = _auth(_register(client)["access_token"])
    intruder = _auth(_register(client, "eve", "eve@example.com")["access_token"])

    order = client.post("/api/orders", headers=owner, json={"date": "2024-05-01"}).json()

    assert client.get(f"/api/orders/{order['id']}", headers=intruder).status_code == 403
    assert client.put(f"/api/orders/{order['id']}", headers=intruder, json={"notes": "x"}).status_code == 403
    assert client.delete(f"/api/orders/{order['id']}", headers=intruder).status_code == 403
    assert client.get("/api/orders", headers=intruder).json() == []


def test_negative_amounts_are_rejected(client):
    headers = _auth(_register(client)["access_token"])
    resp = client.post("/api/orders", headers=headers, json={"date": "2024-05-01", "order_value": -1})
    assert resp.status_code == 422


def test_work_time_and_daily_stats(client):
    headers = _auth(_register(client)["access_token"])

    resp = client.get("/api/orders/worktime/2024-05-01", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["work_hours"] == 0
    assert resp.json()["id"] is None

    resp = client.post(
        "/api/orders/worktime",
        headers=headers,
        json={"date": "2024-05-01", "start_time": "18:00", "end_time": "22:00"},
    )
    assert resp.status_code == 200
    assert resp.json()["work_hours"] == pytest.approx(4)

    client.post(
        "/api/orders",
        headers=headers,
        json={"date": "2024-05-01", "order_value": 20, "payment_amount": 25, "distance_km": 10},
    )

    live = client.get("/api/orders/stats/2024-05-01", headers=headers).json()
    assert live["long_trips_count"] == 1
    assert live["total_wage"] == pytest.approx(34 + 7 + 5)

    strict = client.get("/api/orders/stats/2024-05-01", headers=headers, params={"mode": "historical"}).json()
    assert strict["long_trips_count"] == 0

    resp = client.get("/api/orders/stats/2024-05-01", headers=headers, params={"mode": "weekly"})
    assert resp.status_code == 400


def test_work_time_rejects_malformed_times(client):
    headers = _auth(_register(client)["access_token"])
    resp = client.post(
        "/api/orders/worktime",
        headers=headers,
        json={"date": "2024-05-01", "start_time": "25:00", "end_time": "22:00"},
    )
    assert resp.status_code == 422


def test_historical_stats(client):
    headers = _auth(_register(client)["access_token"])
    client.post("/api/orders", headers=headers, json={"date": "2024-05-02", "order_value": 10, "payment_amount": 13})

    resp = client.get(
        "/api/orders/historical-stats",
        headers=headers,
        params={"start_date": "2024-05-01", "end_date": "2024-05-03"},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert [d["date"] for d in body["days"]] == ["2024-05-01", "2024-05-02", "2024-05-03"]
    assert body["actual_trips"] == 1
    assert body["total_tips"] == pytest.approx(3)
    assert body["average_hourly_wage"] == 0

    resp = client.get(
        "/api/orders/historical-stats",
        headers=headers,
        params={"start_date": "2024-05-03", "end_date": "2024-05-01"},
    )
    assert resp.status_code == 400


def test_profile_and_password(client):
    headers = _auth(_register(client)["access_token"])

    assert client.get("/api/users/profile", headers=headers).json()["username"] == "dee"

    resp = client.put("/api/users/profile", headers=headers, json={"username": "deedee"})
    assert resp.json()["username"] == "deedee"

    resp = client.put(
        "/api/users/change-password",
        headers=headers,
        json={"current_password": "bad", "new_password": "another1"},
    )
    assert resp.status_code == 400

    resp = client.put(
        "/api/users/change-password",
        headers=headers,
        json={"current_password": "secret1", "new_password": "another1", "confirm_password": "another1"},
    )
    assert resp.status_code == 200
    resp = client.post("/api/auth/login", json={"email": "dee@example.com", "password": "another1"})
    assert resp.status_code == 200


def test_historical_stats_edge_ranges(client):
    headers = _auth(_register(client)["access_token"])

    resp = client.get(
        "/api/orders/historical-stats",
        headers=headers,
        params={"start_date": "9999-12-31", "end_date": "9999-12-31"},
    )
    assert resp.status_code == 200
    assert [d["date"] for d in resp.json()["days"]] == ["9999-12-31"]

    resp = client.get(
        "/api/orders/historical-stats",
        headers=headers,
        params={"start_date": "0001-01-01", "end_date": "9999-12-31"},
    )
    assert resp.status_code == 400
