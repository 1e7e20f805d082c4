from __future__ import annotations

from flask.testing import FlaskClient

from sipcalc.app import create_app
from sipcalc.config import Settings


def save(client: FlaskClient, kind: str, request: dict, currency: str = None):
    body = {"kind": kind, "request": request}
    if currency:
        body["currency"] = currency
    return client.post("/api/calculations", json=body)


def sip_request() -> dict:
    return {"monthlyAmount": 5000, "annualRatePercent": 12, "years": 10}


def swp_request() -> dict:
    return {"initialAmount": 1000000, "monthlyWithdrawal": 10000, "annualRatePercent": 8, "years": 15}


def test_save_runs_projection_and_uses_preferred_currency(client: FlaskClient):
    resp = save(client, "accumulation", sip_request())

    assert resp.status_code == 201
    record = resp.get_json()
    assert record["kind"] == "accumulation"
    assert record["currency"] == "INR"
    assert record["result"]["totalInvested"] == 600000
    assert record["request"]["monthlyAmount"] == 5000
    assert record["id"]
    assert record["createdAt"]


def test_saved_list_is_newest_first(client: FlaskClient):
    first = save(client, "accumulation", sip_request()).get_json()
    second = save(client, "decumulation", swp_request(), currency="USD").get_json()

    resp = client.get("/api/calculations")

    assert resp.status_code == 200
    records = resp.get_json()
    assert [r["id"] for r in records] == [second["id"], first["id"]]
    assert records[0]["currency"] == "USD"
    assert records[0]["result"]["monthsSupported"] == 166


def test_saved_list_can_be_searched(client: FlaskClient):
    save(client, "accumulation", sip_request())
    swp = save(client, "decumulation", swp_request()).get_json()

    resp = client.get("/api/calculations", query_string={"q": "decum"})

    assert [r["id"] for r in resp.get_json()] == [swp["id"]]


def test_get_and_delete_by_id(client: FlaskClient):
    record = save(client, "accumulation", sip_request()).get_json()

    assert client.get(f"/api/calculations/{record['id']}").get_json() == record

    assert client.delete(f"/api/calculations/{record['id']}").status_code == 204
    assert client.get(f"/api/calculations/{record['id']}").status_code == 404
    missing = client.delete(f"/api/calculations/{record['id']}")
    assert missing.status_code == 404
    assert "detail" in missing.get_json()


def test_clear_removes_everything(client: FlaskClient):
    save(client, "accumulation", sip_request())
    save(client, "decumulation", swp_request())

    assert client.delete("/api/calculations").status_code == 204
    assert client.get("/api/calculations").get_json() == []


def test_save_validates_the_request(client: FlaskClient):
    bad = sip_request()
    bad["monthlyAmount"] = 0

    assert save(client, "accumulation", bad).status_code == 422
    assert save(client, "pension", sip_request()).status_code == 422
    assert client.get("/api/calculations").get_json() == []


def test_history_limit_comes_from_settings(tmp_path):
    app = create_app(Settings(database_path=str(tmp_path / "small.db"), history_limit=2))
    with app.test_client() as client:
        ids = [save(client, "accumulation", sip_request()).get_json()["id"] for _ in range(3)]

        records = client.get("/api/calculations").get_json()

    assert [r["id"] for r in records] == [ids[2], ids[1]]


def test_memory_store_can_be_configured():
    app = create_app(Settings(database_path=":memory:"))
    with app.test_client() as client:
        save(client, "decumulation", swp_request())
        assert len(client.get("/api/calculations").get_json()) == 1


def test_unstorable_plans_are_rejected_and_history_survives(client: FlaskClient):
    kept = save(client, "accumulation", sip_request()).get_json()

    runaway_rate = sip_request()
    runaway_rate["annualRatePercent"] = 1e6
    assert save(client, "accumulation", runaway_rate).status_code == 422

    overflowing = sip_request()
    overflowing["monthlyAmount"] = 1e308
    resp = save(client, "accumulation", overflowing)
    assert resp.status_code == 422
    assert "detail" in resp.get_json()

    assert [r["id"] for r in client.get("/api/calculations").get_json()] == [kept["id"]]
    latest = save(client, "decumulation", swp_request()).get_json()
    assert [r["id"] for r in client.get("/api/calculations").get_json()] == [latest["id"], kept["id"]]


def test_save_normalises_and_checks_the_currency(client: FlaskClient):
    resp = save(client, "accumulation", sip_request(), currency="usd")

    assert resp.status_code == 201
    assert resp.get_json()["currency"] == "USD"

    assert save(client, "decumulation", swp_request(), currency="XYZ").status_code == 422
    assert save(client, "decumulation", swp_request(), currency="a" * 500).status_code == 422
    assert len(client.get("/api/calculations").get_json()) == 1
