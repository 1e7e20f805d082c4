from __future__ import annotations

from math import isclose

from flask.testing import FlaskClient


def sip_payload() -> dict:
    return {
        "monthlyAmount": 5000,
        "lumpsumAmount": 0,
        "annualRatePercent": 12,
        "years": 10,
        "stepUpPercent": 0,
    }


def swp_payload() -> dict:
    return {
        "initialAmount": 1000000,
        "monthlyWithdrawal": 10000,
        "annualRatePercent": 8,
        "years": 15,
    }


def test_accumulation_endpoint_returns_result_and_schedule(client: FlaskClient):
    resp = client.post("/api/calc/accumulation", json=sip_payload())

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["totalInvested"] == 600000
    assert isclose(body["maturityAmount"], 1_161_695, abs_tol=1.0)
    assert isclose(body["returns"], body["maturityAmount"] - 600000, abs_tol=1e-6)
    assert body["monthlyInvestment"] == 5000
    assert len(body["schedule"]) == 10
    assert body["schedule"][-1]["value"] == body["maturityAmount"]


def test_accumulation_requires_some_investment(client: FlaskClient):
    payload = sip_payload()
    payload["monthlyAmount"] = 0

    resp = client.post("/api/calc/accumulation", json=payload)

    assert resp.status_code == 422
    messages = [error["msg"] for error in resp.get_json()["detail"]]
    assert any("at least one investment amount" in message for message in messages)


def test_accumulation_rejects_out_of_range_input(client: FlaskClient):
    for field, value in [("years", 0), ("years", 31), ("monthlyAmount", -5), ("stepUpPercent", -1)]:
        payload = sip_payload()
        payload[field] = value

        resp = client.post("/api/calc/accumulation", json=payload)

        assert resp.status_code == 422, field
        assert "detail" in resp.get_json()


def test_accumulation_rejects_unknown_fields(client: FlaskClient):
    payload = sip_payload()
    payload["inflation"] = 6

    resp = client.post("/api/calc/accumulation", json=payload)

    assert resp.status_code == 422


def test_malformed_json_returns_400(client: FlaskClient):
    resp = client.post(
        "/api/calc/accumulation", data="{not json", content_type="application/json"
    )

    assert resp.status_code == 400
    assert "detail" in resp.get_json()


def test_decumulation_endpoint_reports_exhaustion(client: FlaskClient):
    resp = client.post("/api/calc/decumulation", json=swp_payload())

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["monthsSupported"] == 166
    assert body["finalBalance"] == 0
    assert isclose(body["yearsSupported"], 166 / 12)
    assert body["schedule"][-1]["withdrawn"] == body["totalWithdrawn"]


def test_decumulation_requires_positive_amounts(client: FlaskClient):
    payload = swp_payload()
    payload["monthlyWithdrawal"] = 0

    resp = client.post("/api/calc/decumulation", json=payload)

    assert resp.status_code == 422


def test_accumulation_rejects_rates_outside_plus_minus_hundred(client: FlaskClient):
    for rate in (101, -101, 1e6):
        payload = sip_payload()
        payload["annualRatePercent"] = rate

        resp = client.post("/api/calc/accumulation", json=payload)

        assert resp.status_code == 422, rate


def test_accumulation_overflow_is_422_not_infinity(client: FlaskClient):
    payload = sip_payload()
    payload["monthlyAmount"] = 1e308

    resp = client.post("/api/calc/accumulation", json=payload)

    assert resp.status_code == 422
    assert resp.is_json
    assert "finite" in resp.get_json()["detail"]
    assert b"Infinity" not in resp.data


def test_decumulation_overflow_is_422_not_infinity(client: FlaskClient):
    payload = {
        "initialAmount": 1e308,
        "monthlyWithdrawal": 1,
        "annualRatePercent": 100,
        "years": 30,
    }

    resp = client.post("/api/calc/decumulation", json=payload)

    assert resp.status_code == 422
    assert "detail" in resp.get_json()
    assert b"Infinity" not in resp.data


def test_decumulation_rejects_rates_outside_plus_minus_hundred(client: FlaskClient):
    payload = swp_payload()
    payload["annualRatePercent"] = 101

    assert client.post("/api/calc/decumulation", json=payload).status_code == 422
