import asyncio

import pytest
from fastapi.testclient import TestClient

from conftest import balance, register


def buy(client, headers, symbol="TCS", quantity=2, price=100.0, name="Tata Consultancy Services"):
    return client.post(
        "/api/portfolio/buy",
        headers=headers,
        json={"symbol": symbol, "name": name, "quantity": quantity, "price": price},
    )


def sell(client, headers, symbol="TCS", quantity=1, price=100.0):
    return client.post(
        "/api/portfolio/sell",
        headers=headers,
        json={"symbol": symbol, "quantity": quantity, "price": price},
    )


def holdings(client, headers):
    return {h["symbol"]: h for h in client.get("/api/portfolio", headers=headers).json()}


def test_buy_debits_balance_and_creates_holding(client, auth_headers):
    r = buy(client, auth_headers, quantity=2, price=100)
    assert r.status_code == 200
    body = r.json()
    assert body["message"] == "Stock purchased successfully"
    assert body["new_balance"] == 800
    assert body["transaction"]["type"] == "BUY"
    assert body["transaction"]["total"] == 200
    assert body["transaction"]["description"] == "Stock Purchase - TCS"
    assert body["transaction"]["fees"]["total"] > 0

    holding = holdings(client, auth_headers)["TCS"]
    assert holding["quantity"] == 2
    assert holding["avg_price"] == 100
    assert balance(client, auth_headers) == 800


def test_second_buy_averages_price(client, auth_headers):
    buy(client, auth_headers, quantity=2, price=100)
    r = buy(client, auth_headers, quantity=2, price=200)
    assert r.json()["new_balance"] == 400

    holding = holdings(client, auth_headers)["TCS"]
    assert holding["quantity"] == 4
    assert holding["avg_price"] == pytest.approx(150)


def test_symbol_is_upper_cased(client, auth_headers):
    buy(client, auth_headers, symbol="tcs", quantity=1, price=10)
    assert "TCS" in holdings(client, auth_headers)


def test_buy_with_insufficient_balance(client, auth_headers):
    r = buy(client, auth_headers, quantity=11, price=100)
    assert r.status_code == 400
    assert r.json()["detail"] == "Insufficient balance"
    assert balance(client, auth_headers) == 1000
    assert holdings(client, auth_headers) == {}


@pytest.mark.parametrize(
    "payload",
    [
        {"symbol": "TCS", "name": "TCS", "quantity": 0, "price": 100},
        {"symbol": "TCS", "name": "TCS", "quantity": 1, "price": -5},
        {"symbol": "TCS", "quantity": 1, "price": 100},
    ],
)
def test_invalid_buy_requests_are_400(client, auth_headers, payload):
    r = client.post("/api/portfolio/buy", headers=auth_headers, json=payload)
    assert r.status_code == 400


def test_partial_sell_keeps_average_price(client, auth_headers):
    buy(client, auth_headers, quantity=4, price=100)
    r = sell(client, auth_headers, quantity=1, price=120)
    assert r.status_code == 200
    body = r.json()
    assert body["message"] == "Stock sold successfully"
    assert body["new_balance"] == 720
    assert body["transaction"]["type"] == "SELL"
    assert body["transaction"]["name"] == "Tata Consultancy Services"

    holding = holdings(client, auth_headers)["TCS"]
    assert holding["quantity"] == 3
    assert holding["avg_price"] == 100


def test_full_sell_removes_holding(client, auth_headers):
    buy(client, auth_headers, quantity=2, price=100)
    r = sell(client, auth_headers, quantity=2, price=90)
    assert r.status_code == 200
    assert r.json()["new_balance"] == 980
    assert holdings(client, auth_headers) == {}


def test_sell_more_than_held(client, auth_headers):
    buy(client, auth_headers, quantity=1, price=100)
    r = sell(client, auth_headers, quantity=2, price=100)
    assert r.status_code == 400
    assert r.json()["detail"] == "Insufficient shares to sell"
    assert holdings(client, auth_headers)["TCS"]["quantity"] == 1
    assert balance(client, auth_headers) == 900


def test_sell_without_holding(client, auth_headers):
    r = sell(client, auth_headers, symbol="INFY")
    assert r.status_code == 400


def test_holdings_are_per_user(client, auth_headers):
    buy(client, auth_headers, quantity=1, price=100)
    other = register(client, email="ravi@gmail.com", name="Ravi")
    other_headers = {"Authorization": f"Bearer {other['token']}"}
    assert holdings(client, other_headers) == {}


def test_failed_ledger_write_rolls_back_buy(db, monkeypatch):
    from growwsim.main import app
    from growwsim.services import trading

    async def broken_ledger(*args, **kwargs):
        raise RuntimeError("ledger unavailable")

    with TestClient(app, raise_server_exceptions=False) as client:
        headers = {"Authorization": f"Bearer {register(client)['token']}"}
        buy(client, headers, quantity=1, price=100)

        monkeypatch.setattr(trading, "record_transaction", broken_ledger)
        r = buy(client, headers, quantity=2, price=200)
        assert r.status_code == 500
        assert r.json() == {"detail": "Something went wrong!"}

        assert balance(client, headers) == 900
        holding = holdings(client, headers)["TCS"]
        assert holding["quantity"] == 1
        assert holding["avg_price"] == 100

        r = buy(client, headers, symbol="INFY", quantity=1, price=100)
        assert r.status_code == 500
        assert "INFY" not in holdings(client, headers)
        assert balance(client, headers) == 900

    assert asyncio.run(db["transactions"].count_documents({})) == 1


def test_failed_ledger_write_rolls_back_sell(db, monkeypatch):
    from growwsim.main import app
    from growwsim.services import trading

    async def broken_ledger(*args, **kwargs):
        raise RuntimeError("ledger unavailable")

    with TestClient(app, raise_server_exceptions=False) as client:
        headers = {"Authorization": f"Bearer {register(client)['token']}"}
        buy(client, headers, quantity=2, price=100)

        monkeypatch.setattr(trading, "record_transaction", broken_ledger)
        r = sell(client, headers, quantity=2, price=150)
        assert r.status_code == 500

        assert balance(client, headers) == 800
        assert holdings(client, headers)["TCS"]["quantity"] == 2


def test_portfolio_summary(client, auth_headers, stocks):
    buy(client, auth_headers, symbol="ITC", name="ITC Limited", quantity=2, price=400)
    buy(client, auth_headers, symbol="XYZ", name="Unlisted", quantity=1, price=50)

    r = client.get("/api/portfolio/summary", headers=auth_headers)
    assert r.status_code == 200
    summary = r.json()
    assert summary["holdings_count"] == 2

    rows = {h["symbol"]: h for h in summary["holdings"]}
    assert rows["ITC"]["current_price"] == pytest.approx(425.80)
    assert rows["ITC"]["pnl"] == pytest.approx(51.6)
    # unknown stocks are valued at cost
    assert rows["XYZ"]["current_value"] == pytest.approx(50)
    assert rows["XYZ"]["pnl"] == 0
    assert summary["total_invested"] == pytest.approx(850)
    assert summary["total_pnl"] == pytest.approx(51.6)


def test_dashboard_stats(client, auth_headers, stocks):
    buy(client, auth_headers, symbol="ITC", name="ITC Limited", quantity=2, price=400)
    buy(client, auth_headers, symbol="XYZ", name="Unlisted", quantity=1, price=50)
    client.post(
        "/api/watchlist", headers=auth_headers, json={"symbol": "TCS", "name": "TCS"}
    )

    r = client.get("/api/dashboard/stats", headers=auth_headers)
    assert r.status_code == 200
    stats = r.json()
    assert stats["portfolio_value"] == pytest.approx(851.6)
    assert stats["total_investment"] == pytest.approx(800)
    assert stats["total_gain"] == pytest.approx(51.6)
    assert stats["gain_percentage"] == pytest.approx(6.45)
    assert stats["available_balance"] == pytest.approx(150)
    assert stats["total_holdings"] == 2
    assert stats["watchlist_count"] == 1
    assert [t["symbol"] for t in stats["recent_transactions"]] == ["XYZ", "ITC"]


def test_dashboard_with_no_investment(client, auth_headers):
    stats = client.get("/api/dashboard/stats", headers=auth_headers).json()
    assert stats["gain_percentage"] == 0
    assert stats["portfolio_value"] == 0
    assert stats["available_balance"] == 1000
