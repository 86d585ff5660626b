from conftest import balance


def test_add_funds(client, auth_headers):
    r = client.post("/api/wallet/add-funds", headers=auth_headers, json={"amount": 500})
    assert r.status_code == 200
    body = r.json()
    assert body["message"] == "Funds added successfully"
    assert body["new_balance"] == 1500
    assert body["transaction"]["type"] == "CREDIT"
    assert body["transaction"]["total"] == 500
    assert body["transaction"]["method"] == "UPI"
    assert body["transaction"]["description"] == "Funds Added"
    assert body["transaction"]["fees"] is None

    r = client.get("/api/transactions", headers=auth_headers, params={"type": "CREDIT"})
    credits = r.json()["transactions"]
    assert len(credits) == 1
    assert credits[0]["total"] == 500


def test_add_funds_rejects_non_positive_amount(client, auth_headers):
    for amount in (0, -10):
        r = client.post(
            "/api/wallet/add-funds", headers=auth_headers, json={"amount": amount}
        )
        assert r.status_code == 400
    assert balance(client, auth_headers) == 1000


def test_withdraw(client, auth_headers):
    r = client.post(
        "/api/wallet/withdraw",
        headers=auth_headers,
        json={"amount": 250, "description": "Rent"},
    )
    assert r.status_code == 200
    body = r.json()
    assert body["message"] == "Withdrawal processed successfully"
    assert body["new_balance"] == 750
    assert body["transaction"]["type"] == "DEBIT"
    assert body["transaction"]["description"] == "Rent"


def test_withdraw_more_than_balance(client, auth_headers):
    r = client.post("/api/wallet/withdraw", headers=auth_headers, json={"amount": 1000.01})
    assert r.status_code == 400
    assert r.json()["detail"] == "Insufficient balance"
    assert balance(client, auth_headers) == 1000


def test_withdraw_entire_balance(client, auth_headers):
    r = client.post("/api/wallet/withdraw", headers=auth_headers, json={"amount": 1000})
    assert r.status_code == 200
    assert r.json()["new_balance"] == 0


def test_wallet_summary_lists_only_wallet_movements(client, auth_headers):
    client.post("/api/wallet/add-funds", headers=auth_headers, json={"amount": 100})
    client.post(
        "/api/portfolio/buy",
        headers=auth_headers,
        json={"symbol": "TCS", "name": "TCS", "quantity": 1, "price": 10},
    )
    client.post("/api/wallet/withdraw", headers=auth_headers, json={"amount": 40})

    r = client.get("/api/wallet", headers=auth_headers)
    assert r.status_code == 200
    summary = r.json()
    assert summary["balance"] == 1050
    assert summary["currency"] == "INR"
    assert [t["type"] for t in summary["recent_transactions"]] == ["DEBIT", "CREDIT"]
