import asyncio
from datetime import datetime, timedelta

from jose import jwt

from conftest import PASSWORD, balance, register


def test_register_returns_token_and_starting_balance(client):
    body = register(client)
    assert body["message"] == "User created successfully"
    assert body["token"]
    assert body["user"]["email"] == "asha@gmail.com"
    assert body["user"]["balance"] == 1000
    assert "hashed_password" not in body["user"]

    claims = jwt.get_unverified_claims(body["token"])
    assert claims["sub"] == body["user"]["id"]
    assert claims["email"] == "asha@gmail.com"


def test_register_duplicate_email_is_rejected(client, db):
    register(client)
    r = client.post(
        "/api/auth/register",
        json={"name": "Other", "email": "asha@gmail.com", "password": "other123"},
    )
    assert r.status_code == 400
    assert r.json()["detail"] == "User already exists"

    assert asyncio.run(db["users"].count_documents({})) == 1


def test_register_validation_errors_are_400(client):
    r = client.post("/api/auth/register", json={"name": "Asha", "email": "not-an-email"})
    assert r.status_code == 400


def test_login(client):
    register(client)
    r = client.post(
        "/api/auth/login", json={"email": "asha@gmail.com", "password": PASSWORD}
    )
    assert r.status_code == 200
    body = r.json()
    assert body["message"] == "Login successful"
    assert body["user"]["last_login"] is not None


def test_login_with_wrong_password(client):
    register(client)
    r = client.post(
        "/api/auth/login", json={"email": "asha@gmail.com", "password": "wrong123"}
    )
    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid credentials"


def test_login_unknown_email(client):
    r = client.post(
        "/api/auth/login", json={"email": "nobody@gmail.com", "password": PASSWORD}
    )
    assert r.status_code == 401


def test_account_locks_after_repeated_failures(client):
    register(client)
    for _ in range(5):
        r = client.post(
            "/api/auth/login", json={"email": "asha@gmail.com", "password": "wrong123"}
        )
        assert r.status_code == 401

    r = client.post(
        "/api/auth/login", json={"email": "asha@gmail.com", "password": PASSWORD}
    )
    assert r.status_code == 423


def test_successful_login_resets_failed_attempts(client, db):
    register(client)
    for _ in range(3):
        client.post(
            "/api/auth/login", json={"email": "asha@gmail.com", "password": "wrong123"}
        )
    r = client.post(
        "/api/auth/login", json={"email": "asha@gmail.com", "password": PASSWORD}
    )
    assert r.status_code == 200

    user = asyncio.run(db["users"].find_one({"email": "asha@gmail.com"}))
    assert user["login_attempts"] == 0


def test_missing_token_is_401(client):
    assert client.get("/api/user/profile").status_code == 401


def test_invalid_token_is_403(client):
    r = client.get(
        "/api/user/profile", headers={"Authorization": "Bearer not.a.token"}
    )
    assert r.status_code == 403
    assert r.json()["detail"] == "Invalid token"


def test_token_for_deleted_user_is_401(client, db, auth_headers):
    asyncio.run(db["users"].delete_many({}))
    assert client.get("/api/user/profile", headers=auth_headers).status_code == 401


def test_update_profile_cannot_touch_balance(client, auth_headers):
    r = client.put(
        "/api/user/profile",
        headers=auth_headers,
        json={"name": "Asha K", "profile": {"phone": "9999999999"}, "balance": 1e9},
    )
    assert r.status_code == 200
    body = r.json()
    assert body["name"] == "Asha K"
    assert body["profile"]["phone"] == "9999999999"
    assert balance(client, auth_headers) == 1000


def test_change_password(client, auth_headers):
    r = client.post(
        "/api/user/change-password",
        headers=auth_headers,
        json={"old_password": "wrong123", "new_password": "fresh456"},
    )
    assert r.status_code == 400

    r = client.post(
        "/api/user/change-password",
        headers=auth_headers,
        json={"old_password": PASSWORD, "new_password": "fresh456"},
    )
    assert r.status_code == 200

    r = client.post(
        "/api/auth/login", json={"email": "asha@gmail.com", "password": "fresh456"}
    )
    assert r.status_code == 200


def test_register_email_differing_only_in_case_is_rejected(client, db):
    register(client, email="Asha@Gmail.com")
    r = client.post(
        "/api/auth/register",
        json={"name": "Other", "email": "asha@gmail.com", "password": "other123"},
    )
    assert r.status_code == 400
    assert asyncio.run(db["users"].count_documents({})) == 1


def test_login_ignores_email_case(client):
    body = register(client, email="Asha@Gmail.com")
    assert body["user"]["email"] == "asha@gmail.com"

    r = client.post(
        "/api/auth/login", json={"email": " ASHA@gmail.com", "password": PASSWORD}
    )
    assert r.status_code == 200


def test_account_locks_again_after_lock_expires(client, db):
    register(client)
    wrong = {"email": "asha@gmail.com", "password": "wrong123"}
    for _ in range(5):
        client.post("/api/auth/login", json=wrong)

    asyncio.run(
        db["users"].update_one(
            {"email": "asha@gmail.com"},
            {"$set": {"lock_until": datetime.utcnow() - timedelta(minutes=1)}},
        )
    )

    codes = [client.post("/api/auth/login", json=wrong).status_code for _ in range(5)]
    assert codes == [401] * 5

    user = asyncio.run(db["users"].find_one({"email": "asha@gmail.com"}))
    assert user["login_attempts"] == 5
    assert user["lock_until"] > datetime.utcnow()

    r = client.post(
        "/api/auth/login", json={"email": "asha@gmail.com", "password": PASSWORD}
    )
    assert r.status_code == 423


def test_expired_lock_allows_login_and_clears_lock(client, db):
    register(client)
    for _ in range(5):
        client.post(
            "/api/auth/login", json={"email": "asha@gmail.com", "password": "wrong123"}
        )
    asyncio.run(
        db["users"].update_one(
            {"email": "asha@gmail.com"},
            {"$set": {"lock_until": datetime.utcnow() - timedelta(minutes=1)}},
        )
    )

    r = client.post(
        "/api/auth/login", json={"email": "asha@gmail.com", "password": PASSWORD}
    )
    assert r.status_code == 200

    user = asyncio.run(db["users"].find_one({"email": "asha@gmail.com"}))
    assert user["login_attempts"] == 0
    assert "lock_until" not in user
