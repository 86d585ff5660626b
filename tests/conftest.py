# tests/conftest.py
import asyncio
import os
import random
import tempfile
import uuid

import pytest

# configure before anything imports growwsim.config
os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="growwsim-logs-")
os.environ["SEED_ON_STARTUP"] = "false"
os.environ["MARKET_SIMULATION_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["STARTING_BALANCE"] = "1000"

from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from growwsim import database
from growwsim.seed import seed_database

PASSWORD = "secret123"


@pytest.fixture
def db(monkeypatch):
    mock_db = AsyncMongoMockClient()[f"growwsim-test-{uuid.uuid4().hex[:8]}"]
    monkeypatch.setattr(database, "client", None)
    monkeypatch.setattr(database, "db", mock_db)
    return mock_db


@pytest.fixture
def client(db):
    from growwsim.main import app

    # context manager runs the lifespan, which creates the indexes
    with TestClient(app) as c:
        yield c


@pytest.fixture
def stocks(db):
    asyncio.run(seed_database(db, days=40, rng=random.Random(7)))


def register(client, email="asha@gmail.com", name="Asha", password=PASSWORD):
    r = client.post(
        "/api/auth/register", json={"name": name, "email": email, "password": password}
    )
    assert r.status_code == 201, r.text
    return r.json()


@pytest.fixture
def auth_headers(client):
    token = register(client)["token"]
    return {"Authorization": f"Bearer {token}"}


def balance(client, headers):
    return client.get("/api/user/profile", headers=headers).json()["balance"]
