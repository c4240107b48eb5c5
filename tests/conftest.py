import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

sys.path.append(str(Path(__file__).resolve().parents[1]))

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "x" * 32)

import gstdesk.app.db as app_db  # noqa: E402

app_db.SessionLocal, app_db.engine = app_db.create_test_session()

from gstdesk.app.main import app  # noqa: E402
from gstdesk.app.models import Base  # noqa: E402

SUPPLIER_GSTIN = "27AAPFU0939F1ZV"  # Maharashtra
LOCAL_GSTIN = "27AABCS1429B1ZB"  # Maharashtra
OUTSTATION_GSTIN = "29AABCT1332L1ZD"  # Karnataka


@pytest.fixture(autouse=True)
def _fresh_db():
    Base.metadata.drop_all(bind=app_db.engine)
    Base.metadata.create_all(bind=app_db.engine)
    yield


@pytest.fixture
def db_session():
    session = app_db.SessionLocal()
    try:
        yield session
    finally:
        session.close()


def _login(client: TestClient, email: str = "ca@example.com") -> dict:
    resp = client.post("/api/auth/login", json={"email": email})
    assert resp.status_code == 200
    return resp.json()["data"]


@pytest.fixture
def login():
    return _login


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def auth_client(client):
    _login(client)
    return client


@pytest.fixture
def workspace(auth_client):
    """Client workspace with one local and one out-of-state customer."""

    resp = auth_client.post(
        "/api/clients",
        json={
            "name": "Sharma Traders",
            "gstin": SUPPLIER_GSTIN,
            "address": "12 MG Road, Pune",
        },
    )
    assert resp.status_code == 201
    client_id = resp.json()["data"]["id"]
    local = auth_client.post(
        f"/api/clients/{client_id}/customers",
        json={"name": "Patil Stores", "gstin": LOCAL_GSTIN},
    ).json()["data"]
    outstation = auth_client.post(
        f"/api/clients/{client_id}/customers",
        json={"name": "Bengaluru Tech", "gstin": OUTSTATION_GSTIN},
    ).json()["data"]
    return {
        "client_id": client_id,
        "local_id": local["id"],
        "outstation_id": outstation["id"],
    }
