import os

# Settings are read at import time, so configure the environment first
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ADMIN_PIN"] = "2025"
os.environ["ENABLE_AI_CHAT"] = "true"
os.environ["ENABLE_DOCUMENT_UPLOAD"] = "true"

import pytest
from fastapi.testclient import TestClient

from coopledger.db.base import SessionLocal, engine
from coopledger.models import Base
from coopledger.main import app


@pytest.fixture(autouse=True)
def audit_dir(tmp_path, monkeypatch):
    """Keep audit log files out of the project tree."""
    monkeypatch.setattr("coopledger.core.audit.LOGS_DIR", tmp_path / "logs")
    return tmp_path / "logs"


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(client):
    response = client.post("/api/auth/login", json={"pin": "2025"})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}
