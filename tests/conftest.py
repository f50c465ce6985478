import os
from typing import Generator

# Keep the import-time create_all away from the on-disk default database
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from bazaar.db import Base, get_db
from bazaar.main import app


@pytest.fixture(scope="function")
def db_session() -> Generator:
    # Use in-memory SQLite with a single connection
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


@pytest.fixture(scope="function")
def client(db_session):
    # Override dependency to use the same session
    def override_get_db():
        try:
            yield db_session
        finally:
            pass
    app.dependency_overrides[get_db] = override_get_db
    from fastapi.testclient import TestClient
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def register_and_login(client, email, password="secret", role=None, name="Test User"):
    body = {"name": name, "email": email, "password": password}
    if role is not None:
        body["role"] = role
    r = client.post("/api/register", json=body)
    assert r.status_code == 201, r.text
    r = client.post("/api/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    data = r.json()
    return data["token"], data["user"]


@pytest.fixture
def seller(client):
    return register_and_login(client, "seller@x.com", role="seller", name="Sita Seller")


@pytest.fixture
def buyer(client):
    return register_and_login(client, "buyer@x.com", name="Bina Buyer")
