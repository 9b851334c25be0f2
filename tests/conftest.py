import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SCHEDULER_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db
from main import app
import models  # noqa: F401

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@event.listens_for(engine, "connect")
def _fk_on(dbapi_conn, _):
    dbapi_conn.execute("PRAGMA foreign_keys=ON")


TestingSession = sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture()
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client(db):
    def override_get_db():
        s = TestingSession()
        try:
            yield s
        finally:
            s.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ---------- small builders ----------
@pytest.fixture()
def make_user(client):
    def _make(name="Ravi", email=None, role="PRODUCTION"):
        email = email or f"{name.lower()}@example.com"
        r = client.post("/api/users", json={"name": name, "email": email, "role": role})
        assert r.status_code == 201, r.text
        return r.json()
    return _make


@pytest.fixture()
def make_raw_material(client):
    def _make(name="Clay", quantity=100, unit="kg"):
        r = client.post("/api/raw-materials", json={"name": name, "quantity": quantity, "unit": unit})
        assert r.status_code == 201, r.text
        return r.json()
    return _make


@pytest.fixture()
def make_product(client):
    def _make(name="Ganesha Idol", quantity=0, price=1000):
        r = client.post("/api/products", json={"name": name, "quantity": quantity, "price": price})
        assert r.status_code == 201, r.text
        return r.json()
    return _make


@pytest.fixture()
def make_vendor(client):
    def _make(name="Shree Paints", **extra):
        r = client.post("/api/vendors", json={"name": name, **extra})
        assert r.status_code == 201, r.text
        return r.json()
    return _make
