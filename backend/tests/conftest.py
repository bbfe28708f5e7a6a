import os
import tempfile

# 在导入 app 之前指定测试配置，避免写入本地数据库文件
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_FILE", os.path.join(tempfile.gettempdir(), "nfc-card-tests", "app.log"))
os.environ.setdefault("ADMIN_EMAILS", "admin@example.com")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.db import Base, get_db
from app.main import app
from app.services import user_service


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def make_client(session_factory):
    """同一数据库上的多个独立客户端（各自持有会话 Cookie）"""
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    clients = []

    def _make():
        c = TestClient(app)
        clients.append(c)
        return c

    yield _make
    for c in clients:
        c.close()
    app.dependency_overrides.clear()


def login(client: TestClient, username: str, email: str = None) -> dict:
    payload = {"username": username}
    if email is not None:
        payload["email"] = email
    resp = client.post("/api/auth/login", json=payload)
    assert resp.status_code == 200, resp.text
    return resp.json()


@pytest.fixture()
def user_client(client):
    login(client, "alice", "alice@example.com")
    return client


@pytest.fixture()
def admin_client(make_client):
    c = make_client()
    login(c, "root", "admin@example.com")
    return c


@pytest.fixture()
def alice(db):
    return user_service.upsert_user(db, "alice", "alice@example.com")


@pytest.fixture()
def bob(db):
    return user_service.upsert_user(db, "bob", "bob@example.com")
