# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Generator, Iterator
from datetime import timedelta
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("DATABASE_URL", "sqlite://")

from groupdeedo.api.v1.dependencies import get_admin_auth_dep
from groupdeedo.core.settings import Settings
from groupdeedo.db.session import Base
from groupdeedo.db.session import get_db as app_get_session
from groupdeedo.db.time import utcnow
from groupdeedo.main import app as fastapi_app
from groupdeedo.models import Post
from groupdeedo.realtime.fanout import FanoutRouter
from groupdeedo.realtime.hub import ChatHub
from groupdeedo.realtime.registry import MembershipRegistry, Participant
from groupdeedo.repositories.post_repo import SqlPostStore
from groupdeedo.schemas.participant import SettingsUpdate
from groupdeedo.services.admin_auth import AdminAuthService

TEST_DB_URL = "sqlite://"
TEST_ADMIN_PASSWORD = "test-admin-password"


class RecordingTransport:
    """Transport double that records every frame it is handed."""

    def __init__(self) -> None:
        self.frames: list[tuple[str, str, Any]] = []
        self.dropping: set[str] = set()
        self.raising: set[str] = set()

    def push(self, connection_id: str, event: str, data: Any) -> bool:
        if connection_id in self.raising:
            raise RuntimeError("socket is gone")
        if connection_id in self.dropping:
            return False
        self.frames.append((connection_id, event, data))
        return True

    def sent_to(self, connection_id: str, event: str | None = None) -> list[Any]:
        return [
            data
            for target, name, data in self.frames
            if target == connection_id and (event is None or name == event)
        ]

    def recipients(self, event: str) -> list[str]:
        return [target for target, name, _ in self.frames if name == event]

    def clear(self) -> None:
        self.frames.clear()


def join(registry: MembershipRegistry, connection_id: str, **settings: Any) -> Participant:
    """Register a connection and apply settings without scheduling snapshots."""
    registry.register(connection_id)
    participant, _ = registry.update(connection_id, SettingsUpdate(**settings))
    assert participant is not None
    return participant


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> Iterator[sessionmaker[Session]]:
    factory = sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    try:
        yield factory
    finally:
        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture()
def db_session(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def store(session_factory: sessionmaker[Session]) -> SqlPostStore:
    return SqlPostStore(session_factory)


@pytest.fixture()
def test_settings() -> Settings:
    """Settings tuned for tests: no snapshot delay, known admin password."""
    return Settings(
        snapshot_delay_seconds=0.0,
        base_url="https://groupdeedo.test",
        admin_password=TEST_ADMIN_PASSWORD,
        geofence_enabled=False,
    )


@pytest.fixture()
def geo_settings(test_settings: Settings) -> Settings:
    return test_settings.model_copy(update={"geofence_enabled": True})


@pytest.fixture()
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture()
def registry() -> MembershipRegistry:
    return MembershipRegistry()


@pytest.fixture()
def router(registry: MembershipRegistry, transport: RecordingTransport) -> FanoutRouter:
    return FanoutRouter(registry, transport)


@pytest.fixture()
def hub(store: SqlPostStore, transport: RecordingTransport, test_settings: Settings) -> ChatHub:
    return ChatHub(store, settings=test_settings, transport=transport)


@pytest.fixture()
def geo_hub(store: SqlPostStore, transport: RecordingTransport, geo_settings: Settings) -> ChatHub:
    return ChatHub(store, settings=geo_settings, transport=transport)


@pytest.fixture()
def admin_auth() -> AdminAuthService:
    return AdminAuthService(TEST_ADMIN_PASSWORD, timedelta(hours=1))


@pytest.fixture()
def app(
    session_factory: sessionmaker[Session],
    admin_auth: AdminAuthService,
) -> Iterator[FastAPI]:
    def _get_session_override() -> Generator[Session, None, None]:
        with session_factory() as session:
            yield session

    fastapi_app.dependency_overrides[app_get_session] = _get_session_override
    fastapi_app.dependency_overrides[get_admin_auth_dep] = lambda: admin_auth
    try:
        yield fastapi_app
    finally:
        fastapi_app.dependency_overrides.pop(app_get_session, None)
        fastapi_app.dependency_overrides.pop(get_admin_auth_dep, None)
        fastapi_app.state.hub = None


@pytest.fixture()
def client(app: FastAPI, hub: ChatHub) -> Iterator[TestClient]:
    """HTTP client whose hub records broadcasts instead of writing to sockets."""
    app.state.hub = hub
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def live_client(
    app: FastAPI, store: SqlPostStore, test_settings: Settings
) -> Iterator[TestClient]:
    """Client whose hub delivers over real WebSocket connections."""
    app.state.hub = ChatHub(store, settings=test_settings)
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def admin_headers(admin_auth: AdminAuthService) -> dict[str, str]:
    token, _ = admin_auth.create_session()
    return {"X-Admin-Token": token}


@pytest.fixture()
def test_post(db_session: Session) -> Iterator[Post]:
    """Create a baseline post in the public channel."""
    post = Post(
        id="11111111-2222-3333-4444-555555555555",
        session_id="author-session",
        display_name="Ann",
        message="Test post content",
        channel="",
        latitude=0.0,
        longitude=0.0,
        timestamp=utcnow(),
    )
    db_session.add(post)
    db_session.commit()
    yield post
