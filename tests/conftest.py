# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from post_decor.api.v1.dependencies import get_notification_sink_dep
from post_decor.core.security import create_access_token
from post_decor.db.session import Base
from post_decor.db.session import get_db as app_get_session
from post_decor.main import app as fastapi_app
from post_decor.models import Post, PostImage, Sticker, User
from post_decor.services.placement import PlacementEngine

TEST_DB_URL = "sqlite://"

# Identifiers mirror a small real-world layout: user 3 owns post 10, whose
# images 12 and 13 get decorated by users 1 and 2.
PLACER_ID = 1
STRANGER_ID = 2
OWNER_ID = 3
POST_ID = 10
IMAGE_ID = 12
OTHER_IMAGE_ID = 13


class RecordingSink:
    """Notification sink that keeps every message in memory."""

    def __init__(self) -> None:
        self.sent: list[tuple[int, int, str]] = []

    def notify(self, actor_id: int, recipient_id: int, message: str) -> None:
        self.sent.append((actor_id, recipient_id, message))


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _configure_sqlite(dbapi_connection, connection_record) -> None:  # pragma: no cover - driver hook
        # Hand transaction control to SQLAlchemy so SAVEPOINTs behave, and
        # turn on foreign keys so ON DELETE CASCADE is enforced.
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _emit_begin(conn) -> None:  # pragma: no cover - driver hook
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    connection = engine.connect()
    transaction = connection.begin()
    # Commits inside the code under test release a savepoint; the outer
    # transaction is rolled back so every test starts from an empty schema.
    session = Session(
        bind=connection,
        autoflush=False,
        expire_on_commit=False,
        join_transaction_mode="create_savepoint",
    )
    try:
        yield session
    finally:
        session.close()
        if transaction.is_active:
            transaction.rollback()
        connection.close()


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture()
def notifier() -> RecordingSink:
    """Return a sink that records notifications instead of sending them."""
    return RecordingSink()


@pytest.fixture(autouse=True)
def override_dependencies(
    app: FastAPI,
    db_session: Session,
    notifier: RecordingSink,
) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    app.dependency_overrides[get_notification_sink_dep] = lambda: notifier
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)
        app.dependency_overrides.pop(get_notification_sink_dep, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def users(db_session: Session) -> dict[int, User]:
    """Create the placer, an unrelated user and the post owner."""
    created = {
        PLACER_ID: User(id=PLACER_ID, nickname="placer"),
        STRANGER_ID: User(id=STRANGER_ID, nickname="stranger"),
        OWNER_ID: User(id=OWNER_ID, nickname="owner"),
    }
    db_session.add_all(created.values())
    db_session.commit()
    return created


@pytest.fixture()
def post(db_session: Session, users: dict[int, User]) -> Post:
    """Create a post owned by OWNER_ID with two images."""
    post = Post(id=POST_ID, owner_user_id=OWNER_ID, title="Weekend trip")
    db_session.add(post)
    db_session.add_all(
        [
            PostImage(id=IMAGE_ID, post_id=POST_ID, image_url="/img/12.jpg", sort_order=0),
            PostImage(id=OTHER_IMAGE_ID, post_id=POST_ID, image_url="/img/13.jpg", sort_order=1),
        ]
    )
    db_session.commit()
    return post


@pytest.fixture()
def stickers(db_session: Session) -> dict[int, Sticker]:
    """Create two stickers with ids 1 and 2."""
    created = {
        1: Sticker(id=1, name="Sparkles", image_url="/stickers/sparkles.png", category="activities"),
        2: Sticker(id=2, name="Heart", image_url="/stickers/heart.png", category="smileys"),
    }
    db_session.add_all(created.values())
    db_session.commit()
    return created


@pytest.fixture()
def placement(
    db_session: Session,
    post: Post,
    stickers: dict[int, Sticker],
    notifier: RecordingSink,
) -> PlacementEngine:
    """Return a placement engine over a populated database."""
    return PlacementEngine(db_session, notifier=notifier)


@pytest.fixture()
def auth_headers() -> Callable[[int], dict[str, str]]:
    """Return a factory producing bearer headers for a user id."""

    def _headers(user_id: int) -> dict[str, str]:
        token = create_access_token(user_id)
        return {"Authorization": f"Bearer {token}"}

    return _headers
