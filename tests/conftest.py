"""Shared pytest fixtures for all test suites."""

from collections.abc import Callable, Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from docmanager.auth.deps import get_db, get_storage
from docmanager.db.session import Base, configure_sqlite
from docmanager.main import create_app
from docmanager.models.user import Role, User
from docmanager.uploads.storage import FileStorage
from docmanager.users.service import create_user


@pytest.fixture
def engine(tmp_path) -> Generator[Engine, None, None]:
    """File-backed SQLite so every connection in a test sees the same data."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        connect_args={"check_same_thread": False},
    )
    configure_sqlite(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory: sessionmaker) -> Generator[Session, None, None]:
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def storage(tmp_path) -> FileStorage:
    return FileStorage(tmp_path / "uploads")


@pytest.fixture
def app(session_factory: sessionmaker, storage: FileStorage) -> FastAPI:
    app = create_app()

    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_storage] = lambda: storage
    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture
def make_user(db: Session) -> Callable[..., User]:
    """Create an account directly through the service layer."""

    def _make(username: str, password: str = "password123", roles=(Role.USER,), **kwargs) -> User:
        return create_user(
            db,
            username=username,
            email=kwargs.pop("email", f"{username}@example.com"),
            password=password,
            roles=roles,
            **kwargs,
        )

    return _make


@pytest.fixture
def login(client: TestClient) -> Callable[[str, str], dict[str, str]]:
    """Log in and return bearer headers; the auth cookie is dropped so only the header authenticates."""

    def _login(identifier: str, password: str = "password123") -> dict[str, str]:
        resp = client.post("/auth/login", json={"usernameOrEmail": identifier, "password": password})
        assert resp.status_code == 200, resp.text
        client.cookies.clear()
        return {"Authorization": f"Bearer {resp.json()['accessToken']}"}

    return _login


@pytest.fixture
def alice(make_user, login) -> tuple[User, dict[str, str]]:
    user = make_user("alice", first_name="Alice", last_name="Liddell")
    return user, login("alice")


@pytest.fixture
def bob(make_user, login) -> tuple[User, dict[str, str]]:
    user = make_user("bob")
    return user, login("bob")


@pytest.fixture
def admin(make_user, login) -> tuple[User, dict[str, str]]:
    user = make_user("admin", roles=(Role.ADMIN, Role.USER))
    return user, login("admin")
