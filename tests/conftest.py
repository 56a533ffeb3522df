import os
from typing import Callable, Generator

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("RATE_LIMITING_ENABLED", "false")
os.environ.setdefault("DEFAULT_WARDEN_PASSWORD", "warden123")

from common.config import reset_settings_cache  # noqa: E402

reset_settings_cache()

from common.database import Base, SessionLocal, engine  # noqa: E402
from common.seed import initialize_data  # noqa: E402
from services.approvals.app import app as approvals_app  # noqa: E402
from services.rooms.app import app as rooms_app  # noqa: E402
from services.rooms.app import menu_cache  # noqa: E402
from services.users.app import app as users_app  # noqa: E402

WARDEN_PASSWORD = "warden123"


@pytest.fixture(autouse=True, scope="function")
def _create_test_database() -> Generator[None, None, None]:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    menu_cache.clear()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db_session() -> Generator:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def seeded(db_session) -> None:
    initialize_data(db_session)


@pytest.fixture()
def users_client() -> Generator[TestClient, None, None]:
    with TestClient(users_app) as client:
        yield client


@pytest.fixture()
def rooms_client() -> Generator[TestClient, None, None]:
    with TestClient(rooms_app) as client:
        yield client


@pytest.fixture()
def approvals_client() -> Generator[TestClient, None, None]:
    with TestClient(approvals_app) as client:
        yield client


def auth_header(users_client: TestClient, username: str, password: str) -> dict[str, str]:
    response = users_client.post("/api/login", json={"username": username, "password": password})
    token = response.json()["token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def warden_headers(seeded, users_client) -> dict[str, str]:
    return auth_header(users_client, "warden", WARDEN_PASSWORD)


@pytest.fixture()
def create_student(users_client, warden_headers) -> Callable[..., dict]:
    """Create a student through the API and return its id, credentials and auth header."""

    def _create(roll_no: str, full_name: str = "Test Student", **extra) -> dict:
        response = users_client.post(
            "/api/warden/create-student",
            json={"roll_no": roll_no, "full_name": full_name, **extra},
            headers=warden_headers,
        )
        assert response.status_code == 201, response.text
        body = response.json()
        credentials = body["credentials"]
        return {
            "id": body["student"]["id"],
            "credentials": credentials,
            "headers": auth_header(users_client, credentials["username"], credentials["password"]),
        }

    return _create
