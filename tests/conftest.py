from __future__ import annotations

import os
import re
from typing import Any, Callable

import pytest
from fastapi.testclient import TestClient


ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "AdminPass123"
DEFAULT_PASSWORD = "SecretPass123"


def pytest_configure() -> None:
    # Ensure the SQLAlchemy engine is created against sqlite for tests.
    os.environ["ORM_DB_URL"] = "sqlite:///./test.db"
    os.environ.pop("DB_URL", None)

    # Ensure local .env cannot leak into tests.
    os.environ["ENVIRONMENT"] = "test"
    os.environ["ADMIN_EMAIL"] = ADMIN_EMAIL
    os.environ["ADMIN_PASSWORD"] = ADMIN_PASSWORD
    os.environ["JWT_SECRET"] = "test-secret"
    os.environ["BCRYPT_ROUNDS"] = "4"
    os.environ["UPLOAD_DIR"] = "./test-uploads"
    os.environ["RESEND_API_KEY"] = ""
    os.environ["GOOGLE_CLIENT_ID"] = ""
    os.environ["GOOGLE_CLIENT_SECRET"] = ""


class FakeStorage:
    """In-memory stand-in for object storage that records every call."""

    def __init__(self) -> None:
        self.files: dict[str, bytes] = {}
        self.deleted: list[str] = []
        self.failing: set[str] = set()
        self._counter = 0

    def upload(self, content: bytes, filename: str, content_type: str | None, folder: str) -> str:
        from jobboard.services.storage import PUBLIC_PREFIX

        self._counter += 1
        url = f"http://testserver{PUBLIC_PREFIX}{folder}/{self._counter}-{filename}"
        self.files[url] = content
        return url

    def delete(self, url: str) -> None:
        from jobboard.services.storage import StorageError

        if url in self.failing:
            raise StorageError(f"simulated failure for {url}")
        self.files.pop(url, None)
        self.deleted.append(url)


class FakeEmailSender:
    def __init__(self) -> None:
        self.sent: list[dict[str, str]] = []
        self.fail = False

    def send(self, to: str, subject: str, html: str) -> None:
        from jobboard.services.email_service import EmailDeliveryError

        if self.fail:
            raise EmailDeliveryError("simulated outage")
        self.sent.append({"to": to, "subject": subject, "html": html})

    def last_otp(self) -> str:
        match = re.search(r"<strong>(\d+)</strong>", self.sent[-1]["html"])
        assert match, "no OTP in the last email"
        return match.group(1)


@pytest.fixture()
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture()
def mailer() -> FakeEmailSender:
    return FakeEmailSender()


@pytest.fixture()
def client(storage: FakeStorage, mailer: FakeEmailSender) -> Any:
    from jobboard.database import Base, engine
    from jobboard.main import create_app
    from jobboard.services.email_service import get_email_sender
    from jobboard.services.storage import get_storage

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    app = create_app()
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_email_sender] = lambda: mailer
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def db_session() -> Any:
    from jobboard.database import SessionLocal

    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def signup(client: TestClient) -> Callable[..., dict[str, Any]]:
    """Register a user and return ``{"user", "token", "headers"}``."""

    def _signup(
        role: str = "jobSeeker",
        email: str | None = None,
        name: str = "Test User",
        password: str = DEFAULT_PASSWORD,
        profile: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "name": name,
            "email": email or f"{role.lower()}-{os.urandom(4).hex()}@example.com",
            "password": password,
            "role": role,
        }
        if profile is not None:
            payload["profile"] = profile
        response = client.post("/auth/signup", json=payload)
        assert response.status_code == 201, response.text
        data = response.json()["data"]
        return {"user": data["user"], "token": data["token"], "headers": bearer(data["token"])}

    return _signup


@pytest.fixture()
def admin(client: TestClient) -> dict[str, Any]:
    response = client.post(
        "/auth/login",
        json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD, "role": "admin"},
    )
    assert response.status_code == 200, response.text
    data = response.json()["data"]
    return {"user": data["user"], "token": data["token"], "headers": bearer(data["token"])}


@pytest.fixture()
def elite_member(client: TestClient, admin: dict[str, Any]) -> dict[str, Any]:
    created = client.post(
        "/elite-team",
        json={"name": "Elite One", "email": "elite@example.com", "password": DEFAULT_PASSWORD},
        headers=admin["headers"],
    )
    assert created.status_code == 201, created.text
    login = client.post(
        "/auth/login",
        json={"email": "elite@example.com", "password": DEFAULT_PASSWORD, "role": "eliteTeam"},
    )
    assert login.status_code == 200, login.text
    data = login.json()["data"]
    return {"user": data["user"], "token": data["token"], "headers": bearer(data["token"])}


@pytest.fixture()
def hoster(signup: Callable[..., dict[str, Any]]) -> dict[str, Any]:
    return signup(
        role="jobHoster",
        email="hoster@example.com",
        name="Hoster",
        profile={
            "companyName": "Acme Corp",
            "companyDescription": "Widgets",
            "companyWebsite": "https://acme.example.com",
            "companyLogo": "http://testserver/uploads/job-files/logos/acme.png",
        },
    )


@pytest.fixture()
def seeker(signup: Callable[..., dict[str, Any]]) -> dict[str, Any]:
    return signup(
        role="jobSeeker",
        email="seeker@example.com",
        name="Seeker",
        profile={
            "phone": "555-0100",
            "skills": ["python", "sql"],
            "resume": "http://testserver/uploads/job-files/resumes/seeker.pdf",
            "preferredLocation": "Bengaluru",
        },
    )


def job_payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "title": "Backend Engineer",
        "description": "Build APIs",
        "location": ["Bengaluru"],
        "category": "IT & Networking",
    }
    payload.update(overrides)
    return payload


@pytest.fixture()
def post_job(client: TestClient) -> Callable[..., dict[str, Any]]:
    def _post(headers: dict[str, str], path: str = "/jobs", **overrides: Any) -> dict[str, Any]:
        response = client.post(path, json=job_payload(**overrides), headers=headers)
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _post
