"""Shared pytest fixtures for the application tests."""

from __future__ import annotations

import sys
from io import BytesIO
from pathlib import Path

import pytest
from flask import Flask
from flask.testing import FlaskClient

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from app import create_app  # noqa: E402
from config import Config  # noqa: E402
from models import db  # noqa: E402
from models.user import User  # noqa: E402
from storage import AbstractStorage, StorageError, StoredImage  # noqa: E402
from utils.mailer import Mailer  # noqa: E402


class _BaseTestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret-key-with-enough-length-for-hs256"
    JWT_SECRET_KEY = "test-jwt-secret-key-with-enough-length-for-hs256"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    PASSWORD_HASH_METHOD = "pbkdf2:sha256:1000"
    RATE_LIMIT = "1000 per minute"
    CLIENT_URL = "https://client.example"
    MAIL_SERVER = None


class RecordingMailer(Mailer):
    """Keeps sent messages in memory; ``fail`` simulates a relay outage."""

    def __init__(self):
        self.sent: list[dict] = []
        self.fail = False

    def send(self, to: str, subject: str, html: str) -> None:
        if self.fail:
            raise OSError("mail relay unavailable")
        self.sent.append({"to": to, "subject": subject, "html": html})


class RecordingStorage(AbstractStorage):
    """In-memory media host recording uploads and deletions."""

    def __init__(self):
        self.images: dict[str, bytes] = {}
        self.deleted: list[str] = []
        self.fail_deletes = False
        self._counter = 0

    def upload(self, data: bytes, filename: str, content_type: str | None = None) -> StoredImage:
        self._counter += 1
        public_id = f"img-{self._counter}"
        self.images[public_id] = data
        return StoredImage(url=f"https://media.example/{public_id}", public_id=public_id)

    def delete(self, public_id: str) -> None:
        self.deleted.append(public_id)
        if self.fail_deletes:
            raise StorageError("media host unavailable")
        self.images.pop(public_id, None)


@pytest.fixture()
def app(tmp_path) -> Flask:
    """Create a Flask application instance for tests."""

    upload_dir = tmp_path / "uploads"

    class TestConfig(_BaseTestConfig):
        UPLOAD_DIR = str(upload_dir)

    application = create_app(TestConfig)

    with application.app_context():
        db.create_all()

    yield application

    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    """Return a test client for the Flask app."""

    return app.test_client()


@pytest.fixture()
def mailer(app: Flask) -> RecordingMailer:
    recorder = RecordingMailer()
    app.extensions["mailer"] = recorder
    return recorder


@pytest.fixture()
def storage(app: Flask) -> RecordingStorage:
    recorder = RecordingStorage()
    app.extensions["image_storage"] = recorder
    return recorder


@pytest.fixture()
def make_user(app: Flask):
    """Persist a user directly and return its id."""

    def _make_user(
        email: str,
        password: str = "Secret1!",
        *,
        username: str | None = None,
        verified: bool = True,
        admin: bool = False,
        blocked: bool = False,
    ) -> int:
        with app.app_context():
            user = User(
                username=username or email.split("@")[0],
                email=email,
                is_account_verified=verified,
                is_admin=admin,
                is_blocked=blocked,
            )
            user.set_password(password)
            db.session.add(user)
            db.session.commit()
            return user.id

    return _make_user


@pytest.fixture()
def login(client: FlaskClient):
    """Log in through the API and return an ``Authorization`` header."""

    def _login(email: str, password: str = "Secret1!") -> dict:
        response = client.post("/auth/login", json={"email": email, "password": password})
        assert response.status_code == 200, response.get_json()
        return {"Authorization": f"Bearer {response.get_json()['token']}"}

    return _login


@pytest.fixture()
def create_post(client: FlaskClient, storage: RecordingStorage):
    """Create a post through the API and return its JSON representation."""

    def _create_post(headers: dict, **fields) -> dict:
        data = {
            "title": fields.get("title", "Hello world"),
            "description": fields.get("description", "A long enough description"),
            "category": fields.get("category", "Tech"),
            "image": (BytesIO(b"fake-image-bytes"), "photo.png", "image/png"),
        }
        response = client.post(
            "/posts", data=data, headers=headers, content_type="multipart/form-data"
        )
        assert response.status_code == 201, response.get_json()
        return response.get_json()["post"]

    return _create_post
