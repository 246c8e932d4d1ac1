"""Tests for the Flask application factory."""
from __future__ import annotations

import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from storage import LocalStorage  # noqa: E402
from utils.mailer import LogMailer  # noqa: E402


def test_health_endpoint_returns_ok(client, tmp_path):
    """The health endpoint should respond with an OK payload and create uploads dir."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.get_json() == {"status": "ok"}
    # uploads dir is configured via TestConfig in conftest and created on app init
    assert (tmp_path / "uploads").is_dir()


def test_blueprints_registered(app):
    """Application factory should register every resource blueprint."""
    bps = set(app.blueprints.keys())
    assert {"auth", "password", "users", "posts", "comments", "categories"} <= bps


def test_default_backends_without_mail_server(app):
    assert isinstance(app.extensions["mailer"], LogMailer)
    assert isinstance(app.extensions["image_storage"], LocalStorage)


def test_local_media_is_served(app, client):
    stored = app.extensions["image_storage"].upload(b"png-bytes", "cat.png", "image/png")

    response = client.get(stored.url)

    assert response.status_code == 200
    assert response.data == b"png-bytes"


def test_unknown_route_returns_json_error(client):
    response = client.get("/does-not-exist")

    assert response.status_code == 404
    payload = response.get_json()
    assert payload["success"] is False
    assert payload["error"] == "Not Found"
