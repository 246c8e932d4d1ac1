"""Tests covering registration, login and email verification flows."""

from __future__ import annotations

import re

import pytest
from flask.testing import FlaskClient

from models import db
from models.user import User
from models.verification_token import VerificationToken

LINK_PATTERN = re.compile(r"/verify-email/(\d+)/verify/([0-9a-f]+)")


def _register(client: FlaskClient, email: str = "j1@example.com", password: str = "J1Pass12!"):
    return client.post(
        "/auth/register",
        json={"username": "Jane", "email": email, "password": password},
    )


def _verification_path(mailer) -> str:
    match = LINK_PATTERN.search(mailer.sent[-1]["html"])
    assert match, mailer.sent[-1]["html"]
    return f"/auth/{match.group(1)}/verify/{match.group(2)}"


def test_register_creates_unverified_user_and_sends_link(client, app, mailer):
    response = _register(client)

    assert response.status_code == 201
    payload = response.get_json()
    assert payload["success"] is True
    assert payload["user"]["isAccountVerified"] is False
    assert "password" not in payload["user"]

    assert len(mailer.sent) == 1
    assert mailer.sent[0]["to"] == "j1@example.com"
    assert "https://client.example/verify-email/" in mailer.sent[0]["html"]

    with app.app_context():
        user = User.query.filter_by(email="j1@example.com").one()
        assert user.password_hash != "J1Pass12!"
        assert VerificationToken.query.filter_by(user_id=user.id).count() == 1


@pytest.mark.parametrize("variant", ["J1@Example.com", "  j1@example.com  ", "J1@EXAMPLE.COM"])
def test_register_rejects_duplicate_email_variants(client, mailer, variant):
    assert _register(client).status_code == 201

    response = _register(client, email=variant)

    assert response.status_code == 409
    payload = response.get_json()
    assert payload["success"] is False
    assert payload["message"] == "Email is used before"


@pytest.mark.parametrize(
    "payload, field",
    [
        ({"email": "a@example.com", "password": "Secret1!"}, "username"),
        ({"username": "Jane", "email": "not-an-email", "password": "Secret1!"}, "email"),
        ({"username": "Jane", "email": "a@example.com", "password": "abc"}, "password"),
        ({"username": "Jane", "email": "a@example.com", "password": "NoDigits!"}, "password"),
        ({"username": "Jane", "email": "a@example.com", "password": "NoSymbol1"}, "password"),
    ],
)
def test_register_validation(client, mailer, payload, field):
    response = client.post("/auth/register", json=payload)

    assert response.status_code == 400
    assert field in response.get_json()["errors"]
    assert mailer.sent == []


def test_register_survives_email_failure(client, app, mailer):
    mailer.fail = True

    response = _register(client)

    assert response.status_code == 201
    assert "could not be sent" in response.get_json()["message"]
    with app.app_context():
        assert User.query.filter_by(email="j1@example.com").count() == 1


def test_login_requires_verified_email(client, mailer):
    _register(client)

    response = client.post("/auth/login", json={"email": "j1@example.com", "password": "J1Pass12!"})

    assert response.status_code == 403
    assert response.get_json()["message"] == "Please verify your email first"


@pytest.mark.parametrize(
    "payload, status_code",
    [
        ({"email": "login@example.com"}, 400),
        ({"password": "Secret1!"}, 400),
        ({"email": "login@example.com", "password": "wrong-pass"}, 400),
        ({"email": "missing@example.com", "password": "Secret1!"}, 400),
    ],
)
def test_login_validation(client, make_user, payload, status_code):
    make_user("login@example.com")

    response = client.post("/auth/login", json=payload)

    assert response.status_code == status_code


def test_login_failure_does_not_reveal_which_field_was_wrong(client, make_user):
    make_user("login@example.com")

    wrong_password = client.post(
        "/auth/login", json={"email": "login@example.com", "password": "wrong-pass"}
    )
    unknown_email = client.post(
        "/auth/login", json={"email": "nobody@example.com", "password": "wrong-pass"}
    )

    assert wrong_password.get_json()["message"] == unknown_email.get_json()["message"]
    assert wrong_password.get_json()["message"] == "Invalid email or password"


def test_blocked_check_precedes_verification_check(client, make_user):
    make_user("blocked@example.com", verified=False, blocked=True)

    response = client.post(
        "/auth/login", json={"email": "blocked@example.com", "password": "Secret1!"}
    )

    assert response.status_code == 403
    assert response.get_json()["message"] == "You are blocked"


def test_wrong_password_precedes_account_state(client, make_user):
    make_user("blocked@example.com", verified=False, blocked=True)

    response = client.post(
        "/auth/login", json={"email": "blocked@example.com", "password": "wrong-pass"}
    )

    assert response.status_code == 400


def test_verify_email_consumes_token(client, app, mailer):
    _register(client)
    path = _verification_path(mailer)

    response = client.get(path)
    assert response.status_code == 200

    again = client.get(path)
    assert again.status_code == 400
    assert again.get_json()["message"] == "Email is already verified"

    with app.app_context():
        user = User.query.filter_by(email="j1@example.com").one()
        assert user.is_account_verified is True
        assert VerificationToken.query.filter_by(user_id=user.id).count() == 0


def test_verify_email_rejects_bad_token_and_unknown_user(client, mailer):
    _register(client)
    user_id = _verification_path(mailer).split("/")[2]

    bad_token = client.get(f"/auth/{user_id}/verify/{'0' * 64}")
    unknown_user = client.get(f"/auth/9999/verify/{'0' * 64}")

    assert bad_token.status_code == 400
    assert bad_token.get_json()["message"] == "Invalid or expired token"
    assert unknown_user.status_code == 404


def test_end_to_end_registration_to_category(client, mailer):
    """Register, verify, log in and create a category, then hit a duplicate."""

    assert _register(client).status_code == 201
    assert client.get(_verification_path(mailer)).status_code == 200

    login = client.post("/auth/login", json={"email": "j1@example.com", "password": "J1Pass12!"})
    assert login.status_code == 200
    token = login.get_json()["token"]
    assert login.get_json()["user"]["isAccountVerified"] is True
    headers = {"Authorization": f"Bearer {token}"}

    created = client.post("/categories", json={"title": "Tech"}, headers=headers)
    assert created.status_code == 201
    assert created.get_json()["category"]["title"] == "Tech"

    duplicate = client.post("/categories", json={"title": "tech"}, headers=headers)
    assert duplicate.status_code == 409


def test_registration_never_grants_admin(client, app, mailer):
    response = client.post(
        "/auth/register",
        json={
            "username": "Sneaky",
            "email": "sneaky@example.com",
            "password": "Secret1!",
            "isAdmin": True,
        },
    )

    assert response.status_code == 201
    assert response.get_json()["user"]["isAdmin"] is False
    with app.app_context():
        assert db.session.get(User, response.get_json()["user"]["id"]).is_admin is False


def test_register_race_on_email_is_reported_as_duplicate(client, app, mailer, monkeypatch):
    from services import credentials

    assert _register(client).status_code == 201
    # the pre-insert lookup misses a row committed by a concurrent request
    monkeypatch.setattr(credentials, "email_taken", lambda *args, **kwargs: False)

    response = _register(client)

    assert response.status_code == 409
    assert response.get_json()["message"] == "Email is used before"
    with app.app_context():
        assert User.query.filter_by(email="j1@example.com").count() == 1
