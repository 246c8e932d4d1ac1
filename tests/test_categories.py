"""Tests for categories."""

from __future__ import annotations


def test_category_crud(client, make_user, login):
    creator_id = make_user("creator@example.com")
    headers = login("creator@example.com")

    created = client.post("/categories", json={"title": "  Travel  "}, headers=headers)
    assert created.status_code == 201
    category = created.get_json()["category"]
    assert category["title"] == "Travel"
    assert category["user"]["id"] == creator_id

    fetched = client.get(f"/categories/{category['id']}")
    assert fetched.get_json()["category"]["title"] == "Travel"

    renamed = client.put(
        f"/categories/{category['id']}", json={"title": "Journeys"}, headers=headers
    )
    assert renamed.status_code == 200
    assert renamed.get_json()["category"]["title"] == "Journeys"

    removed = client.delete(f"/categories/{category['id']}", headers=headers)
    assert removed.status_code == 200
    assert client.get(f"/categories/{category['id']}").status_code == 404


def test_category_titles_are_unique(client, make_user, login):
    make_user("creator@example.com")
    headers = login("creator@example.com")
    client.post("/categories", json={"title": "Tech"}, headers=headers)
    other = client.post("/categories", json={"title": "Food"}, headers=headers).get_json()

    duplicate = client.post("/categories", json={"title": "TECH"}, headers=headers)
    rename_clash = client.put(
        f"/categories/{other['category']['id']}", json={"title": "tech"}, headers=headers
    )
    rename_same = client.put(
        f"/categories/{other['category']['id']}", json={"title": "Food"}, headers=headers
    )

    assert duplicate.status_code == 409
    assert rename_clash.status_code == 409
    assert rename_same.status_code == 200


def test_category_permissions(client, make_user, login):
    make_user("creator@example.com")
    make_user("stranger@example.com")
    make_user("boss@example.com", admin=True)
    category = client.post(
        "/categories", json={"title": "Music"}, headers=login("creator@example.com")
    ).get_json()["category"]

    assert client.post("/categories", json={"title": "Anon"}).status_code == 401
    assert (
        client.delete(
            f"/categories/{category['id']}", headers=login("stranger@example.com")
        ).status_code
        == 403
    )
    assert (
        client.delete(f"/categories/{category['id']}", headers=login("boss@example.com")).status_code
        == 200
    )


def test_list_categories(client, make_user, login):
    make_user("creator@example.com")
    headers = login("creator@example.com")
    for title in ("One", "Two", "Three"):
        client.post("/categories", json={"title": title}, headers=headers)

    payload = client.get("/categories").get_json()

    assert payload["totalCount"] == 3
    assert [c["title"] for c in payload["categories"]] == ["Three", "Two", "One"]


def test_category_validation(client, make_user, login):
    make_user("creator@example.com")
    headers = login("creator@example.com")

    blank = client.post("/categories", json={"title": ""}, headers=headers)
    too_long = client.post("/categories", json={"title": "x" * 101}, headers=headers)

    assert blank.status_code == 400
    assert too_long.status_code == 400
    assert "title" in too_long.get_json()["errors"]


def test_category_title_race_is_reported_as_duplicate(client, app, make_user, login, monkeypatch):
    from models.category import Category
    from routes import categories as category_routes

    make_user("creator@example.com")
    headers = login("creator@example.com")
    assert client.post("/categories", json={"title": "Tech"}, headers=headers).status_code == 201
    monkeypatch.setattr(category_routes, "ensure_category_title_free", lambda *args, **kwargs: None)

    response = client.post("/categories", json={"title": "tech"}, headers=headers)

    assert response.status_code == 409
    assert response.get_json()["message"] == "Category title already exists"
    with app.app_context():
        assert Category.query.count() == 1
