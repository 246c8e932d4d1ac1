"""Tests for the image hosting backends."""

from __future__ import annotations

from io import BytesIO

import pytest
from botocore.exceptions import ClientError

from storage import LocalStorage, StorageError
from storage.s3_storage import S3Storage


class _FakeS3Client:
    def __init__(self, fail: bool = False):
        self.objects: dict[str, dict] = {}
        self.fail = fail

    def _maybe_fail(self, operation: str) -> None:
        if self.fail:
            raise ClientError({"Error": {"Code": "500", "Message": "boom"}}, operation)

    def put_object(self, Bucket, Key, Body, **kwargs):
        self._maybe_fail("PutObject")
        self.objects[Key] = {"Bucket": Bucket, "Body": Body, **kwargs}

    def delete_object(self, Bucket, Key):
        self._maybe_fail("DeleteObject")
        self.objects.pop(Key, None)


def test_local_storage_round_trip(tmp_path):
    storage = LocalStorage(str(tmp_path), "/media")

    stored = storage.upload(b"bytes", "../../evil name.PNG", "image/png")

    assert stored.public_id.endswith(".png")
    assert "/" not in stored.public_id
    assert stored.url == f"/media/{stored.public_id}"
    assert (tmp_path / stored.public_id).read_bytes() == b"bytes"

    storage.delete(stored.public_id)
    assert storage.exists(stored.public_id) is False
    # deleting twice is harmless
    storage.delete(stored.public_id)


def test_local_storage_rejects_path_traversal(tmp_path):
    storage = LocalStorage(str(tmp_path), "/media")

    with pytest.raises(StorageError):
        storage.delete("../config.py")


def test_s3_storage_uploads_under_prefix():
    client = _FakeS3Client()
    storage = S3Storage("blog-images", "eu-west-1", client=client)

    stored = storage.upload(b"data", "cat.jpg", "image/jpeg")

    assert stored.public_id.startswith("images/")
    assert stored.url == f"https://blog-images.s3.eu-west-1.amazonaws.com/{stored.public_id}"
    assert client.objects[stored.public_id]["ContentType"] == "image/jpeg"

    storage.delete(stored.public_id)
    assert client.objects == {}


def test_s3_errors_become_storage_errors():
    storage = S3Storage("blog-images", "eu-west-1", client=_FakeS3Client(fail=True))

    with pytest.raises(StorageError):
        storage.upload(b"data", "cat.jpg")
    with pytest.raises(StorageError):
        storage.delete("images/missing.jpg")


def test_upload_failure_surfaces_as_bad_gateway(app, client, make_user, login, storage):
    make_user("author@example.com")
    headers = login("author@example.com")

    def _broken_upload(*args, **kwargs):
        raise StorageError("media host unavailable")

    storage.upload = _broken_upload
    response = client.post(
        "/posts",
        data={
            "title": "Hello",
            "description": "A long enough description",
            "category": "Tech",
            "image": (BytesIO(b"img"), "a.png", "image/png"),
        },
        headers=headers,
        content_type="multipart/form-data",
    )

    assert response.status_code == 502
    assert response.get_json()["message"] == "Image upload failed"
