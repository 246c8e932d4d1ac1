"""Image hosting backends and the capability used by the services."""

from __future__ import annotations

from flask import Flask, current_app
from werkzeug.datastructures import FileStorage

from utils.errors import UpstreamFailure

from .abstract_storage import AbstractStorage, StorageError, StoredImage
from .local_storage import LocalStorage

__all__ = [
    "AbstractStorage",
    "LocalStorage",
    "StorageError",
    "StoredImage",
    "delete_image",
    "init_image_storage",
    "upload_image",
]


def init_image_storage(app: Flask) -> AbstractStorage:
    """Attach the configured image host to ``app.extensions``."""

    backend = (app.config.get("IMAGE_STORAGE") or "local").lower()
    if backend == "s3":
        from .s3_storage import S3Storage

        storage: AbstractStorage = S3Storage(
            bucket=app.config["S3_BUCKET"],
            region=app.config.get("AWS_REGION", "us-east-1"),
            access_key_id=app.config.get("AWS_ACCESS_KEY_ID"),
            secret_access_key=app.config.get("AWS_SECRET_ACCESS_KEY"),
        )
    elif backend == "local":
        storage = LocalStorage(
            app.config.get("UPLOAD_DIR"), app.config.get("MEDIA_BASE_URL")
        )
    else:
        raise ValueError(f"Unknown IMAGE_STORAGE backend: {backend}")
    app.extensions["image_storage"] = storage
    return storage


def upload_image(file: FileStorage) -> StoredImage:
    """Upload an image, surfacing host errors as ``UpstreamFailure``."""

    storage: AbstractStorage = current_app.extensions["image_storage"]
    try:
        return storage.upload(file.read(), file.filename or "image", file.mimetype)
    except StorageError as exc:
        current_app.logger.error("Image upload failed: %s", exc)
        raise UpstreamFailure("Image upload failed") from exc


def delete_image(public_id: str | None) -> bool:
    """Delete a hosted image; failures are logged and reported as ``False``."""

    if not public_id:
        return False
    storage: AbstractStorage = current_app.extensions["image_storage"]
    try:
        storage.delete(public_id)
    except StorageError as exc:
        current_app.logger.warning("Image deletion failed for %s: %s", public_id, exc)
        return False
    return True
