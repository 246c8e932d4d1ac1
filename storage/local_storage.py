"""Local filesystem image storage implementation."""

from __future__ import annotations

import os
import uuid
from pathlib import Path

from werkzeug.utils import secure_filename

from config import Config

from .abstract_storage import AbstractStorage, StorageError, StoredImage


class LocalStorage(AbstractStorage):
    """Persist images under the upload directory and serve them from ``base_url``."""

    def __init__(self, upload_dir: str | None = None, base_url: str | None = None):
        self.base_directory = Path(upload_dir or Config.UPLOAD_DIR)
        self.base_url = (base_url or Config.MEDIA_BASE_URL).rstrip("/")
        os.makedirs(self.base_directory, exist_ok=True)

    def _path_for(self, public_id: str) -> Path:
        safe_name = secure_filename(public_id)
        if not safe_name or safe_name != public_id:
            raise StorageError(f"Invalid image id: {public_id!r}")
        return self.base_directory / safe_name

    def upload(self, data: bytes, filename: str, content_type: str | None = None) -> StoredImage:
        suffix = Path(secure_filename(filename) or "").suffix.lower()
        public_id = f"{uuid.uuid4().hex}{suffix}"
        destination = self._path_for(public_id)
        try:
            with open(destination, "wb") as output:
                output.write(data)
        except OSError as exc:
            raise StorageError(str(exc)) from exc
        return StoredImage(url=f"{self.base_url}/{public_id}", public_id=public_id)

    def delete(self, public_id: str) -> None:
        path = self._path_for(public_id)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(str(exc)) from exc

    def exists(self, public_id: str) -> bool:
        return self._path_for(public_id).exists()
