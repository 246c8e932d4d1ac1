"""Image hosting abstraction layer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


class StorageError(Exception):
    """Raised by backends when the media host rejects an operation."""


@dataclass(frozen=True)
class StoredImage:
    """Reference to an image kept by the media host."""

    url: str
    public_id: str


class AbstractStorage(ABC):
    """Interface for image hosting backends."""

    @abstractmethod
    def upload(self, data: bytes, filename: str, content_type: str | None = None) -> StoredImage:
        """Persist image bytes and return their public reference."""

    @abstractmethod
    def delete(self, public_id: str) -> None:
        """Remove a stored image. Missing images are not an error."""
