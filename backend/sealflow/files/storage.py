"""File store port and local-directory adapter.

Uploaded attachments are stored as
``{root}/{type}/{yyyy}/{MM}/{dd}/{uuid}.{ext}`` and addressed by the URL
``/api/files/download/{type}/{yyyy}/{MM}/{dd}/{uuid}.{ext}``. Applications
only keep the URL; the store is the single owner of the bytes.
"""

import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional

from ..workflow.clock import Clock, system_clock
from .validation import get_extension, is_safe_segment, is_safe_stored_name

logger = logging.getLogger(__name__)

DOWNLOAD_URL_PREFIX = "/api/files/download"


@dataclass
class StoredFile:
    """Metadata returned after a successful upload.

    Attributes:
        url: Download URL of the stored copy
        filename: Original file name as uploaded
        size: Size in bytes
        content_type: MIME type reported by the client
    """
    url: str
    filename: str
    size: int
    content_type: Optional[str] = None


class FileStorePort(ABC):
    """Port interface for attachment storage."""

    @abstractmethod
    def store(
        self,
        file_type: str,
        filename: str,
        stream: BinaryIO,
        content_type: Optional[str] = None
    ) -> StoredFile:
        """Persist ``stream`` and return where it can be downloaded.

        Raises:
            ValueError: file_type is not a safe folder name
        """

    @abstractmethod
    def resolve(self, file_type: str, year: str, month: str, day: str, name: str) -> Optional[Path]:
        """Return the local path for a download URL, or None if absent/invalid."""


class LocalFileStore(FileStorePort):
    """Stores files under a root directory on the local disk."""

    def __init__(self, root: str, clock: Clock = system_clock):
        self.root = Path(root)
        self.clock = clock

    def store(
        self,
        file_type: str,
        filename: str,
        stream: BinaryIO,
        content_type: Optional[str] = None
    ) -> StoredFile:
        if not is_safe_segment(file_type):
            raise ValueError(f"Invalid file type folder: {file_type!r}")

        date_folder = self.clock.now().strftime("%Y/%m/%d")
        directory = self.root / file_type / date_folder
        directory.mkdir(parents=True, exist_ok=True)

        stored_name = f"{uuid.uuid4()}.{get_extension(filename)}"
        target = directory / stored_name

        size = 0
        with open(target, "wb") as out:
            while True:
                chunk = stream.read(64 * 1024)
                if not chunk:
                    break
                out.write(chunk)
                size += len(chunk)

        url = f"{DOWNLOAD_URL_PREFIX}/{file_type}/{date_folder}/{stored_name}"
        logger.info(
            f"Stored upload {filename} as {url}",
            extra={"size_bytes": size, "content_type": content_type}
        )
        return StoredFile(url=url, filename=filename, size=size, content_type=content_type)

    def resolve(self, file_type: str, year: str, month: str, day: str, name: str) -> Optional[Path]:
        if not all(is_safe_segment(part) for part in (file_type, year, month, day)):
            return None
        if not is_safe_stored_name(name):
            return None

        path = self.root / file_type / year / month / day / name
        if not path.is_file():
            return None
        return path
