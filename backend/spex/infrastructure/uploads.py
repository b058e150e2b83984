"""Local Upload Storage — accepts one profile image and returns its public URL.

Invariants:
    - Only image/jpeg, image/png, image/webp, image/gif are accepted
    - Files larger than max_bytes are rejected before anything touches disk
    - Stored names are server-generated: <epoch-ms>-<8 random chars><ext>
    - Client-supplied filenames only contribute a whitelisted extension
    - Disk writes run in the threadpool, never on the event loop

Design Decisions:
    - Local disk, served by StaticFiles under /uploads (ADR: single-node deployment)
"""

import logging
import os
import re
import time
from pathlib import Path

from fastapi import UploadFile
from fastapi.concurrency import run_in_threadpool

from spex.core.domain_types import new_card_uid
from spex.core.errors import UploadRejectedError

logger = logging.getLogger(__name__)

_IMAGE_TYPE = re.compile(r"^image/(jpeg|jpg|png|webp|gif)$")
_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp", ".gif"}
_EXT_BY_SUBTYPE = {"jpeg": ".jpg", "jpg": ".jpg", "png": ".png", "webp": ".webp", "gif": ".gif"}


class LocalUploadStore:
    """Writes uploads under `directory`, URLs rooted at `<base_url>/uploads/`."""

    def __init__(self, directory: str, base_url: str, max_bytes: int):
        self.directory = Path(directory)
        self.base_url = base_url.rstrip("/")
        self.max_bytes = max_bytes

    def ensure_directory(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)

    async def save(self, file: UploadFile | None) -> str:
        """Validate and persist an image. Returns its public URL."""
        if file is None or not file.filename:
            raise UploadRejectedError("No file uploaded", "NO_FILE")

        match = _IMAGE_TYPE.match(file.content_type or "")
        if not match:
            raise UploadRejectedError(
                "Only jpeg, png, webp and gif images are accepted",
                "INVALID_FILE_TYPE",
            )

        data = await file.read(self.max_bytes + 1)
        if len(data) > self.max_bytes:
            raise UploadRejectedError(
                f"File too large (max {self.max_bytes} bytes)",
                "FILE_TOO_LARGE", 413,
            )

        filename = f"{int(time.time() * 1000)}-{new_card_uid(8)}{self._extension(file, match.group(1))}"
        await run_in_threadpool(self._write, filename, data)
        logger.info(f"Stored upload {filename} ({len(data)} bytes)")
        return f"{self.base_url}/uploads/{filename}"

    @staticmethod
    def _extension(file: UploadFile, subtype: str) -> str:
        ext = os.path.splitext(file.filename or "")[1].lower()
        if ext in _EXTENSIONS:
            return ext
        return _EXT_BY_SUBTYPE[subtype]

    def _write(self, filename: str, data: bytes) -> None:
        self.ensure_directory()
        (self.directory / filename).write_bytes(data)
