"""
Local file storage for uploaded documents. Callers get back an opaque {name, url} reference;
the URL is served by the static mount in main.py.
"""
from __future__ import annotations

import logging
import uuid
from pathlib import Path
from typing import Optional

from config import settings
from services.errors import ValidationError
from utils.case import slugify

logger = logging.getLogger(__name__)

ALLOWED_SUFFIXES = frozenset({".pdf", ".png", ".jpg", ".jpeg", ".webp", ".gif", ".doc", ".docx"})


class LocalFileStorage:
    def __init__(
        self,
        root: Optional[str] = None,
        url_prefix: Optional[str] = None,
        max_bytes: Optional[int] = None,
    ):
        self.root = Path(root or settings.upload_dir)
        self.url_prefix = (url_prefix or settings.upload_url_prefix).rstrip("/")
        self.max_bytes = max_bytes or settings.max_upload_bytes

    def stored_name(self, filename: str) -> str:
        path = Path(filename or "upload")
        suffix = path.suffix.lower()
        if suffix not in ALLOWED_SUFFIXES:
            raise ValidationError(
                f"Unsupported file type '{suffix or 'none'}'",
                {"file": "Allowed: " + ", ".join(sorted(ALLOWED_SUFFIXES))},
            )
        stem = slugify(path.stem) or "file"
        return f"{uuid.uuid4().hex[:12]}-{stem}{suffix}"

    def save(self, filename: str, content: bytes) -> dict[str, str]:
        if not content:
            raise ValidationError("File is empty.", {"file": "Empty upload"})
        if len(content) > self.max_bytes:
            raise ValidationError(
                f"File exceeds {self.max_bytes // (1024 * 1024)} MB limit",
                {"file": "Too large"},
            )
        name = self.stored_name(filename)
        self.root.mkdir(parents=True, exist_ok=True)
        (self.root / name).write_bytes(content)
        logger.info("upload stored name=%s bytes=%d", name, len(content))
        return {"name": filename, "url": f"{self.url_prefix}/{name}"}
