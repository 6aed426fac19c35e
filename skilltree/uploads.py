"""Media upload handling.

Accepted files are written to the upload directory under a fresh UUID name
and described by a :class:`~skilltree.db.models.MediaItem`.  Writes are not
transactional: when a write fails half way through a batch, the files written
before it stay on disk.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from skilltree.db.models import MediaItem
from skilltree.errors import UploadError, ValidationError

logger = logging.getLogger(__name__)


@dataclass
class IncomingFile:
    """One file of a multipart upload, already read into memory."""

    filename: str
    content_type: Optional[str]
    data: bytes


def media_type_for(content_type: Optional[str]) -> Optional[str]:
    """Map a MIME type to ``"img"`` / ``"video"``, or ``None`` if unsupported."""
    mime = (content_type or "").lower()
    if mime.startswith("image/"):
        return "img"
    if mime.startswith("video/"):
        return "video"
    return None


def _stored_name(original: str) -> str:
    suffix = Path(original).suffix.lower()
    return f"{uuid.uuid4()}{suffix}"


def save_uploads(
    files: Iterable[IncomingFile],
    upload_dir: Path,
    url_prefix: str = "/uploads",
) -> list[MediaItem]:
    """Persist the image / video files of a batch and describe them.

    Files are processed sequentially, so the result follows input order.
    Unsupported files are skipped without affecting the others.

    Raises:
        ValidationError: no files were given, or none of them was an image
            or a video.
        UploadError: a file could not be written.
    """
    files = list(files)
    if not files:
        raise ValidationError("No files provided")

    prefix = url_prefix.rstrip("/")
    items: list[MediaItem] = []
    for incoming in files:
        media_type = media_type_for(incoming.content_type)
        if media_type is None:
            logger.info(
                "Skipping upload %r with unsupported type %r",
                incoming.filename, incoming.content_type,
            )
            continue

        name = _stored_name(incoming.filename)
        try:
            upload_dir.mkdir(parents=True, exist_ok=True)
            (upload_dir / name).write_bytes(incoming.data)
        except OSError as exc:
            raise UploadError(f"Could not store {incoming.filename!r}") from exc

        logger.info("Stored upload %r as %s", incoming.filename, name)
        items.append(
            MediaItem(type=media_type, src=f"{prefix}/{name}", alt=incoming.filename)
        )

    if not items:
        raise ValidationError("No valid files uploaded")
    return items
