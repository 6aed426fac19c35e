"""Media upload endpoint.

Routes
------
POST /api/upload   multipart ``file`` fields → list of MediaItem
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, File, UploadFile

from skilltree.api.deps import get_settings
from skilltree.config import Settings
from skilltree.uploads import IncomingFile, save_uploads

router = APIRouter()


@router.post("/upload", response_model=list[dict[str, Any]])
async def upload_media(
    file: list[UploadFile] = File(default=[]),
    settings: Settings = Depends(get_settings),
) -> list[dict[str, Any]]:
    """Store the image / video parts of the request; other files are skipped."""
    incoming = [
        IncomingFile(
            filename=upload.filename or "",
            content_type=upload.content_type,
            data=await upload.read(),
        )
        for upload in file
    ]
    items = save_uploads(incoming, settings.upload_dir, settings.upload_url_prefix)
    return [item.to_dict() for item in items]
