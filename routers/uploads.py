"""Serve deposited images."""

import logging
import mimetypes

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse

from core.deps import get_transfer_service
from image_storage import URL_PREFIX
from transfer import TransferService

logger = logging.getLogger(__name__)

router = APIRouter(prefix=URL_PREFIX, tags=["uploads"])


@router.get("/{filename}")
async def get_upload(
    filename: str,
    service: TransferService = Depends(get_transfer_service),
):
    """Serve a stored payload by file name, typed by its extension."""
    image_path = service.storage.get_image_path(filename)
    if not image_path:
        raise HTTPException(status_code=404, detail="Image not found")

    return FileResponse(
        path=image_path,
        media_type=mimetypes.guess_type(image_path.name)[0] or "application/octet-stream",
        headers={"Cache-Control": "public, max-age=31536000, immutable"}
    )
