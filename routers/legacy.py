"""``/upload`` and ``/drop`` routes kept for older web clients.

Same semantics as ``/transfer``; the reference is returned as ``imagePath``.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from core.deps import get_transfer_service
from transfer import (
    PICKUP_MESSAGES,
    LegacyTransferResponse,
    MissingPayloadError,
    MissingSenderError,
    PickupStatus,
    TransferService,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["legacy"])


@router.post("/upload", response_model=LegacyTransferResponse, response_model_exclude_none=True)
def upload(
    userId: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    service: TransferService = Depends(get_transfer_service),
):
    """Deposit an image for ``userId``."""
    if image is None:
        raise MissingPayloadError()
    if not userId:
        raise MissingSenderError()
    image_ref = service.deposit(userId, image.file.read(), image.filename)
    return LegacyTransferResponse(
        success=True,
        message="Image uploaded successfully",
        imagePath=image_ref,
    )


@router.get("/drop/{receiver_id}", response_model=LegacyTransferResponse, response_model_exclude_none=True)
async def drop(
    receiver_id: str,
    service: TransferService = Depends(get_transfer_service),
):
    """Pick up the item pending for ``receiver_id``."""
    status, image_ref = service.pickup(receiver_id)
    return LegacyTransferResponse(
        success=status is PickupStatus.DELIVERED,
        message=PICKUP_MESSAGES[status],
        imagePath=image_ref,
    )
