"""Deposit and pickup routes."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile

from core.deps import get_transfer_service
from transfer import (
    PICKUP_MESSAGES,
    MissingPayloadError,
    PickupStatus,
    TransferResponse,
    TransferService,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/transfer", tags=["transfer"])


@router.post("/{sender_id}", response_model=TransferResponse, response_model_exclude_none=True)
def deposit(
    sender_id: str,
    image: Optional[UploadFile] = File(None),
    service: TransferService = Depends(get_transfer_service),
):
    """Stage an image as the sender's single pending item.

    A later deposit for the same sender replaces this one. Declared sync so
    the disk write runs in the threadpool.
    """
    if image is None:
        raise MissingPayloadError()
    image_ref = service.deposit(sender_id, image.file.read(), image.filename)
    return TransferResponse(success=True, ref=image_ref, message="Image uploaded successfully")


@router.get("/{receiver_id}", response_model=TransferResponse, response_model_exclude_none=True)
async def pickup(
    receiver_id: str,
    service: TransferService = Depends(get_transfer_service),
):
    """Take the item pending from the receiver's paired sender.

    Empty results are reported with ``success: false`` and status 200 so the
    caller can keep waiting.
    """
    status, image_ref = service.pickup(receiver_id)
    return TransferResponse(
        success=status is PickupStatus.DELIVERED,
        ref=image_ref,
        message=PICKUP_MESSAGES[status],
    )
