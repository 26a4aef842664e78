"""Response bodies for the transfer endpoints."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel


class PickupStatus(str, Enum):
    """Outcome of a pickup request."""
    DELIVERED = "delivered"
    NO_ROUTING = "no_routing"
    NOTHING_PENDING = "nothing_pending"


class TransferResponse(BaseModel):
    """Body returned by deposit and pickup."""
    success: bool
    ref: Optional[str] = None
    message: Optional[str] = None


class LegacyTransferResponse(BaseModel):
    """Body shape used by the ``/upload`` and ``/drop`` routes."""
    success: bool
    message: Optional[str] = None
    imagePath: Optional[str] = None
