"""Server-side transfer core: mailbox, friend routing and the gateway service."""

from .errors import (
    MissingPayloadError,
    MissingSenderError,
    StorageError,
    TransferError,
)
from .friends import FriendDirectory
from .mailbox import MailboxStore
from .schemas import LegacyTransferResponse, PickupStatus, TransferResponse
from .service import PICKUP_MESSAGES, TransferService

__all__ = [
    "FriendDirectory",
    "LegacyTransferResponse",
    "MailboxStore",
    "MissingPayloadError",
    "MissingSenderError",
    "PICKUP_MESSAGES",
    "PickupStatus",
    "StorageError",
    "TransferError",
    "TransferResponse",
    "TransferService",
]
