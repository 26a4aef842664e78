"""Deposit/pickup logic behind the HTTP routes."""

import logging
from typing import Optional, Tuple, TYPE_CHECKING

from .errors import MissingPayloadError
from .friends import FriendDirectory
from .mailbox import MailboxStore
from .schemas import PickupStatus

if TYPE_CHECKING:
    from image_storage import ImageStorage

logger = logging.getLogger(__name__)

PICKUP_MESSAGES = {
    PickupStatus.DELIVERED: "Image received",
    PickupStatus.NO_ROUTING: "No friend mapping found",
    PickupStatus.NOTHING_PENDING: "No image available from your friend",
}


class TransferService:
    """Brokers one-shot image hand-offs between paired devices.

    Routing is resolved through the friend directory before the mailbox is
    touched; the mailbox itself guarantees that a deposited item is handed out
    at most once.
    """

    def __init__(self, mailbox: MailboxStore, friends: FriendDirectory, storage: "ImageStorage"):
        self.mailbox = mailbox
        self.friends = friends
        self.storage = storage

    def deposit(self, sender_id: str, contents: Optional[bytes], filename: Optional[str] = None) -> str:
        """Store a payload and make it the sender's pending item.

        The payload is opaque; it is stored and handed out byte for byte.

        Raises:
            MissingPayloadError: no bytes were supplied.
            StorageError: the payload could not be written.
        """
        if not contents:
            raise MissingPayloadError()

        image_ref = self.storage.save_image(contents, filename)
        displaced = self.mailbox.deposit(sender_id, image_ref)
        if displaced is not None:
            # Nobody can pick the displaced item up any more
            self.storage.delete_image(displaced)

        logger.info(f"Deposit [{sender_id}] -> {image_ref}")
        return image_ref

    def pickup(self, receiver_id: str) -> Tuple[PickupStatus, Optional[str]]:
        """Take the pending item of the receiver's paired sender, if any."""
        sender_id = self.friends.resolve_sender(receiver_id)
        if sender_id is None:
            logger.debug(f"Pickup [{receiver_id}] has no routing")
            return PickupStatus.NO_ROUTING, None

        image_ref = self.mailbox.take_and_clear(sender_id)
        if image_ref is None:
            logger.debug(f"Pickup [{receiver_id}] nothing pending from {sender_id}")
            return PickupStatus.NOTHING_PENDING, None

        logger.info(f"Pickup [{receiver_id}] <- {image_ref} (from {sender_id})")
        return PickupStatus.DELIVERED, image_ref
