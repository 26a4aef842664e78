"""Single-slot mailbox: at most one pending image reference per sender."""

import logging
import threading
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class MailboxStore:
    """In-memory sender -> image reference table.

    All access goes through one lock, so ``take_and_clear`` is atomic with
    respect to every other caller, including concurrent pickups for the same
    sender.
    """

    def __init__(self):
        self._entries: Dict[str, str] = {}
        self._lock = threading.Lock()

    def deposit(self, sender_id: str, image_ref: str) -> Optional[str]:
        """Set or overwrite the pending item for a sender.

        Returns:
            The reference that was displaced, or None if the slot was empty.
        """
        with self._lock:
            previous = self._entries.get(sender_id)
            self._entries[sender_id] = image_ref
        if previous is not None:
            logger.info(f"Mailbox [{sender_id}] overwrote pending item {previous}")
        return previous

    def take_and_clear(self, sender_id: str) -> Optional[str]:
        """Remove and return the pending item for a sender, if any."""
        with self._lock:
            return self._entries.pop(sender_id, None)

    def has_pending(self, sender_id: str) -> bool:
        with self._lock:
            return sender_id in self._entries

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
