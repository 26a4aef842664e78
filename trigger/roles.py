"""Sender and receiver roles: trigger label, precondition and network action."""

import asyncio
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import config
from clients import TransferClient

from .state import Outcome

logger = logging.getLogger(__name__)


class TriggerRole(ABC):
    """What one side of the hand-off does when its gesture fires."""

    name: str = ""
    trigger_label: str = ""

    def __init__(self, client: TransferClient, success_delay: float):
        self.client = client
        self.success_delay = success_delay

    @abstractmethod
    def ready(self) -> bool:
        """Role precondition; the trigger never fires while this is False."""
        ...

    @abstractmethod
    async def perform(self) -> Outcome:
        """Run the network action.

        Raises:
            TransportError: the server could not be reached.
        """
        ...


class SenderRole(TriggerRole):
    """Deposits the staged image on a "grab" gesture."""

    name = "sender"
    trigger_label = "grab"

    def __init__(
        self,
        client: TransferClient,
        sender_id: str,
        success_delay: float = config.SENDER_SETTLE_DELAY,
    ):
        super().__init__(client, success_delay)
        self.sender_id = sender_id
        self.staged: Optional[Path] = None
        self.last_ref: Optional[str] = None

    def stage(self, image_path: str | Path) -> None:
        """Select the image to send. Reset the owning trigger afterwards."""
        self.staged = Path(image_path)
        logger.info(f"Sender [{self.sender_id}] staged {self.staged.name}")

    def ready(self) -> bool:
        return self.staged is not None

    async def perform(self) -> Outcome:
        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(None, self.client.deposit, self.sender_id, self.staged)
        if not result.success:
            logger.warning(f"Sender [{self.sender_id}] deposit rejected: {result.message}")
            return Outcome.FAILED
        self.last_ref = result.ref
        return Outcome.DELIVERED


class ReceiverRole(TriggerRole):
    """Picks up the paired sender's item on a "drop" gesture."""

    name = "receiver"
    trigger_label = "drop"

    def __init__(
        self,
        client: TransferClient,
        receiver_id: str,
        success_delay: float = config.RECEIVER_SETTLE_DELAY,
    ):
        super().__init__(client, success_delay)
        self.receiver_id = receiver_id
        self.received_ref: Optional[str] = None

    @property
    def received_url(self) -> Optional[str]:
        if self.received_ref is None:
            return None
        return self.client.resolve_url(self.received_ref)

    def ready(self) -> bool:
        return self.received_ref is None

    async def perform(self) -> Outcome:
        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(None, self.client.pickup, self.receiver_id)
        if result.success and result.ref:
            self.received_ref = result.ref
            return Outcome.DELIVERED
        logger.debug(f"Receiver [{self.receiver_id}] still waiting: {result.message}")
        return Outcome.EMPTY
