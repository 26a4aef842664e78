"""Periodic classify loop feeding gesture events to triggers."""

import asyncio
import logging
from typing import List, Optional

import config
from gesture_detection import BaseGestureClassifier, GestureEvent

from .trigger import ActionTrigger

logger = logging.getLogger(__name__)


class GestureStream:
    """Owns the classify -> dispatch -> sleep loop as one cancellable task.

    Classification runs in the default executor so a slow model never blocks
    the triggers' timers. ``stop`` cancels the loop; nothing keeps running
    after the owner goes away.
    """

    def __init__(self, classifier: BaseGestureClassifier, interval: float = config.CLASSIFY_INTERVAL):
        self.classifier = classifier
        self.interval = interval
        self.running = False
        self.latest: Optional[GestureEvent] = None
        self._triggers: List[ActionTrigger] = []
        self._task: Optional[asyncio.Task] = None

    def subscribe(self, trigger: ActionTrigger) -> None:
        self._triggers.append(trigger)

    def unsubscribe(self, trigger: ActionTrigger) -> None:
        if trigger in self._triggers:
            self._triggers.remove(trigger)

    def start(self) -> asyncio.Task:
        if self._task is not None and not self._task.done():
            return self._task
        self.running = True
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.info(f"Gesture stream started ({len(self._triggers)} trigger(s), every {self.interval:.2f}s)")
        return self._task

    async def stop(self) -> None:
        self.running = False
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        self.classifier.close()
        logger.info("Gesture stream stopped")

    async def __aenter__(self) -> "GestureStream":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        while self.running:
            try:
                event = await loop.run_in_executor(None, self.classifier.classify)
            except Exception as e:
                # A classifier hiccup counts as "no event" for this tick
                logger.error(f"Gesture classification failed: {e}", exc_info=True)
                event = None

            self.latest = event
            for trigger in list(self._triggers):
                try:
                    trigger.observe(event)
                except Exception as e:
                    logger.error(f"Gesture dispatch to {trigger!r} failed: {e}", exc_info=True)

            await asyncio.sleep(self.interval)
