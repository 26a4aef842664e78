"""Drives the gating state machine for one role on the event loop."""

import asyncio
import logging
import time
from typing import Callable, Optional, Set

import config
from clients import TransportError
from gesture_detection import GestureEvent

from .roles import TriggerRole
from .state import (
    Arm,
    Disarm,
    Effect,
    Fire,
    Observe,
    Outcome,
    Phase,
    Reevaluate,
    Reset,
    Resolved,
    ScheduleSettle,
    Settle,
    Signal,
    TransferState,
    TriggerConfig,
    transition,
)

logger = logging.getLogger(__name__)


class ActionTrigger:
    """Turns a stream of gesture events into at most one safe action at a time.

    Must be used from a running event loop: firing and the post-response
    delays run as tasks owned by the trigger and are cancelled by ``close``.
    """

    def __init__(
        self,
        role: TriggerRole,
        *,
        confidence_threshold: float = config.CONFIDENCE_THRESHOLD,
        cooldown: float = config.TRIGGER_COOLDOWN,
        retry_delay: float = config.RETRY_DELAY,
        clock: Callable[[], float] = time.monotonic,
        on_change: Optional[Callable[["ActionTrigger"], None]] = None,
    ):
        self.role = role
        self.config = TriggerConfig(
            label=role.trigger_label,
            confidence_threshold=confidence_threshold,
            cooldown=cooldown,
            success_delay=role.success_delay,
            empty_delay=retry_delay,
            retry_delay=retry_delay,
        )
        self.state = TransferState()
        self.fire_count = 0
        self._clock = clock
        self._on_change = on_change
        self._latest: Optional[GestureEvent] = None
        self._tasks: Set[asyncio.Task] = set()
        self._done = asyncio.Event()

    @property
    def phase(self) -> Phase:
        return self.state.phase(self._clock())

    def arm(self) -> None:
        """Attach the trigger once the role precondition can be satisfied."""
        self._apply(Arm())

    def disarm(self) -> None:
        self._apply(Disarm())

    def reset(self) -> None:
        """Allow a fresh fire after the owner replaced its item."""
        self._apply(Reset())

    def observe(self, event: Optional[GestureEvent]) -> None:
        """Feed the latest classification (None while unavailable)."""
        self._latest = event
        self._apply(Observe(event=event, ready=self.role.ready()))

    async def wait_done(self) -> None:
        """Block until the trigger reaches its terminal state."""
        await self._done.wait()

    async def close(self) -> None:
        """Cancel in-flight actions and pending delays."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()

    # ----- internals -----

    def _apply(self, signal: Signal) -> None:
        previous = self.state
        self.state, effect = transition(self.state, signal, self._clock(), self.config)

        if self.state.consumed:
            self._done.set()
        else:
            self._done.clear()

        if self.state != previous and self._on_change is not None:
            self._on_change(self)
        self._run_effect(effect)

    def _run_effect(self, effect: Effect) -> None:
        if isinstance(effect, Fire):
            self.fire_count += 1
            logger.info(f"{self.role.name} trigger fired ({self.config.label}, generation {effect.generation})")
            self._spawn(self._fire(effect.generation))
        elif isinstance(effect, ScheduleSettle):
            self._spawn(self._settle_later(effect))
        elif isinstance(effect, Reevaluate):
            self._apply(Observe(event=self._latest, ready=self.role.ready()))

    def _spawn(self, coro) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _fire(self, generation: int) -> None:
        try:
            outcome = await self.role.perform()
        except TransportError as e:
            logger.warning(f"{self.role.name} action failed, retrying after backoff: {e}")
            outcome = Outcome.FAILED
        except Exception as e:
            logger.error(f"{self.role.name} action raised: {e}", exc_info=True)
            outcome = Outcome.FAILED
        logger.info(f"{self.role.name} action resolved: {outcome.value}")
        self._apply(Resolved(outcome=outcome, generation=generation))

    async def _settle_later(self, effect: ScheduleSettle) -> None:
        await asyncio.sleep(effect.delay)
        self._apply(Settle(consume=effect.consume, generation=effect.generation))
