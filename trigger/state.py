"""Gating state machine for gesture-triggered actions.

``transition(state, signal, now, config)`` is the only place the gating state
changes. It returns the new state and the effect the driver has to carry out:

    Idle ──fire──> Busy ──settle──> Idle / Done
      ^                               │
      └──── Locked (cooldown) <───────┘

``Done`` is terminal until the owner resets the trigger (a new item staged).
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple, Union

from gesture_detection import GestureEvent


class Phase(str, Enum):
    IDLE = "idle"
    LOCKED = "locked"
    BUSY = "busy"
    DONE = "done"


class Outcome(str, Enum):
    """Result of a role's network action."""
    DELIVERED = "delivered"  # deposit accepted / item received
    EMPTY = "empty"          # nothing pending or no routing; retry later
    FAILED = "failed"        # transport or server failure


@dataclass(frozen=True)
class TriggerConfig:
    label: str
    confidence_threshold: float = 0.7
    cooldown: float = 10.0
    success_delay: float = 2.0
    empty_delay: float = 2.0
    retry_delay: float = 2.0

    def delay_for(self, outcome: Outcome) -> float:
        if outcome is Outcome.DELIVERED:
            return self.success_delay
        if outcome is Outcome.EMPTY:
            return self.empty_delay
        return self.retry_delay


@dataclass(frozen=True)
class TransferState:
    armed: bool = False
    in_flight: bool = False
    consumed: bool = False
    cooldown_until: float = 0.0
    # Bumped on every reset so late results for a replaced item cannot consume
    generation: int = 0

    def phase(self, now: float) -> Phase:
        if self.in_flight:
            return Phase.BUSY
        if self.consumed:
            return Phase.DONE
        if now < self.cooldown_until:
            return Phase.LOCKED
        return Phase.IDLE


# ---------------------------------------------------------------------------
# Signals
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Observe:
    """A new (possibly missing) classification plus the role precondition."""
    event: Optional[GestureEvent]
    ready: bool


@dataclass(frozen=True)
class Resolved:
    """The network action for ``generation`` finished."""
    outcome: Outcome
    generation: int


@dataclass(frozen=True)
class Settle:
    """Post-response delay elapsed; release the lock."""
    consume: bool
    generation: int


@dataclass(frozen=True)
class Arm:
    pass


@dataclass(frozen=True)
class Disarm:
    pass


@dataclass(frozen=True)
class Reset:
    """The owner replaced the precondition (e.g. staged a new item)."""
    pass


Signal = Union[Observe, Resolved, Settle, Arm, Disarm, Reset]


# ---------------------------------------------------------------------------
# Effects
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class NoEffect:
    pass


@dataclass(frozen=True)
class Fire:
    generation: int


@dataclass(frozen=True)
class ScheduleSettle:
    delay: float
    consume: bool
    generation: int


@dataclass(frozen=True)
class Reevaluate:
    """Check the latest event again against the new state."""
    pass


Effect = Union[NoEffect, Fire, ScheduleSettle, Reevaluate]

NO_EFFECT = NoEffect()


def matches(event: Optional[GestureEvent], config: TriggerConfig) -> bool:
    """True if the event is the trigger label above the confidence threshold."""
    return (
        event is not None
        and event.label == config.label
        and event.confidence > config.confidence_threshold
    )


def transition(
    state: TransferState,
    signal: Signal,
    now: float,
    config: TriggerConfig,
) -> Tuple[TransferState, Effect]:
    """Apply one signal. Pure: no clocks, no I/O."""
    if isinstance(signal, Observe):
        if (
            state.phase(now) is Phase.IDLE
            and state.armed
            and signal.ready
            and matches(signal.event, config)
        ):
            # Cooldown starts at fire time, before the action resolves
            fired = replace(state, in_flight=True, cooldown_until=now + config.cooldown)
            return fired, Fire(generation=state.generation)
        return state, NO_EFFECT

    if isinstance(signal, Resolved):
        if not state.in_flight:
            return state, NO_EFFECT
        consume = signal.outcome is Outcome.DELIVERED and signal.generation == state.generation
        return state, ScheduleSettle(
            delay=config.delay_for(signal.outcome),
            consume=consume,
            generation=signal.generation,
        )

    if isinstance(signal, Settle):
        if not state.in_flight:
            return state, NO_EFFECT
        consumed = state.consumed or (signal.consume and signal.generation == state.generation)
        return replace(state, in_flight=False, consumed=consumed), Reevaluate()

    if isinstance(signal, Arm):
        return replace(state, armed=True), Reevaluate()

    if isinstance(signal, Disarm):
        return replace(state, armed=False), NO_EFFECT

    if isinstance(signal, Reset):
        reset = replace(
            state,
            armed=True,
            consumed=False,
            cooldown_until=0.0,
            generation=state.generation + 1,
        )
        return reset, Reevaluate()

    raise TypeError(f"Unknown trigger signal: {signal!r}")
