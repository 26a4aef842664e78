"""Client-side gesture trigger: gating state machine, roles and event stream."""

from .roles import ReceiverRole, SenderRole, TriggerRole
from .state import (
    Outcome,
    Phase,
    TransferState,
    TriggerConfig,
    transition,
)
from .stream import GestureStream
from .trigger import ActionTrigger

__all__ = [
    "ActionTrigger",
    "GestureStream",
    "Outcome",
    "Phase",
    "ReceiverRole",
    "SenderRole",
    "TransferState",
    "TriggerConfig",
    "TriggerRole",
    "transition",
]
