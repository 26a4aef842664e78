"""Replays recorded classifications from a JSON-lines file.

Each line is either ``{"gesture": "grab", "confidence": 0.92}`` or ``null``
(no classification available, e.g. during warm-up). Blank lines are skipped.
"""

import json
import logging
from pathlib import Path
from typing import List, Optional

from .base import BaseGestureClassifier, GestureEvent

logger = logging.getLogger(__name__)


def load_recording(path: str | Path) -> List[Optional[GestureEvent]]:
    """Parse a JSON-lines recording into a list of events (None for gaps)."""
    events = []
    with open(path, "r") as f:
        for line_no, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                data = json.loads(line)
                events.append(GestureEvent.from_dict(data) if data is not None else None)
            except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
                raise ValueError(f"{path}:{line_no}: invalid gesture record: {e}") from e
    return events


class ReplayGestureClassifier(BaseGestureClassifier):
    """Classifier that hands out pre-recorded events one call at a time."""

    def __init__(
        self,
        path: str | Path | None = None,
        *,
        events: Optional[List[Optional[GestureEvent]]] = None,
        loop: bool = False,
    ):
        if path is not None:
            events = load_recording(path)
            logger.info(f"Loaded {len(events)} recorded gesture events from {path}")
        self._events = list(events or [])
        self._loop = loop
        self._index = 0

    @property
    def exhausted(self) -> bool:
        return not self._loop and self._index >= len(self._events)

    def classify(self) -> Optional[GestureEvent]:
        if not self._events:
            return None
        if self._index >= len(self._events):
            if not self._loop:
                return None
            self._index = 0
        event = self._events[self._index]
        self._index += 1
        return event
