"""Abstract base class for gesture classification providers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class GestureEvent:
    """One classification result: a label and its confidence in [0, 1]."""
    label: str
    confidence: float

    @classmethod
    def from_dict(cls, data: dict) -> "GestureEvent":
        """Build from a ``{"gesture": str, "confidence": float}`` dict."""
        return cls(label=str(data["gesture"]), confidence=float(data["confidence"]))


class BaseGestureClassifier(ABC):
    """Abstract base for anything that yields the latest gesture classification."""

    @abstractmethod
    def classify(self) -> Optional[GestureEvent]:
        """Return the latest classification.

        Returns:
            The current GestureEvent, or None while the model is warming up or
            nothing was recognised.
        """
        ...

    def close(self) -> None:
        """Release any resources held by the provider."""
