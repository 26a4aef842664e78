"""Gesture classification providers: factory and public exports."""

from .base import BaseGestureClassifier, GestureEvent
from .replay_provider import ReplayGestureClassifier, load_recording

_PROVIDERS: dict[str, type[BaseGestureClassifier]] = {
    "replay": ReplayGestureClassifier,
}


def register_provider(provider_type: str, provider_cls: type[BaseGestureClassifier]) -> None:
    """Make an external classifier (e.g. a camera model) available by name."""
    _PROVIDERS[provider_type] = provider_cls


def create_classifier(provider_type: str | None = None, **kwargs) -> BaseGestureClassifier:
    """Create a gesture classifier instance."""
    if provider_type is None:
        provider_type = "replay"
    if provider_type not in _PROVIDERS:
        raise ValueError(f"Unknown gesture classification provider: {provider_type}")
    return _PROVIDERS[provider_type](**kwargs)


__all__ = [
    "BaseGestureClassifier",
    "GestureEvent",
    "ReplayGestureClassifier",
    "create_classifier",
    "load_recording",
    "register_provider",
]
