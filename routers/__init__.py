"""API route handlers."""

from .legacy import router as legacy_router
from .transfer import router as transfer_router
from .uploads import router as uploads_router

__all__ = [
    "legacy_router",
    "transfer_router",
    "uploads_router",
]
