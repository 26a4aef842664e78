"""Client-side access to the transfer server."""

from .transfer_client import TransferClient, TransferResult, TransportError

__all__ = ["TransferClient", "TransferResult", "TransportError"]
