"""FastAPI dependencies for the transfer gateway."""

from fastapi import Request

from transfer import TransferService


def get_transfer_service(request: Request) -> TransferService:
    """Dependency to get the application's transfer service."""
    return request.app.state.transfer_service
