"""Grab & Drop transfer server."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import config
from image_storage import ImageStorage
from routers import legacy_router, transfer_router, uploads_router
from transfer import FriendDirectory, MailboxStore, TransferError, TransferService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events - runs on startup and shutdown."""
    service: TransferService = app.state.transfer_service
    logger.info(
        f"Transfer server starting up (uploads={service.storage.images_dir}, "
        f"routes={len(service.friends)})"
    )

    yield

    # Pending items are in-memory only and do not survive a restart
    pending = len(service.mailbox)
    if pending:
        logger.info(f"Shutting down with {pending} undelivered item(s)")
    service.mailbox.clear()
    logger.info("Transfer server stopped")


async def transfer_error_handler(request: Request, exc: TransferError):
    """Render gateway failures as ``{"success": false, "message": ...}``."""
    logger.warning(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.message},
    )


def create_app(service: Optional[TransferService] = None) -> FastAPI:
    """Build the FastAPI application around a transfer service."""
    if service is None:
        service = TransferService(
            mailbox=MailboxStore(),
            friends=FriendDirectory.from_pairs(config.parse_friend_pairs(config.FRIEND_PAIRS)),
            storage=ImageStorage(config.UPLOADS_DIR),
        )

    app = FastAPI(
        lifespan=lifespan,
        title="Grab & Drop Transfer API",
        description="One-shot gesture-triggered image hand-off between paired devices",
        version="0.1.0",
        openapi_tags=[
            {"name": "health", "description": "Health check and status endpoints"},
            {"name": "transfer", "description": "Deposit and pickup"},
            {"name": "uploads", "description": "Stored image retrieval"},
            {"name": "legacy", "description": "Original /upload and /drop routes"},
        ]
    )
    app.state.transfer_service = service

    # Configure CORS for the browser clients
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type"],
    )

    app.add_exception_handler(TransferError, transfer_error_handler)

    @app.get("/health", tags=["health"])
    async def health():
        """Health check endpoint."""
        return {"status": "ok", "service": "transfer-hub"}

    app.include_router(transfer_router)
    app.include_router(uploads_router)
    app.include_router(legacy_router)

    return app


if __name__ == "__main__":
    logging.basicConfig(level=config.LOG_LEVEL)
    uvicorn.run(create_app(), host=config.TRANSFER_HOST, port=config.TRANSFER_PORT)
