"""HTTP client for the transfer server."""

import logging
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import requests

import config

logger = logging.getLogger(__name__)


class TransportError(Exception):
    """The request could not be completed or its response was unreadable."""


@dataclass
class TransferResult:
    success: bool
    ref: Optional[str] = None
    message: Optional[str] = None


class TransferClient:
    """Blocking client for deposit/pickup; run it in an executor from async code."""

    def __init__(self, api_url: Optional[str] = None, timeout: Optional[float] = None):
        """Initialize the client.

        Args:
            api_url: Server base URL (defaults to env var TRANSFER_API_URL)
            timeout: Per-request timeout in seconds (defaults to REQUEST_TIMEOUT)
        """
        self.api_url = (api_url or config.TRANSFER_API_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else config.REQUEST_TIMEOUT

    def deposit(self, sender_id: str, image_path: str | Path) -> TransferResult:
        """Upload an image file as the sender's pending item."""
        image_path = Path(image_path)
        media_type = mimetypes.guess_type(image_path.name)[0] or "application/octet-stream"
        try:
            with open(image_path, "rb") as f:
                response = requests.post(
                    f"{self.api_url}/transfer/{sender_id}",
                    files={"image": (image_path.name, f, media_type)},
                    timeout=self.timeout,
                )
        except (OSError, requests.RequestException) as e:
            raise TransportError(f"Deposit for {sender_id} failed: {e}") from e
        return self._parse(response)

    def pickup(self, receiver_id: str) -> TransferResult:
        """Ask for the item pending from the receiver's paired sender."""
        try:
            response = requests.get(f"{self.api_url}/transfer/{receiver_id}", timeout=self.timeout)
        except requests.RequestException as e:
            raise TransportError(f"Pickup for {receiver_id} failed: {e}") from e
        return self._parse(response)

    def health(self) -> bool:
        """Return True if the server answers its health check."""
        try:
            response = requests.get(f"{self.api_url}/health", timeout=self.timeout)
            return response.ok and response.json().get("status") == "ok"
        except (requests.RequestException, ValueError) as e:
            logger.debug(f"Health check failed: {e}")
            return False

    def resolve_url(self, ref: str) -> str:
        """Turn a server-relative reference into an absolute URL."""
        if ref.startswith(("http://", "https://")):
            return ref
        return f"{self.api_url}/{ref.lstrip('/')}"

    def download(self, ref: str) -> bytes:
        """Fetch the bytes behind a reference."""
        try:
            response = requests.get(self.resolve_url(ref), timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise TransportError(f"Download of {ref} failed: {e}") from e
        return response.content

    @staticmethod
    def _parse(response: requests.Response) -> TransferResult:
        """Read a ``{success, ref?, message?}`` body; any status code is accepted."""
        try:
            data = response.json()
        except ValueError as e:
            raise TransportError(
                f"Unreadable response ({response.status_code}) from {response.url}"
            ) from e
        if not isinstance(data, dict) or "success" not in data:
            raise TransportError(f"Unexpected response ({response.status_code}): {data!r}")
        return TransferResult(
            success=bool(data["success"]),
            ref=data.get("ref"),
            message=data.get("message"),
        )
