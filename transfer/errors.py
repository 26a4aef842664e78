"""Gateway error types rendered as ``{"success": false, "message": ...}``."""


class TransferError(Exception):
    """Base class for deposit/pickup failures reported to the client."""

    status_code = 500
    default_message = "Transfer failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class MissingPayloadError(TransferError):
    """Deposit arrived without an attached image."""

    status_code = 400
    default_message = "No file uploaded"


class MissingSenderError(TransferError):
    """Legacy upload arrived without a ``userId``."""

    status_code = 400
    default_message = "Missing userId"


class StorageError(TransferError):
    """Writing the payload to storage failed."""

    status_code = 500
    default_message = "Upload failed"
