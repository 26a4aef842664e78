"""Environment-driven settings for the transfer server and gesture clients."""

import os

import dotenv

dotenv.load_dotenv()

# Server
TRANSFER_HOST = os.getenv("TRANSFER_HOST", "0.0.0.0")
TRANSFER_PORT = int(os.getenv("TRANSFER_PORT", "5000"))
UPLOADS_DIR = os.getenv("UPLOADS_DIR", "data/uploads")
FRIEND_PAIRS = os.getenv("FRIEND_PAIRS", "id1:id2")
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",")
    if origin.strip()
]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Client
TRANSFER_API_URL = os.getenv("TRANSFER_API_URL", "http://localhost:5000")
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "10"))

# Trigger gating
CONFIDENCE_THRESHOLD = float(os.getenv("CONFIDENCE_THRESHOLD", "0.7"))
TRIGGER_COOLDOWN = float(os.getenv("TRIGGER_COOLDOWN", "10"))
SENDER_SETTLE_DELAY = float(os.getenv("SENDER_SETTLE_DELAY", "2"))
RECEIVER_SETTLE_DELAY = float(os.getenv("RECEIVER_SETTLE_DELAY", "1"))
RETRY_DELAY = float(os.getenv("RETRY_DELAY", "2"))
CLASSIFY_INTERVAL = float(os.getenv("CLASSIFY_INTERVAL", "0.1"))


def parse_friend_pairs(raw: str) -> list[tuple[str, str]]:
    """Parse ``"a:b,c:d"`` into ``[("a", "b"), ("c", "d")]``.

    Blank items are skipped; malformed items raise ValueError.
    """
    pairs = []
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        left, sep, right = item.partition(":")
        if not sep or not left.strip() or not right.strip():
            raise ValueError(f"Invalid friend pair: {item!r} (expected 'a:b')")
        pairs.append((left.strip(), right.strip()))
    return pairs
