"""Run one side of the hand-off from the command line.

Usage:
    python -m clients.main sender --id id1 --image photo.jpg --gestures grab.jsonl
    python -m clients.main receiver --id id2 --gestures drop.jsonl --save received.jpg

Gestures come from a recorded JSON-lines file (see ``gesture_detection``);
a camera model can be plugged in with ``gesture_detection.register_provider``.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import config
from clients import TransferClient, TransportError
from gesture_detection import create_classifier
from trigger import ActionTrigger, GestureStream, Phase, ReceiverRole, SenderRole

logger = logging.getLogger(__name__)


def _log_state(trigger: ActionTrigger) -> None:
    state = trigger.state
    logger.info(
        f"{trigger.role.name}: {trigger.phase.value} "
        f"(in_flight={state.in_flight}, consumed={state.consumed})"
    )


async def run(
    role_name: str,
    user_id: str,
    gestures: str,
    *,
    image: Optional[str] = None,
    save: Optional[str] = None,
    api_url: Optional[str] = None,
    provider: str = "replay",
    loop: bool = False,
    interval: float = config.CLASSIFY_INTERVAL,
) -> bool:
    """Run until the trigger completes or the recorded gestures run out.

    Returns True if the hand-off completed.
    """
    client = TransferClient(api_url)
    if not client.health():
        logger.warning(f"Transfer server not reachable at {client.api_url}; triggers will keep retrying")

    if role_name == "sender":
        role = SenderRole(client, user_id)
        role.stage(image)
    else:
        role = ReceiverRole(client, user_id)

    classifier = create_classifier(provider, path=gestures, loop=loop)
    trigger = ActionTrigger(role, on_change=_log_state)
    stream = GestureStream(classifier, interval=interval)
    stream.subscribe(trigger)

    if role_name == "sender":
        trigger.reset()
    else:
        trigger.arm()

    try:
        async with stream:
            while trigger.phase is not Phase.DONE:
                exhausted = getattr(classifier, "exhausted", False)
                if exhausted and trigger.phase is not Phase.BUSY:
                    logger.info("Recorded gestures exhausted before the hand-off completed")
                    break
                await asyncio.sleep(0.1)
    finally:
        await trigger.close()

    completed = trigger.phase is Phase.DONE
    if completed and isinstance(role, ReceiverRole):
        logger.info(f"Received image: {role.received_url}")
        if save:
            try:
                Path(save).write_bytes(client.download(role.received_ref))
                logger.info(f"Saved to {save}")
            except (TransportError, OSError) as e:
                logger.error(f"Could not save received image: {e}")
    elif completed:
        logger.info(f"Image sent: {role.last_ref}")
    return completed


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Grab & Drop gesture client")
    parser.add_argument("role", choices=["sender", "receiver"])
    parser.add_argument("--id", required=True, help="This device's identity")
    parser.add_argument("--gestures", required=True, help="JSON-lines gesture recording")
    parser.add_argument("--image", help="Image to send (sender only)")
    parser.add_argument("--save", help="Where to write the received image (receiver only)")
    parser.add_argument("--api-url", default=None, help="Transfer server URL")
    parser.add_argument("--provider", default="replay", help="Gesture classifier provider")
    parser.add_argument("--loop", action="store_true", help="Replay the recording forever")
    parser.add_argument("--interval", type=float, default=config.CLASSIFY_INTERVAL)
    args = parser.parse_args(argv)

    if args.role == "sender" and not args.image:
        parser.error("--image is required for the sender")

    logging.basicConfig(level=config.LOG_LEVEL)
    try:
        completed = asyncio.run(run(
            args.role,
            args.id,
            args.gestures,
            image=args.image,
            save=args.save,
            api_url=args.api_url,
            provider=args.provider,
            loop=args.loop,
            interval=args.interval,
        ))
    except KeyboardInterrupt:
        print("\nStopped.")
        return 130
    return 0 if completed else 1


if __name__ == "__main__":
    sys.exit(main())
