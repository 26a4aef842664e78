import asyncio
import unittest
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest.mock import create_autospec

from clients import TransferClient, TransferResult, TransportError
from gesture_detection import GestureEvent
from image_storage import ImageStorage
from transfer import FriendDirectory, MailboxStore, PickupStatus, TransferService
from trigger import (
    ActionTrigger,
    Outcome,
    Phase,
    ReceiverRole,
    SenderRole,
    TriggerRole,
)

GRAB = GestureEvent("grab", 0.95)
DROP = GestureEvent("drop", 0.95)


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ScriptedRole(TriggerRole):
    """Role whose network action returns (or raises) scripted results."""

    name = "scripted"

    def __init__(self, label, results, success_delay=0.0):
        super().__init__(client=None, success_delay=success_delay)
        self.trigger_label = label
        self.results = list(results)
        self.calls = 0
        self.precondition = True

    def ready(self) -> bool:
        return self.precondition

    async def perform(self) -> Outcome:
        self.calls += 1
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


async def drain(trigger: ActionTrigger) -> None:
    """Let every task spawned by the trigger (and their follow-ups) finish."""
    for _ in range(20):
        await asyncio.sleep(0)
        tasks = list(trigger._tasks)
        if not tasks:
            return
        await asyncio.gather(*tasks)


class TestActionTrigger(unittest.IsolatedAsyncioTestCase):
    def make_trigger(self, role, cooldown=10.0):
        self.clock = FakeClock()
        trigger = ActionTrigger(role, cooldown=cooldown, retry_delay=0.0, clock=self.clock)
        trigger.arm()
        return trigger

    async def test_burst_of_events_fires_once(self):
        role = ScriptedRole("grab", [Outcome.DELIVERED])
        trigger = self.make_trigger(role)

        for _ in range(30):
            trigger.observe(GRAB)
            self.clock.advance(0.03)
        await drain(trigger)

        self.assertEqual(role.calls, 1)
        self.assertEqual(trigger.fire_count, 1)
        self.assertIs(trigger.phase, Phase.DONE)

    async def test_consumed_sender_ignores_later_gestures(self):
        role = ScriptedRole("grab", [Outcome.DELIVERED])
        trigger = self.make_trigger(role)
        trigger.observe(GRAB)
        await asyncio.wait_for(trigger.wait_done(), timeout=1)

        self.clock.advance(60)
        trigger.observe(GRAB)
        await drain(trigger)
        self.assertEqual(role.calls, 1)

    async def test_empty_pickup_retries_after_cooldown(self):
        role = ScriptedRole("drop", [Outcome.EMPTY, Outcome.DELIVERED])
        trigger = self.make_trigger(role)

        trigger.observe(DROP)
        await drain(trigger)
        self.assertIs(trigger.phase, Phase.LOCKED)
        self.assertFalse(trigger.state.consumed)

        self.clock.advance(5)
        trigger.observe(DROP)
        await drain(trigger)
        self.assertEqual(role.calls, 1)

        self.clock.advance(5)
        trigger.observe(DROP)
        await drain(trigger)
        self.assertEqual(role.calls, 2)
        self.assertIs(trigger.phase, Phase.DONE)

    async def test_transport_failure_releases_lock(self):
        role = ScriptedRole("grab", [TransportError("connection refused"), Outcome.DELIVERED])
        trigger = self.make_trigger(role)

        trigger.observe(GRAB)
        await drain(trigger)
        self.assertFalse(trigger.state.in_flight)
        self.assertFalse(trigger.state.consumed)

        self.clock.advance(10)
        trigger.observe(GRAB)
        await drain(trigger)
        self.assertEqual(role.calls, 2)
        self.assertIs(trigger.phase, Phase.DONE)

    async def test_unexpected_error_is_treated_as_failure(self):
        role = ScriptedRole("grab", [RuntimeError("boom")])
        trigger = self.make_trigger(role)

        with self.assertLogs("trigger.trigger", level="ERROR"):
            trigger.observe(GRAB)
            await drain(trigger)
        self.assertFalse(trigger.state.in_flight)

    async def test_leaving_busy_reevaluates_latest_event(self):
        role = ScriptedRole("drop", [Outcome.EMPTY, Outcome.DELIVERED])
        trigger = self.make_trigger(role, cooldown=0.0)

        trigger.observe(DROP)
        await asyncio.wait_for(trigger.wait_done(), timeout=1)
        self.assertEqual(role.calls, 2)

    async def test_reset_allows_sending_a_new_item(self):
        role = ScriptedRole("grab", [Outcome.DELIVERED, Outcome.DELIVERED])
        trigger = self.make_trigger(role)
        trigger.observe(GRAB)
        await drain(trigger)
        self.assertIs(trigger.phase, Phase.DONE)

        # The grab is still the latest event, so the reset itself fires
        trigger.reset()
        self.assertIs(trigger.phase, Phase.BUSY)
        await drain(trigger)
        self.assertEqual(role.calls, 2)
        self.assertIs(trigger.phase, Phase.DONE)

    async def test_reset_without_gesture_waits(self):
        role = ScriptedRole("grab", [Outcome.DELIVERED, Outcome.DELIVERED])
        trigger = self.make_trigger(role)
        trigger.observe(GRAB)
        await drain(trigger)

        trigger.observe(None)
        trigger.reset()
        self.assertIs(trigger.phase, Phase.IDLE)
        self.assertEqual(role.calls, 1)

    async def test_precondition_blocks_fire(self):
        role = ScriptedRole("grab", [Outcome.DELIVERED])
        role.precondition = False
        trigger = self.make_trigger(role)

        trigger.observe(GRAB)
        await drain(trigger)
        self.assertEqual(role.calls, 0)

    async def test_close_cancels_pending_action(self):
        gate = asyncio.Event()

        class HangingRole(ScriptedRole):
            async def perform(self):
                self.calls += 1
                await gate.wait()
                return Outcome.DELIVERED

        role = HangingRole("grab", [])
        trigger = self.make_trigger(role)
        trigger.observe(GRAB)
        await asyncio.sleep(0)
        self.assertIs(trigger.phase, Phase.BUSY)

        await trigger.close()
        self.assertEqual(trigger._tasks, set())
        self.assertEqual(role.calls, 1)

    async def test_on_change_sees_transitions(self):
        phases = []
        role = ScriptedRole("grab", [Outcome.DELIVERED])
        clock = FakeClock()
        trigger = ActionTrigger(
            role,
            cooldown=10.0,
            retry_delay=0.0,
            clock=clock,
            on_change=lambda t: phases.append(t.phase),
        )
        trigger.arm()
        trigger.observe(GRAB)
        await drain(trigger)

        self.assertEqual(phases[-2:], [Phase.BUSY, Phase.DONE])


class TestRoles(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.client = create_autospec(TransferClient, instance=True)

    async def test_sender_needs_staged_item(self):
        role = SenderRole(self.client, "id1", success_delay=0)
        self.assertFalse(role.ready())
        role.stage("photo.jpg")
        self.assertTrue(role.ready())

    async def test_sender_deposit(self):
        self.client.deposit.return_value = TransferResult(success=True, ref="/uploads/a.jpg")
        role = SenderRole(self.client, "id1", success_delay=0)
        role.stage("photo.jpg")

        self.assertIs(await role.perform(), Outcome.DELIVERED)
        self.client.deposit.assert_called_once_with("id1", Path("photo.jpg"))
        self.assertEqual(role.last_ref, "/uploads/a.jpg")

    async def test_sender_rejected_deposit_is_failure(self):
        self.client.deposit.return_value = TransferResult(success=False, message="No file uploaded")
        role = SenderRole(self.client, "id1", success_delay=0)
        role.stage("photo.jpg")

        self.assertIs(await role.perform(), Outcome.FAILED)

    async def test_receiver_pickup(self):
        self.client.pickup.return_value = TransferResult(success=True, ref="/uploads/a.jpg")
        self.client.resolve_url.return_value = "http://server/uploads/a.jpg"
        role = ReceiverRole(self.client, "id2", success_delay=0)

        self.assertIs(await role.perform(), Outcome.DELIVERED)
        self.assertFalse(role.ready())
        self.assertEqual(role.received_url, "http://server/uploads/a.jpg")

    async def test_receiver_nothing_pending(self):
        self.client.pickup.return_value = TransferResult(
            success=False, message="No image available from your friend"
        )
        role = ReceiverRole(self.client, "id2", success_delay=0)

        self.assertIs(await role.perform(), Outcome.EMPTY)
        self.assertTrue(role.ready())
        self.assertIsNone(role.received_url)


class InProcessClient(TransferClient):
    """TransferClient that talks to a TransferService directly."""

    def __init__(self, service: TransferService):
        super().__init__(api_url="http://transfer.local")
        self.service = service

    def deposit(self, sender_id, image_path):
        image_path = Path(image_path)
        ref = self.service.deposit(sender_id, image_path.read_bytes(), image_path.name)
        return TransferResult(success=True, ref=ref)

    def pickup(self, receiver_id):
        status, ref = self.service.pickup(receiver_id)
        return TransferResult(success=status is PickupStatus.DELIVERED, ref=ref)


class TestHandOff(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.tmp = TemporaryDirectory()
        self.service = TransferService(
            mailbox=MailboxStore(),
            friends=FriendDirectory.from_pairs([("id1", "id2")]),
            storage=ImageStorage(Path(self.tmp.name) / "uploads"),
        )
        self.image_path = Path(self.tmp.name) / "photo.jpg"
        self.image_path.write_bytes(b"\xff\xd8\xff\xe0 staged photo \xff\xd9")

    def tearDown(self):
        self.tmp.cleanup()

    async def test_grab_then_drop(self):
        client = InProcessClient(self.service)
        clock = FakeClock()
        sender_role = SenderRole(client, "id1", success_delay=0)
        receiver_role = ReceiverRole(client, "id2", success_delay=0)
        sender = ActionTrigger(sender_role, retry_delay=0, clock=clock)
        receiver = ActionTrigger(receiver_role, retry_delay=0, clock=clock)
        receiver.arm()

        # Nothing staged yet: the drop finds an empty mailbox and keeps waiting
        receiver.observe(DROP)
        await drain(receiver)
        self.assertIs(receiver.phase, Phase.LOCKED)

        sender_role.stage(self.image_path)
        sender.reset()
        sender.observe(GRAB)
        await asyncio.wait_for(sender.wait_done(), timeout=5)
        self.assertTrue(self.service.mailbox.has_pending("id1"))

        clock.advance(10)
        receiver.observe(DROP)
        await asyncio.wait_for(receiver.wait_done(), timeout=5)

        self.assertEqual(receiver_role.received_ref, sender_role.last_ref)
        self.assertEqual(receiver_role.received_url, f"http://transfer.local{sender_role.last_ref}")
        stored = self.service.storage.get_image_path(receiver_role.received_ref.rsplit("/", 1)[-1])
        self.assertEqual(stored.read_bytes(), self.image_path.read_bytes())
        self.assertFalse(self.service.mailbox.has_pending("id1"))


if __name__ == '__main__':
    unittest.main()
