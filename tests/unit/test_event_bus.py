import sys
from dataclasses import dataclass
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from tokenmold.application.services.event_bus import EventBus


@dataclass
class _Ping:
    value: int


class EventBusTests(unittest.TestCase):
    def test_handlers_run_by_priority_then_subscription_order(self) -> None:
        bus = EventBus()
        calls = []
        bus.subscribe(_Ping, lambda event: calls.append("late"), priority=50)
        bus.subscribe(_Ping, lambda event: calls.append("early"), priority=10)
        bus.subscribe(_Ping, lambda event: calls.append("late-second"), priority=50)

        bus.publish(_Ping(1))

        self.assertEqual(["early", "late", "late-second"], calls)

    def test_failing_handler_is_isolated(self) -> None:
        bus = EventBus()
        calls = []

        def _explode(event):
            raise RuntimeError("boom")

        bus.subscribe(_Ping, _explode, priority=1)
        bus.subscribe(_Ping, lambda event: calls.append(event.value), priority=2)

        with self.assertLogs("tokenmold.application.services.event_bus", level="ERROR"):
            bus.publish(_Ping(7))

        self.assertEqual([7], calls)
        errors = bus.last_publish_errors()
        self.assertEqual(1, len(errors))
        self.assertIsInstance(errors[0], RuntimeError)

    def test_unsubscribe_and_publish_returns_event(self) -> None:
        bus = EventBus()
        calls = []

        def _handler(event):
            calls.append(event.value)

        bus.subscribe(_Ping, _handler)
        bus.unsubscribe(_Ping, _handler)
        event = _Ping(3)

        self.assertIs(event, bus.publish(event))
        self.assertEqual([], calls)
        self.assertEqual([], bus.last_publish_errors())


if __name__ == "__main__":
    unittest.main()
