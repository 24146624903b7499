import bisect
import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Type, TypeVar

E = TypeVar("E")


@dataclass(frozen=True, order=True)
class _Subscription:
    priority: int
    order: int
    handler: Callable[[Any], None] = field(compare=False)


def _handler_name(handler: Callable[[Any], None]) -> str:
    return getattr(handler, "__qualname__", None) or getattr(handler, "__name__", None) or repr(handler)


class EventBus:
    """Synchronous, in-order dispatch of lifecycle events to handlers.

    Handlers run by ascending priority, then subscription order. A failing
    handler is logged and isolated so later handlers still see the event;
    its exception is kept until the next publish.
    """

    def __init__(self) -> None:
        self._subscriptions: Dict[Type[Any], List[_Subscription]] = {}
        self._sequence = itertools.count()
        self._errors: List[Exception] = []
        self._logger = logging.getLogger(__name__)

    def subscribe(self, event_type: Type[E], handler: Callable[[E], None], *, priority: int = 100) -> None:
        bucket = self._subscriptions.setdefault(event_type, [])
        bisect.insort(bucket, _Subscription(int(priority), next(self._sequence), handler))

    def unsubscribe(self, event_type: Type[E], handler: Callable[[E], None]) -> None:
        bucket = self._subscriptions.get(event_type, [])
        self._subscriptions[event_type] = [entry for entry in bucket if entry.handler is not handler]

    def publish(self, event: E) -> E:
        self._errors = []
        for entry in tuple(self._subscriptions.get(type(event), ())):
            try:
                entry.handler(event)
            except Exception as exc:
                self._errors.append(exc)
                self._logger.exception(
                    "Event handler failed and was isolated",
                    extra={
                        "event_type": type(event).__name__,
                        "handler": _handler_name(entry.handler),
                        "priority": entry.priority,
                    },
                )
        return event

    def last_publish_errors(self) -> List[Exception]:
        return list(self._errors)
