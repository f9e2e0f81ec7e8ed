"""
In-process publish/subscribe service.

Every hardened view of the bus carries its own :class:`PubSubKey`; the key's
id is the event-origin token the application maps back to a plugin or widget
name. Delivery is synchronous and in subscription order.
"""

from __future__ import annotations

import logging
import uuid
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, DefaultDict, List, Optional

__all__ = ['PubSubKey', 'PubSub', 'HardenedPubSub']

logger = logging.getLogger(__name__)

Handler = Callable[..., Any]


@dataclass(frozen=True)
class PubSubKey:
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def get_id(self) -> str:
        return self.id


@dataclass(frozen=True)
class _Subscription:
    key: PubSubKey
    handler: Handler


class PubSub:
    """The elevated bus; owns the subscriber table shared by every hardened view."""

    def __init__(self) -> None:
        self._key = PubSubKey()
        self._subs: DefaultDict[str, List[_Subscription]] = defaultdict(list)
        self.last_origin: Optional[PubSubKey] = None

    def get_current_pubsub_key(self) -> PubSubKey:
        return self._key

    def get_hardened_instance(self) -> 'HardenedPubSub':
        return HardenedPubSub(self, PubSubKey())

    def subscribe(self, event: str, handler: Handler, *, key: Optional[PubSubKey] = None) -> None:
        self._subs[event].append(_Subscription(key or self._key, handler))

    def unsubscribe(self, event: str, handler: Handler) -> None:
        self._subs[event] = [s for s in self._subs.get(event, []) if s.handler != handler]

    def publish(self, event: str, *args: Any, key: Optional[PubSubKey] = None) -> int:
        """Deliver ``args`` to every subscriber of ``event``; returns the number of handlers called.

        While handlers run, ``last_origin`` holds the publishing key.
        """
        handlers = list(self._subs.get(event, ()))
        logger.debug('PUBLISHING "%s" to %d subscriber(s)', event, len(handlers))
        previous = self.last_origin
        self.last_origin = key or self._key
        try:
            for sub in handlers:
                sub.handler(*args)
        finally:
            self.last_origin = previous
        return len(handlers)

    def destroy(self) -> None:
        self._subs.clear()
        logger.debug('PubSub destroyed')


class HardenedPubSub:
    """Per-component view of the bus that publishes and subscribes under its own key."""

    def __init__(self, bus: PubSub, key: PubSubKey) -> None:
        self._bus = bus
        self._key = key

    def get_current_pubsub_key(self) -> PubSubKey:
        return self._key

    def subscribe(self, event: str, handler: Handler) -> None:
        self._bus.subscribe(event, handler, key=self._key)

    def unsubscribe(self, event: str, handler: Handler) -> None:
        self._bus.unsubscribe(event, handler)

    def publish(self, event: str, *args: Any) -> int:
        return self._bus.publish(event, *args, key=self._key)
