from __future__ import annotations

import logging
from typing import Any, Dict, ItemsView, Optional

from bootstrap.exceptions import BarbarianRegistryInconsistencyError
from core.container import Container
from core.lifecycle import DiagnosticSink

__all__ = ['BarbarianRegistry', 'DEFAULT_PUBSUB_SERVICE']

logger = logging.getLogger(__name__)

DEFAULT_PUBSUB_SERVICE = 'PubSub'


class BarbarianRegistry:
    """
    Event-origin token -> ``"category:name"`` for plugins and widgets.

    The token is the id of the PubSub key a barbarian was wired with, so an
    event can be traced back to the component that published it. Entries
    live for the whole session.
    """

    def __init__(self, pubsub_service: str = DEFAULT_PUBSUB_SERVICE, sink: Optional[DiagnosticSink] = None) -> None:
        self.pubsub_service = pubsub_service
        self._entries: Dict[str, str] = {}
        self._log = sink or logger

    def token_for(self, hive_view: Any) -> str:
        """Ask the view's PubSub for the id of its current key."""
        pubsub = hive_view.get_service(self.pubsub_service)
        if pubsub is None:
            raise LookupError(f"Hive view has no '{self.pubsub_service}' service")
        return pubsub.get_current_pubsub_key().get_id()

    def record(self, token: str, category: str, name: str) -> str:
        qualified = f'{category}:{name}'
        previous = self._entries.get(token)
        if previous is not None and previous != qualified:
            self._log.warning("Token %s was registered to '%s', now '%s'", token, previous, qualified)
        self._entries[token] = qualified
        self._log.debug('barbarian registry: %s -> %s', token, qualified)
        return qualified

    def qualified_name(self, token: str) -> Optional[str]:
        return self._entries.get(token)

    def lookup(self, token: str, plugins: Container, widgets: Container) -> Any:
        qualified = self.qualified_name(token)
        if qualified is None:
            return None
        category, _, name = qualified.partition(':')
        container = widgets if category == 'widget' else plugins
        if container.has(name):
            return container.get(name)
        raise BarbarianRegistryInconsistencyError(token, qualified)

    def items(self) -> ItemsView[str, str]:
        return self._entries.items()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, token: object) -> bool:
        return token in self._entries
