from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Optional, Tuple

from core.lifecycle import ComponentEntry

__all__ = ['Container']

logger = logging.getLogger(__name__)


class Container:
    """
    Name -> instance registry for one component group.

    Lookups are soft: ``get`` returns ``None`` for unknown names, callers are
    expected to check ``has`` first. ``add`` overwrites. Enumeration follows
    insertion order of the current members.
    """

    def __init__(self, label: str = 'container') -> None:
        self.label = label
        self._entries: Dict[str, ComponentEntry] = {}

    def has(self, name: str) -> bool:
        return name in self._entries

    def get(self, name: str) -> Any:
        entry = self._entries.get(name)
        return entry.instance if entry is not None else None

    def get_entry(self, name: str) -> Optional[ComponentEntry]:
        return self._entries.get(name)

    def add(self, name: str, instance: Any) -> None:
        # Re-adding moves the name to the end of the enumeration order.
        self._entries.pop(name, None)
        self._entries[name] = ComponentEntry.wrap(name, instance)
        logger.debug("[%s] added '%s' (%s)", self.label, name, type(instance).__name__)

    def remove(self, name: str) -> None:
        if self._entries.pop(name, None) is not None:
            logger.debug("[%s] removed '%s'", self.label, name)

    def names(self) -> List[str]:
        return list(self._entries)

    def entries(self) -> List[ComponentEntry]:
        """Snapshot of the current entries; safe to iterate while adding."""
        return list(self._entries.values())

    def get_all(self) -> List[Tuple[str, Any]]:
        return [(entry.name, entry.instance) for entry in self._entries.values()]

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __repr__(self) -> str:
        return f"Container(label={self.label!r}, names={self.names()!r})"
