from __future__ import annotations

import inspect
import logging
from typing import Any, List, Mapping, Optional, Protocol

from core.lifecycle import ComponentGroup, DiagnosticSink

__all__ = ['RegistrationTarget', 'HiveSection', 'InstancePolicy']

logger = logging.getLogger(__name__)


class RegistrationTarget(Protocol):
    def has(self, name: str) -> bool: ...
    def add(self, name: str, instance: Any) -> None: ...
    def remove(self, name: str) -> None: ...


class HiveSection:
    """Presents the hive's services or objects with the Container shape."""

    def __init__(self, hive: Any, kind: str) -> None:
        if kind not in ('service', 'object'):
            raise ValueError(f"kind must be 'service' or 'object', got {kind!r}")
        self._hive = hive
        self.kind = kind

    def has(self, name: str) -> bool:
        return getattr(self._hive, f'has_{self.kind}')(name)

    def get(self, name: str) -> Any:
        return getattr(self._hive, f'get_{self.kind}')(name)

    def add(self, name: str, instance: Any) -> None:
        getattr(self._hive, f'add_{self.kind}')(name, instance)

    def remove(self, name: str) -> None:
        getattr(self._hive, f'remove_{self.kind}')(name)


class InstancePolicy:
    """
    Per-group rule turning a resolved value into the registered instance.

    * ``modules``: the resolved value, untouched.
    * every other group: a class is instantiated with no arguments; otherwise
      a value carrying a property named after the component is unwrapped;
      otherwise the value is used as is.
    """

    def __init__(self, sink: Optional[DiagnosticSink] = None) -> None:
        self._log = sink or logger

    def create_instance(self, group: ComponentGroup, name: str, resolved: Any) -> Any:
        if group is ComponentGroup.MODULES:
            instance = resolved
        elif inspect.isclass(resolved):
            self._log.debug('Creating instance of: %s', name)
            # a freshly constructed instance is registered even if it is falsy (empty dict subclass, ...)
            return resolved()
        else:
            instance = self._unwrap(name, resolved)
        if _is_empty(instance):
            self._log.warning("Object %s is empty, cannot instantiate it!", name)
            return None
        return instance

    @staticmethod
    def _unwrap(name: str, resolved: Any) -> Any:
        if isinstance(resolved, Mapping):
            return resolved[name] if name in resolved else resolved
        if resolved is not None and hasattr(resolved, name):
            return getattr(resolved, name)
        return resolved

    def register(self, group: ComponentGroup, resolved_by_name: Mapping[str, Any], target: RegistrationTarget) -> List[str]:
        """Register every resolved value into ``target``; returns the names actually registered.

        An existing name is removed first (last write wins). When the new
        instance turns out empty the name is left unregistered.
        """
        registered: List[str] = []
        for name, resolved in resolved_by_name.items():
            if target.has(name):
                self._log.warning('Removing (existing) object into [%s]: %s', group.value, name)
                target.remove(name)
            instance = self.create_instance(group, name, resolved)
            if instance is None:
                self._log.warning('Removing %s (because it is empty!)', name)
                continue
            target.add(name, instance)
            registered.append(name)
        return registered


def _is_empty(value: Any) -> bool:
    """Only ``None`` and falsy scalars count as empty; containers and objects never do."""
    if value is None:
        return True
    return isinstance(value, (bool, int, float, str, bytes)) and not value
