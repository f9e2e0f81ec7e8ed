from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Protocol, Tuple, runtime_checkable

from core.container import Container

__all__ = ['ElevatedRegistry', 'HardenedRegistry', 'Hive', 'HardenedHive']

logger = logging.getLogger(__name__)


@runtime_checkable
class HardenedRegistry(Protocol):
    """Read-only capability view handed to plugins and widgets."""

    def has_service(self, name: str) -> bool: ...
    def get_service(self, name: str) -> Any: ...
    def has_object(self, name: str) -> bool: ...
    def get_object(self, name: str) -> Any: ...


@runtime_checkable
class ElevatedRegistry(Protocol):
    """The privileged core registry owned by the application."""

    def has_service(self, name: str) -> bool: ...
    def get_service(self, name: str) -> Any: ...
    def add_service(self, name: str, instance: Any) -> None: ...
    def remove_service(self, name: str) -> None: ...
    def has_object(self, name: str) -> bool: ...
    def get_object(self, name: str) -> Any: ...
    def add_object(self, name: str, instance: Any) -> None: ...
    def remove_object(self, name: str) -> None: ...
    def get_all_services(self) -> List[Tuple[str, Any]]: ...
    def get_all_objects(self) -> List[Tuple[str, Any]]: ...
    def activate(self, hive: Any) -> None: ...
    def get_hardened_instance(self) -> HardenedRegistry: ...
    def destroy(self) -> None: ...


class Hive:
    """
    Default elevated registry: services and objects with full access.

    Controllers and modules get the hive itself; everybody else gets a
    :class:`HardenedHive` from :meth:`get_hardened_instance`.
    """

    def __init__(self) -> None:
        self._services = Container('hive:services')
        self._objects = Container('hive:objects')
        self._activated = False
        self._destroyed = False

    # ------------------------------------------------------------------ #
    # Services
    # ------------------------------------------------------------------ #
    def has_service(self, name: str) -> bool:
        return self._services.has(name)

    def get_service(self, name: str) -> Any:
        return self._services.get(name)

    def add_service(self, name: str, instance: Any) -> None:
        self._services.add(name, instance)

    def remove_service(self, name: str) -> None:
        self._services.remove(name)

    def get_all_services(self) -> List[Tuple[str, Any]]:
        return self._services.get_all()

    # ------------------------------------------------------------------ #
    # Objects
    # ------------------------------------------------------------------ #
    def has_object(self, name: str) -> bool:
        return self._objects.has(name)

    def get_object(self, name: str) -> Any:
        return self._objects.get(name)

    def add_object(self, name: str, instance: Any) -> None:
        self._objects.add(name, instance)

    def remove_object(self, name: str) -> None:
        self._objects.remove(name)

    def get_all_objects(self) -> List[Tuple[str, Any]]:
        return self._objects.get_all()

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #
    @property
    def is_activated(self) -> bool:
        return self._activated

    def activate(self, hive: Any = None) -> None:
        """Activate services, then objects, handing each the elevated registry."""
        if self._activated:
            logger.debug('Hive already activated; skipping')
            return
        target = hive if hive is not None else self
        for container in (self._services, self._objects):
            for entry in container.entries():
                if entry.is_activatable:
                    logger.debug('hive: %s.activate(hive)', entry.name)
                    entry.activate(target)
        self._activated = True

    def get_hardened_instance(self) -> 'HardenedHive':
        return HardenedHive(self)

    def destroy(self) -> None:
        for container in (self._services, self._objects):
            for entry in container.entries():
                destroy = getattr(entry.instance, 'destroy', None)
                if callable(destroy):
                    destroy()
            container.clear()
        self._destroyed = True
        logger.info('Hive destroyed')

    @property
    def is_destroyed(self) -> bool:
        return self._destroyed


class HardenedHive:
    """Attenuated view over a :class:`Hive`.

    Services that can harden themselves (``get_hardened_instance``) are
    handed out hardened, once per view, so each view gets e.g. its own
    PubSub key.
    """

    def __init__(self, hive: Hive) -> None:
        self._hive = hive
        self._hardened: Dict[str, Any] = {}

    def has_service(self, name: str) -> bool:
        return self._hive.has_service(name)

    def get_service(self, name: str) -> Any:
        if name in self._hardened:
            return self._hardened[name]
        service = self._hive.get_service(name)
        if service is None:
            return None
        harden = getattr(service, 'get_hardened_instance', None)
        hardened = harden() if callable(harden) else service
        self._hardened[name] = hardened
        return hardened

    def has_object(self, name: str) -> bool:
        return self._hive.has_object(name)

    def get_object(self, name: str) -> Optional[Any]:
        return self._hive.get_object(name)

    def get_hardened_instance(self) -> 'HardenedHive':
        """A sibling view with its own hardened services, for spawned children."""
        return HardenedHive(self._hive)
