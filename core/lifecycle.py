from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Protocol, Tuple, runtime_checkable

__all__ = [
    'ComponentGroup',
    'Activatable',
    'ComponentEntry',
    'SpawnedChild',
    'DiagnosticSink',
    'CORE_GROUPS',
    'BARBARIAN_GROUPS',
]

logger = logging.getLogger(__name__)


class ComponentGroup(str, Enum):
    """The six manifest groups, declared in their fixed enumeration order."""

    CONTROLLERS = 'controllers'
    MODULES = 'modules'
    SERVICES = 'services'
    OBJECTS = 'objects'
    PLUGINS = 'plugins'
    WIDGETS = 'widgets'

    @property
    def is_barbarian(self) -> bool:
        return self in BARBARIAN_GROUPS

    @property
    def category(self) -> str:
        """Singular label used in qualified names (``plugin:Foo``)."""
        return self.value[:-1]

    @classmethod
    def from_category(cls, category: str) -> 'ComponentGroup':
        for group in cls:
            if group.category == category:
                return group
        raise ValueError(f"Unknown component category: {category!r}")


CORE_GROUPS: Tuple[ComponentGroup, ...] = (
    ComponentGroup.CONTROLLERS,
    ComponentGroup.MODULES,
    ComponentGroup.SERVICES,
    ComponentGroup.OBJECTS,
)
BARBARIAN_GROUPS: Tuple[ComponentGroup, ...] = (ComponentGroup.PLUGINS, ComponentGroup.WIDGETS)


@runtime_checkable
class Activatable(Protocol):
    """Optional capability: a component that wants to be wired up at activation.

    Controllers receive ``(hive, application)``, modules receive the elevated
    hive and plugins/widgets a hardened view. Plugins and widgets may return
    spawned children (a mapping or a sequence of :class:`SpawnedChild`).
    """

    def activate(self, *args: Any) -> Any:
        ...


@runtime_checkable
class DiagnosticSink(Protocol):
    """Where orchestration diagnostics go. ``logging.Logger`` satisfies it."""

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None: ...
    def info(self, msg: str, *args: Any, **kwargs: Any) -> None: ...
    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None: ...
    def error(self, msg: str, *args: Any, **kwargs: Any) -> None: ...


@dataclass(frozen=True)
class ComponentEntry:
    """A registered instance with its capabilities resolved once, at registration."""

    name: str
    instance: Any
    activator: Optional[Callable[..., Any]] = None

    @classmethod
    def wrap(cls, name: str, instance: Any) -> 'ComponentEntry':
        activator = getattr(instance, 'activate', None)
        if activator is not None and not callable(activator):
            logger.debug("Component '%s' has a non-callable 'activate' attribute; treating it as passive", name)
            activator = None
        return cls(name=name, instance=instance, activator=activator)

    @property
    def is_activatable(self) -> bool:
        return self.activator is not None

    def activate(self, *args: Any) -> Any:
        if self.activator is None:
            raise TypeError(f"Component '{self.name}' is passive and cannot be activated")
        return self.activator(*args)


@dataclass
class SpawnedChild:
    """A component created by a plugin/widget during its own activation.

    ``hive`` is the hardened view the child was wired with; its PubSub key is
    what ties the child's events back to it. When ``name`` is empty the key
    (or index) under which the child was returned is used instead.
    """

    object: Any
    hive: Any
    name: Optional[str] = None
