"""
Application - owns the component containers and drives loading and activation.

Controllers, modules, plugins and widgets live in the application's own
containers; services and objects live in the hive. ``load_modules`` fills
them from a manifest, ``activate`` wires them together in a fixed order and
``destroy`` cancels timed-out resolver requests and tears the hive down.
"""

from __future__ import annotations

import itertools
import logging
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from bootstrap.activation import ActivationCascade
from bootstrap.barbarians import BarbarianRegistry
from bootstrap.config.app_config import ApplicationConfig
from bootstrap.exceptions import ApplicationStateError, UnknownSectionError
from bootstrap.instance_policy import HiveSection, InstancePolicy, RegistrationTarget
from bootstrap.loader import LoadOrchestrator
from bootstrap.manifest import Manifest
from bootstrap.resolver import ImportResolver, Resolver
from bootstrap.result import ActivationReport, LoadResult
from core.container import Container
from core.lifecycle import ComponentGroup, DiagnosticSink
from core.pubsub import PubSub
from core.registry.hive import ElevatedRegistry, Hive

__all__ = ['Application', 'ApplicationState']

_application_ids = itertools.count(1)


class ApplicationState(str, Enum):
    CREATED = 'created'
    LOADING = 'loading'
    LOADED = 'loaded'
    ACTIVATED = 'activated'
    DESTROYED = 'destroyed'


class Application:

    def __init__(
        self,
        config: Optional[ApplicationConfig] = None,
        *,
        resolver: Optional[Resolver] = None,
        hive: Optional[ElevatedRegistry] = None,
        logger: Optional[DiagnosticSink] = None,
    ) -> None:
        self.aid = f'application{next(_application_ids)}'
        self.config = config or ApplicationConfig()
        self.resolver = resolver or ImportResolver()
        self._log = logger if logger is not None else logging.getLogger(__name__)
        self._hive = hive if hive is not None else self._default_hive()

        self._containers: Dict[ComponentGroup, Container] = {
            group: Container(f'{self.aid}:{group.value}')
            for group in (ComponentGroup.CONTROLLERS, ComponentGroup.MODULES,
                          ComponentGroup.PLUGINS, ComponentGroup.WIDGETS)
        }
        self._targets: Dict[ComponentGroup, RegistrationTarget] = dict(self._containers)
        self._targets[ComponentGroup.SERVICES] = HiveSection(self._hive, 'service')
        self._targets[ComponentGroup.OBJECTS] = HiveSection(self._hive, 'object')

        self.policy = InstancePolicy(self._log)
        self.barbarians = BarbarianRegistry(self.config.pubsub_service, self._log)
        self.loader = LoadOrchestrator(
            self.resolver,
            self.register_loaded_modules,
            timeout_ms=self.config.timeout_ms,
            strategy=self.config.load_strategy,
            sink=self._log,
        )
        self.last_activation: Optional[ActivationReport] = None
        self._state = ApplicationState.CREATED

    def _default_hive(self) -> Hive:
        hive = Hive()
        hive.add_service(self.config.pubsub_service, PubSub())
        return hive

    def __repr__(self) -> str:
        return f'Application(aid={self.aid!r}, state={self._state.value!r})'

    # ------------------------------------------------------------------ #
    # State
    # ------------------------------------------------------------------ #
    @property
    def state(self) -> ApplicationState:
        return self._state

    def is_activated(self) -> bool:
        return self._state is ApplicationState.ACTIVATED

    def get_hive(self) -> ElevatedRegistry:
        return self._hive

    def _ensure_alive(self, operation: str) -> None:
        if self._state is ApplicationState.DESTROYED:
            raise ApplicationStateError(f'Cannot {operation}: application {self.aid} was destroyed')

    # ------------------------------------------------------------------ #
    # Loading
    # ------------------------------------------------------------------ #
    async def load_modules(
        self,
        manifest: Union[Manifest, Mapping[str, Any]],
        options: Optional[Mapping[str, Any]] = None,
    ) -> LoadResult:
        """Resolve every section of ``manifest`` and register what loads.

        ``options['timeout_ms']`` overrides the configured per-section
        timeout for this call only. Failures never raise; inspect the
        returned :class:`LoadResult` or call ``raise_for_failure()``.
        """
        self._ensure_alive('load modules')
        options = options or {}
        previous = self._state
        self._state = ApplicationState.LOADING
        self._log.info('%s: loading modules', self.aid)
        try:
            result = await self.loader.load(manifest, timeout_ms=options.get('timeout_ms'))
        finally:
            self._state = ApplicationState.ACTIVATED if previous is ApplicationState.ACTIVATED else ApplicationState.LOADED
        self._log.info('%s: load finished (success=%s)', self.aid, result.success)
        return result

    def register_loaded_modules(self, section: Union[ComponentGroup, str], modules: Mapping[str, Any]) -> List[str]:
        try:
            group = ComponentGroup(section)
        except ValueError:
            raise UnknownSectionError(str(section)) from None
        return self.policy.register(group, modules, self._targets[group])

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #
    def activate(self, options: Optional[Mapping[str, Any]] = None) -> ActivationReport:
        self._ensure_alive('activate')
        if self.is_activated():
            self._log.warning('%s is already activated; ignoring activate()', self.aid)
            return self.last_activation or ActivationReport()
        cascade = ActivationCascade(self._hive, self._containers, self.barbarians, self._log)
        report = cascade.run(self)
        self.last_activation = report
        self._state = ApplicationState.ACTIVATED
        return report

    def destroy(self) -> None:
        if self._state is ApplicationState.DESTROYED:
            return
        self.loader.cancel_stragglers()
        self._hive.destroy()
        self._state = ApplicationState.DESTROYED
        self._log.info('%s destroyed', self.aid)

    # ------------------------------------------------------------------ #
    # Lookups
    # ------------------------------------------------------------------ #
    def has_controller(self, name: str) -> bool:
        return self._containers[ComponentGroup.CONTROLLERS].has(name)

    def get_controller(self, name: str) -> Any:
        return self._containers[ComponentGroup.CONTROLLERS].get(name)

    def get_all_controllers(self) -> List[Tuple[str, Any]]:
        return self._containers[ComponentGroup.CONTROLLERS].get_all()

    def has_module(self, name: str) -> bool:
        return self._containers[ComponentGroup.MODULES].has(name)

    def get_module(self, name: str) -> Any:
        return self._containers[ComponentGroup.MODULES].get(name)

    def get_all_modules(self) -> List[Tuple[str, Any]]:
        return self._containers[ComponentGroup.MODULES].get_all()

    def has_plugin(self, name: str) -> bool:
        return self._containers[ComponentGroup.PLUGINS].has(name)

    def get_plugin(self, name: str) -> Any:
        return self._containers[ComponentGroup.PLUGINS].get(name)

    def get_all_plugins(self) -> List[Tuple[str, Any]]:
        return self._containers[ComponentGroup.PLUGINS].get_all()

    def has_widget(self, name: str) -> bool:
        return self._containers[ComponentGroup.WIDGETS].has(name)

    def get_widget(self, name: str) -> Any:
        return self._containers[ComponentGroup.WIDGETS].get(name)

    def get_all_widgets(self) -> List[Tuple[str, Any]]:
        return self._containers[ComponentGroup.WIDGETS].get_all()

    def has_service(self, name: str) -> bool:
        return self._hive.has_service(name)

    def get_service(self, name: str) -> Any:
        return self._hive.get_service(name)

    def get_all_services(self) -> List[Tuple[str, Any]]:
        return self._hive.get_all_services()

    def has_object(self, name: str) -> bool:
        return self._hive.has_object(name)

    def get_object(self, name: str) -> Any:
        return self._hive.get_object(name)

    def get_all_objects(self) -> List[Tuple[str, Any]]:
        return self._hive.get_all_objects()

    def get_plugin_or_widget_name(self, token: str) -> Optional[str]:
        return self.barbarians.qualified_name(token)

    def get_plugin_or_widget_by_pubsub_key(self, token: str) -> Any:
        return self.barbarians.lookup(
            token,
            self._containers[ComponentGroup.PLUGINS],
            self._containers[ComponentGroup.WIDGETS],
        )

    # ------------------------------------------------------------------ #
    # Broadcast
    # ------------------------------------------------------------------ #
    def trigger_method_on_all(self, method_name: str, options: Any = None) -> None:
        self.trigger_method(self.get_all_controllers(), 'controllers', method_name, options)
        self.trigger_method(self.get_all_modules(), 'modules', method_name, options)
        self.trigger_method(self.get_all_plugins(), 'plugins', method_name, options)
        self.trigger_method(self.get_all_widgets(), 'widgets', method_name, options)
        self.trigger_method(self._hive.get_all_services(), 'hive:services', method_name, options)
        self.trigger_method(self._hive.get_all_objects(), 'hive:objects', method_name, options)

    def trigger_method(self, pairs: List[Tuple[str, Any]], label: str, method_name: str, options: Any = None) -> int:
        """Call ``method_name(options)`` on every member that has it; returns how many were called."""
        called = 0
        for name, instance in pairs:
            method = getattr(instance, method_name, None)
            if not callable(method):
                continue
            self._log.debug('application.trigger_method: %s: %s.%s()', label, name, method_name)
            method(options)
            called += 1
        return called
