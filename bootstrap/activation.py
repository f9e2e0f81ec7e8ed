"""
Activation Cascade - wires every registered component, tier by tier.

Order is fixed: the hive itself, controllers, modules, plugins, widgets.
Controllers are trusted: the first one that fails aborts the cascade.
Modules, plugins and widgets fail alone; their errors are logged and
collected in the :class:`ActivationReport`. Plugins and widgets only ever
see a hardened view of the hive, a fresh one per component.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

from bootstrap.barbarians import BarbarianRegistry
from bootstrap.exceptions import ActivationComponentError, ChildNameCollisionError
from bootstrap.result import ActivationReport
from core.container import Container
from core.lifecycle import BARBARIAN_GROUPS, ComponentGroup, DiagnosticSink, SpawnedChild

__all__ = ['ActivationCascade']

logger = logging.getLogger(__name__)


class ActivationCascade:

    def __init__(
        self,
        hive: Any,
        containers: Mapping[ComponentGroup, Container],
        barbarians: BarbarianRegistry,
        sink: Optional[DiagnosticSink] = None,
    ) -> None:
        self.hive = hive
        self.containers = containers
        self.barbarians = barbarians
        self._log = sink or logger

    def run(self, application: Any) -> ActivationReport:
        report = ActivationReport()

        # services are activated by the hive itself
        self._log.debug('application: hive.activate()')
        self.hive.activate(self.hive)

        self._activate_controllers(application, report)
        self._activate_modules(report)
        for group in BARBARIAN_GROUPS:
            self._activate_barbarians(group, report)

        if report.has_failures:
            self._log.warning(
                'Activation finished with %d failed component(s): %s',
                len(report.failures), ', '.join(report.failed_components),
            )
        else:
            self._log.info('Activation finished')
        return report

    # ------------------------------------------------------------------ #
    # Tiers
    # ------------------------------------------------------------------ #
    def _activate_controllers(self, application: Any, report: ActivationReport) -> None:
        for entry in self.containers[ComponentGroup.CONTROLLERS].entries():
            if not entry.is_activatable:
                continue
            self._log.debug('application: controllers: %s.activate(hive, app)', entry.name)
            try:
                entry.activate(self.hive, application)
            except Exception as exc:
                raise ActivationComponentError(ComponentGroup.CONTROLLERS.value, entry.name, exc) from exc
            report.record_activated(ComponentGroup.CONTROLLERS.value, entry.name)

    def _activate_modules(self, report: ActivationReport) -> None:
        for entry in self.containers[ComponentGroup.MODULES].entries():
            if not entry.is_activatable:
                continue
            self._log.debug('application: modules: %s.activate(hive)', entry.name)
            try:
                entry.activate(self.hive)
            except Exception as exc:
                self._record_failure(ComponentGroup.MODULES, entry.name, exc, report)
                continue
            report.record_activated(ComponentGroup.MODULES.value, entry.name)

    def _activate_barbarians(self, group: ComponentGroup, report: ActivationReport) -> None:
        # snapshot: spawned children join the container but are not activated again
        for entry in self.containers[group].entries():
            if not entry.is_activatable:
                continue
            self._log.debug('application: %s: %s.activate(hardened hive)', group.value, entry.name)
            try:
                hardened = self.hive.get_hardened_instance()
                children = entry.activate(hardened)
                token = self.barbarians.token_for(hardened)
                spawned = self._prepare_children(group, entry.name, children)
            except Exception as exc:
                self._record_failure(group, entry.name, exc, report)
                continue
            self.barbarians.record(token, group.category, entry.name)
            report.record_activated(group.value, entry.name)
            self._register_children(group, spawned, report)

    # ------------------------------------------------------------------ #
    # Spawned children
    # ------------------------------------------------------------------ #
    def _prepare_children(self, group: ComponentGroup, prefix: str, children: Any) -> List[Tuple[str, Any, str]]:
        """Turn an activate() return value into ``(name, object, token)`` triples, registering nothing."""
        if not children:
            return []
        pairs = _iter_children(children)
        if pairs is None:
            self._log.warning(
                "Ignoring children returned by %s '%s': expected a mapping or a sequence, got %s",
                group.category, prefix, type(children).__name__,
            )
            return []
        return [
            (f'{prefix}-{child.name or key}', child.object, self.barbarians.token_for(child.hive))
            for key, child in pairs
        ]

    def _register_children(self, group: ComponentGroup, spawned: List[Tuple[str, Any, str]], report: ActivationReport) -> None:
        container = self.containers[group]
        for name, instance, token in spawned:
            if container.has(name):
                raise ChildNameCollisionError(group.category, name)
            self._log.debug('adding child object to registry: %s', name)
            self.barbarians.record(token, group.category, name)
            container.add(name, instance)
            report.record_child(group.value, name)

    def _record_failure(self, group: ComponentGroup, name: str, exc: Exception, report: ActivationReport) -> None:
        error = ActivationComponentError(group.value, name, exc)
        error.__cause__ = exc
        self._log.error('Error activating: %s', name, exc_info=exc)
        report.failures.append(error)


def _iter_children(children: Any) -> Optional[List[Tuple[str, SpawnedChild]]]:
    if isinstance(children, SpawnedChild):
        pairs: Iterable[Tuple[Any, Any]] = [('0', children)]
    elif isinstance(children, Mapping):
        pairs = children.items()
    elif isinstance(children, Sequence) and not isinstance(children, (str, bytes)):
        pairs = enumerate(children)
    else:
        return None
    return [(str(key), _coerce_child(child)) for key, child in pairs]


def _coerce_child(child: Any) -> SpawnedChild:
    if isinstance(child, Mapping) and 'object' in child:
        child = SpawnedChild(object=child['object'], hive=child.get('hive', child.get('beehive')), name=child.get('name'))
    elif not isinstance(child, SpawnedChild):
        raise TypeError(f'Spawned child must be a SpawnedChild or a mapping with an "object" key, got {type(child).__name__}')
    if child.hive is None:
        raise TypeError(f'Spawned child {child.name or type(child.object).__name__!r} has no hive view')
    return child
