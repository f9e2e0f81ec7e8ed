import logging
from typing import Any, Callable, List, Optional

import pytest

from bootstrap.barbarians import BarbarianRegistry
from core.container import Container
from core.lifecycle import ComponentGroup
from core.pubsub import PubSub
from core.registry.hive import Hive


class FakeComponent:
    """Records its activation into a shared log; optionally fails or spawns children."""

    def __init__(self, label: str, log: List[str], fail: bool = False, children: Any = None):
        self.label = label
        self.log = log
        self.fail = fail
        self.children = children
        self.activated_with: Optional[tuple] = None
        self.destroyed = False
        self.triggered: List[Any] = []

    def activate(self, *args):
        self.activated_with = args
        self.log.append(self.label)
        if self.fail:
            raise RuntimeError(f'{self.label} exploded')
        if callable(self.children):
            return self.children(*args)
        return self.children

    def destroy(self):
        self.destroyed = True

    def refresh(self, options):
        self.triggered.append(options)
        self.log.append(f'refresh:{self.label}')


class PassiveComponent:
    """No activate capability at all."""

    def __init__(self, label: str = 'passive'):
        self.label = label


@pytest.fixture
def activation_log() -> List[str]:
    return []


@pytest.fixture
def make_component(activation_log) -> Callable[..., FakeComponent]:
    def _make(label: str, **kwargs) -> FakeComponent:
        return FakeComponent(label, activation_log, **kwargs)
    return _make


@pytest.fixture
def passive_component() -> PassiveComponent:
    return PassiveComponent()


@pytest.fixture
def hive() -> Hive:
    h = Hive()
    h.add_service('PubSub', PubSub())
    return h


@pytest.fixture
def containers():
    return {
        group: Container(group.value)
        for group in (ComponentGroup.CONTROLLERS, ComponentGroup.MODULES,
                      ComponentGroup.PLUGINS, ComponentGroup.WIDGETS)
    }


@pytest.fixture
def barbarians() -> BarbarianRegistry:
    return BarbarianRegistry('PubSub', logging.getLogger('tests.barbarians'))
