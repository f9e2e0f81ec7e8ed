import asyncio
import logging
from typing import List
from unittest.mock import AsyncMock, MagicMock

import pytest

from bootstrap.exceptions import (
    LoadFailureError,
    LoadTimeoutError,
    ManifestValidationError,
    UnknownSectionError,
)
from bootstrap.loader import DEFAULT_TIMEOUT_MS, LoadOrchestrator
from bootstrap.resolver import StaticResolver
from bootstrap.result import SectionStatus
from core.lifecycle import ComponentGroup


def _registrar():
    return MagicMock(side_effect=lambda group, resolved: list(resolved))


class TracingResolver:
    """Records when each request starts and ends."""

    def __init__(self, delay: float = 0.02):
        self.delay = delay
        self.events: List[str] = []

    async def resolve(self, identifiers):
        self.events.append(f'start:{identifiers[0]}')
        await asyncio.sleep(self.delay)
        self.events.append(f'end:{identifiers[0]}')
        return [f'value:{i}' for i in identifiers]


MANIFEST = {
    'core': {
        'controllers': {'Main': 'ctrl.main'},
        'services': {'Api': 'svc.api'},
    },
    'widgets': {'Box': 'w.box', 'List': 'w.list'},
}


@pytest.mark.asyncio
async def test_all_sections_resolved_and_registered():
    resolver = StaticResolver({'ctrl.main': 'C', 'svc.api': 'S', 'w.box': 'B', 'w.list': 'L'})
    registrar = _registrar()
    orchestrator = LoadOrchestrator(resolver, registrar)

    result = await orchestrator.load(MANIFEST)

    assert result.success
    assert bool(result)
    assert set(result.sections) == {'controllers', 'services', 'widgets'}
    assert result.sections['widgets'].registered == ['Box', 'List']
    registrar.assert_any_call(ComponentGroup.WIDGETS, {'Box': 'B', 'List': 'L'})
    registrar.assert_any_call(ComponentGroup.CONTROLLERS, {'Main': 'C'})
    assert registrar.call_count == 3
    # one request per section, identifiers in manifest order
    assert ['w.box', 'w.list'] in resolver.requests


@pytest.mark.asyncio
async def test_validation_failure_dispatches_nothing(caplog):
    resolver = StaticResolver({})
    registrar = _registrar()
    orchestrator = LoadOrchestrator(resolver, registrar)

    with caplog.at_level(logging.ERROR):
        result = await orchestrator.load({'core': {'modules': {'M': 'm'}}, 'plugins': {'P': 3}})

    assert not result.success
    assert isinstance(result.errors[0], ManifestValidationError)
    assert resolver.requests == []
    registrar.assert_not_called()
    assert 'Manifest rejected' in caplog.text
    with pytest.raises(ManifestValidationError):
        result.raise_for_failure()


@pytest.mark.asyncio
async def test_empty_manifest_is_a_successful_noop():
    resolver = StaticResolver({})
    result = await LoadOrchestrator(resolver, _registrar()).load({'core': {}, 'plugins': {}})
    assert result.success
    assert result.sections == {}
    assert resolver.requests == []


@pytest.mark.asyncio
async def test_timeout_marks_only_the_slow_section(caplog):
    resolver = StaticResolver({'fast': 'F', 'slow': 'S'}, delays={'slow': 0.2})
    registrar = _registrar()
    orchestrator = LoadOrchestrator(resolver, registrar, timeout_ms=50)

    with caplog.at_level(logging.WARNING):
        result = await orchestrator.load({'core': {'modules': {'Fast': 'fast'}}, 'plugins': {'Slow': 'slow'}})

    assert not result.success
    assert result.failed_sections == ['plugins']
    outcome = result.sections['plugins']
    assert outcome.status is SectionStatus.TIMED_OUT
    assert isinstance(outcome.error, LoadTimeoutError)
    assert outcome.error.timeout_ms == 50
    # the fast section stays registered, no rollback
    assert result.sections['modules'].registered == ['Fast']
    registrar.assert_called_once_with(ComponentGroup.MODULES, {'Fast': 'F'})

    # the late answer is dropped, not registered
    with caplog.at_level(logging.WARNING):
        await asyncio.sleep(0.3)
    registrar.assert_called_once()
    assert 'Discarding late response for section plugins' in caplog.text


@pytest.mark.asyncio
async def test_late_failure_is_consumed(caplog):
    resolver = MagicMock()

    async def _slow_fail(identifiers):
        await asyncio.sleep(0.1)
        raise RuntimeError('boom later')

    resolver.resolve = _slow_fail
    orchestrator = LoadOrchestrator(resolver, _registrar(), timeout_ms=20)

    with caplog.at_level(logging.DEBUG):
        result = await orchestrator.load({'widgets': {'W': 'w'}})
        await asyncio.sleep(0.2)

    assert result.sections['widgets'].status is SectionStatus.TIMED_OUT
    assert 'Discarding late failure for section widgets' in caplog.text
    assert orchestrator.stragglers == set()


@pytest.mark.asyncio
async def test_cancel_stragglers_stops_requests_that_never_settle(caplog):
    resolver = StaticResolver({'stuck': 'S', 'fine': 'F'}, pending=['stuck'])
    orchestrator = LoadOrchestrator(resolver, _registrar(), timeout_ms=20)

    result = await orchestrator.load({'plugins': {'P': 'stuck'}, 'widgets': {'W': 'fine'}})
    assert result.sections['plugins'].status is SectionStatus.TIMED_OUT
    pending = list(orchestrator.stragglers)
    assert len(pending) == 1

    with caplog.at_level(logging.INFO):
        assert orchestrator.cancel_stragglers() == 1
    await asyncio.gather(*pending, return_exceptions=True)

    assert pending[0].cancelled()
    assert orchestrator.stragglers == set()
    assert orchestrator.cancel_stragglers() == 0
    assert 'Cancelled 1 timed-out resolver request(s)' in caplog.text


@pytest.mark.asyncio
async def test_call_timeout_overrides_default():
    resolver = StaticResolver({'slow': 'S'}, delays={'slow': 0.1})
    orchestrator = LoadOrchestrator(resolver, _registrar())
    assert orchestrator.timeout_ms == DEFAULT_TIMEOUT_MS

    result = await orchestrator.load({'plugins': {'Slow': 'slow'}}, timeout_ms=10)
    assert result.sections['plugins'].status is SectionStatus.TIMED_OUT
    await asyncio.sleep(0.15)


@pytest.mark.asyncio
async def test_resolution_error_fails_the_section(caplog):
    resolver = StaticResolver({'ok': 1})
    registrar = _registrar()
    orchestrator = LoadOrchestrator(resolver, registrar)

    with caplog.at_level(logging.WARNING):
        result = await orchestrator.load({'core': {'objects': {'Ok': 'ok'}}, 'widgets': {'Gone': 'missing'}})

    outcome = result.sections['widgets']
    assert outcome.status is SectionStatus.FAILED
    assert isinstance(outcome.error, LoadFailureError)
    assert outcome.error.identifier == 'missing'
    assert 'Error loading impl=missing' in caplog.text
    assert result.sections['objects'].success
    assert result.failed_sections == ['widgets']


@pytest.mark.asyncio
async def test_resolver_returning_wrong_number_of_values_fails():
    resolver = MagicMock()
    resolver.resolve = AsyncMock(return_value=['only one'])
    registrar = _registrar()

    result = await LoadOrchestrator(resolver, registrar).load({'plugins': {'A': 'a', 'B': 'b'}})

    assert result.sections['plugins'].status is SectionStatus.FAILED
    registrar.assert_not_called()


@pytest.mark.asyncio
async def test_registration_failure_fails_the_section():
    resolver = StaticResolver({'a': 'A'})
    registrar = MagicMock(side_effect=ValueError('bad instance'))

    result = await LoadOrchestrator(resolver, registrar).load({'plugins': {'A': 'a'}})

    outcome = result.sections['plugins']
    assert outcome.status is SectionStatus.FAILED
    assert 'registration failed' in str(outcome.error)


@pytest.mark.asyncio
async def test_unknown_section_from_registrar_propagates():
    resolver = StaticResolver({'a': 'A'})
    registrar = MagicMock(side_effect=UnknownSectionError('gadgets'))

    with pytest.raises(UnknownSectionError):
        await LoadOrchestrator(resolver, registrar).load({'plugins': {'A': 'a'}})


@pytest.mark.asyncio
async def test_concurrent_strategy_dispatches_all_sections_at_once():
    resolver = TracingResolver()
    orchestrator = LoadOrchestrator(resolver, _registrar(), strategy='concurrent')

    await orchestrator.load({'core': {'controllers': {'C': 'c'}, 'modules': {'M': 'm'}}})

    assert resolver.events[:2] == ['start:c', 'start:m']


@pytest.mark.asyncio
async def test_sequential_strategy_waits_for_each_section_in_group_order():
    resolver = TracingResolver()
    orchestrator = LoadOrchestrator(resolver, _registrar(), strategy='sequential')

    result = await orchestrator.load({
        'widgets': {'W': 'w'},
        'core': {'modules': {'M': 'm'}, 'controllers': {'C': 'c'}},
    })

    assert result.success
    assert resolver.events == ['start:c', 'end:c', 'start:m', 'end:m', 'start:w', 'end:w']


@pytest.mark.asyncio
async def test_sequential_strategy_keeps_going_after_a_failure():
    resolver = StaticResolver({'w': 'W'})
    result = await LoadOrchestrator(resolver, _registrar(), strategy='sequential').load({
        'core': {'modules': {'M': 'missing'}},
        'widgets': {'W': 'w'},
    })
    assert result.failed_sections == ['modules']
    assert result.sections['widgets'].success
