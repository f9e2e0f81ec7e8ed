import asyncio
import json
import os.path

import pytest

from bootstrap.exceptions import ResolutionError
from bootstrap.resolver import ImportResolver, Resolver, StaticResolver, import_by_path


def test_import_by_path_module_and_attribute():
    assert import_by_path('json') is json
    assert import_by_path('json:dumps') is json.dumps
    assert import_by_path('os:path.join') is os.path.join


@pytest.mark.parametrize('path', ['no_such_module_xyz', 'json:no_such_attr', ''])
def test_import_by_path_failures(path):
    with pytest.raises(ResolutionError) as exc_info:
        import_by_path(path)
    assert exc_info.value.identifier == path


@pytest.mark.asyncio
async def test_import_resolver_keeps_request_order():
    resolver = ImportResolver()
    assert isinstance(resolver, Resolver)
    values = await resolver.resolve(['json:loads', 'json'])
    assert values == [json.loads, json]


@pytest.mark.asyncio
async def test_import_resolver_reports_first_bad_identifier():
    with pytest.raises(ResolutionError) as exc_info:
        await ImportResolver().resolve(['json', 'json:missing', 'also_missing'])
    assert exc_info.value.identifier == 'json:missing'


@pytest.mark.asyncio
async def test_static_resolver():
    resolver = StaticResolver({'a': 1}, delays={'b': 0.01})
    resolver.register('b', 2)

    assert await resolver.resolve(['b', 'a']) == [2, 1]
    assert resolver.requests == [['b', 'a']]

    with pytest.raises(ResolutionError):
        await resolver.resolve(['c'])


@pytest.mark.asyncio
async def test_static_resolver_pending_never_settles():
    resolver = StaticResolver({}, pending=['hang'])
    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(resolver.resolve(['hang']), 0.05)
