from core.container import Container
from core.lifecycle import ComponentEntry


class _WithActivate:
    def activate(self, hive):
        return hive


class _WithAttribute:
    activate = 'not callable'


def test_add_get_has_remove():
    c = Container('test')
    assert not c.has('a')
    assert c.get('a') is None

    obj = object()
    c.add('a', obj)
    assert c.has('a')
    assert 'a' in c
    assert c.get('a') is obj
    assert len(c) == 1

    c.remove('a')
    assert not c.has('a')
    assert len(c) == 0


def test_remove_missing_name_is_noop():
    c = Container()
    c.remove('ghost')
    assert len(c) == 0


def test_add_overwrites_last_write_wins():
    c = Container()
    first, second = object(), object()
    c.add('a', first)
    c.add('b', object())
    c.add('a', second)
    assert c.get('a') is second
    assert len(c) == 2
    # re-adding moves the name to the end
    assert c.names() == ['b', 'a']


def test_get_all_preserves_insertion_order():
    c = Container()
    for name in ('zeta', 'alpha', 'mid'):
        c.add(name, name.upper())
    assert c.get_all() == [('zeta', 'ZETA'), ('alpha', 'ALPHA'), ('mid', 'MID')]
    assert list(c) == ['zeta', 'alpha', 'mid']


def test_entries_resolve_activate_capability_once():
    c = Container()
    c.add('active', _WithActivate())
    c.add('passive', object())
    c.add('odd', _WithAttribute())

    entries = {e.name: e for e in c.entries()}
    assert isinstance(entries['active'], ComponentEntry)
    assert entries['active'].is_activatable
    assert entries['active'].activate('hive') == 'hive'
    assert not entries['passive'].is_activatable
    assert not entries['odd'].is_activatable


def test_entries_is_a_snapshot():
    c = Container()
    c.add('a', 1)
    snapshot = c.entries()
    c.add('b', 2)
    assert [e.name for e in snapshot] == ['a']
    assert c.get_entry('b').instance == 2


def test_clear():
    c = Container()
    c.add('a', 1)
    c.add('b', 2)
    c.clear()
    assert c.get_all() == []
