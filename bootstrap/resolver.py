from __future__ import annotations

import asyncio
import importlib
import logging
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, runtime_checkable

from bootstrap.exceptions import ResolutionError

__all__ = ['Resolver', 'ImportResolver', 'StaticResolver', 'import_by_path']

logger = logging.getLogger(__name__)


@runtime_checkable
class Resolver(Protocol):
    """Turns opaque identifiers into live values.

    ``resolve`` returns the values in request order or raises
    :class:`ResolutionError` naming the first identifier it could not resolve.
    """

    async def resolve(self, identifiers: Sequence[str]) -> List[Any]:
        ...


def import_by_path(path: str) -> Any:
    """Import ``pkg.mod`` (the module) or ``pkg.mod:Attr.sub`` (an attribute inside it)."""
    if not isinstance(path, str) or not path:
        raise ResolutionError(str(path), 'import path must be a non-empty string')

    module_name, _, attr_path = path.partition(':')
    try:
        module = importlib.import_module(module_name)
        logger.debug('Successfully imported module: %s', module_name)
    except ImportError as e:
        raise ResolutionError(path, f"could not import module '{module_name}': {e}") from e

    if not attr_path:
        return module

    target: Any = module
    for attr_name in attr_path.split('.'):
        try:
            target = getattr(target, attr_name)
        except AttributeError as e:
            raise ResolutionError(path, f"attribute '{attr_name}' not found in '{module_name}'") from e
    logger.debug("Successfully retrieved '%s' from module '%s'", attr_path, module_name)
    return target


class ImportResolver:
    """Resolves identifiers with ``importlib`` in a worker thread."""

    async def resolve(self, identifiers: Sequence[str]) -> List[Any]:
        return await asyncio.to_thread(self._resolve_all, list(identifiers))

    @staticmethod
    def _resolve_all(identifiers: List[str]) -> List[Any]:
        return [import_by_path(identifier) for identifier in identifiers]


class StaticResolver:
    """
    Resolves identifiers from an in-memory table.

    ``delays`` (seconds, per identifier) make a section slow; an identifier
    listed in ``pending`` never resolves, which is how a hung loader looks
    from the orchestrator's side.
    """

    def __init__(
        self,
        table: Mapping[str, Any],
        delays: Optional[Mapping[str, float]] = None,
        pending: Sequence[str] = (),
    ) -> None:
        self._table: Dict[str, Any] = dict(table)
        self._delays: Dict[str, float] = dict(delays or {})
        self._pending = set(pending)
        self.requests: List[List[str]] = []

    def register(self, identifier: str, value: Any) -> None:
        self._table[identifier] = value

    async def resolve(self, identifiers: Sequence[str]) -> List[Any]:
        requested = list(identifiers)
        self.requests.append(requested)
        if self._pending.intersection(requested):
            await asyncio.Event().wait()
        delay = max((self._delays.get(i, 0.0) for i in requested), default=0.0)
        if delay:
            await asyncio.sleep(delay)
        values = []
        for identifier in requested:
            if identifier not in self._table:
                raise ResolutionError(identifier, 'no such identifier')
            values.append(self._table[identifier])
        return values
