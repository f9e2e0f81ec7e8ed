"""
Load Orchestrator - resolves manifest sections and hands them over for registration.

Every non-empty section is sent to the resolver as one request and raced
against the section timeout. A section's outcome latches on first
settlement: a timeout does not cancel the resolver call, and whatever the
resolver produces afterwards is dropped. Sections that succeed are
registered right away, so a failing sibling never rolls them back.
Requests still pending after their timeout are kept in ``stragglers`` until
they settle or ``cancel_stragglers`` is called.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable, Dict, List, Literal, Mapping, Optional, Set, Union

from bootstrap.exceptions import (
    LoadFailureError,
    LoadTimeoutError,
    ManifestValidationError,
    ResolutionError,
    UnknownSectionError,
)
from bootstrap.manifest import Manifest
from bootstrap.resolver import Resolver
from bootstrap.result import LoadResult, SectionOutcome, SectionStatus
from core.lifecycle import ComponentGroup, DiagnosticSink

__all__ = ['LoadOrchestrator', 'DEFAULT_TIMEOUT_MS']

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 30000

LoadStrategy = Literal['concurrent', 'sequential']
Registrar = Callable[[ComponentGroup, Dict[str, Any]], List[str]]


class LoadOrchestrator:

    def __init__(
        self,
        resolver: Resolver,
        registrar: Registrar,
        *,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        strategy: LoadStrategy = 'concurrent',
        sink: Optional[DiagnosticSink] = None,
    ) -> None:
        self.resolver = resolver
        self.registrar = registrar
        self.timeout_ms = timeout_ms
        self.strategy = strategy
        self._log = sink or logger
        # timed-out requests still running; cancelled by cancel_stragglers()
        self.stragglers: Set['asyncio.Future[Any]'] = set()

    async def load(self, manifest: Union[Manifest, Mapping[str, Any]], timeout_ms: Optional[int] = None) -> LoadResult:
        try:
            parsed = Manifest.from_mapping(manifest)
        except ManifestValidationError as exc:
            self._log.error('Manifest rejected before loading: %s', exc)
            return LoadResult.failure_result(exc)

        sections = parsed.sections()
        if not sections:
            self._log.info('Manifest has no sections to load')
            return LoadResult(success=True)

        timeout = timeout_ms if timeout_ms is not None else self.timeout_ms
        if self.strategy == 'sequential':
            outcomes = []
            for group, prescription in sections:
                outcomes.append(await self._load_section(group, prescription, timeout))
        else:
            outcomes = list(await asyncio.gather(
                *(self._load_section(group, prescription, timeout) for group, prescription in sections)
            ))

        result = LoadResult.from_outcomes(outcomes)
        if not result.success:
            self._log.error(
                'Generic error - we were not successful in loading all modules; failed sections: %s',
                ', '.join(result.failed_sections),
            )
        return result

    async def _load_section(self, group: ComponentGroup, prescription: Dict[str, str], timeout_ms: int) -> SectionOutcome:
        section = group.value
        names = list(prescription)
        identifiers = list(prescription.values())
        self._log.debug('application: loading %s %s', section, prescription)
        started = time.monotonic()

        request = asyncio.ensure_future(self.resolver.resolve(identifiers))
        try:
            values = await asyncio.wait_for(asyncio.shield(request), timeout_ms / 1000.0)
        except asyncio.TimeoutError:
            self.stragglers.add(request)
            request.add_done_callback(self.stragglers.discard)
            request.add_done_callback(_discard_late_response(section, self._log))
            error = LoadTimeoutError(section, timeout_ms)
            self._log.error('Timeout, application is loading too long: %s', error)
            return SectionOutcome(section, SectionStatus.TIMED_OUT, names=names, error=error,
                                  duration_seconds=time.monotonic() - started)
        except ResolutionError as exc:
            error = LoadFailureError(section, exc.identifier, exc.reason)
            self._log.warning('Error loading impl=%s', exc.identifier)
            return SectionOutcome(section, SectionStatus.FAILED, names=names, error=error,
                                  duration_seconds=time.monotonic() - started)
        except Exception as exc:
            error = LoadFailureError(section, reason=str(exc))
            self._log.warning('Error loading section %s: %s', section, exc)
            return SectionOutcome(section, SectionStatus.FAILED, names=names, error=error,
                                  duration_seconds=time.monotonic() - started)

        if len(values) != len(names):
            error = LoadFailureError(
                section, reason=f'resolver returned {len(values)} values for {len(names)} identifiers'
            )
            self._log.error('%s', error)
            return SectionOutcome(section, SectionStatus.FAILED, names=names, error=error,
                                  duration_seconds=time.monotonic() - started)

        duration = time.monotonic() - started
        self._log.debug('Loaded: type=%s in %.3fs', section, duration)
        try:
            registered = self.registrar(group, dict(zip(names, values)))
        except UnknownSectionError:
            raise
        except Exception as exc:
            error = LoadFailureError(section, reason=f'registration failed: {exc}')
            self._log.error('Error registering section %s: %s', section, exc, exc_info=True)
            return SectionOutcome(section, SectionStatus.FAILED, names=names, error=error,
                                  duration_seconds=duration)
        return SectionOutcome(section, SectionStatus.RESOLVED, names=names, registered=registered,
                              duration_seconds=duration)

    def cancel_stragglers(self) -> int:
        """Cancel resolver requests that outlived their section timeout; returns how many."""
        pending = [request for request in self.stragglers if not request.done()]
        for request in pending:
            request.cancel()
        if pending:
            self._log.info('Cancelled %d timed-out resolver request(s)', len(pending))
        return len(pending)


def _discard_late_response(section: str, sink: DiagnosticSink) -> Callable[['asyncio.Future[Any]'], None]:
    def _callback(future: 'asyncio.Future[Any]') -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            sink.debug('Discarding late failure for section %s: %s', section, exc)
        else:
            sink.warning('Discarding late response for section %s (already timed out)', section)
    return _callback
