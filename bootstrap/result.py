from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from bootstrap.exceptions import ActivationComponentError, BootstrapError, LoadError

__all__ = ['SectionStatus', 'SectionOutcome', 'LoadResult', 'ActivationReport']

logger = logging.getLogger(__name__)


class SectionStatus(str, Enum):
    RESOLVED = 'resolved'
    FAILED = 'failed'
    TIMED_OUT = 'timed_out'


@dataclass
class SectionOutcome:
    """Latched outcome of one manifest section."""
    section: str
    status: SectionStatus
    names: List[str] = field(default_factory=list)
    registered: List[str] = field(default_factory=list)
    error: Optional[LoadError] = None
    duration_seconds: float = 0.0

    @property
    def success(self) -> bool:
        return self.status is SectionStatus.RESOLVED


@dataclass
class LoadResult:
    """Aggregate outcome of one ``load_modules`` call.

    Validation errors and section failures come back through the same
    object; ``raise_for_failure`` turns a failed result into an exception.
    """
    success: bool
    sections: Dict[str, SectionOutcome] = field(default_factory=dict)
    errors: List[BootstrapError] = field(default_factory=list)

    @classmethod
    def from_outcomes(cls, outcomes: List[SectionOutcome]) -> 'LoadResult':
        errors: List[BootstrapError] = [o.error for o in outcomes if o.error is not None]
        return cls(
            success=all(o.success for o in outcomes),
            sections={o.section: o for o in outcomes},
            errors=errors,
        )

    @classmethod
    def failure_result(cls, error: BootstrapError) -> 'LoadResult':
        return cls(success=False, errors=[error])

    @property
    def failed_sections(self) -> List[str]:
        return [name for name, outcome in self.sections.items() if not outcome.success]

    def raise_for_failure(self) -> None:
        if self.success:
            return
        if self.errors:
            raise self.errors[0]
        raise LoadError('Loading failed')

    def __bool__(self) -> bool:
        return self.success


@dataclass
class ActivationReport:
    """What happened during ``Application.activate``."""
    activated: Dict[str, List[str]] = field(default_factory=dict)
    failures: List[ActivationComponentError] = field(default_factory=list)
    children: Dict[str, List[str]] = field(default_factory=dict)

    def record_activated(self, group: str, name: str) -> None:
        self.activated.setdefault(group, []).append(name)

    def record_child(self, group: str, name: str) -> None:
        self.children.setdefault(group, []).append(name)

    @property
    def failed_components(self) -> List[str]:
        return [f.component_id for f in self.failures if f.component_id]

    @property
    def has_failures(self) -> bool:
        return bool(self.failures)
