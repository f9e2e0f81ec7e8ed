"""
Manifest
────────
* Per-group prescription checks (name and identifier must both be strings)
* A pydantic model of the whole manifest
* Enumeration of the present, non-empty sections in fixed order
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, StrictStr, ValidationError

from bootstrap.exceptions import ManifestValidationError
from core.lifecycle import ComponentGroup

__all__ = ['CoreManifest', 'Manifest', 'check_prescription']

logger = logging.getLogger(__name__)

Prescription = Dict[StrictStr, StrictStr]


def check_prescription(section: str, prescription: Any) -> None:
    """Raise :class:`ManifestValidationError` unless ``prescription`` maps str -> str."""
    if not isinstance(prescription, Mapping):
        raise ManifestValidationError(
            f"Section '{section}' must be a mapping of name -> identifier, got {type(prescription).__name__}",
            section=section,
        )
    errors: List[str] = []
    for name, impl in prescription.items():
        if not isinstance(name, str) or not isinstance(impl, str):
            errors.append(f"{name!r}: {impl!r} (key and implementation must be string values)")
    if errors:
        raise ManifestValidationError(
            f"Invalid entries in section '{section}'", section=section, schema_errors=errors
        )


class CoreManifest(BaseModel):
    controllers: Optional[Prescription] = None
    modules: Optional[Prescription] = None
    services: Optional[Prescription] = None
    objects: Optional[Prescription] = None

    model_config = ConfigDict(extra='ignore')


class Manifest(BaseModel):
    """Declarative description of which named components to load."""

    core: Optional[CoreManifest] = None
    plugins: Optional[Prescription] = None
    widgets: Optional[Prescription] = None

    model_config = ConfigDict(extra='ignore')

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> 'Manifest':
        if isinstance(data, Manifest):
            return data
        if not isinstance(data, Mapping):
            raise ManifestValidationError(f"Manifest must be a mapping, got {type(data).__name__}")
        _check_raw_sections(data)
        try:
            return cls.model_validate(dict(data))
        except ValidationError as exc:
            errors = [
                f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
                for err in exc.errors()
            ]
            section = _section_of(exc)
            raise ManifestValidationError('Manifest failed validation', section=section, schema_errors=errors) from exc

    def section(self, group: ComponentGroup) -> Optional[Dict[str, str]]:
        if group.is_barbarian:
            return getattr(self, group.value)
        if self.core is None:
            return None
        return getattr(self.core, group.value)

    def sections(self) -> List[Tuple[ComponentGroup, Dict[str, str]]]:
        """Present, non-empty groups in fixed enumeration order."""
        found = []
        for group in ComponentGroup:
            prescription = self.section(group)
            if prescription:
                found.append((group, dict(prescription)))
        return found


def _check_raw_sections(data: Mapping[str, Any]) -> None:
    core = data.get('core')
    if core is not None and not isinstance(core, Mapping):
        raise ManifestValidationError(f"'core' must be a mapping, got {type(core).__name__}", section='core')
    for group in ComponentGroup:
        source = data if group.is_barbarian else (core or {})
        prescription = source.get(group.value)
        if prescription is not None:
            check_prescription(group.value, prescription)


def _section_of(exc: ValidationError) -> Optional[str]:
    for err in exc.errors():
        loc = err.get('loc') or ()
        if loc and loc[0] == 'core' and len(loc) > 1:
            return str(loc[1])
        if loc:
            return str(loc[0])
    return None
