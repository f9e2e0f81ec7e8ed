"""
Exception classes for the application bootstrap.

Import them like:
    from bootstrap.exceptions import BootstrapError, ManifestValidationError, ...
"""

from __future__ import annotations

from typing import List, Optional

__all__ = [
    'BootstrapError',
    'ManifestValidationError',
    'ResolutionError',
    'LoadError',
    'LoadTimeoutError',
    'LoadFailureError',
    'UnknownSectionError',
    'ChildNameCollisionError',
    'ActivationComponentError',
    'BarbarianRegistryInconsistencyError',
    'ApplicationStateError',
]


class BootstrapError(RuntimeError):
    """
    Base exception for everything raised by the bootstrap.

    Carries optional context about which component and which manifest
    section were involved.
    """

    def __init__(self, message: str, component_id: Optional[str] = None, section: Optional[str] = None):
        super().__init__(message)
        self.component_id = component_id
        self.section = section

    def __str__(self) -> str:
        base_msg = super().__str__()

        context_parts = []
        if self.section:
            context_parts.append(f"section={self.section}")
        if self.component_id:
            context_parts.append(f"component={self.component_id}")

        if context_parts:
            return f"{base_msg} ({', '.join(context_parts)})"
        return base_msg


class ManifestValidationError(BootstrapError):
    """
    Raised when a manifest group is not a flat mapping of string name to
    string identifier. Nothing is dispatched for a load call that fails
    validation.
    """

    def __init__(self, message: str, section: Optional[str] = None, schema_errors: Optional[List[str]] = None):
        super().__init__(message, section=section)
        self.schema_errors = schema_errors or []

    def __str__(self) -> str:
        base_msg = super().__str__()
        if self.schema_errors:
            error_list = "\n  - ".join(self.schema_errors)
            return f"{base_msg}\nSchema errors:\n  - {error_list}"
        return base_msg


class ResolutionError(BootstrapError):
    """Raised by a resolver when an identifier cannot be resolved."""

    def __init__(self, identifier: str, reason: str = ''):
        message = f"Could not resolve '{identifier}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.identifier = identifier
        self.reason = reason


class LoadError(BootstrapError):
    """A manifest section did not load."""
    pass


class LoadTimeoutError(LoadError):
    """The resolver did not answer for a section within the configured timeout."""

    def __init__(self, section: str, timeout_ms: int):
        super().__init__(f"Timeout, section took longer than {timeout_ms} ms to load", section=section)
        self.timeout_ms = timeout_ms


class LoadFailureError(LoadError):
    """The resolver reported an identifier of the section as unresolvable."""

    def __init__(self, section: str, identifier: Optional[str] = None, reason: str = ''):
        message = f"Error loading impl={identifier}" if identifier else "Error loading section"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, section=section)
        self.identifier = identifier


class UnknownSectionError(BootstrapError):
    """Registration was requested for a group outside the known set."""

    def __init__(self, section: str):
        super().__init__(f"Unknown section: {section}", section=section)


class ChildNameCollisionError(BootstrapError):
    """A spawned child's derived name is already taken in its container."""

    def __init__(self, category: str, name: str):
        super().__init__(f"There already exists a {category} with name: {name}", component_id=name)
        self.category = category


class ActivationComponentError(BootstrapError):
    """A component's ``activate`` raised. The exception it raised is ``__cause__``."""

    def __init__(self, group: str, component_id: str, error: BaseException):
        super().__init__(f"Error activating: {component_id}: {error}", component_id=component_id, section=group)
        self.group = group
        self.error = error


class BarbarianRegistryInconsistencyError(BootstrapError):
    """The barbarian registry names a component its container no longer holds."""

    def __init__(self, token: str, qualified_name: str):
        super().__init__(
            f"Can't find barbarian with ID: {token} (registered as '{qualified_name}')",
            component_id=qualified_name,
        )
        self.token = token
        self.qualified_name = qualified_name


class ApplicationStateError(BootstrapError):
    """An operation is not allowed in the application's current lifecycle state."""
    pass
