# bootstrap/__init__.py
from __future__ import annotations

from .exceptions import *
from .application import Application, ApplicationState
from .activation import ActivationCascade
from .barbarians import BarbarianRegistry
from .config.app_config import ApplicationConfig
from .instance_policy import HiveSection, InstancePolicy
from .loader import DEFAULT_TIMEOUT_MS, LoadOrchestrator
from .manifest import Manifest, check_prescription
from .resolver import ImportResolver, Resolver, StaticResolver
from .result import ActivationReport, LoadResult, SectionOutcome, SectionStatus

__version__ = '1.0.0'
__description__ = 'Hive application bootstrap and lifecycle orchestrator'

__all__ = [
    'Application', 'ApplicationState', 'ApplicationConfig',
    'ActivationCascade', 'ActivationReport',
    'BarbarianRegistry',
    'HiveSection', 'InstancePolicy',
    'LoadOrchestrator', 'LoadResult', 'SectionOutcome', 'SectionStatus', 'DEFAULT_TIMEOUT_MS',
    'Manifest', 'check_prescription',
    'Resolver', 'ImportResolver', 'StaticResolver',
    '__version__', '__description__',
    'BootstrapError', 'ManifestValidationError', 'ResolutionError',
    'LoadError', 'LoadTimeoutError', 'LoadFailureError',
    'UnknownSectionError', 'ChildNameCollisionError', 'ActivationComponentError',
    'BarbarianRegistryInconsistencyError', 'ApplicationStateError',
]
