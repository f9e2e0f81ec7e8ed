# bootstrap/config/__init__.py
"""
Bootstrap Configuration Module

Typed application settings; file loading lives in ``configs.config_loader``.
"""

from .app_config import ApplicationConfig

__all__ = ['ApplicationConfig']
