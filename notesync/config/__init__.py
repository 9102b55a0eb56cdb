"""
Configuration loading and validation.
"""

from .settings import NoteSyncConfig, LogLevel
from .environment import EnvironmentLoader
from .validation import ConfigValidator, ValidationError

__all__ = [
    "NoteSyncConfig",
    "LogLevel",
    "EnvironmentLoader",
    "ConfigValidator",
    "ValidationError",
]
