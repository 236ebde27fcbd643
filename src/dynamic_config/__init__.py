"""
Dynamic configuration providers: secret overrides and feature flags merged
into application configuration and refreshed in the background.
"""

from .configuration import ConfigurationBuilder, ConfigurationRoot
from .errors import (
    ConfigurationError,
    FatalConfigurationError,
    MissingConfigurationError,
    NoPriorDataError,
    RefreshError,
    StaleSnapshotError,
)
from .sources import add_feature_flags, add_secrets

__version__ = "0.1.0"

__all__ = [
    'ConfigurationBuilder',
    'ConfigurationRoot',
    'ConfigurationError',
    'FatalConfigurationError',
    'MissingConfigurationError',
    'NoPriorDataError',
    'RefreshError',
    'StaleSnapshotError',
    'add_feature_flags',
    'add_secrets',
]
