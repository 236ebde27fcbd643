"""
Exception hierarchy for dynamic configuration providers.

Refresh-path failures are transient and absorbed by the provider that hit
them. Fatal failures happen before any usable configuration exists and are
raised to whoever triggered the load.
"""


class ConfigurationError(Exception):
    """Base class for all configuration provider errors"""


class RefreshError(ConfigurationError):
    """A refresh attempt failed; previously loaded values stay in place"""


class StaleSnapshotError(RefreshError):
    """The flag service reported an invalid snapshot while older data exists"""


class FatalConfigurationError(ConfigurationError):
    """A failure that must stop application startup"""


class NoPriorDataError(FatalConfigurationError):
    """The first load produced no usable data and there is nothing to fall back to"""


class MissingConfigurationError(ConfigurationError, ValueError):
    """A required registration input was not supplied"""
