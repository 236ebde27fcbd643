"""
Configuration providers.
Providers hold the values a configuration root reads (secrets, feature flags, static maps)
"""

from .base import ConfigurationProvider, RefreshableProvider, StaticProvider
from .flags import FlagClientOptions, FlagSnapshot, FlagStreamClient, ProviderState, PushFlagProvider
from .secrets import PollingSecretProvider, SecretFetcher, SecretsSourceOptions

__all__ = [
    'ConfigurationProvider',
    'RefreshableProvider',
    'StaticProvider',
    'PollingSecretProvider',
    'SecretFetcher',
    'SecretsSourceOptions',
    'PushFlagProvider',
    'FlagClientOptions',
    'FlagSnapshot',
    'FlagStreamClient',
    'ProviderState',
]
