"""
Registration of dynamic providers with a configuration builder.

Each distinct source gets exactly one provider per process, because every
provider owns a background timer or a live connection. The registry below is
where those long-lived instances are created and handed out.
"""
import os
import threading
from typing import Callable, Dict, Hashable, Optional

from dynamic_config.errors import MissingConfigurationError
from dynamic_config.fetchers import AwsSecretsManagerFetcher
from dynamic_config.providers.base import ConfigurationProvider
from dynamic_config.providers.flags import DEFAULT_PREFIX, ClientFactory, PushFlagProvider
from dynamic_config.providers.secrets import PollingSecretProvider, SecretFetcher, SecretsSourceOptions
from dynamic_config.utils.logger import logger

SECRET_ID_ENV = "APPSETTINGS_OVERRIDE_SECRET_ARN"


class ProviderRegistry:
    """Process-scoped store of provider instances keyed by source identity"""

    def __init__(self):
        self._providers: Dict[Hashable, ConfigurationProvider] = {}
        self._lock = threading.Lock()

    def get_or_create(self, identity: Hashable,
                      factory: Callable[[], ConfigurationProvider]) -> ConfigurationProvider:
        with self._lock:
            provider = self._providers.get(identity)
            if provider is None:
                provider = factory()
                self._providers[identity] = provider
                logger.debug(f"Created {type(provider).__name__} for process-wide use")
            return provider

    def __contains__(self, identity: Hashable) -> bool:
        return identity in self._providers

    def __len__(self):
        return len(self._providers)

    def clear(self):
        """Forget every provider, closing those that hold resources"""
        with self._lock:
            providers = list(self._providers.values())
            self._providers.clear()
        for provider in providers:
            close = getattr(provider, "close", None)
            if close is not None:
                close()


# Global registry instance
default_registry = ProviderRegistry()


class SecretsConfigurationSource:
    def __init__(self, options: SecretsSourceOptions, fetcher: Optional[SecretFetcher] = None,
                 registry: Optional[ProviderRegistry] = None, **provider_kwargs):
        self.options = options
        self.fetcher = fetcher
        self.registry = registry or default_registry
        self.provider_kwargs = provider_kwargs

    def build(self, builder) -> ConfigurationProvider:
        return self.registry.get_or_create(
            ("secrets", self.options.secret_id),
            lambda: PollingSecretProvider(
                self.fetcher or AwsSecretsManagerFetcher(), self.options, **self.provider_kwargs
            ),
        )


class FeatureFlagSource:
    def __init__(self, sdk_key: str, prefix: str = DEFAULT_PREFIX,
                 client_factory: Optional[ClientFactory] = None,
                 registry: Optional[ProviderRegistry] = None, **provider_kwargs):
        if not sdk_key:
            raise MissingConfigurationError("sdk_key is required for feature flag configuration")
        if not prefix:
            raise MissingConfigurationError("prefix is required for feature flag configuration")
        self.sdk_key = sdk_key
        self.prefix = prefix
        self.client_factory = client_factory
        self.registry = registry or default_registry
        self.provider_kwargs = provider_kwargs

    def build(self, builder) -> ConfigurationProvider:
        return self.registry.get_or_create(
            ("flags", self.sdk_key, self.prefix),
            lambda: PushFlagProvider(
                self.sdk_key, self.prefix, client_factory=self.client_factory, **self.provider_kwargs
            ),
        )


def add_secrets(builder, options: Optional[SecretsSourceOptions] = None, **source_kwargs):
    """Register secret overrides; disabled when no secret is configured"""
    if options is None:
        secret_id = os.environ.get(SECRET_ID_ENV)
        if not secret_id:
            print("No secret identifier provided. Secret configuration overrides disabled.")
            return builder
        options = SecretsSourceOptions(secret_id)

    return builder.add(SecretsConfigurationSource(options, **source_kwargs))


def add_feature_flags(builder, sdk_key: str, prefix: str = DEFAULT_PREFIX, **source_kwargs):
    """Register feature-flag backed configuration values"""
    return builder.add(FeatureFlagSource(sdk_key, prefix, **source_kwargs))
