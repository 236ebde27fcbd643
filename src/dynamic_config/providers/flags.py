"""
Configuration values mirrored from a feature-flag service.

Flags whose key starts with the configured prefix become configuration
values: ``configure-backend-cache-ttl`` is exposed as ``cache:ttl``. The
provider connects lazily on its first load and reloads whenever the flag
service reports a change; there is no polling timer.
"""
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Protocol

from dynamic_config.config.settings import settings
from dynamic_config.errors import (
    ConfigurationError,
    MissingConfigurationError,
    NoPriorDataError,
    StaleSnapshotError,
)
from dynamic_config.keys import flag_key_to_path
from dynamic_config.providers.base import RefreshableProvider
from dynamic_config.utils.logger import logger

DEFAULT_PREFIX = "configure-backend-"


@dataclass(frozen=True)
class FlagSnapshot:
    """All flag values evaluated at one point in time"""

    valid: bool
    values: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class FlagClientOptions:
    diagnostic_opt_out: bool = True
    start_wait: float = 5.0


class FlagStreamClient(Protocol):
    """Live connection to a flag service"""

    def snapshot(self, context: Optional[Any] = None) -> FlagSnapshot:
        """Evaluate every flag; context None means an anonymous evaluation"""

    def on_change(self, callback: Callable[[str], None]):
        """Register a callback invoked with the key of any flag that changes"""

    def close(self):
        """Release the connection"""


ClientFactory = Callable[[str, FlagClientOptions], FlagStreamClient]


class ProviderState(Enum):
    UNINITIALIZED = "uninitialized"
    CONNECTING = "connecting"
    READY = "ready"
    FAILED = "failed"


def _default_client_factory(sdk_key: str, options: FlagClientOptions) -> FlagStreamClient:
    from dynamic_config.launchdarkly import LaunchDarklyFlagClient

    return LaunchDarklyFlagClient.connect(sdk_key, options)


class PushFlagProvider(RefreshableProvider):
    """Mirrors prefixed feature flags into configuration values"""

    def __init__(self, sdk_key: str, prefix: str = DEFAULT_PREFIX,
                 client_factory: Optional[ClientFactory] = None,
                 client_options: Optional[FlagClientOptions] = None,
                 min_refresh_interval: float = 0, **kwargs):
        if not sdk_key:
            raise MissingConfigurationError("sdk_key is required for feature flag configuration")
        if not prefix:
            raise MissingConfigurationError("prefix is required for feature flag configuration")

        super().__init__(min_refresh_interval=min_refresh_interval, **kwargs)
        self.sdk_key = sdk_key
        self.prefix = prefix
        self.client_factory = client_factory or _default_client_factory
        self.client_options = client_options or FlagClientOptions(
            start_wait=settings.get('flags.start_wait_seconds', 5.0)
        )
        self.client: Optional[FlagStreamClient] = None
        self.state = ProviderState.UNINITIALIZED

    def _fetch(self) -> Dict[str, Optional[str]]:
        if self.state is ProviderState.FAILED:
            raise NoPriorDataError("Feature flag provider failed during its initial load")

        # Runs under the refresh guard, so the client is created exactly once
        if self.client is None:
            self._connect()

        snapshot = self.client.snapshot()
        if not snapshot.valid:
            # Only a load that has never succeeded is fatal; an empty but valid
            # earlier snapshot still counts as loaded
            if self.state is not ProviderState.READY:
                self.state = ProviderState.FAILED
                raise NoPriorDataError("Could not load the initial feature flags")
            raise StaleSnapshotError("Flag service returned an invalid snapshot; keeping previous values")

        values = self._transform(snapshot.values)
        self.state = ProviderState.READY
        return values

    def _connect(self):
        self.state = ProviderState.CONNECTING
        try:
            client = self.client_factory(self.sdk_key, self.client_options)
        except Exception as e:
            # The client is only created before the first successful load
            self.state = ProviderState.FAILED
            raise NoPriorDataError(f"Could not connect to the feature flag service: {e}") from e

        client.on_change(self._on_flag_change)
        self.client = client
        logger.info(f"Connected to feature flag service (prefix '{self.prefix}')")

    def _transform(self, values: Mapping[str, Any]) -> Dict[str, Optional[str]]:
        result: Dict[str, Optional[str]] = {}
        for key, value in values.items():
            if value is None:
                continue
            path = flag_key_to_path(key, self.prefix)
            if path is None:
                continue
            result[path] = value if isinstance(value, str) else json.dumps(value, separators=(",", ":"))
        return result

    def _on_flag_change(self, flag_key: str):
        # Called on the flag client's thread; there is nobody to raise to
        try:
            if self.refresh():
                self.on_reload()
        except ConfigurationError as e:
            logger.error(f"Failed to reload feature flags after change to '{flag_key}': {e}")

    def close(self):
        """Close the flag service connection, if one was opened"""
        if self.client is not None:
            self.client.close()
