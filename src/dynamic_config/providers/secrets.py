"""
Configuration overrides pulled from a remote secret store on a timer.

The secret holds a single JSON object of flat key-value pairs whose keys use
``__`` for nesting (``Database__Password``); they are exposed as hierarchical
configuration keys (``database:password``).
"""
import json
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

from dynamic_config.config.settings import settings
from dynamic_config.errors import MissingConfigurationError
from dynamic_config.keys import env_style_to_path
from dynamic_config.providers.base import RefreshableProvider
from dynamic_config.scheduler import RefreshScheduler


class SecretFetcher(Protocol):
    """Pulls a raw secret string from a remote store"""

    def fetch(self, secret_id: str, timeout: Optional[float] = None) -> Optional[str]:
        """Return the secret's string value, or None when it has none.

        Implementations should bound network calls by ``timeout`` seconds and
        raise on transport errors.
        """


@dataclass(frozen=True)
class SecretsSourceOptions:
    secret_id: str
    fetch_timeout: Optional[float] = None

    def __post_init__(self):
        if not self.secret_id:
            raise MissingConfigurationError("secret_id is required for secret configuration overrides")


class PollingSecretProvider(RefreshableProvider):
    """Refreshes secret overrides every ``min_refresh_interval`` seconds"""

    def __init__(self, fetcher: SecretFetcher, options: SecretsSourceOptions,
                 min_refresh_interval: Optional[float] = None, auto_refresh: bool = True,
                 scheduler: Optional[RefreshScheduler] = None, **kwargs):
        super().__init__(min_refresh_interval=min_refresh_interval, **kwargs)
        self.fetcher = fetcher
        self.options = options
        self.fetch_timeout = (
            options.fetch_timeout
            if options.fetch_timeout is not None
            else settings.get('refresh.fetch_timeout_seconds', 10)
        )

        if scheduler is None:
            # The first timed refresh is deliberately late; load() covers startup
            scheduler = RefreshScheduler(
                self._scheduled_refresh,
                interval=self.min_refresh_interval,
                initial_delay=self.min_refresh_interval * 2,
                name=f"secrets:{options.secret_id}",
            )
        else:
            # A supplied scheduler keeps its own timing but runs this provider's refresh
            scheduler.job = self._scheduled_refresh
        self.scheduler = scheduler
        if auto_refresh:
            self.scheduler.start()

    def _scheduled_refresh(self):
        self.refresh()
        self.on_reload()

    def close(self):
        """Stop the background refresh timer"""
        if self.scheduler.running:
            self.scheduler.stop()

    def _fetch(self) -> Dict[str, Optional[str]]:
        raw = self.fetcher.fetch(self.options.secret_id, timeout=self.fetch_timeout)
        return parse_overrides(raw)


def parse_overrides(raw: Optional[str]) -> Dict[str, Optional[str]]:
    """Parse a JSON object of overrides into hierarchical keys"""
    if raw is None:
        return {}

    overrides = json.loads(raw)
    if overrides is None:
        return {}
    if not isinstance(overrides, dict):
        raise ValueError(f"Secret must contain a JSON object, got {type(overrides).__name__}")

    return {env_style_to_path(key): _as_text(value) for key, value in overrides.items()}


def _as_text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, str):
        return value
    return json.dumps(value, separators=(",", ":"))
