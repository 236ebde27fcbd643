"""
Base classes for configuration providers.

A provider exposes a flat, case-insensitive mapping of hierarchical keys
(``section:subsection:key``) to string values. Refreshable providers replace
that mapping wholesale on every successful refresh, so readers never need a
lock: they always see one complete snapshot.
"""
import json
import sys
import threading
import time
from abc import ABC, abstractmethod
from datetime import datetime
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from dynamic_config.config.settings import settings
from dynamic_config.errors import FatalConfigurationError
from dynamic_config.keys import combine, normalize_key
from dynamic_config.utils.logger import logger

ReloadCallback = Callable[["ConfigurationProvider"], None]

EMPTY: Mapping[str, Optional[str]] = MappingProxyType({})


class ConfigurationProvider(ABC):
    """Read-only key lookup consumed by the configuration root"""

    def __init__(self):
        self._data: Mapping[str, Optional[str]] = EMPTY
        self._reload_callbacks: List[ReloadCallback] = []

    @property
    def data(self) -> Mapping[str, Optional[str]]:
        """Current snapshot; never mutated in place"""
        return self._data

    def _publish(self, values: Mapping[str, Optional[str]]):
        # Single reference assignment: readers see the old map or the new one
        self._data = MappingProxyType(
            {normalize_key(key): value for key, value in values.items()}
        )

    @abstractmethod
    def load(self):
        """Load (or refresh) the provider's values"""

    def try_get(self, key: str) -> Tuple[bool, Optional[str]]:
        """Case-insensitive lookup returning ``(found, value)``"""
        snapshot = self._data
        normalized = normalize_key(key)
        if normalized in snapshot:
            return True, snapshot[normalized]
        return False, None

    def subscribe(self, callback: ReloadCallback):
        """Register a callback fired whenever the provider reloads"""
        if callback not in self._reload_callbacks:
            self._reload_callbacks.append(callback)

    def unsubscribe(self, callback: ReloadCallback):
        if callback in self._reload_callbacks:
            self._reload_callbacks.remove(callback)

    def on_reload(self):
        """Notify subscribers that values may have changed"""
        for callback in list(self._reload_callbacks):
            try:
                callback(self)
            except Exception as e:
                logger.error(f"Reload callback failed for {self.__class__.__name__}: {e}")


class RefreshableProvider(ConfigurationProvider):
    """Provider whose values come from a remote fetch, refreshed over time.

    At most one refresh runs at a time. The guard is taken with a
    non-blocking acquire: a caller that finds a refresh already running
    returns immediately instead of queueing (drop-newest under contention).
    Successful refreshes are rate limited to one per ``min_refresh_interval``
    seconds. A failed refresh leaves the previous snapshot and timestamp
    untouched; only ``FatalConfigurationError`` escapes ``refresh()``.
    """

    def __init__(self, min_refresh_interval: Optional[float] = None,
                 clock: Callable[[], float] = time.monotonic):
        super().__init__()
        if min_refresh_interval is None:
            min_refresh_interval = settings.get('refresh.min_interval_seconds', 60)
        if min_refresh_interval < 0:
            raise ValueError("min_refresh_interval must not be negative")

        self.min_refresh_interval = min_refresh_interval
        self._clock = clock
        self._lock = threading.Lock()
        self.last_refresh_time: Optional[float] = None
        self.last_refreshed_at: Optional[datetime] = None
        self.last_error: Optional[BaseException] = None
        self.refresh_count = 0

    @property
    def refreshing(self) -> bool:
        return self._lock.locked()

    def load(self):
        self.refresh()

    def refresh(self) -> bool:
        """Attempt a refresh. Returns True when a new snapshot was published."""
        if not self._lock.acquire(blocking=False):
            return False

        try:
            if not self._refresh_due():
                return False

            values = self._fetch()
            self._publish(values)
            self.last_refresh_time = self._clock()
            self.last_refreshed_at = datetime.now()
            self.last_error = None
            self.refresh_count += 1
            return True
        except FatalConfigurationError:
            raise
        except Exception as e:
            self.last_error = e
            self._report_failure(e)
            return False
        finally:
            self._lock.release()

    def _refresh_due(self) -> bool:
        if self.last_refresh_time is None:
            return True
        return self._clock() - self.last_refresh_time >= self.min_refresh_interval

    def _report_failure(self, error: BaseException):
        # Logging may not be configured yet during early startup, so write
        # straight to the process's error stream
        print(f"An exception occurred while refreshing {self.__class__.__name__}:", file=sys.stderr)
        print(f"  {type(error).__name__}: {error}", file=sys.stderr)

    @abstractmethod
    def _fetch(self) -> Mapping[str, Optional[str]]:
        """Fetch and transform remote values into a flat key-value map"""


class StaticProvider(ConfigurationProvider):
    """Fixed in-memory values, nested dictionaries flattened with ``:``"""

    def __init__(self, values: Dict):
        super().__init__()
        self._values = values

    def load(self):
        self._publish(flatten(self._values))


def flatten(values: Mapping, prefix: str = "") -> Dict[str, Optional[str]]:
    flat: Dict[str, Optional[str]] = {}
    for key, value in values.items():
        path = combine(prefix, str(key))
        if isinstance(value, Mapping):
            flat.update(flatten(value, path))
        elif value is None or isinstance(value, str):
            flat[path] = value
        else:
            # Lists and scalars keep their JSON text, e.g. true or ["a","b"]
            flat[path] = json.dumps(value, separators=(",", ":"), default=str)
    return flat
