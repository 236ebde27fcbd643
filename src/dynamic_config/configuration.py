"""
Minimal configuration root: an ordered stack of providers where the
provider added last wins. Sources plug into it through ``build(builder)``.
"""
from typing import Any, Callable, Dict, List, Optional, Protocol

from dynamic_config.keys import KEY_DELIMITER, normalize_key
from dynamic_config.providers.base import ConfigurationProvider, StaticProvider
from dynamic_config.utils.logger import logger


class ConfigurationSource(Protocol):
    def build(self, builder: "ConfigurationBuilder") -> ConfigurationProvider:
        ...


class MappingSource:
    """Source for fixed in-memory values"""

    def __init__(self, values: Dict[str, Any]):
        self.values = values

    def build(self, builder: "ConfigurationBuilder") -> ConfigurationProvider:
        return StaticProvider(self.values)


class ConfigurationBuilder:
    def __init__(self):
        self.sources: List[ConfigurationSource] = []

    def add(self, source: ConfigurationSource) -> "ConfigurationBuilder":
        self.sources.append(source)
        return self

    def add_mapping(self, values: Dict[str, Any]) -> "ConfigurationBuilder":
        return self.add(MappingSource(values))

    def build(self) -> "ConfigurationRoot":
        """Build every source and load each provider once, synchronously"""
        providers = [source.build(self) for source in self.sources]
        for provider in providers:
            provider.load()
        logger.debug(f"Configuration built from {len(providers)} provider(s)")
        return ConfigurationRoot(providers)


class ConfigurationRoot:
    """Read configuration values by hierarchical key"""

    def __init__(self, providers: List[ConfigurationProvider]):
        self.providers = providers
        self._change_callbacks: List[Callable[["ConfigurationRoot"], None]] = []
        for provider in providers:
            provider.subscribe(self._provider_reloaded)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        for provider in reversed(self.providers):
            found, value = provider.try_get(key)
            if found:
                return value
        return default

    def __getitem__(self, key: str) -> Optional[str]:
        return self.get(key)

    def __contains__(self, key: str) -> bool:
        return any(provider.try_get(key)[0] for provider in self.providers)

    def get_section(self, path: str) -> Dict[str, Optional[str]]:
        """Values below ``path``, keyed relative to it"""
        prefix = normalize_key(path) + KEY_DELIMITER
        section: Dict[str, Optional[str]] = {}
        for provider in self.providers:
            for key, value in provider.data.items():
                if key.startswith(prefix):
                    section[key[len(prefix):]] = value
        return section

    def as_dict(self) -> Dict[str, Optional[str]]:
        merged: Dict[str, Optional[str]] = {}
        for provider in self.providers:
            merged.update(provider.data)
        return merged

    def on_change(self, callback: Callable[["ConfigurationRoot"], None]):
        self._change_callbacks.append(callback)

    def reload(self):
        """Ask every provider to load again"""
        for provider in self.providers:
            provider.load()
        self._notify()

    def _provider_reloaded(self, provider: ConfigurationProvider):
        self._notify()

    def _notify(self):
        for callback in list(self._change_callbacks):
            try:
                callback(self)
            except Exception as e:
                logger.error(f"Configuration change callback failed: {e}")
