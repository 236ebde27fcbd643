"""
Flag stream client backed by the LaunchDarkly server-side SDK.
"""
from typing import Any, Callable, Optional

from ldclient import Context
from ldclient.client import LDClient
from ldclient.config import Config

from dynamic_config.providers.flags import FlagClientOptions, FlagSnapshot
from dynamic_config.utils.logger import logger

# Flag values are not targeted per user in configuration lookups
ANONYMOUS_CONTEXT = Context.builder("anon").anonymous(True).build()


class LaunchDarklyFlagClient:
    """Adapts an ``LDClient`` to the flag stream client interface"""

    def __init__(self, client: LDClient):
        self.client = client

    @classmethod
    def connect(cls, sdk_key: str, options: Optional[FlagClientOptions] = None, **config_kwargs):
        """Open a streaming connection; blocks up to ``options.start_wait`` seconds"""
        options = options or FlagClientOptions()
        config = Config(sdk_key, diagnostic_opt_out=options.diagnostic_opt_out, **config_kwargs)
        client = LDClient(config=config, start_wait=options.start_wait)
        if not client.is_initialized():
            logger.warning("LaunchDarkly client did not initialize within the start wait")
        return cls(client)

    def snapshot(self, context: Optional[Any] = None) -> FlagSnapshot:
        state = self.client.all_flags_state(context or ANONYMOUS_CONTEXT)
        if not state.valid:
            return FlagSnapshot(valid=False)
        return FlagSnapshot(valid=True, values=state.to_values_map())

    def on_change(self, callback: Callable[[str], None]):
        self.client.flag_tracker.add_listener(lambda change: callback(change.key))

    def close(self):
        self.client.close()
