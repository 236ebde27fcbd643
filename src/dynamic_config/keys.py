"""
Helpers for turning external key formats into hierarchical configuration keys.

Configuration keys are case-insensitive and use ``:`` between levels, e.g.
``database:connection:timeout``.
"""
from typing import Optional

KEY_DELIMITER = ":"
ENV_NESTING_DELIMITER = "__"
FLAG_NESTING_DELIMITER = "-"


def normalize_key(key: str) -> str:
    """Return the canonical (lower-case) form of a lookup key"""
    return key.lower()


def env_style_to_path(key: str) -> str:
    """Convert ``Foo__Bar`` style keys into ``foo:bar``"""
    return normalize_key(key.replace(ENV_NESTING_DELIMITER, KEY_DELIMITER))


def flag_key_to_path(key: str, prefix: str) -> Optional[str]:
    """Strip ``prefix`` from a flag key and convert dashes to the delimiter.

    Returns None for keys that do not carry the prefix.
    """
    if not key.startswith(prefix):
        return None
    return normalize_key(key[len(prefix):].replace(FLAG_NESTING_DELIMITER, KEY_DELIMITER))


def combine(*segments: str) -> str:
    return KEY_DELIMITER.join(s for s in segments if s)

