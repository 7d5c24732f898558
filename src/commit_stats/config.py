"""
Runtime configuration for commit-stats.

Read from the environment once and cached; immutable afterwards.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Literal

__all__ = [
    "KeyOrder",
    "KEY_ORDERS",
    "CommitStatsConfig",
    "load_config",
    "get_config",
    "reset_config_cache",
]

KeyOrder = Literal["insertion", "sorted"]
LogLevelName = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

KEY_ORDERS: tuple[KeyOrder, ...] = ("insertion", "sorted")
_LOG_LEVELS: tuple[LogLevelName, ...] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class CommitStatsConfig:
    """Immutable service and codec configuration."""

    # Order in which user_data entries are written on the wire
    key_order: KeyOrder
    # Largest request body the HTTP surface accepts
    max_body_bytes: int
    log_level: LogLevelName


def validate_key_order(value: str) -> KeyOrder:
    if value not in KEY_ORDERS:
        raise ValueError(f"key_order must be one of {', '.join(KEY_ORDERS)}")
    return value  # type: ignore[return-value]


def _read_int_env(names: list[str], *, default: int, minimum: int = 1) -> int:
    for name in names:
        raw = os.getenv(name, "").strip()
        if not raw:
            continue
        try:
            value = int(raw)
        except ValueError:
            continue
        return max(minimum, value)
    return max(minimum, default)


def _read_choice_env(name: str, *, default: str, choices: tuple[str, ...]) -> str:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    if raw not in choices:
        raise ValueError(f"{name} must be one of {', '.join(choices)}")
    return raw


def load_config() -> CommitStatsConfig:
    """
    Load configuration from the environment.

    Raises:
        ValueError: If an enumerated setting has an unknown value.
    """
    key_order = _read_choice_env(
        "COMMIT_STATS_KEY_ORDER",
        default="insertion",
        choices=KEY_ORDERS,
    )
    log_level = _read_choice_env(
        "COMMIT_STATS_LOG_LEVEL",
        default="INFO",
        choices=_LOG_LEVELS,
    )
    return CommitStatsConfig(
        key_order=validate_key_order(key_order),
        max_body_bytes=_read_int_env(
            ["COMMIT_STATS_MAX_BODY_BYTES"],
            default=1024 * 1024,
            minimum=16,
        ),
        log_level=log_level,  # type: ignore[arg-type]
    )


@lru_cache(maxsize=1)
def get_config() -> CommitStatsConfig:
    """
    Get cached configuration.

    Loads once at first call, immutable thereafter.
    """
    return load_config()


def reset_config_cache() -> None:
    """Reset config cache. Only for testing."""
    get_config.cache_clear()
