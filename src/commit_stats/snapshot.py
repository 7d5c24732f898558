"""
Commit snapshot value.

A CommitStats captures the user data and generation of the last commit
point of a segment set. Instances are immutable once constructed and can be
shared between threads without locking.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from .ports.commit_source import CommitSource

__all__ = ["CommitStats", "INT64_MIN", "INT64_MAX"]

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


@dataclass(frozen=True, eq=False, repr=False)
class CommitStats:
    """Immutable view of the last commit point."""

    user_data: Mapping[str, str | None] = field(default_factory=dict)
    generation: int = 0

    def __post_init__(self) -> None:
        # private copy, the producer keeps mutating its own mapping
        copied: dict[str, str | None] = {}
        for key, value in _items(self.user_data):
            if not isinstance(key, str):
                raise ValueError("user_data keys must be strings")
            if value is not None and not isinstance(value, str):
                raise ValueError(f"user_data[{key!r}] must be a string or None")
            copied[key] = value
        object.__setattr__(self, "user_data", MappingProxyType(copied))
        _validate_generation(self.generation)

    @classmethod
    def from_source(cls, source: CommitSource) -> CommitStats:
        """Snapshot the producer's current user data and last generation."""
        return cls(user_data=source.user_data, generation=source.last_generation)

    @classmethod
    def empty(cls) -> CommitStats:
        return cls()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CommitStats):
            return NotImplemented
        return self.generation == other.generation and dict(self.user_data) == dict(other.user_data)

    def __hash__(self) -> int:
        return hash((self.generation, frozenset(self.user_data.items())))

    def __repr__(self) -> str:
        return f"CommitStats(user_data={dict(self.user_data)!r}, generation={self.generation})"


def _items(user_data: Any) -> list[tuple[Any, Any]]:
    if not isinstance(user_data, Mapping):
        raise ValueError("user_data must be a mapping")
    return list(user_data.items())


def _validate_generation(generation: object) -> None:
    if isinstance(generation, bool) or not isinstance(generation, int):
        raise ValueError("generation must be an int")
    if generation < INT64_MIN or generation > INT64_MAX:
        raise ValueError(f"generation out of int64 range: {generation}")
