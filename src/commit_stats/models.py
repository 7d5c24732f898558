from __future__ import annotations

from typing import TypedDict


class CommitFields(TypedDict):
    generation: int
    user_data: dict[str, str | None]


class CommitDocument(TypedDict):
    commit: CommitFields | None
