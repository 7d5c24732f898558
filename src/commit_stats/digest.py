from __future__ import annotations

import hashlib
import json
from typing import Any

from .codec import encode
from .snapshot import CommitStats

__all__ = ["canonical_bytes", "commit_digest", "render_digest"]


def canonical_bytes(value: Any) -> bytes:
    try:
        text = json.dumps(
            value,
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=True,
            allow_nan=False,
        )
    except (TypeError, ValueError) as exc:
        raise ValueError(f"non-canonical payload: {exc}") from exc
    return text.encode("utf-8")


def _digest_ref(data: bytes) -> str:
    return f"sha256:{hashlib.sha256(data).hexdigest()}"


def commit_digest(snapshot: CommitStats) -> str:
    """Digest of the sorted wire encoding; equal snapshots share a digest."""
    return _digest_ref(encode(snapshot, key_order="sorted"))


def render_digest(document: Any) -> str:
    return _digest_ref(canonical_bytes(document))
