from __future__ import annotations

import logging

from .config import KeyOrder, validate_key_order
from .errors import MalformedStreamError
from .log import log_json
from .snapshot import CommitStats
from .stream import StreamInput, StreamOutput

__all__ = [
    "encode",
    "decode",
    "encode_optional",
    "decode_optional",
    "write_commit_stats",
    "read_commit_stats",
    "write_optional_commit_stats",
    "read_optional_commit_stats",
]

def _entries(snapshot: CommitStats, key_order: KeyOrder) -> list[tuple[str, str | None]]:
    # one traversal feeds both the count and the entries
    if key_order == "sorted":
        return sorted(snapshot.user_data.items(), key=lambda item: item[0])
    return list(snapshot.user_data.items())


def write_commit_stats(
    out: StreamOutput,
    snapshot: CommitStats,
    *,
    key_order: KeyOrder = "insertion",
) -> None:
    order = validate_key_order(key_order)
    entries = _entries(snapshot, order)
    out.write_vint(len(entries))
    for key, value in entries:
        out.write_string(key)
        out.write_optional_string(value)
    out.write_long(snapshot.generation)


def read_commit_stats(inp: StreamInput) -> CommitStats:
    user_data: dict[str, str | None] = {}
    for _ in range(inp.read_vint()):
        key = inp.read_string()
        user_data[key] = inp.read_optional_string()
    generation = inp.read_long()
    return CommitStats(user_data=user_data, generation=generation)


def write_optional_commit_stats(
    out: StreamOutput,
    snapshot: CommitStats | None,
    *,
    key_order: KeyOrder = "insertion",
) -> None:
    if snapshot is None:
        out.write_bool(False)
        return
    out.write_bool(True)
    write_commit_stats(out, snapshot, key_order=key_order)


def read_optional_commit_stats(inp: StreamInput) -> CommitStats | None:
    if inp.read_bool():
        return read_commit_stats(inp)
    return None


def encode(snapshot: CommitStats, *, key_order: KeyOrder = "insertion") -> bytes:
    out = StreamOutput()
    write_commit_stats(out, snapshot, key_order=key_order)
    return out.getvalue()


def encode_optional(snapshot: CommitStats | None, *, key_order: KeyOrder = "insertion") -> bytes:
    out = StreamOutput()
    write_optional_commit_stats(out, snapshot, key_order=key_order)
    return out.getvalue()


def decode(data: bytes) -> CommitStats:
    inp = StreamInput(data)
    try:
        snapshot = read_commit_stats(inp)
        inp.ensure_consumed()
    except MalformedStreamError as exc:
        log_json(logging.DEBUG, "commit.decode.failed", length=len(data), reason=str(exc))
        raise
    return snapshot


def decode_optional(data: bytes) -> CommitStats | None:
    inp = StreamInput(data)
    try:
        snapshot = read_optional_commit_stats(inp)
        inp.ensure_consumed()
    except MalformedStreamError as exc:
        log_json(logging.DEBUG, "commit.decode.failed", length=len(data), reason=str(exc), optional=True)
        raise
    return snapshot
