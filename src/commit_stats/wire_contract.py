from __future__ import annotations

from typing import Mapping

from .models import CommitDocument, CommitFields
from .snapshot import INT64_MAX, INT64_MIN, CommitStats


def validate_commit_document(document: object, *, allow_absent: bool = False) -> CommitDocument:
    if not isinstance(document, Mapping):
        raise ValueError("document must be a mapping")
    if "commit" not in document:
        raise ValueError("commit is required")
    commit = document.get("commit")
    if commit is None:
        if not allow_absent:
            raise ValueError("commit must be an object")
        return {"commit": None}
    return {"commit": validate_commit_fields(commit)}


def validate_commit_fields(commit: object) -> CommitFields:
    if not isinstance(commit, Mapping):
        raise ValueError("commit must be an object")
    generation = _require_int(commit, "generation")
    if generation < INT64_MIN or generation > INT64_MAX:
        raise ValueError("generation must fit in a signed 64-bit integer")
    user_data_map = _require_mapping(commit, "user_data")
    user_data: dict[str, str | None] = {}
    for key, value in user_data_map.items():
        if not isinstance(key, str):
            raise ValueError("user_data keys must be strings")
        if value is not None and not isinstance(value, str):
            raise ValueError(f"user_data.{key} must be a string or null")
        user_data[key] = value
    return {"generation": generation, "user_data": user_data}


def snapshot_from_document(document: object, *, allow_absent: bool = False) -> CommitStats | None:
    """Rebuild a snapshot from its structured rendering."""
    validated = validate_commit_document(document, allow_absent=allow_absent)
    commit = validated["commit"]
    if commit is None:
        return None
    return CommitStats(user_data=commit["user_data"], generation=commit["generation"])


def _require_int(mapping: Mapping[str, object], key: str) -> int:
    value = mapping.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key} must be an int")
    return value


def _require_mapping(mapping: Mapping[str, object], key: str) -> Mapping[str, object]:
    value = mapping.get(key)
    if not isinstance(value, Mapping):
        raise ValueError(f"{key} must be a mapping")
    return value


def validate_digest_ref(value: str, name: str) -> None:
    if ":" not in value:
        raise ValueError(f"{name} must be sha256:<64 hex>")
    algo, hex_value = value.split(":", 1)
    if algo != "sha256":
        raise ValueError(f"{name} must be sha256:<64 hex>")
    if len(hex_value) != 64:
        raise ValueError(f"{name} must be sha256:<64 hex>")
    try:
        bytes.fromhex(hex_value)
    except ValueError as exc:
        raise ValueError(f"{name} must be sha256:<64 hex>") from exc
