from __future__ import annotations

import json

from fastapi.testclient import TestClient

import commit_stats.app as app_module
from commit_stats.app import create_app
from commit_stats.codec import encode, encode_optional
from commit_stats.digest import commit_digest
from commit_stats.snapshot import CommitStats

DOCUMENT = {"commit": {"generation": 42, "user_data": {"sync_id": "abc", "history_uuid": None}}}


def _stats() -> CommitStats:
    return CommitStats(user_data={"sync_id": "abc", "history_uuid": None}, generation=42)


def test_healthz_ok() -> None:
    with TestClient(create_app()) as client:
        resp = client.get("/healthz")
        assert resp.status_code == 200
        assert resp.json() == {"ok": True}


def test_encode_returns_wire_bytes() -> None:
    with TestClient(create_app()) as client:
        resp = client.post("/commit/encode", json=DOCUMENT)
        assert resp.status_code == 200
        assert resp.headers["content-type"] == "application/octet-stream"
        assert resp.content == encode(_stats())
        assert resp.headers["x-commit-digest"] == commit_digest(_stats())


def test_encode_sorted_key_order() -> None:
    with TestClient(create_app()) as client:
        resp = client.post("/commit/encode?key_order=sorted", json=DOCUMENT)
        assert resp.content == encode(_stats(), key_order="sorted")
        bad = client.post("/commit/encode?key_order=shuffled", json=DOCUMENT)
        assert bad.status_code == 400


def test_encode_optional_absent() -> None:
    with TestClient(create_app()) as client:
        resp = client.post("/commit/encode?optional=true", json={"commit": None})
        assert resp.status_code == 200
        assert resp.content == b"\x00"
        assert "x-commit-digest" not in resp.headers
        rejected = client.post("/commit/encode", json={"commit": None})
        assert rejected.status_code == 400


def test_encode_rejects_invalid_document() -> None:
    with TestClient(create_app()) as client:
        resp = client.post("/commit/encode", json={"commit": {"generation": "x", "user_data": {}}})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "generation must be an int"


def test_decode_renders_commit() -> None:
    with TestClient(create_app()) as client:
        resp = client.post("/commit/decode", content=encode(_stats()))
        assert resp.status_code == 200
        body = resp.json()
        assert body["commit"] == DOCUMENT["commit"]
        assert list(body["commit"]) == ["generation", "user_data"]
        assert body["commit_digest"] == commit_digest(_stats())
        assert body["render_digest"].startswith("sha256:")


def test_decode_optional() -> None:
    with TestClient(create_app()) as client:
        absent = client.post("/commit/decode?optional=true", content=encode_optional(None))
        assert absent.json() == {"commit": None, "render_digest": None, "commit_digest": None}
        present = client.post("/commit/decode?optional=true", content=encode_optional(_stats()))
        assert present.json()["commit"] == DOCUMENT["commit"]


def test_decode_malformed_is_400() -> None:
    with TestClient(create_app()) as client:
        resp = client.post("/commit/decode", content=encode(_stats())[:-1])
        assert resp.status_code == 400
        assert resp.json()["detail"].startswith("malformed commit stream")


def test_decode_expect_digest() -> None:
    data = encode(_stats())
    with TestClient(create_app()) as client:
        ok = client.post("/commit/decode", params={"expect_digest": commit_digest(_stats())}, content=data)
        assert ok.status_code == 200
        mismatch = client.post("/commit/decode", params={"expect_digest": "sha256:" + "0" * 64}, content=data)
        assert mismatch.status_code == 409
        invalid = client.post("/commit/decode", params={"expect_digest": "nope"}, content=data)
        assert invalid.status_code == 400


def test_body_limit(monkeypatch) -> None:
    monkeypatch.setenv("COMMIT_STATS_MAX_BODY_BYTES", "16")
    with TestClient(create_app()) as client:
        resp = client.post("/commit/decode", content=b"\x00" * 64)
        assert resp.status_code == 413


def test_request_id_roundtrip() -> None:
    with TestClient(create_app()) as client:
        resp = client.get("/healthz", headers={"x-request-id": "req-1"})
        assert resp.headers["x-request-id"] == "req-1"
        generated = client.get("/healthz")
        assert len(generated.headers["x-request-id"]) == 32


def test_configured_key_order_applies_to_encode(monkeypatch) -> None:
    monkeypatch.setenv("COMMIT_STATS_KEY_ORDER", "sorted")
    document = {"commit": {"generation": 1, "user_data": {"b": "2", "a": "1"}}}
    stats = CommitStats(user_data={"b": "2", "a": "1"}, generation=1)
    with TestClient(create_app()) as client:
        resp = client.post("/commit/encode", json=document)
        assert resp.content == encode(stats, key_order="sorted")
        explicit = client.post("/commit/encode?key_order=insertion", json=document)
        assert explicit.content == encode(stats)


def test_encode_body_limit_without_content_length(monkeypatch) -> None:
    monkeypatch.setenv("COMMIT_STATS_MAX_BODY_BYTES", "16")

    def chunks():
        yield json.dumps(DOCUMENT).encode("utf-8")

    with TestClient(create_app()) as client:
        resp = client.post(
            "/commit/encode",
            content=chunks(),
            headers={"content-type": "application/json"},
        )
        assert resp.status_code == 413


def test_serve_command_runs_uvicorn(monkeypatch) -> None:
    calls = []
    monkeypatch.setattr(app_module.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))
    app_module.main(["serve", "--host", "0.0.0.0", "--port", "9000"])
    assert len(calls) == 1
    assert calls[0][1] == {"host": "0.0.0.0", "port": 9000, "reload": False}


def test_serve_defaults() -> None:
    args = app_module._parse_args(["serve"])
    assert args.command == "serve"
    assert args.host == "127.0.0.1"
    assert args.port == 8020
