from __future__ import annotations

import argparse
import logging
import time
import uuid
from contextlib import asynccontextmanager
from importlib.metadata import PackageNotFoundError, version
from typing import Any

import uvicorn
from fastapi import Body, FastAPI, HTTPException, Query, Request, Response
from fastapi.responses import JSONResponse

from .codec import decode, decode_optional, encode, encode_optional
from .config import CommitStatsConfig, KeyOrder, get_config, validate_key_order
from .digest import commit_digest
from .errors import MalformedStreamError
from .log import configure_logging, log_json
from .rendering import render_commit_document
from .snapshot import CommitStats
from .wire_contract import snapshot_from_document, validate_digest_ref

_OCTET_STREAM = "application/octet-stream"


def _get_version() -> str:
    try:
        return version("commit-stats")
    except PackageNotFoundError:
        return "unknown"


def create_app() -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        config = get_config()
        configure_logging(config.log_level)
        app.state.config = config
        yield

    app = FastAPI(title="commit-stats", version=_get_version(), lifespan=lifespan)

    @app.middleware("http")
    async def request_logging(request: Request, call_next):
        request_id = request.headers.get("x-request-id", "").strip() or uuid.uuid4().hex
        request.state.request_id = request_id
        start = time.monotonic()
        content_length = request.headers.get("content-length", "").strip()
        if content_length.isdigit() and int(content_length) > _get_app_config(request).max_body_bytes:
            response: Response = JSONResponse(status_code=413, content={"detail": "request body too large"})
        else:
            try:
                response = await call_next(request)
            except Exception:
                latency_ms = int((time.monotonic() - start) * 1000)
                log_json(
                    logging.ERROR,
                    "request.failed",
                    request_id=request_id,
                    method=request.method,
                    path=request.url.path,
                    latency_ms=latency_ms,
                )
                raise
        latency_ms = int((time.monotonic() - start) * 1000)
        response.headers["x-request-id"] = request_id
        log_json(
            logging.INFO,
            "request.completed",
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            latency_ms=latency_ms,
        )
        return response

    @app.get("/healthz")
    async def healthz() -> dict[str, bool]:
        return {"ok": True}

    @app.post("/commit/encode")
    async def commit_encode(
        request: Request,
        body: dict[str, Any] = Body(...),
        key_order: str | None = Query(None),
        optional: bool = Query(False),
    ) -> Response:
        config = _get_app_config(request)
        if len(await request.body()) > config.max_body_bytes:
            raise HTTPException(status_code=413, detail="request body too large")
        order = _parse_key_order(key_order, default=config.key_order)
        try:
            snapshot = snapshot_from_document(body, allow_absent=optional)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        if optional:
            data = encode_optional(snapshot, key_order=order)
        elif snapshot is None:
            raise HTTPException(status_code=400, detail="commit must be an object")
        else:
            data = encode(snapshot, key_order=order)
        headers = {}
        if snapshot is not None:
            headers["x-commit-digest"] = commit_digest(snapshot)
        return Response(content=data, media_type=_OCTET_STREAM, headers=headers)

    @app.post("/commit/decode")
    async def commit_decode(
        request: Request,
        optional: bool = Query(False),
        expect_digest: str | None = Query(None),
    ) -> dict[str, Any]:
        data = await request.body()
        if len(data) > _get_app_config(request).max_body_bytes:
            raise HTTPException(status_code=413, detail="request body too large")
        if expect_digest is not None:
            try:
                validate_digest_ref(expect_digest, "expect_digest")
            except ValueError as exc:
                raise HTTPException(status_code=400, detail=str(exc)) from exc
        try:
            snapshot = decode_optional(data) if optional else decode(data)
        except MalformedStreamError as exc:
            raise HTTPException(status_code=400, detail=f"malformed commit stream: {exc}") from exc
        return _decoded_body(snapshot, expect_digest)

    return app


def _get_app_config(request: Request) -> CommitStatsConfig:
    config = getattr(request.app.state, "config", None)
    if config is None:
        return get_config()
    return config


def _parse_key_order(key_order: str | None, *, default: KeyOrder) -> KeyOrder:
    if key_order is None:
        return default
    try:
        return validate_key_order(key_order)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _decoded_body(snapshot: CommitStats | None, expect_digest: str | None) -> dict[str, Any]:
    if snapshot is None:
        if expect_digest is not None:
            raise HTTPException(status_code=409, detail="commit digest mismatch")
        return {"commit": None, "render_digest": None, "commit_digest": None}
    digest = commit_digest(snapshot)
    if expect_digest is not None and expect_digest != digest:
        raise HTTPException(status_code=409, detail="commit digest mismatch")
    rendered = render_commit_document(snapshot)
    return {
        "commit": rendered.document["commit"],
        "render_digest": rendered.render_digest,
        "commit_digest": digest,
    }


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    app = create_app()
    uvicorn.run(app, host=args.host, port=args.port, reload=False)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="commit-stats")
    sub = parser.add_subparsers(dest="command", required=True)
    serve = sub.add_parser("serve")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8020)
    return parser.parse_args(argv)


app = create_app()
