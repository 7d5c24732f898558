from __future__ import annotations

from ..digest import render_digest
from ..snapshot import CommitStats
from .models import RenderResult
from .sinks import StructuredSink, TreeSink

__all__ = ["COMMIT", "GENERATION", "USER_DATA", "render_commit", "render_commit_document"]

COMMIT = "commit"
GENERATION = "generation"
USER_DATA = "user_data"


def render_commit(snapshot: CommitStats, sink: StructuredSink) -> None:
    """Write the ``commit`` object into an object the caller has already opened."""
    sink.start_object(COMMIT)
    sink.field(GENERATION, snapshot.generation)
    sink.start_object(USER_DATA)
    for key, value in snapshot.user_data.items():
        sink.field(key, value)
    sink.end_object()
    sink.end_object()


def render_commit_document(snapshot: CommitStats) -> RenderResult:
    sink = TreeSink()
    sink.start_object()
    render_commit(snapshot, sink)
    sink.end_object()
    document = sink.document
    return RenderResult(document=document, render_digest=render_digest(document))
