from __future__ import annotations

from .models import RenderResult
from .renderer import render_commit, render_commit_document
from .sinks import JsonStreamSink, StructuredSink, TreeSink

__all__ = [
    "JsonStreamSink",
    "RenderResult",
    "StructuredSink",
    "TreeSink",
    "render_commit",
    "render_commit_document",
]
