from __future__ import annotations

import json
from typing import Any, Protocol, TextIO

from ..errors import SinkError

__all__ = ["StructuredSink", "TreeSink", "JsonStreamSink"]

Scalar = str | int | float | bool | None


class StructuredSink(Protocol):
    def start_object(self, name: str | None = None) -> None:
        """Open an object, named when inside another object."""
        ...

    def field(self, name: str, value: Scalar) -> None:
        ...

    def end_object(self) -> None:
        ...


class TreeSink:
    """Builds the rendered document as nested dicts."""

    def __init__(self) -> None:
        self._stack: list[dict[str, Any]] = []
        self._root: dict[str, Any] | None = None

    def start_object(self, name: str | None = None) -> None:
        obj: dict[str, Any] = {}
        if not self._stack:
            if name is not None:
                raise SinkError("root object cannot be named")
            if self._root is not None:
                raise SinkError("document already has a root object")
            self._root = obj
        else:
            if name is None:
                raise SinkError("nested object requires a name")
            self._stack[-1][name] = obj
        self._stack.append(obj)

    def field(self, name: str, value: Scalar) -> None:
        if not self._stack:
            raise SinkError("field written outside of an object")
        self._stack[-1][name] = value

    def end_object(self) -> None:
        if not self._stack:
            raise SinkError("end_object without matching start_object")
        self._stack.pop()

    @property
    def document(self) -> dict[str, Any]:
        if self._root is None or self._stack:
            raise SinkError("document is not complete")
        return self._root


class JsonStreamSink:
    """Writes compact JSON to a text stream as the renderer walks the value.

    Errors raised by the stream propagate to the caller unchanged.
    """

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream
        # one entry per open object: whether a member was already written
        self._members: list[bool] = []
        self._closed_root = False

    def _member_prefix(self, name: str) -> None:
        if self._members[-1]:
            self._stream.write(",")
        self._members[-1] = True
        self._stream.write(_dumps(name))
        self._stream.write(":")

    def start_object(self, name: str | None = None) -> None:
        if not self._members:
            if name is not None:
                raise SinkError("root object cannot be named")
            if self._closed_root:
                raise SinkError("document already has a root object")
        else:
            if name is None:
                raise SinkError("nested object requires a name")
            self._member_prefix(name)
        self._stream.write("{")
        self._members.append(False)

    def field(self, name: str, value: Scalar) -> None:
        if not self._members:
            raise SinkError("field written outside of an object")
        self._member_prefix(name)
        self._stream.write(_dumps(value))

    def end_object(self) -> None:
        if not self._members:
            raise SinkError("end_object without matching start_object")
        self._members.pop()
        self._stream.write("}")
        if not self._members:
            self._closed_root = True


def _dumps(value: Any) -> str:
    return json.dumps(value, ensure_ascii=True, allow_nan=False)
