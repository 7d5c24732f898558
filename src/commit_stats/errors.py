from __future__ import annotations


class MalformedStreamError(ValueError):
    """Raised when encoded bytes cannot be decoded into a value."""


class SinkError(RuntimeError):
    """Raised by the bundled structured sinks when they are driven out of order."""
