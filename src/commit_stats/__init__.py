from __future__ import annotations

from .codec import decode, decode_optional, encode, encode_optional
from .errors import MalformedStreamError, SinkError
from .ports.commit_source import CommitSource
from .snapshot import CommitStats

__all__ = [
    "CommitSource",
    "CommitStats",
    "MalformedStreamError",
    "SinkError",
    "decode",
    "decode_optional",
    "encode",
    "encode_optional",
]
