from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class RenderResult:
    document: dict[str, Any]
    render_digest: str
