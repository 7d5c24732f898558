from __future__ import annotations


class SegmentInfosStub:
    """Mutable stand-in for the segment layer that produces commits."""

    def __init__(self, user_data: dict[str, str | None] | None = None, last_generation: int = 0) -> None:
        self.user_data = dict(user_data or {})
        self.last_generation = last_generation

    def commit(self, **entries: str | None) -> None:
        self.user_data.update(entries)
        self.last_generation += 1
