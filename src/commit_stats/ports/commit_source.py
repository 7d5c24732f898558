from __future__ import annotations

from typing import Mapping, Protocol


class CommitSource(Protocol):
    """Producer of commit metadata, typically the segment layer of a store.

    Both attributes are read once per snapshot. Keeping them consistent with
    each other is up to the producer's own commit protocol.
    """

    @property
    def user_data(self) -> Mapping[str, str | None]:
        ...

    @property
    def last_generation(self) -> int:
        ...
