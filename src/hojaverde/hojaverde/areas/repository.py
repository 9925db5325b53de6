from __future__ import annotations

from typing import Protocol, Sequence

from .model import Area


class AreaRepository(Protocol):
    """Read-only lookups over areas (CRUD lives elsewhere)."""

    def get_by_ids(self, area_ids: Sequence[str]) -> Sequence[Area]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Area]:
        raise NotImplementedError
