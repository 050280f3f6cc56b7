from __future__ import annotations

from .repository import MainRepository


class MainService:
    """Use case: list main events (public)."""

    def __init__(self, mains: MainRepository):
        self._mains = mains

    def list_mains(self) -> list[dict]:
        return [m.to_dict() for m in self._mains.list_all()]
