from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import MainEvent


class MainRepository(Protocol):
    def list_all(self) -> Sequence[MainEvent]:
        raise NotImplementedError

    def get_by_id(self, main_id: int) -> Optional[MainEvent]:
        raise NotImplementedError
