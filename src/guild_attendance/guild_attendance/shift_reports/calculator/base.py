from __future__ import annotations

from abc import ABC, abstractmethod

from ..model import ShiftActivity


class ScoreCalculator(ABC):
    """Calculator interface (Strategy Pattern for shift scoring)."""

    @abstractmethod
    def total(self, activity: ShiftActivity) -> int:
        raise NotImplementedError
