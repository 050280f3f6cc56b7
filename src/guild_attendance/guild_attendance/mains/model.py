from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class MainEvent:
    """A recurring scheduled community activity members attend."""

    main_id: int
    name: str
    description: Optional[str] = None

    def to_dict(self) -> dict:
        return {"mainID": self.main_id, "name": self.name, "description": self.description}
