from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping


@dataclass(slots=True)
class LedgerSnapshot:
    """Plain-data copy of a ledger for an external save system.

    Attributes:
        available_points: Unspent points.
        levels: Learned ability id -> level (only levels above 0).
        specialization_id: Active specialization, if any.
        total_granted: Points ever granted; ``None`` lets the loader derive it
            from spent + available.
    """

    available_points: int = 0
    levels: Dict[str, int] = field(default_factory=dict)
    specialization_id: str | None = None
    total_granted: int | None = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "available_points": self.available_points,
            "levels": dict(sorted(self.levels.items())),
            "specialization_id": self.specialization_id,
            "total_granted": self.total_granted,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LedgerSnapshot":
        raw_levels = data.get("levels") or {}
        levels: Dict[str, int] = {}
        for key, value in dict(raw_levels).items():
            try:
                levels[str(key)] = int(value)
            except (TypeError, ValueError):
                continue
        total = data.get("total_granted")
        return cls(
            available_points=int(data.get("available_points", 0) or 0),
            levels=levels,
            specialization_id=data.get("specialization_id"),
            total_granted=int(total) if total is not None else None,
        )
