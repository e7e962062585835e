from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class AbilityState:
    """Mutable per-player level of a single ability.

    A level of 0 means the ability is not learned; such states are never kept
    in a ledger's learned set.
    """

    ability_id: str
    level: int = 0

    @property
    def is_learned(self) -> bool:
        return self.level > 0

    def copy(self) -> "AbilityState":
        return AbilityState(ability_id=self.ability_id, level=self.level)
