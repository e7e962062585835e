"""Shapes exchanged with the inventory and combat collaborators."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping, Optional, Protocol, Tuple


class DamageKind(Enum):
    """Damage kinds as reported by the combat pipeline."""
    PHYSICAL = "physical"
    FIRE = "fire"
    ICE = "ice"
    POISON = "poison"
    ELECTRIC = "electric"
    HOLY = "holy"
    DEMONIC = "demonic"


@dataclass(frozen=True, slots=True)
class EquippedWeapon:
    """Currently wielded weapon as seen by the damage hooks.

    ``tag`` is the weapon class (``"axe"``, ``"longbow"``...). ``gear_tags``
    carries extra labels such as ``"oiyoi"`` for gear-conditional effects.
    """

    tag: str
    ranged: bool = False
    gear_tags: Tuple[str, ...] = ()

    def has_tag(self, tag: str) -> bool:
        return tag == self.tag or tag in self.gear_tags


class BaseStatsProvider(Protocol):
    def __call__(self) -> Mapping[str, Any]:
        ...


EquipmentQuery = Callable[[], Optional[EquippedWeapon]]


def damage_kind_key(damage_kind: Any) -> str:
    """Normalise an opaque damage kind into a stat-name fragment."""

    value = getattr(damage_kind, "value", damage_kind)
    if value is None:
        return ""
    return str(value).strip().lower()
