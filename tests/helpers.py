from __future__ import annotations

from typing import Any, Dict, Sequence

from progression.catalog.registry import AbilityCatalog
from progression.components.ability_definition import (
    AbilityCategory,
    AbilityDefinition,
    Prerequisite,
)
from progression.events.bus import EventBus


def make_ability(
    ability_id: str,
    costs: Sequence[int] = (1, 1, 1),
    *,
    prerequisites: Sequence[Prerequisite] = (),
    category: AbilityCategory = AbilityCategory.COMBAT,
    tier: int = 1,
    **extra: Any,
) -> AbilityDefinition:
    """Small ability definition whose level cap follows ``costs``."""

    return AbilityDefinition(
        id=ability_id,
        name=ability_id.replace("_", " ").title(),
        description=f"Test ability {ability_id}",
        tier=tier,
        category=category,
        max_level=len(costs),
        level_costs=tuple(costs),
        prerequisites=tuple(prerequisites),
        **extra,
    )


def make_specialization(ability_id: str, costs: Sequence[int] = (1,), **extra: Any) -> AbilityDefinition:
    return make_ability(
        ability_id,
        costs,
        category=AbilityCategory.SPECIALIZATION,
        is_specialization=True,
        tier=4,
        **extra,
    )


def build_catalog(*definitions: AbilityDefinition) -> AbilityCatalog:
    return AbilityCatalog(definitions)


def capture(bus: EventBus, event_name: str) -> list[Dict[str, Any]]:
    """Record every payload emitted for ``event_name`` on ``bus``."""

    captured: list[Dict[str, Any]] = []
    bus.subscribe(event_name, lambda sender, **payload: captured.append(payload))
    return captured


class StubRandom:
    """Deterministic stand-in for ``random.Random`` returning queued values."""

    def __init__(self, *values: float, default: float = 0.99) -> None:
        self._values = list(values)
        self._default = default
        self.calls = 0

    def random(self) -> float:
        self.calls += 1
        if self._values:
            return self._values.pop(0)
        return self._default
