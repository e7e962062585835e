from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple

from progression.constants import DEFAULT_LEVEL_COSTS, DEFAULT_MAX_LEVEL, LEVEL_ZERO_DESCRIPTION


class AbilityCategory(Enum):
    """Broad grouping used by browsers to tab the catalog."""
    COMBAT = "Combat"
    CRAFTING = "Crafting"
    KNOWLEDGE = "Knowledge"
    EXPLORATION = "Exploration"
    SPECIALIZATION = "Specialization"
    OTHER = "Other"


@dataclass(frozen=True, slots=True)
class Prerequisite:
    """Minimum level another ability must reach before first learn."""

    ability_id: str
    min_level: int = 1


_DIFFICULTY_TEXT = {
    1: "Low (Beginner-friendly)",
    2: "Low-Medium",
    3: "Medium",
    4: "Medium-High",
    5: "High",
}


@dataclass(frozen=True, slots=True)
class SpecializationProfile:
    """Class-choice flavour attached to a specialization ability."""

    class_name: str
    role: str
    difficulty: int = 3
    optimal_weapons: Tuple[str, ...] = ()
    optimal_armor: Tuple[str, ...] = ()
    key_abilities: Tuple[str, ...] = ()

    def difficulty_text(self) -> str:
        return _DIFFICULTY_TEXT.get(self.difficulty, "Medium")

    def class_description(self, description: str) -> str:
        return f"{self.class_name}: {self.role}\nDifficulty: {self.difficulty_text()}\n\n{description}"

    def recommended_gear_text(self) -> str:
        weapons = ", ".join(self.optimal_weapons)
        armor = ", ".join(self.optimal_armor)
        return f"Optimal Weapons: {weapons}\nOptimal Armor: {armor}"

    def key_abilities_text(self) -> str:
        return "\n".join(f"• {ability}" for ability in self.key_abilities)


@dataclass(frozen=True, slots=True)
class AbilityDefinition:
    """Static, catalog-owned description of a learnable ability.

    Attributes:
        id: Unique identifier used by the ledger and the fold registry.
        name: Display name.
        description: Long-form text for browsers.
        tier: Informational progression tier (1 = core).
        category: Browser grouping.
        max_level: Highest reachable level (at least 1).
        level_costs: ``level_costs[i]`` is the point cost to go from level
            ``i`` to ``i + 1``; its length always equals ``max_level``.
        prerequisites: Levels required in other abilities before first learn.
        is_specialization: Whether this ability is a mutually exclusive class.
        level_effects: Effect lines shown for each level, index 0 = level 1.
        unlocks: Display names of follow-up abilities opened at max level.
        expertise_path: Name of the expertise chain this ability belongs to.
        specialization: Class profile for specialization abilities.
    """

    id: str
    name: str
    description: str = ""
    tier: int = 1
    category: AbilityCategory = AbilityCategory.OTHER
    max_level: int = DEFAULT_MAX_LEVEL
    level_costs: Tuple[int, ...] = DEFAULT_LEVEL_COSTS
    prerequisites: Tuple[Prerequisite, ...] = ()
    is_specialization: bool = False
    level_effects: Tuple[Tuple[str, ...], ...] = ()
    unlocks: Tuple[str, ...] = ()
    expertise_path: str | None = None
    specialization: SpecializationProfile | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        # Accept lists from data tables but store immutable tuples.
        object.__setattr__(self, "level_costs", tuple(self.level_costs))
        object.__setattr__(self, "prerequisites", tuple(self.prerequisites))
        object.__setattr__(self, "level_effects", tuple(tuple(lines) for lines in self.level_effects))
        object.__setattr__(self, "unlocks", tuple(self.unlocks))

    def cost_for_level(self, level: int) -> int | None:
        """Cost to advance from ``level`` to ``level + 1`` or None at the cap."""
        if level < 0 or level >= self.max_level:
            return None
        return self.level_costs[level]

    def total_cost(self, level: int) -> int:
        """Points paid to bring this ability from 0 up to ``level``."""
        level = max(0, min(level, self.max_level))
        return sum(self.level_costs[:level])

    def effects_for_level(self, level: int) -> Tuple[str, ...]:
        if level <= 0 or level > len(self.level_effects):
            return ()
        return self.level_effects[level - 1]


def describe_effects(definition: AbilityDefinition, level: int) -> str:
    """Human-readable effect summary for ``definition`` at ``level``."""

    if level <= 0:
        return LEVEL_ZERO_DESCRIPTION
    if level > definition.max_level:
        return "Unknown level"
    lines = list(definition.effects_for_level(level))
    if not lines:
        return f"{definition.name} (Level {level})"
    if level == definition.max_level and definition.unlocks:
        lines.append("Unlocks: " + ", ".join(definition.unlocks))
    return "\n".join(lines)
