from __future__ import annotations

from typing import Dict, Iterable, List, Tuple

from progression.components.ability_definition import AbilityCategory, AbilityDefinition


class CatalogError(ValueError):
    """Raised when a catalog's prerequisite graph is inconsistent."""


def check_definition(definition: AbilityDefinition) -> None:
    """Raise ``ValueError`` when a single definition breaks its own invariants."""

    if not definition.id:
        raise ValueError("Ability id must be a non-empty string")
    if definition.max_level < 1:
        raise ValueError(f"Ability '{definition.id}' must have max_level >= 1")
    if len(definition.level_costs) != definition.max_level:
        raise ValueError(
            f"Ability '{definition.id}' declares {len(definition.level_costs)} level costs "
            f"for max_level {definition.max_level}"
        )
    if any(cost < 0 for cost in definition.level_costs):
        raise ValueError(f"Ability '{definition.id}' has a negative level cost")
    if definition.tier < 1:
        raise ValueError(f"Ability '{definition.id}' must have a positive tier")
    for prereq in definition.prerequisites:
        if prereq.ability_id == definition.id:
            raise ValueError(f"Ability '{definition.id}' lists itself as a prerequisite")
        if prereq.min_level < 1:
            raise ValueError(
                f"Ability '{definition.id}' requires level {prereq.min_level} of '{prereq.ability_id}'"
            )


class AbilityCatalog:
    """Read-only collection of ability definitions once loaded."""

    def __init__(self, definitions: Iterable[AbilityDefinition] = ()) -> None:
        self._definitions: Dict[str, AbilityDefinition] = {}
        for definition in definitions:
            self.register(definition)
        if self._definitions:
            self.validate()

    def register(self, definition: AbilityDefinition) -> None:
        if definition.id in self._definitions:
            raise ValueError(f"Ability '{definition.id}' already registered")
        check_definition(definition)
        self._definitions[definition.id] = definition

    def get(self, ability_id: str) -> AbilityDefinition | None:
        return self._definitions.get(ability_id)

    def has(self, ability_id: str) -> bool:
        return ability_id in self._definitions

    def all(self) -> Tuple[AbilityDefinition, ...]:
        return tuple(self._definitions.values())

    def ids(self) -> Tuple[str, ...]:
        return tuple(self._definitions.keys())

    def by_category(self, category: AbilityCategory) -> Tuple[AbilityDefinition, ...]:
        return tuple(d for d in self._definitions.values() if d.category == category)

    def by_tier(self, tier: int) -> Tuple[AbilityDefinition, ...]:
        return tuple(d for d in self._definitions.values() if d.tier == tier)

    def specializations(self) -> Tuple[AbilityDefinition, ...]:
        return tuple(d for d in self._definitions.values() if d.is_specialization)

    def highest_tier(self) -> int:
        return max((d.tier for d in self._definitions.values()), default=0)

    def expertise_paths(self) -> Tuple[str, ...]:
        paths: Dict[str, None] = {}
        for definition in self._definitions.values():
            if definition.expertise_path:
                paths.setdefault(definition.expertise_path, None)
        return tuple(paths)

    def by_expertise_path(self, path: str) -> Tuple[AbilityDefinition, ...]:
        chain = [d for d in self._definitions.values() if d.expertise_path == path]
        return tuple(sorted(chain, key=lambda d: d.tier))

    def dependents_of(self, ability_id: str) -> Tuple[AbilityDefinition, ...]:
        """Abilities that list ``ability_id`` as a prerequisite."""
        return tuple(
            d for d in self._definitions.values()
            if any(p.ability_id == ability_id for p in d.prerequisites)
        )

    def validate(self) -> None:
        """Check prerequisite references and reject cycles."""

        for definition in self._definitions.values():
            for prereq in definition.prerequisites:
                if prereq.ability_id not in self._definitions:
                    raise CatalogError(
                        f"Ability '{definition.id}' requires unknown ability '{prereq.ability_id}'"
                    )
                required = self._definitions[prereq.ability_id]
                if prereq.min_level > required.max_level:
                    raise CatalogError(
                        f"Ability '{definition.id}' requires level {prereq.min_level} of "
                        f"'{required.id}' which caps at {required.max_level}"
                    )
        cycle = self._find_cycle()
        if cycle:
            raise CatalogError("Prerequisite cycle: " + " -> ".join(cycle))

    def _find_cycle(self) -> List[str]:
        visiting: Dict[str, int] = {}
        done: set[str] = set()
        path: List[str] = []

        def visit(ability_id: str) -> List[str]:
            if ability_id in done:
                return []
            if ability_id in visiting:
                return path[visiting[ability_id]:] + [ability_id]
            definition = self._definitions.get(ability_id)
            if definition is None:
                return []
            visiting[ability_id] = len(path)
            path.append(ability_id)
            for prereq in definition.prerequisites:
                found = visit(prereq.ability_id)
                if found:
                    return found
            path.pop()
            del visiting[ability_id]
            done.add(ability_id)
            return []

        for ability_id in self._definitions:
            found = visit(ability_id)
            if found:
                return found
        return []

    def __contains__(self, ability_id: object) -> bool:
        return ability_id in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)


default_catalog = AbilityCatalog()
