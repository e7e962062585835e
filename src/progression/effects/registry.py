from __future__ import annotations

from typing import Any, Callable, Dict, Mapping

from progression.effects import folds

Fold = Callable[[Mapping[str, Any], int], Dict[str, Any]]

_registry: Dict[str, Fold] = {}


def register_fold(ability_id: str, fold: Fold) -> None:
    """Register a fold provided by external content."""

    _registry[ability_id] = fold


def _builtin_folds() -> Dict[str, Fold]:
    return {
        "archery": folds.archery,
        "cleave": folds.cleave,
        "oiyoi_martial_art": folds.oiyoi_martial_art,
        "tactics": folds.tactics,
        "foraging": folds.foraging,
        "tracker": folds.tracker,
        "blacksmithing": folds.blacksmithing,
        "alchemy": folds.alchemy,
        "focus": folds.focus,
        "heroism": folds.heroism,
        "triumph": folds.triumph,
        "relentless_assault": folds.relentless_assault,
        "fatality": folds.fatality,
        "shield_charge": folds.shield_charge,
        "taunt": folds.taunt,
        "rally_cry": folds.rally_cry,
        "troglodyte_philosophy": folds.troglodyte_philosophy,
        "leatherworking": folds.leatherworking,
        "expertise_combat_1": folds.expertise_combat_1,
        "expertise_combat_2": folds.expertise_combat_2,
        "expertise_combat_3": folds.expertise_combat_3,
        "expertise_combat_4": folds.expertise_combat_4,
        "expertise_crafting_1": folds.expertise_crafting_1,
        "expertise_crafting_2": folds.expertise_crafting_2,
        "expertise_knowledge_1": folds.expertise_knowledge_1,
        "expertise_knowledge_2": folds.expertise_knowledge_2,
        "lizardfolk_philosophy": folds.lizardfolk_philosophy,
        "rebound": folds.rebound,
        "barrage": folds.barrage,
        "guardian_insight": folds.guardian_insight,
        "valor": folds.valor,
        "unity": folds.unity,
        "pierce_armor": folds.pierce_armor,
        "blight_strike": folds.blight_strike,
        "warrior_training": folds.warrior_training,
        "druid_training": folds.druid_training,
        "ninja_training": folds.ninja_training,
        "ranger_training": folds.ranger_training,
    }


def create_fold_registry(overrides: Mapping[str, Fold] | None = None) -> Dict[str, Fold]:
    """Combine built-in, externally registered, and override folds into a single map."""

    registry: Dict[str, Fold] = {}
    registry.update(_builtin_folds())
    registry.update(_registry)
    if overrides:
        registry.update(overrides)
    return registry
