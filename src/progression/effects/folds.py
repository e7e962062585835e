"""Pure stat folds, one per ability.

Each fold takes the stats accumulated so far plus the ability's current
level and returns a new mapping. Folds only add, scale, raise a stat to a
threshold or set a capability flag, so the order of generic abilities does
not change the result; specializations are applied last and may build on
generic stats.
"""
from __future__ import annotations

from typing import Any, Dict, Mapping

from progression.constants import (
    DEFAULT_ACCURACY,
    DEFAULT_CRIT_CHANCE,
    DEFAULT_CRIT_MULTIPLIER,
    DEFAULT_MAX_HEALTH,
    DEFAULT_MOVEMENT_SPEED,
    DEFAULT_RANGED_ATTACK_RANGE,
)

Stats = Dict[str, Any]


def _add(stats: Stats, key: str, amount: float, default: float = 0) -> None:
    stats[key] = stats.get(key, default) + amount


def _scale(stats: Stats, key: str, factor: float, default: float = 1.0) -> None:
    stats[key] = stats.get(key, default) * factor


def _at_least(stats: Stats, key: str, value: float) -> None:
    current = stats.get(key)
    stats[key] = value if current is None else max(current, value)


def _at_most(stats: Stats, key: str, value: float) -> None:
    current = stats.get(key)
    stats[key] = value if current is None else min(current, value)


def _flag(stats: Stats, key: str) -> None:
    stats[key] = True


def _pick(values, level: int):
    """Per-level value, holding the last entry past the end of ``values``."""
    return values[min(level, len(values)) - 1]


# ---------------------------------------------------------------------------
# Tier 1 combat
# ---------------------------------------------------------------------------
def archery(stats: Mapping[str, Any], level: int) -> Stats:
    result = dict(stats)
    _flag(result, "can_use_bows")
    _add(result, "longbow_attack_bonus", level)
    _add(result, "crossbow_attack_bonus", level)
    _flag(result, "can_craft_bows")
    if level >= 2:
        _add(result, "ranged_attack_range", 25 * (level - 1), DEFAULT_RANGED_ATTACK_RANGE)
    return result


def cleave(stats: Mapping[str, Any], level: int) -> Stats:
    result = dict(stats)
    _add(result, "cleave_chance", 0.05 * level)
    _at_least(result, "cleave_targets", 2 + level)
    _at_least(result, "cleave_damage_fraction", 0.5)
    return result


def oiyoi_martial_art(stats: Mapping[str, Any], level: int) -> Stats:
    result = dict(stats)
    _flag(result, "can_use_oiyoi_gear")
    _flag(result, "unarmed_level_scaling")
    _add(result, "shuriken_attack_bonus", level)
    _add(result, "blowdart_attack_bonus", level)
    if level >= 2:
        _add(result, "unarmed_dodge_chance", 0.15 * (level - 1))
    if level >= 3:
        _flag(result, "can_craft_oiyoi_gear")
    return result


def tactics(stats: Mapping[str, Any], level: int) -> Stats:
    result = dict(stats)
    _at_least(result, "tactics_bonus_step", 0.1 * level)
    _at_least(result, "tactics_bonus_max", level)
    return result


# ---------------------------------------------------------------------------
# Tier 2-3
# ---------------------------------------------------------------------------
def foraging(stats: Mapping[str, Any], level: int) -> Stats:
    result = dict(stats)
    _add(result, "forage_chance", 0.05 * level)
    return result


def tracker(stats: Mapping[str, Any], level: int) -> Stats:
    result = dict(stats)
    _add(result, "exposed_weakness_chance", 0.03 * level)
    _at_least(result, "exposed_weakness_multiplier", 2.0 if level >= 3 else 1.5)
    return result


def blacksmithing(stats: Mapping[str, Any], level: int) -> Stats:
    result = dict(stats)
    _at_least(result, "gear_durability_multiplier", _pick((1.5, 2.0, 3.0), level))
    _at_most(result, "repair_cost_per_tenth", _pick((150, 125, 100), level))
    if level >= 3:
        _flag(result, "can_craft_traps")
    return result


def alchemy(stats: Mapping[str, Any], level: int) -> Stats:
    result = dict(stats)
    _scale(result, "resin_effectiveness", 1.5)
    if level >= 2:
        _scale(result, "potion_duration_multiplier", 1.5)
    if level >= 3:
        _scale(result, "fire_bomb_damage_multiplier", 1.25)
    return result


def focus(stats: Mapping[str, Any], level: int) -> Stats:
    result = dict(stats)
    _add(result, "accuracy", 0.03 * level, DEFAULT_ACCURACY)
    return result


def heroism(stats: Mapping[str, Any], level: int) -> Stats:
    result = dict(stats)
    _add(result, "low_health_damage_bonus", 0.15 * level)
    _at_least(result, "low_health_threshold", 0.3)
    return result


def triumph(stats: Mapping[str, Any], level: int) -> Stats:
    result = dict(stats)
    _add(result, "heal_on_kill", 5 + 3 * level)
    return result


def relentless_assault(stats: Mapping[str, Any], level: int) -> Stats:
    result = dict(stats)
    _add(result, "attack_speed_bonus", 0.1 + 0.05 * level)
    return result


def fatality(stats: Mapping[str, Any], level: int) -> Stats:
    result = dict(stats)
    _add(result, "crit_chance", 0.05 * level, DEFAULT_CRIT_CHANCE)
    _add(result, "crit_damage_multiplier", 0.2 * level, DEFAULT_CRIT_MULTIPLIER)
    return result


def shield_charge(stats: Mapping[str, Any], level: int) -> Stats:
    result = dict(stats)
    _flag(result, "shield_charge_unlocked")
    _at_least(result, "shield_charge_damage", 5 + 3 * level)
    _at_least(result, "shield_charge_stun_duration", 1 + 0.5 * level)
    _at_most(result, "shield_charge_cooldown", 15 - 2 * level)
    return result


def taunt(stats: Mapping[str, Any], level: int) -> Stats:
    result = dict(stats)
    _flag(result, "taunt_unlocked")
    _at_least(result, "taunt_radius", 100 + 50 * level)
    _at_least(result, "taunt_duration", 3 + level)
    _at_most(result, "taunt_cooldown", 20 - 3 * level)
    return result


def rally_cry(stats: Mapping[str, Any], level: int) -> Stats:
    result = dict(stats)
    _flag(result, "rally_cry_unlocked")
    _at_least(result, "rally_cry_damage_bonus", 0.1 + 0.05 * level)
    _at_least(result, "rally_cry_defense_bonus", 0.1 + 0.05 * level)
    _at_least(result, "rally_cry_duration", 5 + 2 * level)
    return result


def troglodyte_philosophy(stats: Mapping[str, Any], level: int) -> Stats:
    result = dict(stats)
    _flag(result, "can_craft_leather_basics")
    _add(result, "leather_monster_defense_bonus", 1)
    if level >= 2:
        _add(result, "leather_monster_attack_bonus", 1)
    if level >= 3:
        _add(result, "double_leather_chance", 0.2)
    return result


def leatherworking(stats: Mapping[str, Any], level: int) -> Stats:
    result = dict(stats)
    _add(result, "leather_durability_bonus", _pick((0.1, 0.25, 0.5), level))
    if level >= 3:
        _add(result, "leather_save_chance", 0.15)
    return result


# ---------------------------------------------------------------------------
# Expertise chains
# ---------------------------------------------------------------------------
def expertise_combat_1(stats: Mapping[str, Any], level: int) -> Stats:
    result = dict(stats)
    _at_least(result, "weapon_damage_multiplier", 1.1)
    return result


def expertise_combat_2(stats: Mapping[str, Any], level: int) -> Stats:
    result = dict(stats)
    _at_least(result, "weapon_damage_multiplier", 1.2)
    _add(result, "crit_chance", 0.05, DEFAULT_CRIT_CHANCE)
    return result


def expertise_combat_3(stats: Mapping[str, Any], level: int) -> Stats:
    result = dict(stats)
    _at_least(result, "weapon_damage_multiplier", 1.3)
    _add(result, "crit_chance", 0.1, DEFAULT_CRIT_CHANCE)
    _add(result, "crit_damage_multiplier", 0.5, DEFAULT_CRIT_MULTIPLIER)
    return result


def expertise_combat_4(stats: Mapping[str, Any], level: int) -> Stats:
    result = dict(stats)
    _at_least(result, "weapon_damage_multiplier", 1.5)
    _add(result, "crit_chance", 0.1, DEFAULT_CRIT_CHANCE)
    _add(result, "crit_damage_multiplier", 1.0, DEFAULT_CRIT_MULTIPLIER)
    _at_least(result, "execute_chance", 0.05)
    return result


def expertise_crafting_1(stats: Mapping[str, Any], level: int) -> Stats:
    result = dict(stats)
    _at_least(result, "crafting_speed_multiplier", 1.25)
    _at_least(result, "craft_quality_bonus", 0.15)
    return result


def expertise_crafting_2(stats: Mapping[str, Any], level: int) -> Stats:
    result = dict(stats)
    _at_least(result, "crafting_speed_multiplier", 1.5)
    _at_least(result, "craft_quality_bonus", 0.3)
    _at_least(result, "material_save_chance", 0.2)
    return result


def expertise_knowledge_1(stats: Mapping[str, Any], level: int) -> Stats:
    result = dict(stats)
    _at_least(result, "experience_multiplier", 1.2)
    return result


def expertise_knowledge_2(stats: Mapping[str, Any], level: int) -> Stats:
    result = dict(stats)
    _at_least(result, "experience_multiplier", 1.4)
    _flag(result, "auto_identify_weakness")
    _scale(result, "consumable_effectiveness", 1.2)
    return result


# ---------------------------------------------------------------------------
# Advanced
# ---------------------------------------------------------------------------
def lizardfolk_philosophy(stats: Mapping[str, Any], level: int) -> Stats:
    result = dict(stats)
    _add(result, "poison_resistance", 0.25)
    if level >= 2:
        _add(result, "health_regen", 1)
    if level >= 3:
        _flag(result, "natural_camouflage")
        _add(result, "fire_resistance", 0.1)
        _add(result, "ice_resistance", 0.1)
    return result


def rebound(stats: Mapping[str, Any], level: int) -> Stats:
    result = dict(stats)
    _add(result, "reflect_chance", 0.1 * level)
    _at_least(result, "reflect_damage_multiplier", _pick((1.0, 1.25, 1.5), level))
    if level >= 3:
        _add(result, "reflect_stun_chance", 0.05)
    return result


def barrage(stats: Mapping[str, Any], level: int) -> Stats:
    result = dict(stats)
    _at_least(result, "barrage_projectiles", level + 1)
    _at_most(result, "barrage_damage_penalty", _pick((0.15, 0.1, 0.05), level))
    if level >= 2:
        _add(result, "ranged_attack_speed_bonus", 0.1)
    if level >= 3:
        _flag(result, "barrage_applies_bleed")
    return result


def guardian_insight(stats: Mapping[str, Any], level: int) -> Stats:
    result = dict(stats)
    _add(result, "damage_reduction", 2 * _pick((1.0, 1.25, 1.5), level))
    if level >= 2:
        _add(result, "dodge_chance", 0.05)
    if level >= 3:
        _flag(result, "shared_regeneration")
    return result


def valor(stats: Mapping[str, Any], level: int) -> Stats:
    result = dict(stats)
    _at_least(result, "low_health_damage_reduction", 0.5)
    _at_least(result, "valor_threshold", 0.2)
    if level >= 2:
        _add(result, "boss_damage_reduction", 0.15)
    if level >= 3:
        _flag(result, "crits_ignore_armor")
        _flag(result, "second_wind")
    return result


def unity(stats: Mapping[str, Any], level: int) -> Stats:
    result = dict(stats)
    _add(result, "ally_damage_bonus", 0.1)
    if level >= 2:
        _add(result, "ally_damage_reduction", 0.1)
    if level >= 3:
        _flag(result, "coordinated_attacks")
    return result


def pierce_armor(stats: Mapping[str, Any], level: int) -> Stats:
    result = dict(stats)
    _add(result, "armor_pierce_chance", _pick((0.15, 0.25, 0.35), level))
    _at_least(result, "armor_pierce_amount", _pick((0.5, 0.75, 1.0), level))
    return result


def blight_strike(stats: Mapping[str, Any], level: int) -> Stats:
    result = dict(stats)
    _add(result, "blight_chance", _pick((0.2, 0.35, 0.5), level))
    _at_least(result, "blight_damage_multiplier", _pick((1.0, 1.5, 2.0), level))
    if level >= 3:
        _flag(result, "blight_spreads")
    return result


# ---------------------------------------------------------------------------
# Specializations
# ---------------------------------------------------------------------------
_TRAINING_WEAPON_BONUS = (1, 1, 2, 2, 3)


def warrior_training(stats: Mapping[str, Any], level: int) -> Stats:
    result = dict(stats)
    _add(result, "max_health", 10 * level, DEFAULT_MAX_HEALTH)
    _add(result, "axe_attack_bonus", _pick(_TRAINING_WEAPON_BONUS, level))
    if level >= 2:
        _add(result, "low_health_melee_attack_bonus", 1)
        _at_least(result, "low_health_melee_threshold", 0.5)
    if level >= 3:
        _add(result, "cleave_targets", 1)
    if level >= 4:
        _add(result, "axe_low_health_attack_bonus", 2)
        _at_least(result, "axe_low_health_threshold", 0.35)
    if level >= 5:
        _scale(result, "cleave_chance", 2, 0.0)
    return result


def druid_training(stats: Mapping[str, Any], level: int) -> Stats:
    result = dict(stats)
    _flag(result, "can_use_staff")
    _flag(result, "replenish_unlocked")
    _add(result, "healing_aura_range", 30)
    if level >= 2:
        _at_least(result, "tactics_bonus_max", _pick((3, 4, 4, 5, 6), level))
    if level >= 3:
        _at_least(result, "unarmored_dodge_chance", 0.3 if level >= 5 else 0.15)
        _at_least(result, "replenish_ratio", 1.3 if level >= 5 else 1.0)
    return result


def ninja_training(stats: Mapping[str, Any], level: int) -> Stats:
    result = dict(stats)
    _add(result, "shuriken_attack_bonus", _pick(_TRAINING_WEAPON_BONUS, level))
    _flag(result, "shuriken_close_range")
    if level >= 2:
        _add(result, "movement_speed", _pick((0, 0.1, 0.1, 0.2, 0.3), level), DEFAULT_MOVEMENT_SPEED)
        _add(result, "dodge_chance", _pick((0, 0.03, 0.03, 0.06, 0.1), level))
    return result


def ranger_training(stats: Mapping[str, Any], level: int) -> Stats:
    result = dict(stats)
    bonus = _pick(_TRAINING_WEAPON_BONUS, level)
    _add(result, "longbow_attack_bonus", bonus)
    _add(result, "sword_attack_bonus", bonus)
    if level >= 2:
        _add(result, "movement_speed", 0.1 if level >= 5 else 0.05, DEFAULT_MOVEMENT_SPEED)
        _add(result, "ranged_attack_range", 75 if level >= 4 else 25, DEFAULT_RANGED_ATTACK_RANGE)
    if level >= 4:
        _add(result, "leather_melee_defense", 2 if level >= 5 else 1)
    return result
