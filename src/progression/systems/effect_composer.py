from __future__ import annotations

import math
import random
from typing import Any, Callable, Dict, List, Mapping, Tuple, Union

from progression.catalog.registry import AbilityCatalog
from progression.components.ability_state import AbilityState
from progression.components.equipment import (
    BaseStatsProvider,
    DamageKind,
    EquipmentQuery,
    EquippedWeapon,
    damage_kind_key,
)
from progression.constants import DEFAULT_CRIT_MULTIPLIER, MELEE_WEAPON_TAGS, OIYOI_GEAR_TAGS
from progression.effects.registry import Fold, create_fold_registry
from progression.events.bus import (
    EVENT_DAMAGE_EVADED,
    EVENT_DAMAGE_PROC,
    LEDGER_EVENTS,
    EventBus,
)
from progression.logging import get_logger
from progression.systems.progression_ledger import ProgressionLedger

logger = get_logger(__name__)

StatsSource = Union[Mapping[str, Any], Callable[[], Mapping[str, Any]]]


class EffectComposer:
    """Folds learned abilities into a derived stats bag and applies it to damage.

    The bag is rebuilt from the base stats whenever the ledger's version or
    the base stats change, and is cached otherwise. Callers always receive a
    copy.
    """

    def __init__(
        self,
        ledger: ProgressionLedger,
        catalog: AbilityCatalog | None = None,
        *,
        folds: Mapping[str, Fold] | None = None,
        rng: random.Random | None = None,
        base_stats: StatsSource | BaseStatsProvider | None = None,
        equipment: EquipmentQuery | None = None,
        event_bus: EventBus | None = None,
    ) -> None:
        self.ledger = ledger
        self.catalog = catalog if catalog is not None else ledger.catalog
        self.event_bus = event_bus if event_bus is not None else ledger.event_bus
        self._folds: Dict[str, Fold] = create_fold_registry(folds)
        self._rng: random.Random = rng or random.SystemRandom()
        self._base_stats = base_stats
        self._equipment = equipment
        self._dirty = True
        self._cached_version: int | None = None
        self._cached_base: Dict[str, Any] | None = None
        self._cached_stats: Dict[str, Any] = {}
        for event_name in LEDGER_EVENTS:
            self.ledger.on(event_name, self._on_ledger_changed)

    def _on_ledger_changed(self, sender, **payload) -> None:
        self._dirty = True

    def invalidate(self) -> None:
        self._dirty = True

    @property
    def is_stale(self) -> bool:
        return self._dirty or self._cached_version != self.ledger.version

    # ------------------------------------------------------------------
    # Aggregation
    # ------------------------------------------------------------------
    def get_derived_stats(self, base_stats: Mapping[str, Any] | None = None) -> Dict[str, Any]:
        base = self._resolve_base_stats(base_stats)
        if self.is_stale or self._cached_base != base:
            self._cached_stats = self._compose(base)
            self._cached_base = base
            self._cached_version = self.ledger.version
            self._dirty = False
        return dict(self._cached_stats)

    def _resolve_base_stats(self, base_stats: Mapping[str, Any] | None) -> Dict[str, Any]:
        if base_stats is not None:
            return dict(base_stats)
        source = self._base_stats
        if source is None:
            return {}
        if callable(source):
            return dict(source() or {})
        return dict(source)

    def _fold_order(self) -> List[AbilityState]:
        specialization_id = self.ledger.specialization_id
        generic = sorted(
            (state for state in self.ledger.get_learned() if state.ability_id != specialization_id),
            key=lambda state: state.ability_id,
        )
        specialization = self.ledger.get_specialization()
        if specialization is not None:
            generic.append(specialization)
        return generic

    def _compose(self, base: Mapping[str, Any]) -> Dict[str, Any]:
        stats: Dict[str, Any] = dict(base)
        for state in self._fold_order():
            if not self.catalog.has(state.ability_id):
                logger.warning("ability_unknown", ability_id=state.ability_id, level=state.level)
                continue
            fold = self._folds.get(state.ability_id)
            if fold is None:
                continue
            try:
                folded = fold(dict(stats), state.level)
            except Exception:
                logger.exception("ability_fold_failed", ability_id=state.ability_id, level=state.level)
                continue
            if not isinstance(folded, Mapping):
                logger.warning(
                    "ability_fold_invalid",
                    ability_id=state.ability_id,
                    returned=type(folded).__name__,
                )
                continue
            stats = dict(folded)
        return stats

    # ------------------------------------------------------------------
    # Damage hooks
    # ------------------------------------------------------------------
    def modify_outgoing_damage(
        self,
        base_damage: float,
        damage_kind: Any = DamageKind.PHYSICAL,
        target: Any = None,
    ) -> int:
        """Final damage dealt by the player, floored and never negative.

        ``{tag}_attack_bonus`` stats are the "+N with <weapon>" ratings from the
        ability text. There is no separate attack roll here, so a rating point
        counts as one point of flat damage before the multipliers apply.
        """
        stats = self.get_derived_stats()
        weapon = self._equipped_weapon()
        health_fraction = _health_fraction(stats)
        damage = float(base_damage)

        if weapon is not None:
            damage += stats.get(f"{weapon.tag}_attack_bonus", 0)
        if _is_melee(weapon) and _below(health_fraction, stats.get("low_health_melee_threshold")):
            damage += stats.get("low_health_melee_attack_bonus", 0)
        if weapon is not None and weapon.tag == "axe" and _below(health_fraction, stats.get("axe_low_health_threshold")):
            damage += stats.get("axe_low_health_attack_bonus", 0)

        for bonus_key in self._outgoing_bonus_keys(weapon, damage_kind):
            bonus = stats.get(bonus_key)
            if bonus:
                damage *= 1 + bonus
        if weapon is not None and stats.get("weapon_damage_multiplier"):
            damage *= stats["weapon_damage_multiplier"]
        if stats.get("rally_cry_active") and stats.get("rally_cry_damage_bonus"):
            damage *= 1 + stats["rally_cry_damage_bonus"]
        if stats.get("low_health_damage_bonus") and _below(health_fraction, stats.get("low_health_threshold")):
            damage *= 1 + stats["low_health_damage_bonus"]

        procs: List[Tuple[str, Dict[str, Any]]] = []
        if self._roll(stats.get("crit_chance")):
            multiplier = stats.get("crit_damage_multiplier", DEFAULT_CRIT_MULTIPLIER)
            damage *= multiplier
            procs.append(("critical_hit", {"multiplier": multiplier}))
        if self._roll(stats.get("exposed_weakness_chance")):
            multiplier = stats.get("exposed_weakness_multiplier", 1.5)
            damage *= multiplier
            procs.append(("exposed_weakness", {"multiplier": multiplier}))

        final = max(0, math.floor(damage))

        if (_is_melee(weapon) or _is_unarmed(weapon)) and self._roll(stats.get("cleave_chance")):
            fraction = stats.get("cleave_damage_fraction", 0.5)
            procs.append((
                "cleave",
                {"targets": int(stats.get("cleave_targets", 1)), "damage": math.floor(final * fraction)},
            ))
        if self._roll(stats.get("armor_pierce_chance")):
            procs.append(("armor_pierce", {"amount": stats.get("armor_pierce_amount", 0)}))
        if self._roll(stats.get("blight_chance")):
            procs.append((
                "blight",
                {
                    "damage_multiplier": stats.get("blight_damage_multiplier", 1.0),
                    "spreads": bool(stats.get("blight_spreads", False)),
                },
            ))
        if self._roll(stats.get("execute_chance")):
            procs.append(("execute", {}))

        for slug, metadata in procs:
            self.event_bus.emit(
                EVENT_DAMAGE_PROC,
                slug=slug,
                direction="outgoing",
                target=target,
                source=None,
                metadata=metadata,
            )
        return final

    def modify_incoming_damage(
        self,
        base_damage: float,
        damage_kind: Any = DamageKind.PHYSICAL,
        source: Any = None,
    ) -> int:
        stats = self.get_derived_stats()
        weapon = self._equipped_weapon()

        evasion = self._evasion_chance(stats, weapon)
        if evasion >= 1 or self._roll(evasion):
            self.event_bus.emit(
                EVENT_DAMAGE_EVADED,
                base_damage=base_damage,
                damage_kind=damage_kind,
                source=source,
                chance=evasion,
            )
            return 0

        damage = float(base_damage)
        kind = damage_kind_key(damage_kind)
        resistance = stats.get(f"{kind}_resistance", 0) if kind else 0
        if resistance:
            damage *= 1 - min(resistance, 1)
        if stats.get("rally_cry_active") and stats.get("rally_cry_defense_bonus"):
            damage *= 1 - min(stats["rally_cry_defense_bonus"], 1)
        damage -= stats.get("damage_reduction", 0)
        if stats.get("low_health_damage_reduction") and _below(_health_fraction(stats), stats.get("valor_threshold")):
            damage *= 1 - min(stats["low_health_damage_reduction"], 1)

        final = max(1, math.floor(damage))

        if self._roll(stats.get("reflect_chance")):
            reflected = math.floor(final * stats.get("reflect_damage_multiplier", 1.0))
            self.event_bus.emit(
                EVENT_DAMAGE_PROC,
                slug="rebound",
                direction="incoming",
                target=source,
                source=source,
                metadata={"damage": reflected, "stun_chance": stats.get("reflect_stun_chance", 0)},
            )
        return final

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _equipped_weapon(self) -> EquippedWeapon | None:
        if self._equipment is None:
            return None
        return self._equipment()

    def _outgoing_bonus_keys(self, weapon: EquippedWeapon | None, damage_kind: Any) -> List[str]:
        keys: List[str] = []
        if weapon is not None:
            keys.append(f"{weapon.tag}_damage_bonus")
            keys.append("ranged_damage_bonus" if weapon.ranged else "melee_damage_bonus")
        if _is_unarmed(weapon):
            keys.append("unarmed_damage_bonus")
        kind = damage_kind_key(damage_kind)
        if kind:
            keys.append(f"{kind}_damage_bonus")
        return keys

    def _evasion_chance(self, stats: Mapping[str, Any], weapon: EquippedWeapon | None) -> float:
        chance = float(stats.get("dodge_chance", 0) or 0)
        if _is_unarmed(weapon) or (weapon is not None and any(weapon.has_tag(tag) for tag in OIYOI_GEAR_TAGS)):
            chance += float(stats.get("unarmed_dodge_chance", 0) or 0)
        if weapon is None or not (weapon.has_tag("heavy_armor") or weapon.has_tag("shield")):
            chance += float(stats.get("unarmored_dodge_chance", 0) or 0)
        return chance

    def _roll(self, chance: Any) -> bool:
        if not chance or chance <= 0:
            return False
        return self._rng.random() < chance


def _is_unarmed(weapon: EquippedWeapon | None) -> bool:
    return weapon is None or weapon.tag == "unarmed"


def _is_melee(weapon: EquippedWeapon | None) -> bool:
    return weapon is not None and not weapon.ranged and weapon.tag in MELEE_WEAPON_TAGS


def _health_fraction(stats: Mapping[str, Any]) -> float | None:
    health = stats.get("health")
    max_health = stats.get("max_health")
    if health is None or not max_health:
        return None
    return health / max_health


def _below(fraction: float | None, threshold: Any) -> bool:
    if fraction is None or not threshold:
        return False
    return fraction <= threshold
