from __future__ import annotations

from collections import deque
from typing import Any, Deque, Dict, Tuple

from progression.catalog.registry import AbilityCatalog
from progression.components.ability_state import AbilityState
from progression.components.snapshot import LedgerSnapshot
from progression.events.bus import (
    EVENT_ABILITY_LEARNED,
    EVENT_ABILITY_UPGRADED,
    EVENT_POINTS_CHANGED,
    EVENT_SPECIALIZATION_CHANGED,
    LEDGER_EVENTS,
    EventBus,
    Handler,
)
from progression.logging import get_logger
from progression.rules.advancement import LearnFailure, LearnResult, advance, check_advance
from progression.rules.specialization import conflicts_with

logger = get_logger(__name__)


class ProgressionLedger:
    """Owns a player's points, learned abilities and active specialization.

    Every mutation bumps ``version`` once, completes before any handler runs,
    and then notifies subscribers in subscription order. Mutations made from
    inside a handler take effect immediately; their notifications are queued
    behind the ones already being delivered.
    """

    def __init__(
        self,
        catalog: AbilityCatalog,
        event_bus: EventBus | None = None,
        *,
        available_points: int = 0,
    ) -> None:
        self.catalog = catalog
        self.event_bus = event_bus if event_bus is not None else EventBus()
        self._available_points = 0
        self._learned: Dict[str, AbilityState] = {}
        self._specialization_id: str | None = None
        self.version = 0
        self.total_granted = 0
        self._pending: Deque[Tuple[str, Dict[str, Any]]] = deque()
        self._dispatching = False
        if available_points:
            points = _require_int(available_points)
            self._available_points = max(0, points)
            self.total_granted = self._available_points

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def available_points(self) -> int:
        return self._available_points

    def get_learned(self) -> Tuple[AbilityState, ...]:
        return tuple(state.copy() for state in self._learned.values())

    def get_specialization(self) -> AbilityState | None:
        if self._specialization_id is None:
            return None
        state = self._learned.get(self._specialization_id)
        return state.copy() if state is not None else None

    @property
    def specialization_id(self) -> str | None:
        return self._specialization_id

    def get_ability(self, ability_id: str) -> AbilityState | None:
        """Learned state, a level-0 view for catalog-only abilities, or ``None``."""

        state = self._learned.get(ability_id)
        if state is not None:
            return state.copy()
        if self.catalog.has(ability_id):
            return AbilityState(ability_id=ability_id, level=0)
        return None

    def spent_points(self) -> int:
        total = 0
        for state in self._learned.values():
            definition = self.catalog.get(state.ability_id)
            if definition is None:
                continue
            total += definition.total_cost(state.level)
        return total

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def grant_points(self, amount: int) -> int:
        """Add ``amount`` points (negative amounts add nothing); return the points added.

        Subscribers are notified even when nothing was added; the version only
        moves when the balance does.
        """

        added = max(0, _require_int(amount))
        if added:
            self._available_points += added
            self.total_granted += added
            self.version += 1
        self._queue(
            EVENT_POINTS_CHANGED,
            available=self._available_points,
            delta=added,
            reason="grant",
            version=self.version,
        )
        self._flush()
        return added

    def check(self, ability_id: str) -> LearnResult:
        """Dry-run of :meth:`learn_or_upgrade`; never changes anything."""

        definition = self.catalog.get(ability_id)
        if definition is None:
            return LearnResult.failure(ability_id, LearnFailure.UNKNOWN_ABILITY)
        state = self._learned.get(ability_id) or AbilityState(ability_id=ability_id)
        if state.level == 0 and conflicts_with(definition, self._specialization_id):
            return LearnResult.failure(ability_id, LearnFailure.SPECIALIZATION_CONFLICT)
        return check_advance(definition, state, self._available_points, self._learned)

    def learnable(self) -> Tuple[str, ...]:
        return tuple(sorted(ability_id for ability_id in self.catalog.ids() if self.check(ability_id).ok))

    def learn_or_upgrade(self, ability_id: str) -> LearnResult:
        definition = self.catalog.get(ability_id)
        if definition is None:
            return LearnResult.failure(ability_id, LearnFailure.UNKNOWN_ABILITY)

        existing = self._learned.get(ability_id)
        if existing is None and conflicts_with(definition, self._specialization_id):
            return LearnResult.failure(ability_id, LearnFailure.SPECIALIZATION_CONFLICT)

        # Advance a scratch copy so a declined attempt leaves nothing behind.
        state = existing.copy() if existing is not None else AbilityState(ability_id=ability_id)
        result = advance(definition, state, self._available_points, self._learned)
        if not result.ok:
            return result

        self._available_points -= result.cost
        self._learned[ability_id] = state
        previous_specialization = self._specialization_id
        became_specialization = existing is None and definition.is_specialization
        if became_specialization:
            self._specialization_id = ability_id
        self.version += 1

        event = EVENT_ABILITY_LEARNED if existing is None else EVENT_ABILITY_UPGRADED
        self._queue(event, ability_id=ability_id, level=state.level, cost=result.cost, version=self.version)
        if became_specialization:
            self._queue(
                EVENT_SPECIALIZATION_CHANGED,
                ability_id=ability_id,
                previous_id=previous_specialization,
                version=self.version,
            )
        self._queue(
            EVENT_POINTS_CHANGED,
            available=self._available_points,
            delta=-result.cost,
            reason="learn" if existing is None else "upgrade",
            version=self.version,
        )
        self._flush()
        return result

    def reset_all(self) -> int:
        """Refund every paid cost and forget all abilities; return the refund."""

        refund = self.spent_points()
        previous_specialization = self._specialization_id
        self._learned = {}
        self._specialization_id = None
        self._available_points += refund
        self.version += 1

        self._queue(
            EVENT_POINTS_CHANGED,
            available=self._available_points,
            delta=refund,
            reason="reset",
            version=self.version,
        )
        self._queue(
            EVENT_SPECIALIZATION_CHANGED,
            ability_id=None,
            previous_id=previous_specialization,
            version=self.version,
        )
        self._flush()
        return refund

    # ------------------------------------------------------------------
    # Subscription
    # ------------------------------------------------------------------
    def on(self, event_name: str, handler: Handler) -> None:
        _require_ledger_event(event_name)
        self.event_bus.subscribe(event_name, handler)

    def off(self, event_name: str, handler: Handler) -> None:
        _require_ledger_event(event_name)
        self.event_bus.unsubscribe(event_name, handler)

    def _queue(self, event_name: str, **payload: Any) -> None:
        self._pending.append((event_name, payload))

    def _flush(self) -> None:
        if self._dispatching:
            return
        self._dispatching = True
        try:
            while self._pending:
                event_name, payload = self._pending.popleft()
                self.event_bus.emit(event_name, **payload)
        except Exception:
            # A failed delivery abandons the rest of the batch.
            self._pending.clear()
            raise
        finally:
            self._dispatching = False

    # ------------------------------------------------------------------
    # Snapshot / restore
    # ------------------------------------------------------------------
    def snapshot(self) -> LedgerSnapshot:
        return LedgerSnapshot(
            available_points=self._available_points,
            levels={ability_id: state.level for ability_id, state in self._learned.items()},
            specialization_id=self._specialization_id,
            total_granted=self.total_granted,
        )

    @classmethod
    def from_snapshot(
        cls,
        catalog: AbilityCatalog,
        snapshot: LedgerSnapshot,
        event_bus: EventBus | None = None,
    ) -> "ProgressionLedger":
        ledger = cls(catalog, event_bus)
        ledger._load(snapshot)
        return ledger

    def restore(self, snapshot: LedgerSnapshot) -> None:
        """Replace the whole state with ``snapshot`` and notify subscribers once."""

        previous_specialization = self._specialization_id
        self._load(snapshot)
        self.version += 1
        self._queue(
            EVENT_POINTS_CHANGED,
            available=self._available_points,
            delta=0,
            reason="restore",
            version=self.version,
        )
        if self._specialization_id != previous_specialization:
            self._queue(
                EVENT_SPECIALIZATION_CHANGED,
                ability_id=self._specialization_id,
                previous_id=previous_specialization,
                version=self.version,
            )
        self._flush()

    def _load(self, snapshot: LedgerSnapshot) -> None:
        learned: Dict[str, AbilityState] = {}
        specialization_id: str | None = None
        refund = 0
        for ability_id, raw_level in sorted(snapshot.levels.items()):
            definition = self.catalog.get(ability_id)
            if definition is None:
                logger.warning("snapshot_unknown_ability", ability_id=ability_id)
                continue
            requested = int(raw_level)
            level = min(max(0, requested), definition.max_level)
            if level != requested:
                logger.warning(
                    "snapshot_level_clamped",
                    ability_id=ability_id,
                    level=raw_level,
                    clamped=level,
                )
            if level == 0:
                continue
            if definition.is_specialization:
                preferred = snapshot.specialization_id
                if specialization_id is not None or (preferred is not None and preferred != ability_id):
                    logger.warning("snapshot_extra_specialization_dropped", ability_id=ability_id)
                    refund += definition.total_cost(level)
                    continue
                specialization_id = ability_id
            learned[ability_id] = AbilityState(ability_id=ability_id, level=level)

        self._learned = learned
        self._specialization_id = specialization_id
        available = max(0, int(snapshot.available_points)) + refund
        spent = self.spent_points()
        if snapshot.total_granted is not None:
            # Whatever the dropped entries had paid comes back as unspent points.
            available = max(available, int(snapshot.total_granted) - spent)
        self._available_points = available
        self.total_granted = spent + available


def _require_int(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Point amounts must be integers, got {value!r}")
    return value


def _require_ledger_event(event_name: str) -> None:
    if event_name not in LEDGER_EVENTS:
        raise ValueError(f"Unknown ledger event '{event_name}'")
