from blinker import Signal
from itertools import count
from typing import Any, Callable, Dict

Handler = Callable[..., Any]


class EventBus:
    """Simple event bus leveraging blinker Signal objects.

    Receivers are invoked synchronously in the order they subscribed.
    """
    def __init__(self):
        self._signals: Dict[str, Signal] = {}
        self._order: Dict[str, Dict[Handler, int]] = {}
        self._sequence = count()

    def subscribe(self, name: str, fn: Handler) -> None:
        sig = self._signals.setdefault(name, Signal(name))
        # Use weak=False to retain strong reference to bound methods so systems not kept in a variable still receive events.
        sig.connect(fn, weak=False)
        self._order.setdefault(name, {}).setdefault(fn, next(self._sequence))

    def unsubscribe(self, name: str, fn: Handler) -> None:
        sig = self._signals.get(name)
        if sig is None:
            return
        sig.disconnect(fn)
        self._order.get(name, {}).pop(fn, None)

    def has_subscribers(self, name: str) -> bool:
        sig = self._signals.get(name)
        return bool(sig and sig.receivers)

    def emit(self, name: str, **payload: Any) -> None:
        sig = self._signals.get(name)
        if not sig:
            return
        order = self._order.get(name, {})
        # blinker does not guarantee receiver order, so sort by subscription sequence.
        receivers = sorted(sig.receivers_for(self), key=lambda fn: order.get(fn, len(order)))
        for receiver in receivers:
            receiver(self, **payload)


# ============================================================================
# PROGRESSION LEDGER
# ============================================================================
EVENT_POINTS_CHANGED = "points_changed"                  # payload: available=int, delta=int, reason=str, version=int
EVENT_ABILITY_LEARNED = "ability_learned"                # payload: ability_id=str, level=int, cost=int, version=int
EVENT_ABILITY_UPGRADED = "ability_upgraded"              # payload: ability_id=str, level=int, cost=int, version=int
EVENT_SPECIALIZATION_CHANGED = "specialization_changed"  # payload: ability_id=str|None, previous_id=str|None, version=int

LEDGER_EVENTS = (
    EVENT_POINTS_CHANGED,
    EVENT_ABILITY_LEARNED,
    EVENT_ABILITY_UPGRADED,
    EVENT_SPECIALIZATION_CHANGED,
)


# ============================================================================
# COMBAT FEEDBACK
# ============================================================================
EVENT_DAMAGE_EVADED = "damage_evaded"    # payload: base_damage=int, damage_kind=Any, source=Any, chance=float
EVENT_DAMAGE_PROC = "damage_proc"        # payload: slug=str, direction=str, target=Any, source=Any, metadata=dict
