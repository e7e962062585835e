from __future__ import annotations

from progression.systems.effect_composer import EffectComposer
from progression.systems.progression_ledger import ProgressionLedger

__all__ = [
    "EffectComposer",
    "ProgressionLedger",
]
