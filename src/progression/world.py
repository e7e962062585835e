import random
from dataclasses import dataclass

from progression.catalog.factory import create_default_catalog
from progression.catalog.registry import AbilityCatalog
from progression.components.equipment import EquipmentQuery
from progression.constants import DEFAULT_STARTING_POINTS
from progression.events.bus import EventBus
from progression.systems.effect_composer import EffectComposer, StatsSource
from progression.systems.progression_ledger import ProgressionLedger


@dataclass(slots=True)
class ProgressionWorld:
    """One player's progression: its own bus, ledger and composer."""

    event_bus: EventBus
    catalog: AbilityCatalog
    ledger: ProgressionLedger
    composer: EffectComposer


def create_world(
    event_bus: EventBus | None = None,
    *,
    starting_points: int = DEFAULT_STARTING_POINTS,
    catalog: AbilityCatalog | None = None,
    rng: random.Random | None = None,
    base_stats: StatsSource | None = None,
    equipment: EquipmentQuery | None = None,
) -> ProgressionWorld:
    bus = event_bus if event_bus is not None else EventBus()
    # Each world gets a private catalog unless one is shared explicitly.
    abilities = catalog if catalog is not None else create_default_catalog()
    ledger = ProgressionLedger(abilities, bus, available_points=starting_points)
    composer = EffectComposer(
        ledger,
        abilities,
        rng=rng or random.Random(),
        base_stats=base_stats,
        equipment=equipment,
    )
    return ProgressionWorld(event_bus=bus, catalog=abilities, ledger=ledger, composer=composer)
