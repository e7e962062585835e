import random

import pytest

from progression.components.equipment import EquippedWeapon
from progression.events.bus import EVENT_ABILITY_LEARNED, EventBus
from progression.rules.advancement import LearnFailure
from progression.world import create_world
from tests.helpers import build_catalog, make_ability


def test_create_world_wires_default_catalog():
    world = create_world(starting_points=3)

    assert world.ledger.available_points == 3
    assert world.ledger.total_granted == 3
    assert world.catalog.has("warrior_training")
    assert world.composer.ledger is world.ledger
    assert world.ledger.event_bus is world.event_bus


def test_worlds_have_private_state():
    first = create_world(starting_points=1)
    second = create_world(starting_points=1)

    first.ledger.learn_or_upgrade("archery")

    assert second.ledger.available_points == 1
    assert second.ledger.get_ability("archery").level == 0


def test_create_world_uses_given_bus_and_catalog():
    bus = EventBus()
    catalog = build_catalog(make_ability("x"))
    world = create_world(bus, starting_points=1, catalog=catalog)
    learned = []
    bus.subscribe(EVENT_ABILITY_LEARNED, lambda sender, **payload: learned.append(payload["ability_id"]))

    world.ledger.learn_or_upgrade("x")

    assert world.event_bus is bus
    assert world.catalog is catalog
    assert learned == ["x"]


def test_warrior_path_through_default_catalog():
    world = create_world(starting_points=13, base_stats={"max_health": 100})
    ledger, composer = world.ledger, world.composer

    assert ledger.learn_or_upgrade("warrior_training").reason is LearnFailure.PREREQUISITES_NOT_MET
    for _ in range(3):
        assert ledger.learn_or_upgrade("cleave").ok
    for _ in range(5):
        assert ledger.learn_or_upgrade("warrior_training").ok
    assert ledger.learn_or_upgrade("ranger_training").reason is LearnFailure.SPECIALIZATION_CONFLICT

    stats = composer.get_derived_stats()

    assert ledger.available_points == 0
    assert stats["max_health"] == 150
    assert stats["cleave_targets"] == 6
    assert stats["cleave_chance"] == pytest.approx(0.3)


def test_ninja_dodge_with_oiyoi_gear():
    world = create_world(
        starting_points=20,
        rng=random.Random(3),
        equipment=lambda: EquippedWeapon("shuriken", ranged=True, gear_tags=("oiyoi",)),
    )
    ledger = world.ledger
    for ability_id in ["oiyoi_martial_art"] * 3 + ["ninja_training"] * 5:
        assert ledger.learn_or_upgrade(ability_id).ok

    stats = world.composer.get_derived_stats()

    assert stats["unarmed_dodge_chance"] == pytest.approx(0.3)
    assert stats["dodge_chance"] == pytest.approx(0.1)
    assert stats["shuriken_attack_bonus"] == 6
