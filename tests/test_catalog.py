import pytest

from progression.catalog.registry import AbilityCatalog, CatalogError
from progression.components.ability_definition import (
    AbilityCategory,
    AbilityDefinition,
    Prerequisite,
    describe_effects,
)
from tests.helpers import build_catalog, make_ability, make_specialization


def test_get_unknown_ability_returns_none():
    catalog = build_catalog(make_ability("archery"))

    assert catalog.get("fireball") is None
    assert not catalog.has("fireball")
    assert "archery" in catalog


def test_all_preserves_registration_order():
    catalog = build_catalog(make_ability("b"), make_ability("a"), make_ability("c"))

    assert [d.id for d in catalog.all()] == ["b", "a", "c"]
    assert len(catalog) == 3


def test_by_category_and_tier():
    catalog = build_catalog(
        make_ability("cleave"),
        make_ability("alchemy", category=AbilityCategory.CRAFTING, tier=2),
        make_specialization("warrior_training"),
    )

    assert [d.id for d in catalog.by_category(AbilityCategory.CRAFTING)] == ["alchemy"]
    assert [d.id for d in catalog.by_tier(2)] == ["alchemy"]
    assert [d.id for d in catalog.specializations()] == ["warrior_training"]
    assert catalog.highest_tier() == 4


def test_register_rejects_duplicate_id():
    catalog = build_catalog(make_ability("archery"))

    with pytest.raises(ValueError):
        catalog.register(make_ability("archery"))


def test_register_rejects_cost_length_mismatch():
    catalog = AbilityCatalog()
    bad = AbilityDefinition(id="archery", name="Archery", max_level=3, level_costs=(1, 1))

    with pytest.raises(ValueError):
        catalog.register(bad)
    assert not catalog.has("archery")


def test_register_rejects_self_prerequisite_and_negative_cost():
    catalog = AbilityCatalog()

    with pytest.raises(ValueError):
        catalog.register(make_ability("loop", prerequisites=[Prerequisite("loop", 1)]))
    with pytest.raises(ValueError):
        catalog.register(make_ability("refund", (1, -1)))


def test_validate_rejects_unknown_prerequisite():
    with pytest.raises(CatalogError):
        build_catalog(make_ability("heroism", prerequisites=[Prerequisite("cleave", 1)]))


def test_validate_rejects_unreachable_prerequisite_level():
    with pytest.raises(CatalogError):
        build_catalog(
            make_ability("cleave", (1, 1)),
            make_ability("heroism", prerequisites=[Prerequisite("cleave", 3)]),
        )


def test_validate_rejects_cycles():
    with pytest.raises(CatalogError) as excinfo:
        build_catalog(
            make_ability("a", prerequisites=[Prerequisite("c")]),
            make_ability("b", prerequisites=[Prerequisite("a")]),
            make_ability("c", prerequisites=[Prerequisite("b")]),
        )

    assert "cycle" in str(excinfo.value)


def test_dependents_and_expertise_paths():
    catalog = build_catalog(
        make_ability("cleave"),
        make_ability("heroism", prerequisites=[Prerequisite("cleave", 1)]),
        make_ability("expertise_combat_2", (3,), tier=6, expertise_path="Combat",
                     prerequisites=[Prerequisite("expertise_combat_1")]),
        make_ability("expertise_combat_1", (2,), tier=4, expertise_path="Combat"),
    )

    assert [d.id for d in catalog.dependents_of("cleave")] == ["heroism"]
    assert catalog.expertise_paths() == ("Combat",)
    assert [d.id for d in catalog.by_expertise_path("Combat")] == [
        "expertise_combat_1",
        "expertise_combat_2",
    ]


def test_describe_effects_by_level():
    definition = make_ability(
        "archery",
        level_effects=[("+1 with Longbows",), ("+2 with Longbows",), ("+3 with Longbows",)],
        unlocks=["Ranger Training"],
    )

    assert describe_effects(definition, 0) == "Not learned yet."
    assert describe_effects(definition, 1) == "+1 with Longbows"
    assert describe_effects(definition, 3) == "+3 with Longbows\nUnlocks: Ranger Training"
    assert describe_effects(definition, 4) == "Unknown level"


def test_describe_effects_falls_back_to_name():
    definition = make_ability("mystery")

    assert describe_effects(definition, 2) == "Mystery (Level 2)"


def test_definition_cost_helpers():
    definition = make_ability("cleave", (1, 1, 2))

    assert definition.cost_for_level(0) == 1
    assert definition.cost_for_level(2) == 2
    assert definition.cost_for_level(3) is None
    assert definition.total_cost(3) == 4
    assert definition.total_cost(0) == 0
