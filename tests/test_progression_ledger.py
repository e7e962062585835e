import pytest

from progression.components.ability_definition import Prerequisite
from progression.events.bus import (
    EVENT_ABILITY_LEARNED,
    EVENT_ABILITY_UPGRADED,
    EVENT_POINTS_CHANGED,
    EVENT_SPECIALIZATION_CHANGED,
    EventBus,
)
from progression.rules.advancement import LearnFailure
from progression.systems.progression_ledger import ProgressionLedger
from tests.helpers import build_catalog, capture, make_ability, make_specialization


def _state(ledger: ProgressionLedger):
    return (
        ledger.available_points,
        {state.ability_id: state.level for state in ledger.get_learned()},
        ledger.specialization_id,
        ledger.version,
    )


def test_learn_and_upgrade_until_points_run_out():
    """Costs [1, 1, 2] with three points: two ranks, then a decline."""
    ledger = ProgressionLedger(build_catalog(make_ability("x", (1, 1, 2))), available_points=3)

    first = ledger.learn_or_upgrade("x")
    assert first.ok and first.level == 1 and ledger.available_points == 2

    second = ledger.learn_or_upgrade("x")
    assert second.ok and second.level == 2 and ledger.available_points == 1

    third = ledger.learn_or_upgrade("x")
    assert not third.ok
    assert third.reason is LearnFailure.INSUFFICIENT_POINTS
    assert ledger.get_ability("x").level == 2
    assert ledger.available_points == 1


def test_second_specialization_is_rejected():
    catalog = build_catalog(make_specialization("y"), make_specialization("z"))
    ledger = ProgressionLedger(catalog, available_points=5)

    assert ledger.learn_or_upgrade("y").ok
    assert ledger.get_specialization().ability_id == "y"

    result = ledger.learn_or_upgrade("z")

    assert result.reason is LearnFailure.SPECIALIZATION_CONFLICT
    assert ledger.available_points == 4
    assert ledger.get_specialization().ability_id == "y"
    assert ledger.get_specialization().level == 1


def test_unknown_ability_fails_without_change():
    ledger = ProgressionLedger(build_catalog(make_ability("x")), available_points=2)
    before = _state(ledger)

    result = ledger.learn_or_upgrade("fireball")

    assert result.reason is LearnFailure.UNKNOWN_ABILITY
    assert _state(ledger) == before


def test_failed_attempts_change_nothing_and_emit_nothing():
    catalog = build_catalog(
        make_ability("cleave", (1,)),
        make_ability("heroism", prerequisites=[Prerequisite("cleave", 1)]),
    )
    bus = EventBus()
    ledger = ProgressionLedger(catalog, bus, available_points=1)
    events = []
    for name in (EVENT_POINTS_CHANGED, EVENT_ABILITY_LEARNED, EVENT_ABILITY_UPGRADED, EVENT_SPECIALIZATION_CHANGED):
        ledger.on(name, lambda sender, name=name, **payload: events.append(name))
    before = _state(ledger)

    assert ledger.learn_or_upgrade("heroism").reason is LearnFailure.PREREQUISITES_NOT_MET
    assert _state(ledger) == before

    assert ledger.learn_or_upgrade("cleave").ok
    events.clear()
    before = _state(ledger)
    assert ledger.learn_or_upgrade("cleave").reason is LearnFailure.MAX_LEVEL_REACHED
    assert ledger.learn_or_upgrade("heroism").reason is LearnFailure.INSUFFICIENT_POINTS
    assert _state(ledger) == before
    assert events == []


def test_prerequisite_satisfied_after_upgrade():
    catalog = build_catalog(
        make_ability("b"),
        make_ability("a", prerequisites=[Prerequisite("b", 2)]),
    )
    ledger = ProgressionLedger(catalog, available_points=5)

    ledger.learn_or_upgrade("b")
    assert ledger.learn_or_upgrade("a").reason is LearnFailure.PREREQUISITES_NOT_MET

    ledger.learn_or_upgrade("b")
    assert ledger.learn_or_upgrade("a").ok


def test_learn_emits_learned_then_points_changed():
    bus = EventBus()
    ledger = ProgressionLedger(build_catalog(make_ability("x", (2, 3))), bus, available_points=5)
    order = []
    ledger.on(EVENT_ABILITY_LEARNED, lambda sender, **p: order.append(("learned", p)))
    ledger.on(EVENT_ABILITY_UPGRADED, lambda sender, **p: order.append(("upgraded", p)))
    ledger.on(EVENT_POINTS_CHANGED, lambda sender, **p: order.append(("points", p)))

    ledger.learn_or_upgrade("x")
    ledger.learn_or_upgrade("x")

    assert [name for name, _ in order] == ["learned", "points", "upgraded", "points"]
    assert order[0][1] == {"ability_id": "x", "level": 1, "cost": 2, "version": 1}
    assert order[1][1]["available"] == 3
    assert order[1][1]["delta"] == -2
    assert order[3][1]["available"] == 0


def test_first_specialization_learn_emits_specialization_changed():
    bus = EventBus()
    ledger = ProgressionLedger(build_catalog(make_specialization("y", (1, 1))), bus, available_points=2)
    changes = capture(bus, EVENT_SPECIALIZATION_CHANGED)

    ledger.learn_or_upgrade("y")
    ledger.learn_or_upgrade("y")

    assert changes == [{"ability_id": "y", "previous_id": None, "version": 1}]


def test_handlers_observe_completed_mutation():
    bus = EventBus()
    ledger = ProgressionLedger(build_catalog(make_ability("x")), bus, available_points=1)
    seen = []
    ledger.on(EVENT_ABILITY_LEARNED, lambda sender, **p: seen.append((ledger.available_points, ledger.version)))

    ledger.learn_or_upgrade("x")

    assert seen == [(0, 1)]


def test_grant_points_clamps_and_rejects_non_integers():
    bus = EventBus()
    ledger = ProgressionLedger(build_catalog(make_ability("x")), bus)
    changes = capture(bus, EVENT_POINTS_CHANGED)

    assert ledger.grant_points(3) == 3
    assert ledger.grant_points(-4) == 0
    assert ledger.available_points == 3
    assert ledger.total_granted == 3
    assert changes == [
        {"available": 3, "delta": 3, "reason": "grant", "version": 1},
        {"available": 3, "delta": 0, "reason": "grant", "version": 1},
    ]

    with pytest.raises(ValueError):
        ledger.grant_points(1.5)
    with pytest.raises(ValueError):
        ledger.grant_points(True)


def test_zero_grant_notifies_without_bumping_version():
    bus = EventBus()
    ledger = ProgressionLedger(build_catalog(make_ability("x")), bus, available_points=2)
    changes = capture(bus, EVENT_POINTS_CHANGED)

    assert ledger.grant_points(0) == 0

    assert ledger.version == 0
    assert changes == [{"available": 2, "delta": 0, "reason": "grant", "version": 0}]


def test_reset_all_refunds_exact_costs():
    catalog = build_catalog(
        make_ability("x", (1, 1, 2)),
        make_ability("w", (2,)),
        make_specialization("y", (1, 1, 2, 2, 3)),
    )
    bus = EventBus()
    ledger = ProgressionLedger(catalog, bus, available_points=12)
    for ability_id in ("x", "x", "x", "w", "y", "y", "y"):
        assert ledger.learn_or_upgrade(ability_id).ok
    available_before = ledger.available_points
    points = capture(bus, EVENT_POINTS_CHANGED)
    specs = capture(bus, EVENT_SPECIALIZATION_CHANGED)

    refund = ledger.reset_all()

    assert refund == 4 + 2 + 4
    assert ledger.available_points == available_before + refund == 12
    assert ledger.get_learned() == ()
    assert ledger.get_specialization() is None
    assert points == [{"available": 12, "delta": refund, "reason": "reset", "version": ledger.version}]
    assert specs == [{"ability_id": None, "previous_id": "y", "version": ledger.version}]


def test_reset_allows_a_different_specialization():
    ledger = ProgressionLedger(build_catalog(make_specialization("y"), make_specialization("z")), available_points=1)
    ledger.learn_or_upgrade("y")

    ledger.reset_all()

    assert ledger.learn_or_upgrade("z").ok
    assert ledger.specialization_id == "z"


def test_point_conservation_holds_through_operations():
    catalog = build_catalog(make_ability("x", (1, 1, 2)), make_ability("w", (2, 2)))
    ledger = ProgressionLedger(catalog, available_points=2)

    def conserved():
        return ledger.spent_points() + ledger.available_points == ledger.total_granted

    for step in ("x", "w", "x", "x", "w"):
        ledger.learn_or_upgrade(step)
        assert conserved()
    ledger.grant_points(5)
    for step in ("x", "w", "w"):
        ledger.learn_or_upgrade(step)
        assert conserved()
    ledger.reset_all()
    assert conserved()


def test_get_ability_views():
    ledger = ProgressionLedger(build_catalog(make_ability("x"), make_ability("w")), available_points=1)
    ledger.learn_or_upgrade("x")

    assert ledger.get_ability("x").level == 1
    assert ledger.get_ability("w").level == 0
    assert ledger.get_ability("fireball") is None

    # Accessors hand out copies.
    ledger.get_ability("x").level = 3
    assert ledger.get_ability("x").level == 1


def test_check_and_learnable_are_dry_runs():
    catalog = build_catalog(
        make_ability("b", (1,)),
        make_ability("a", prerequisites=[Prerequisite("b")]),
        make_ability("expensive", (5,)),
    )
    ledger = ProgressionLedger(catalog, available_points=1)
    before = _state(ledger)

    assert ledger.check("b").ok
    assert ledger.check("a").reason is LearnFailure.PREREQUISITES_NOT_MET
    assert ledger.learnable() == ("b",)
    assert _state(ledger) == before


def test_off_removes_handler():
    bus = EventBus()
    ledger = ProgressionLedger(build_catalog(make_ability("x")), bus)
    calls = []

    def handler(sender, **payload):
        calls.append(payload)

    ledger.on(EVENT_POINTS_CHANGED, handler)
    ledger.off(EVENT_POINTS_CHANGED, handler)
    ledger.grant_points(1)

    assert calls == []


def test_on_rejects_unknown_event():
    ledger = ProgressionLedger(build_catalog(make_ability("x")))

    with pytest.raises(ValueError):
        ledger.on("damage_evaded", lambda sender, **payload: None)


def test_reentrant_mutation_notifications_are_queued():
    bus = EventBus()
    ledger = ProgressionLedger(build_catalog(make_ability("x"), make_ability("w")), bus, available_points=2)
    log = []

    def learn_follow_up(sender, **payload):
        log.append(("learned", payload["ability_id"]))
        if payload["ability_id"] == "x":
            result = ledger.learn_or_upgrade("w")
            # Applied immediately even though notifications wait.
            log.append(("nested", result.ok, ledger.available_points))

    ledger.on(EVENT_ABILITY_LEARNED, learn_follow_up)
    ledger.on(EVENT_POINTS_CHANGED, lambda sender, **p: log.append(("points", p["available"])))

    ledger.learn_or_upgrade("x")

    assert log == [
        ("learned", "x"),
        ("nested", True, 0),
        ("points", 1),
        ("learned", "w"),
        ("points", 0),
    ]


def test_independent_ledgers_do_not_cross_talk():
    catalog = build_catalog(make_ability("x"))
    first = ProgressionLedger(catalog, available_points=1)
    second = ProgressionLedger(catalog, available_points=1)
    seen = []
    second.on(EVENT_ABILITY_LEARNED, lambda sender, **p: seen.append(p))

    first.learn_or_upgrade("x")

    assert seen == []
    assert second.available_points == 1


def test_failed_handler_does_not_replay_stale_notifications():
    bus = EventBus()
    ledger = ProgressionLedger(build_catalog(make_ability("x")), bus, available_points=1)

    def explode(sender, **payload):
        raise RuntimeError("handler failed")

    ledger.on(EVENT_ABILITY_LEARNED, explode)
    changes = capture(bus, EVENT_POINTS_CHANGED)

    with pytest.raises(RuntimeError):
        ledger.learn_or_upgrade("x")
    assert ledger.get_ability("x").level == 1
    assert changes == []

    ledger.grant_points(1)

    assert [change["reason"] for change in changes] == ["grant"]
    assert changes[0]["available"] == 1
