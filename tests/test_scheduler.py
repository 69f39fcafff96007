"""Tests for next-batch selection, blocking and configuration checks."""

import pytest

from pyorchestra.executor.scheduler import (
    ConfigurationError,
    blocked_members,
    find_cycle,
    is_eligible,
    priority_weight,
    select_next,
    sort_by_priority,
    validate_members,
)
from pyorchestra.models import MemberStatus, Priority

make_step = pytest.make_step


def test_priority_weights():
    assert priority_weight(Priority.URGENT) == 4
    assert priority_weight(Priority.HIGH) == 3
    assert priority_weight(Priority.MEDIUM) == 2
    assert priority_weight(Priority.LOW) == 1


def test_sort_by_priority_is_stable():
    members = [
        make_step("low", priority=Priority.LOW),
        make_step("m1"),
        make_step("urgent", priority=Priority.URGENT),
        make_step("m2"),
        make_step("high", priority=Priority.HIGH),
    ]

    ordered = [m.id for m in sort_by_priority(members)]

    assert ordered == ["urgent", "high", "m1", "m2", "low"]


def test_select_next_waits_for_dependencies():
    """A, then B and C once A has completed."""
    a = make_step("a")
    b = make_step("b", "a")
    c = make_step("c", "a")

    assert [m.id for m in select_next([a, b, c], set(), 2)] == ["a"]

    a.status = MemberStatus.COMPLETED
    assert [m.id for m in select_next([a, b, c], set(), 2)] == ["b", "c"]


def test_select_next_priority_beats_insertion_order():
    first = make_step("first", priority=Priority.LOW)
    second = make_step("second", priority=Priority.URGENT)

    assert [m.id for m in select_next([first, second], set(), 1)] == ["second"]


def test_select_next_respects_free_slots():
    members = [make_step(f"s{i}") for i in range(5)]
    members[0].status = MemberStatus.RUNNING

    batch = select_next(members, {"s0"}, 3)

    assert [m.id for m in batch] == ["s1", "s2"]


def test_select_next_full_slots_returns_empty():
    members = [make_step("a"), make_step("b"), make_step("c")]

    assert select_next(members, {"x", "y"}, 2) == []


def test_select_next_excludes_in_flight_and_non_pending():
    a = make_step("a")
    b = make_step("b")
    b.status = MemberStatus.FAILED
    c = make_step("c")
    c.status = MemberStatus.PAUSED

    assert select_next([a, b, c], {"a"}, 5) == []


def test_select_next_rejects_zero_limit():
    with pytest.raises(ConfigurationError):
        select_next([make_step("a")], set(), 0)


def test_select_next_does_not_mutate():
    a = make_step("a")
    b = make_step("b", "a")

    select_next([a, b], set(), 2)

    assert a.status == MemberStatus.PENDING
    assert b.status == MemberStatus.PENDING


def test_dependency_outside_run_is_satisfied():
    a = make_step("a", "not-in-this-run")

    assert is_eligible(a, {"a": MemberStatus.PENDING}, set())
    assert [m.id for m in select_next([a], set(), 1)] == ["a"]


def test_blocked_members_direct_dependencies_only():
    a = make_step("a")
    a.status = MemberStatus.FAILED
    b = make_step("b", "a")
    c = make_step("c", "b")
    d = make_step("d")

    assert [m.id for m in blocked_members([a, b, c, d])] == ["b"]

    b.status = MemberStatus.SKIPPED
    assert [m.id for m in blocked_members([a, b, c, d])] == ["c"]


def test_running_dependency_does_not_block():
    a = make_step("a")
    a.status = MemberStatus.RUNNING
    b = make_step("b", "a")

    assert blocked_members([a, b]) == []


def test_find_cycle_reports_path():
    a = make_step("a", "b")
    b = make_step("b", "a")

    cycle = find_cycle([a, b])

    assert cycle is not None
    assert cycle[0] == cycle[-1]
    assert set(cycle) == {"a", "b"}


def test_find_cycle_self_dependency():
    assert find_cycle([make_step("a", "a")]) == ["a", "a"]


def test_find_cycle_acyclic():
    members = [make_step("a"), make_step("b", "a"), make_step("c", "a", "b")]

    assert find_cycle(members) is None


def test_validate_rejects_cycle():
    with pytest.raises(ConfigurationError, match="cycle"):
        validate_members([make_step("a", "b"), make_step("b", "a")], 2)


def test_validate_rejects_duplicate_ids():
    with pytest.raises(ConfigurationError, match="Duplicate"):
        validate_members([make_step("a"), make_step("a")], 2)


def test_validate_rejects_bad_concurrency():
    with pytest.raises(ConfigurationError, match="Concurrency"):
        validate_members([make_step("a")], 0)


def test_validate_rejects_negative_retries():
    step = make_step("a")
    step.max_retries = -1

    with pytest.raises(ConfigurationError, match="max_retries"):
        validate_members([step], 1)


def test_validate_accepts_unknown_dependency():
    validate_members([make_step("a", "elsewhere")], 1)


def test_find_cycle_long_chain_listed_leaf_first():
    members = [make_step("s0")] + [make_step(f"s{i}", f"s{i - 1}") for i in range(1, 2000)]
    members.reverse()

    assert find_cycle(members) is None
    validate_members(members, 2)


def test_find_cycle_closing_a_long_chain():
    members = [make_step("s0", "s1999")] + [
        make_step(f"s{i}", f"s{i - 1}") for i in range(1, 2000)
    ]
    members.reverse()

    cycle = find_cycle(members)

    assert cycle is not None
    assert cycle[0] == cycle[-1]
    assert len(cycle) == 2001
