"""Tests for dependency levels and graph summaries."""

import pytest

from pyorchestra.executor.graph import dependency_levels, level_graph, summarize
from pyorchestra.executor.scheduler import ConfigurationError

make_step = pytest.make_step


@pytest.fixture
def diamond():
    return [
        make_step("a"),
        make_step("b"),
        make_step("c", "a"),
        make_step("d", "a", "b"),
        make_step("e", "c", "d"),
    ]


def test_dependency_levels(diamond):
    assert dependency_levels(diamond) == [["a", "b"], ["c", "d"], ["e"]]


def test_summarize(diamond):
    summary = summarize(diamond)

    assert summary.total == 5
    assert summary.root_count == 2
    assert summary.roots == ["a", "b"]
    assert summary.leaf_count == 1
    assert summary.leaves == ["e"]
    assert summary.max_depth == 2


def test_level_graph_text():
    members = [make_step("fetch"), make_step("parse", "fetch"), make_step("scan", "fetch")]

    text = level_graph(members)

    assert text.startswith("Dependency Levels (3 members):\n\n")
    assert "Level 0: [fetch]\n" in text
    assert "Level 1: [parse] [scan] (2 side by side)\n" in text
    assert "↓" in text


def test_levels_ignore_outside_dependencies():
    assert dependency_levels([make_step("a", "elsewhere")]) == [["a"]]


def test_empty_graph():
    assert dependency_levels([]) == []
    assert summarize([]).total == 0


def test_cycle_has_no_levels():
    with pytest.raises(ConfigurationError):
        dependency_levels([make_step("a", "b"), make_step("b", "a")])
