"""
Dependency graph inspection.

Read-only views over the dependency structure of a workflow or queue:
which members are roots, which are leaves, how deep the graph goes and
which members can run side by side.

**How It Works**:
1. Each member's dependency list is an edge set pointing at earlier work
2. A member's level is 0 without in-run dependencies, else 1 + the
   highest level among its dependencies
3. Members sharing a level have no dependency on each other

Dependencies on ids outside the member set are ignored here, matching the
scheduler's "not present in this run means satisfied" rule.

**Example**:
```python
print(level_graph(workflow.steps))
```
```
Dependency Levels (4 members):

Level 0: [fetch]
         ↓
Level 1: [parse] [scan] (2 side by side)
         ↓
Level 2: [report]
```
"""

from collections.abc import Sequence
from dataclasses import dataclass

from pyorchestra.executor.scheduler import ConfigurationError, find_cycle
from pyorchestra.models import Member

__all__ = ["GraphSummary", "summarize", "dependency_levels", "level_graph"]


@dataclass
class GraphSummary:
    """
    Summary information about a dependency graph.

    **Attributes**:
        total: Total number of members
        root_count: Number of members without in-run dependencies
        leaf_count: Number of members nothing else depends on
        max_depth: Highest dependency level (0 for a flat graph)
        roots: Root member ids, in insertion order
        leaves: Leaf member ids, in insertion order
    """

    total: int
    root_count: int
    leaf_count: int
    max_depth: int
    roots: list[str]
    leaves: list[str]


def _in_run_dependencies(members: Sequence[Member]) -> dict[str, list[str]]:
    ids = {m.id for m in members}
    return {m.id: [dep for dep in m.dependencies if dep in ids] for m in members}


def _calculate_depths(members: Sequence[Member]) -> dict[str, int]:
    """
    Calculates the level of each member.

    Root members have level 0, their dependents level 1, etc.

    Raises:
        ConfigurationError: If the graph has a cycle (levels are undefined)
    """
    cycle = find_cycle(members)
    if cycle:
        raise ConfigurationError(f"Dependency cycle detected: {' -> '.join(cycle)}")

    graph = _in_run_dependencies(members)
    depths: dict[str, int] = {}

    # Iterate until every member has a level; terminates because the graph is acyclic
    while len(depths) < len(graph):
        for member_id, deps in graph.items():
            if member_id in depths:
                continue
            if all(dep in depths for dep in deps):
                depths[member_id] = 1 + max((depths[dep] for dep in deps), default=-1)

    return depths


def summarize(members: Sequence[Member]) -> GraphSummary:
    """
    Returns a summary of the dependency graph.

    **Returns**:
        GraphSummary with graph statistics
    """
    graph = _in_run_dependencies(members)

    roots = [member_id for member_id, deps in graph.items() if not deps]

    depended_on: set[str] = set()
    for deps in graph.values():
        depended_on.update(deps)
    leaves = [member_id for member_id in graph if member_id not in depended_on]

    depths = _calculate_depths(members)

    return GraphSummary(
        total=len(graph),
        root_count=len(roots),
        leaf_count=len(leaves),
        max_depth=max(depths.values(), default=0),
        roots=roots,
        leaves=leaves,
    )


def dependency_levels(members: Sequence[Member]) -> list[list[str]]:
    """
    Group member ids by dependency level.

    Example:
        a, b without dependencies; c depends on a; d on a and b; e on c and d
        Returns: [['a', 'b'], ['c', 'd'], ['e']]
    """
    depths = _calculate_depths(members)
    if not depths:
        return []

    levels: list[list[str]] = [[] for _ in range(max(depths.values()) + 1)]
    for member in members:
        levels[depths[member.id]].append(member.id)

    return levels


def level_graph(members: Sequence[Member]) -> str:
    """
    Returns a level-based text view of the dependency graph.

    **Returns**:
        Multi-line string representation
    """
    levels = dependency_levels(members)
    output = f"Dependency Levels ({len(members)} members):\n\n"

    for level, ids in enumerate(levels):
        side_by_side = f" ({len(ids)} side by side)" if len(ids) > 1 else ""
        output += f"Level {level}: [{'] ['.join(ids)}]{side_by_side}\n"

        if level < len(levels) - 1:
            output += "         ↓\n"

    return output
