"""
tagchart - unit tests for dependency cycle detection

File: tests/unit/analysis/test_dependencies.py

Purpose
- Cycle path reporting, acyclicity on generated DAGs, and the chain depth cap.
"""

from __future__ import annotations

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from tagchart.analysis.dependencies import dependency_graph, detect_cycles, has_cycles
from tagchart.domain.records import Record
from tagchart.errors import DependencyChainTooDeepError


def _graph(edges: dict[str, list[str]], field: str = "depends_on") -> dict[str, Record]:
    return {
        record_id: Record.from_tags(record_id, {field: deps} if deps else {})
        for record_id, deps in edges.items()
    }


def test_two_node_cycle_reports_both_ids() -> None:
    cycles = detect_cycles(_graph({"A": ["B"], "B": ["A"]}))

    assert cycles == ["A -> B", "B -> A", "A (cyclic)"]
    assert has_cycles(_graph({"A": ["B"], "B": ["A"]}))


def test_self_dependency_is_a_cycle() -> None:
    assert detect_cycles(_graph({"solo": ["solo"]})) == ["solo -> solo", "solo (cyclic)"]


def test_cycle_path_skips_acyclic_branches() -> None:
    records = _graph({"A": ["X", "B"], "X": [], "B": ["C"], "C": ["A"]})

    assert detect_cycles(records) == ["A -> B", "B -> C", "C -> A", "A (cyclic)"]


def test_each_cyclic_component_is_reported() -> None:
    records = _graph({"A": ["B"], "B": ["A"], "M": ["N"], "N": ["M"], "Z": []})

    cycles = detect_cycles(records)

    assert "A (cyclic)" in cycles
    assert "M (cyclic)" in cycles


def test_unknown_ids_are_leaves_and_other_kinds_are_ignored() -> None:
    records = _graph({"A": ["ghost"], "B": []})
    records["C"] = Record.from_tags("C", {"depends_on": "A"})

    assert dependency_graph(records) == {"A": ("ghost",), "B": (), "C": ()}
    assert detect_cycles(records) == []


def test_custom_field_name() -> None:
    records = _graph({"A": ["B"], "B": ["A"]}, field="blocked_by")
    assert detect_cycles(records) == []
    assert detect_cycles(records, "blocked_by")


def test_deep_chain_hits_depth_cap_without_recursion_error() -> None:
    size = 3_000
    records = _graph({f"t{i:05d}": [f"t{i + 1:05d}"] for i in range(size)})

    assert detect_cycles(records, max_depth=size + 1) == []
    with pytest.raises(DependencyChainTooDeepError):
        detect_cycles(records, max_depth=100)


@st.composite
def _acyclic_edges(draw: st.DrawFn) -> dict[str, list[str]]:
    size = draw(st.integers(min_value=0, max_value=25))
    ids = [f"n{index:02d}" for index in range(size)]
    edges: dict[str, list[str]] = {}
    for index, node in enumerate(ids):
        later = ids[index + 1 :]
        edges[node] = draw(st.lists(st.sampled_from(later), max_size=4)) if later else []
    return edges


@settings(max_examples=75, deadline=None)
@given(_acyclic_edges())
def test_generated_dags_are_acyclic(edges: dict[str, list[str]]) -> None:
    assert detect_cycles(_graph(edges)) == []


@settings(max_examples=75, deadline=None)
@given(_acyclic_edges(), st.data())
def test_back_edge_on_generated_chain_is_reported(
    edges: dict[str, list[str]], data: st.DataObject
) -> None:
    ids = sorted(edges)
    if len(ids) < 2:
        return
    chain = {node: [ids[i + 1]] for i, node in enumerate(ids[:-1])}
    chain[ids[-1]] = [data.draw(st.sampled_from(ids[:-1]))]

    cycles = detect_cycles(_graph(chain))

    assert cycles
    assert cycles[-1].endswith("(cyclic)")
