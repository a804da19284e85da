"""
Tests for cycle detection and topological ordering.
"""

import pytest

from tokentree.graph import (
    build_dependency_graph,
    detect_cycles,
    find_cycles,
    find_shortest_cycle,
    topological_sort,
    would_create_cycle,
)
from tokentree.structure import build_tree


def assert_dependencies_first(graph, order):
    position = {node: index for index, node in enumerate(order)}
    for source, targets in graph.dependencies.items():
        for target in targets:
            assert position[target] < position[source], f"{target} must precede {source}"


class TestDetectCycles:
    """Tarjan-based cycle detection over token graphs."""

    def test_simple_cycle(self, cyclic_document):
        """Two tokens referencing each other form one cycle."""
        result = detect_cycles(cyclic_document)

        assert result.has_cycles
        assert len(result.cycles) == 1
        assert set(result.cycles[0]) == {"a", "b"}
        assert result.cyclic_tokens == {"a", "b"}
        assert result.topological_order is None

    def test_self_reference(self):
        """A token referencing itself is a cycle of exactly itself."""
        result = detect_cycles({"loop": {"$value": "{loop}"}, "ok": {"$value": 1}})

        assert result.has_cycles
        assert result.cycles == [["loop"]]
        assert result.topological_order is None

    def test_diamond_is_acyclic(self, diamond_document):
        """A diamond has no cycle and orders dependencies first."""
        result = detect_cycles(diamond_document)
        order = result.topological_order

        assert not result.has_cycles
        assert result.cycles == []
        assert set(order) == {"a", "b", "c", "d"}
        assert order.index("c") < order.index("b")
        assert order.index("b") < order.index("a")
        assert order.index("b") < order.index("d")

    def test_empty_graph_has_empty_order(self):
        """Without references the order is an empty list, not None."""
        result = detect_cycles({"a": {"$value": 1}})
        assert not result.has_cycles
        assert result.topological_order == []

    def test_multiple_components(self):
        """Independent cycles are reported separately; acyclic parts are not."""
        result = detect_cycles(
            {
                "a": {"$value": "{b}"},
                "b": {"$value": "{a}"},
                "c": {"$value": "{d}"},
                "d": {"$value": "{e}"},
                "e": {"$value": "{c}"},
                "f": {"$value": "{a}"},
                "g": {"$value": "{g}"},
            }
        )
        assert sorted(sorted(cycle) for cycle in result.cycles) == [
            ["a", "b"],
            ["c", "d", "e"],
            ["g"],
        ]
        assert "f" not in result.cyclic_tokens

    def test_accepts_every_source_kind(self, diamond_document):
        """Trees, documents, graphs and adjacency mappings give the same answer."""
        graph = build_dependency_graph(diamond_document)
        sources = [
            diamond_document,
            build_tree(diamond_document),
            graph,
            graph.dependencies,
            {"a": ["b"], "b": ["c"], "d": ["b"]},
        ]
        orders = [detect_cycles(source).topological_order for source in sources]
        assert all(order == orders[0] for order in orders)

    def test_long_chain_does_not_recurse(self, make_chain):
        """Very long chains are handled without hitting the recursion limit."""
        document = make_chain(5000)
        result = detect_cycles(document)
        assert not result.has_cycles
        assert result.topological_order[0] == "t5000"
        assert result.topological_order[-1] == "t1"

    def test_long_cycle(self, make_chain):
        """A long ring is detected as one cycle containing every member."""
        document = make_chain(3000)
        document["t3000"] = {"$value": "{t1}"}
        result = detect_cycles(document)
        assert len(result.cycles) == 1
        assert len(result.cyclic_tokens) == 3000


class TestOrderingProperty:
    """Cycles and topological order are mutually exclusive."""

    @pytest.mark.parametrize(
        "adjacency",
        [
            {},
            {"a": {"b"}},
            {"a": {"b", "c"}, "b": {"c"}, "c": {"d"}},
            {"a": {"b"}, "b": {"a"}},
            {"x": {"x"}},
            {"a": {"b"}, "b": {"c"}, "c": {"a"}, "d": {"a"}},
            {"p": {"q", "r"}, "q": {"s"}, "r": {"s"}, "s": set()},
        ],
    )
    def test_duality(self, adjacency):
        """has_cycles is True exactly when topological_order is None."""
        result = detect_cycles(adjacency)
        assert result.has_cycles == (result.topological_order is None)

    def test_order_respects_every_edge(self, color_document):
        """Every dependency precedes its dependents."""
        graph = build_dependency_graph(color_document)
        result = detect_cycles(graph)
        assert_dependencies_first(graph, result.topological_order)
        assert set(result.topological_order) == set(graph.nodes())

    def test_ties_follow_first_seen_order(self):
        """Independent nodes keep the order in which they were first seen."""
        ordered, blocked = topological_sort({"z": [], "m": [], "a": []})
        assert ordered == ["z", "m", "a"]
        assert blocked == []


class TestGenericHelpers:
    """Graph helpers reused at file granularity."""

    def test_topological_sort_reports_blocked_nodes(self):
        """Nodes on or behind a cycle are returned separately."""
        ordered, blocked = topological_sort(
            {"app": ["theme"], "theme": ["base"], "x": ["y"], "y": ["x"], "z": ["x"]},
            nodes=["app", "theme", "base", "x", "y", "z"],
        )
        assert ordered == ["base", "theme", "app"]
        assert blocked == ["x", "y", "z"]

    def test_find_cycles_on_adjacency(self):
        """find_cycles works on plain mappings of lists."""
        cycles = find_cycles({"a.json": ["b.json"], "b.json": ["a.json"], "c.json": []})
        assert [set(cycle) for cycle in cycles] == [{"a.json", "b.json"}]

    def test_shortest_cycle(self):
        """The shortest cycle through a node starts at that node."""
        adjacency = {"a": ["b", "c"], "b": ["d"], "d": ["a"], "c": ["a"]}
        assert find_shortest_cycle(adjacency, "a") == ["a", "c"]
        assert find_shortest_cycle({"s": ["s"]}, "s") == ["s"]
        assert find_shortest_cycle({"a": ["b"]}, "a") is None

    def test_would_create_cycle(self, diamond_document):
        """Adding an edge back up the chain would close a cycle."""
        assert would_create_cycle(diamond_document, "c", "a")
        assert would_create_cycle(diamond_document, "c", "c")
        assert not would_create_cycle(diamond_document, "a", "d")
