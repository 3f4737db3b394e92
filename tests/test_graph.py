"""Tests for the attestation graph."""
import pytest

from attestrank.config import TrustConfig
from attestrank.errors import InvalidAccountError
from attestrank.graph import AttestationGraph, Edge

from conftest import addr

A, B, C = addr(1), addr(2), addr(3)


@pytest.fixture
def empty_graph():
    return AttestationGraph()


class TestAttestationGraph:
    def test_empty(self, empty_graph):
        assert empty_graph.num_nodes == 0
        assert empty_graph.num_edges == 0
        assert empty_graph.nodes == set()
        assert empty_graph.sorted_nodes() == []

    def test_add_edge_registers_both_accounts(self, empty_graph):
        empty_graph.add_edge(A, B, 0.9)
        assert empty_graph.nodes == {A, B}
        assert empty_graph.num_edges == 1
        assert empty_graph.outgoing(A) == [Edge(B, 0.9)]
        assert empty_graph.outgoing(B) == []

    def test_accounts_are_canonicalized(self, empty_graph):
        empty_graph.add_edge("0x" + "AB" * 20, "cd" * 20)
        assert empty_graph.nodes == {"0x" + "ab" * 20, "0x" + "cd" * 20}

    def test_invalid_account_rejected(self, empty_graph):
        with pytest.raises(InvalidAccountError):
            empty_graph.add_edge("alice", B)

    def test_parallel_edges_kept_distinct(self, empty_graph):
        empty_graph.add_edge(A, B, 1.0)
        empty_graph.add_edge(A, B, 2.0)
        assert empty_graph.outgoing(A) == [Edge(B, 1.0), Edge(B, 2.0)]
        assert empty_graph.num_edges == 2
        assert empty_graph.incoming_count(B) == 2
        assert empty_graph.num_nodes == 2

    def test_outgoing_unknown_node(self, empty_graph):
        assert empty_graph.outgoing(A) == []
        assert empty_graph.incoming_count(A) == 0

    def test_outgoing_returns_copy(self, cycle_graph):
        cycle_graph.outgoing(A).append(Edge(C, 5.0))
        assert len(cycle_graph.outgoing(A)) == 1

    def test_negative_weight_accepted(self, empty_graph):
        empty_graph.add_edge(A, B, -3.0)
        assert empty_graph.outgoing(A)[0].weight == -3.0

    def test_sorted_nodes(self, empty_graph):
        empty_graph.add_edge(C, A)
        empty_graph.add_edge(B, C)
        assert empty_graph.sorted_nodes() == [A, B, C]

    def test_self_loop_nodes(self, empty_graph):
        empty_graph.add_edge(B, B, 5.0)
        empty_graph.add_edge(A, A, 1.0)
        empty_graph.add_edge(C, A, 1.0)
        assert empty_graph.self_loop_nodes() == [A, B]

    def test_contains_and_len(self, cycle_graph):
        assert A in cycle_graph
        assert addr(9) not in cycle_graph
        assert len(cycle_graph) == 3

    def test_to_dict(self, cycle_graph):
        cycle_graph.add_edge(A, A)
        assert cycle_graph.to_dict() == {"nodes": 3, "edges": 4, "self_loops": 1}


class TestEligibleOutgoing:
    def test_self_loops_stripped_from_edges_and_total(self, empty_graph):
        empty_graph.add_edge(A, A, 5.0)
        empty_graph.add_edge(A, C, 3.0)
        empty_graph.add_edge(A, B, 1.0)
        eligible = empty_graph.eligible_outgoing(A, TrustConfig())
        assert eligible.edges == [(B, 1.0), (C, 3.0)]
        assert eligible.total_weight == 4.0

    def test_trust_multiplier_applied_to_seed_edges(self, empty_graph):
        empty_graph.add_edge(A, B, 1.0)
        empty_graph.add_edge(A, C, 3.0)
        trust = TrustConfig({A}, trust_multiplier=2.0)
        eligible = empty_graph.eligible_outgoing(A, trust)
        assert eligible.edges == [(B, 2.0), (C, 6.0)]
        assert eligible.total_weight == 8.0

    def test_non_seed_edges_unchanged(self, empty_graph):
        empty_graph.add_edge(B, C, 1.5)
        eligible = empty_graph.eligible_outgoing(B, TrustConfig({A}, trust_multiplier=3.0))
        assert eligible.edges == [(C, 1.5)]

    def test_self_loop_only_node_is_empty(self, empty_graph):
        empty_graph.add_edge(A, A, 100.0)
        eligible = empty_graph.eligible_outgoing(A, TrustConfig())
        assert not eligible
        assert eligible.total_weight == 0.0

    def test_parallel_edges_keep_insertion_order(self, empty_graph):
        empty_graph.add_edge(A, C, 2.0)
        empty_graph.add_edge(A, B, 1.0)
        empty_graph.add_edge(A, C, 0.5)
        eligible = empty_graph.eligible_outgoing(A, TrustConfig())
        assert eligible.edges == [(B, 1.0), (C, 2.0), (C, 0.5)]


class TestReverseAdjacency:
    def test_unique_sorted_sources(self, empty_graph):
        empty_graph.add_edge(C, B)
        empty_graph.add_edge(A, B)
        empty_graph.add_edge(A, B)
        assert empty_graph.reverse_adjacency() == {B: [A, C]}

    def test_neighbors_both_directions(self, empty_graph):
        empty_graph.add_edge(A, B)
        empty_graph.add_edge(C, A)
        empty_graph.add_edge(A, A)
        rev = empty_graph.reverse_adjacency()
        assert empty_graph.neighbors(A, rev) == [B, C]
        assert empty_graph.neighbors(B, rev) == [A]
