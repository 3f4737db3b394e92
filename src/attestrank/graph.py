"""
attestrank graph: directed, weighted attestation graph.

Nodes = accounts, edges = endorsements (attester -> recipient). Parallel
edges between the same pair are kept distinct; totals are accumulated when
the graph is evaluated. Write-once, read-many for a single computation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, NamedTuple, Set, Tuple

from .accounts import to_account
from .config import TrustConfig


class Edge(NamedTuple):
    target: str
    weight: float


@dataclass
class EligibleEdges:
    """Outgoing edges that may contribute score, self-loops removed."""
    edges: List[Tuple[str, float]] = field(default_factory=list)  # (target, effective weight)
    total_weight: float = 0.0

    def __bool__(self) -> bool:
        return bool(self.edges)


class AttestationGraph:
    """
    Lightweight directed multigraph of endorsements.

    Negative weights are accepted as-is and act as negative contributions.
    Iteration over ``nodes`` has no meaningful order; use ``sorted_nodes``
    wherever output depends on it.
    """

    def __init__(self):
        self._out: Dict[str, List[Edge]] = {}
        self._incoming: Dict[str, int] = {}
        self._nodes: Set[str] = set()

    def add_edge(self, src: str, dst: str, base_weight: float = 1.0) -> None:
        """Add an endorsement edge from src to dst."""
        src = to_account(src)
        dst = to_account(dst)
        self._nodes.add(src)
        self._nodes.add(dst)
        self._out.setdefault(src, []).append(Edge(dst, float(base_weight)))
        self._incoming[dst] = self._incoming.get(dst, 0) + 1

    @property
    def nodes(self) -> Set[str]:
        return set(self._nodes)

    def sorted_nodes(self) -> List[str]:
        return sorted(self._nodes)

    @property
    def num_nodes(self) -> int:
        return len(self._nodes)

    @property
    def num_edges(self) -> int:
        return sum(len(edges) for edges in self._out.values())

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, account: str) -> bool:
        return account in self._nodes

    def outgoing(self, node: str) -> List[Edge]:
        return list(self._out.get(node, ()))

    def incoming_count(self, node: str) -> int:
        """Number of edges pointing at node, self-loops included. Diagnostic only."""
        return self._incoming.get(node, 0)

    def self_loop_nodes(self) -> List[str]:
        return sorted(
            node for node, edges in self._out.items()
            if any(e.target == node for e in edges)
        )

    def eligible_outgoing(self, node: str, trust_config: TrustConfig) -> EligibleEdges:
        """
        Contribution-eligible outgoing edges of node with trust-composed weights.

        Self-loops are dropped from both the edge list and the total, so the
        denominator always matches the edges that contribute. Edges are
        ordered by target; parallel edges keep insertion order.
        """
        eligible = EligibleEdges()
        for target, weight in sorted(self._out.get(node, ()), key=lambda e: e.target):
            if target == node:
                continue
            effective = trust_config.effective_weight(node, weight)
            eligible.edges.append((target, effective))
            eligible.total_weight += effective
        return eligible

    def reverse_adjacency(self) -> Dict[str, List[str]]:
        """target -> sorted unique sources. Built once per computation."""
        rev: Dict[str, Set[str]] = {}
        for src, edges in self._out.items():
            for target, _ in edges:
                rev.setdefault(target, set()).add(src)
        return {target: sorted(sources) for target, sources in rev.items()}

    def neighbors(self, node: str, reverse: Dict[str, List[str]]) -> List[str]:
        """Forward and reverse neighbours, sorted, self excluded."""
        found = {e.target for e in self._out.get(node, ())}
        found.update(reverse.get(node, ()))
        found.discard(node)
        return sorted(found)

    def to_dict(self) -> dict:
        return {
            "nodes": self.num_nodes,
            "edges": self.num_edges,
            "self_loops": len(self.self_loop_nodes()),
        }

    def __repr__(self):
        return f"AttestationGraph(nodes={self.num_nodes}, edges={self.num_edges})"
