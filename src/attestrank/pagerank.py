"""
attestrank pagerank: trust-aware PageRank over an attestation graph.

Standard mode (no trusted seeds) is plain weighted PageRank with uniform
teleportation. Trust mode adds three things:

1. Edges from trusted seeds are amplified by ``trust_multiplier``.
2. ``trust_boost`` of the teleportation mass (and of the initial mass) is
   reserved for the seeds; the rest is split across everyone else.
3. Contributions decay with distance from the nearest seed
   (``0.8 ** hops``), and nodes unreachable from every seed are pinned to a
   minuscule score. Sybil clusters that only endorse themselves cannot
   bootstrap score from teleportation alone.

Every loop runs over one sorted node list, so results are bit-identical
across runs for the same input.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .config import PageRankConfig, TrustConfig
from .distance import UNREACHABLE, trust_distances
from .graph import AttestationGraph

logger = logging.getLogger(__name__)

DISTANCE_DECAY = 0.8
UNREACHABLE_DECAY = 0.01
ISOLATED_SCORE = 1e-6

# (source, share of source's effective outgoing weight, trust decay)
_Contribution = Tuple[str, float, float]


@dataclass
class PageRankResult:
    """Normalized scores plus how the iteration went."""
    scores: Dict[str, float] = field(default_factory=dict)
    iterations: int = 0
    converged: bool = False
    distances: Optional[Dict[str, int]] = None  # only in trust mode
    statistics: Optional[TrustStatistics] = None  # only in trust mode

    def ranked(self) -> List[Tuple[str, float]]:
        """Scores sorted high to low, ties by account."""
        return sorted(self.scores.items(), key=lambda item: (-item[1], item[0]))

    def __len__(self) -> int:
        return len(self.scores)

    def __getitem__(self, account: str) -> float:
        return self.scores[account]


def trust_decay(distances: Optional[Dict[str, int]], source: str, target: str) -> float:
    """Decay applied to a source -> target contribution."""
    if distances is None:
        return 1.0
    hops = max(distances.get(source, UNREACHABLE), distances.get(target, UNREACHABLE))
    if hops == UNREACHABLE:
        return UNREACHABLE_DECAY
    return DISTANCE_DECAY ** hops


def _split_mass(nodes: List[str], trust_config: TrustConfig, mass: float) -> Dict[str, float]:
    """Split mass uniformly, or trust_boost over seeds and the rest over others.

    When every node is a seed, or none is, the one populated group takes the
    whole mass, so the shares always add up to ``mass``.
    """
    n = len(nodes)
    if not trust_config.enabled:
        return {node: mass / n for node in nodes}

    seeds = sum(1 for node in nodes if trust_config.is_trusted_seed(node))
    regular = n - seeds
    if not seeds or not regular:
        return {node: mass / n for node in nodes}

    seed_share = mass * trust_config.trust_boost / seeds
    regular_share = mass * (1.0 - trust_config.trust_boost) / regular
    return {
        node: seed_share if trust_config.is_trusted_seed(node) else regular_share
        for node in nodes
    }


def initial_scores(nodes: List[str], trust_config: TrustConfig) -> Dict[str, float]:
    """Uniform 1/N, or trust_boost split over seeds and the rest over others."""
    return _split_mass(nodes, trust_config, 1.0)


def teleport_terms(nodes: List[str], config: PageRankConfig) -> Dict[str, float]:
    """Per-node share of the (1 - damping) teleportation mass."""
    return _split_mass(nodes, config.trust_config, 1.0 - config.damping_factor)


def _incoming_contributions(graph: AttestationGraph, nodes: List[str],
                            config: PageRankConfig,
                            distances: Optional[Dict[str, int]]) -> Dict[str, List[_Contribution]]:
    """target -> contributions, ordered by source then edge order."""
    incoming: Dict[str, List[_Contribution]] = {}
    for src in nodes:
        eligible = graph.eligible_outgoing(src, config.trust_config)
        # Self-loop-only nodes, and negative totals, contribute nothing.
        if not eligible or eligible.total_weight <= 0.0:
            continue
        for target, weight in eligible.edges:
            incoming.setdefault(target, []).append(
                (src, weight / eligible.total_weight, trust_decay(distances, src, target))
            )
    return incoming


def calculate_pagerank(graph: AttestationGraph,
                       config: Optional[PageRankConfig] = None) -> PageRankResult:
    """Run trust-aware PageRank to convergence or max_iterations."""
    config = config or PageRankConfig()
    nodes = graph.sorted_nodes()
    n = len(nodes)
    if n == 0:
        return PageRankResult(scores={}, iterations=0, converged=True)

    trust = config.trust_config
    distances = None
    if trust.enabled:
        logger.info("Starting trust-aware PageRank for %d nodes (%d trusted seeds)",
                    n, len(trust.trusted_seeds))
        distances = trust_distances(graph, trust)
    else:
        logger.info("Starting standard PageRank for %d nodes", n)

    self_loops = graph.self_loop_nodes()
    if self_loops:
        logger.warning("Detected %d nodes with self-loops (will be ignored)", len(self_loops))

    rank = initial_scores(nodes, trust)
    teleport = teleport_terms(nodes, config)
    incoming = _incoming_contributions(graph, nodes, config, distances)
    damping = config.damping_factor

    iterations = 0
    converged = False
    for iteration in range(config.max_iterations):
        new_rank: Dict[str, float] = {}
        max_delta = 0.0

        for node in nodes:
            score = teleport[node]
            # Isolated nodes keep only the teleportation term.
            if distances is None or distances[node] != UNREACHABLE:
                for src, share, decay in incoming.get(node, ()):
                    score += damping * (rank[src] * share * decay)

            delta = abs(score - rank[node])
            if delta > max_delta:
                max_delta = delta
            new_rank[node] = score

        rank = new_rank
        iterations = iteration + 1

        if iteration % 10 == 0:
            logger.debug("PageRank iteration %d: max delta = %.8f", iteration, max_delta)
        if max_delta < config.tolerance:
            converged = True
            logger.info("PageRank converged after %d iterations", iterations)
            break
    else:
        logger.info("PageRank stopped at max_iterations=%d without converging",
                    config.max_iterations)

    if distances is not None:
        for node in nodes:
            if distances[node] == UNREACHABLE:
                rank[node] = ISOLATED_SCORE

    total = 0.0
    for node in nodes:
        total += rank[node]
    if total > 0.0:
        rank = {node: rank[node] / total for node in nodes}

    result = PageRankResult(scores=rank, iterations=iterations,
                            converged=converged, distances=distances)
    if distances is not None:
        result.statistics = trust_statistics(graph, result, config)
        log_trust_statistics(result.statistics)
    return result


# ─── Trust statistics ────────────────────────────────────────────

@dataclass
class TrustStatistics:
    """How score split between seeds, regular nodes and isolated nodes."""
    trusted_count: int = 0
    trusted_total: float = 0.0
    regular_count: int = 0
    regular_total: float = 0.0
    isolated_count: int = 0
    self_vouching_count: int = 0
    top_non_trusted: List[Tuple[str, float, int]] = field(default_factory=list)

    @property
    def trusted_average(self) -> float:
        return self.trusted_total / self.trusted_count if self.trusted_count else 0.0

    @property
    def regular_average(self) -> float:
        return self.regular_total / self.regular_count if self.regular_count else 0.0

    @property
    def trust_advantage(self) -> Optional[float]:
        """Average seed score over average regular score."""
        if not self.trusted_count or not self.regular_count or self.regular_average == 0.0:
            return None
        return self.trusted_average / self.regular_average

    def to_dict(self) -> dict:
        return {
            "trusted": {"count": self.trusted_count, "total_score": self.trusted_total},
            "regular": {"count": self.regular_count, "total_score": self.regular_total},
            "isolated": self.isolated_count,
            "self_vouching": self.self_vouching_count,
            "trust_advantage": self.trust_advantage,
            "top_non_trusted": [
                {"account": a, "score": s, "distance": None if d == UNREACHABLE else d}
                for a, s, d in self.top_non_trusted
            ],
        }


def trust_statistics(graph: AttestationGraph, result: PageRankResult,
                     config: PageRankConfig, top: int = 5) -> TrustStatistics:
    trust = config.trust_config
    distances = result.distances or {}
    stats = TrustStatistics(self_vouching_count=len(graph.self_loop_nodes()))

    for account, score in sorted(result.scores.items()):
        if distances.get(account, UNREACHABLE) == UNREACHABLE:
            stats.isolated_count += 1
        elif trust.is_trusted_seed(account):
            stats.trusted_count += 1
            stats.trusted_total += score
        else:
            stats.regular_count += 1
            stats.regular_total += score

    stats.top_non_trusted = [
        (account, score, distances.get(account, UNREACHABLE))
        for account, score in result.ranked()
        if not trust.is_trusted_seed(account)
    ][:top]
    return stats


def log_trust_statistics(stats: TrustStatistics) -> None:
    logger.info("Trust statistics: %d trusted seeds with %.4f total score (avg %.6f)",
                stats.trusted_count, stats.trusted_total, stats.trusted_average)
    logger.info("Trust statistics: %d regular nodes with %.4f total score (avg %.6f)",
                stats.regular_count, stats.regular_total, stats.regular_average)
    logger.info("Trust statistics: %d isolated, %d self-vouching (ignored)",
                stats.isolated_count, stats.self_vouching_count)
    if stats.trust_advantage is not None:
        logger.info("Trust advantage: %.2fx average score", stats.trust_advantage)
    for i, (account, score, dist) in enumerate(stats.top_non_trusted, 1):
        where = "isolated" if dist == UNREACHABLE else f"distance {dist}"
        logger.info("  %d. %s: %.6f (%s)", i, account, score, where)
