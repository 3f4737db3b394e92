"""
attestrank distance: hop distance from the nearest trusted seed.

Multi-source BFS seeded from every trusted seed at distance 0. Edges are
walked in both directions: proximity of endorsement, not its direction,
decides how much a node's contributions decay.
"""

from __future__ import annotations

import logging
import sys
from collections import deque
from typing import Dict, List, Optional, Tuple

from .config import TrustConfig
from .graph import AttestationGraph

logger = logging.getLogger(__name__)

# Larger than any real hop count.
UNREACHABLE = sys.maxsize


def trust_distances(graph: AttestationGraph, trust_config: TrustConfig,
                    reverse: Optional[Dict[str, List[str]]] = None) -> Dict[str, int]:
    """Return {account: hops to nearest seed} for every graph node, or UNREACHABLE."""
    if reverse is None:
        reverse = graph.reverse_adjacency()

    dist: Dict[str, int] = {}
    queue = deque()
    for seed in trust_config.sorted_seeds():
        dist[seed] = 0
        queue.append(seed)

    while queue:
        node = queue.popleft()
        for nb in graph.neighbors(node, reverse):
            if nb not in dist:
                dist[nb] = dist[node] + 1
                queue.append(nb)

    distances = {node: dist.get(node, UNREACHABLE) for node in graph.sorted_nodes()}
    reachable, unreachable = distance_summary(distances)
    logger.info("Trust distance analysis: %d reachable, %d unreachable from trusted seeds",
                reachable, unreachable)
    return distances


def distance_summary(distances: Dict[str, int]) -> Tuple[int, int]:
    """(reachable, unreachable) counts."""
    unreachable = sum(1 for d in distances.values() if d == UNREACHABLE)
    return len(distances) - unreachable, unreachable


def is_isolated(distances: Dict[str, int], account: str) -> bool:
    return distances.get(account, UNREACHABLE) == UNREACHABLE
