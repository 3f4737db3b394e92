"""
attestrank engine: endorsements in, scores and points out.

Flow: build graph -> trust distances -> iterate -> normalize -> penalize
isolated -> allocate. Everything is rebuilt per call; nothing is cached, so
independent runs can execute concurrently without coordination.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence, Union

from .allocation import (
    DEFAULT_MIN_SCORE_THRESHOLD, DEFAULT_PRECISION_SCALE, Allocation, allocate_points,
)
from .config import PageRankConfig, TrustConfig
from .endorsements import EndorsementLike, build_graph
from .graph import AttestationGraph
from .pagerank import PageRankResult, TrustStatistics, calculate_pagerank

logger = logging.getLogger(__name__)


@dataclass
class Distribution:
    """Result of one reward computation."""
    result: PageRankResult
    allocation: Allocation
    graph_summary: dict = field(default_factory=dict)
    statistics: Optional[TrustStatistics] = None

    @property
    def scores(self):
        return self.result.scores

    @property
    def points(self):
        return self.allocation.points

    @property
    def iterations(self) -> int:
        return self.result.iterations

    @property
    def converged(self) -> bool:
        return self.result.converged

    def to_dict(self) -> dict:
        data = {
            "graph": self.graph_summary,
            "iterations": self.iterations,
            "converged": self.converged,
            "scores": dict(self.result.ranked()),
            "allocation": self.allocation.to_dict(),
        }
        if self.statistics is not None:
            data["trust_statistics"] = self.statistics.to_dict()
        return data


@dataclass
class RewardSource:
    """A PageRank reward pool for one attestation schema."""
    schema_uid: str
    total_pool: int
    config: PageRankConfig = field(default_factory=PageRankConfig)
    min_score_threshold: float = DEFAULT_MIN_SCORE_THRESHOLD
    precision_scale: int = DEFAULT_PRECISION_SCALE

    @classmethod
    def with_trusted_seeds(cls, schema_uid: str, total_pool: int,
                           trusted_seeds: Sequence[str]) -> "RewardSource":
        """Trust-aware source with default multiplier and boost. Bad seeds raise."""
        config = PageRankConfig().with_trust_config(TrustConfig.from_seeds(trusted_seeds))
        return cls(schema_uid, total_pool, config)

    def with_min_threshold(self, threshold: float) -> "RewardSource":
        self.min_score_threshold = threshold
        return self

    @property
    def has_trust_enabled(self) -> bool:
        return self.config.has_trust_enabled

    @property
    def trusted_seeds(self) -> list[str]:
        return self.config.trust_config.sorted_seeds()

    @property
    def name(self) -> str:
        return "Trust-Aware-EAS-PageRank" if self.has_trust_enabled else "EAS-PageRank"

    def compute(self, endorsements: Union[AttestationGraph, Iterable[EndorsementLike]]) -> Distribution:
        graph = endorsements if isinstance(endorsements, AttestationGraph) else build_graph(endorsements)
        if self.has_trust_enabled:
            logger.info("Trust-aware PageRank enabled with %d trusted seeds",
                        len(self.config.trust_config.trusted_seeds))
        else:
            logger.info("Standard PageRank (no trust seeds configured)")

        result = calculate_pagerank(graph, self.config)
        for i, (account, score) in enumerate(result.ranked()[:10], 1):
            logger.debug("  %d. %s: %.6f", i, account, score)

        allocation = allocate_points(result.scores, self.total_pool,
                                     min_score_threshold=self.min_score_threshold,
                                     precision_scale=self.precision_scale)
        return Distribution(result=result, allocation=allocation,
                            graph_summary=graph.to_dict(), statistics=result.statistics)

    def metadata(self) -> dict:
        """JSON-compatible description of this source."""
        return {
            "name": self.name,
            "type": ("trust_aware_pagerank_attestations" if self.has_trust_enabled
                     else "pagerank_attestations"),
            "schema_uid": self.schema_uid,
            "total_pool": str(self.total_pool),
            "pagerank_config": {
                **self.config.to_dict(),
                "min_score_threshold": self.min_score_threshold,
            },
            "trust_config": self.config.trust_config.to_dict(),
        }


def compute_distribution(endorsements: Union[AttestationGraph, Iterable[EndorsementLike]],
                         total_pool: int, config: Optional[PageRankConfig] = None,
                         min_score_threshold: float = DEFAULT_MIN_SCORE_THRESHOLD) -> Distribution:
    """One-shot scores + points without building a RewardSource."""
    source = RewardSource(schema_uid="", total_pool=total_pool,
                          config=config or PageRankConfig(),
                          min_score_threshold=min_score_threshold)
    return source.compute(endorsements)
