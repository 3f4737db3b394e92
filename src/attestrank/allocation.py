"""
attestrank allocation: split a fixed token pool proportionally to scores.

Scores are scaled into integers first, so all pool arithmetic is exact.
Accounts are processed from highest to lowest score (ties by account);
each gets floor(scaled * pool / total) and the last one gets whatever is
left, so the pool is exhausted with no rounding leakage and never exceeded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping

from .errors import AllocationInvariantError

logger = logging.getLogger(__name__)

DEFAULT_MIN_SCORE_THRESHOLD = 0.0001   # 0.01%
DEFAULT_PRECISION_SCALE = 1_000_000


@dataclass
class Allocation:
    """Integer points per account. ``points`` is in allocation order."""
    pool: int
    points: Dict[str, int] = field(default_factory=dict)
    eligible_accounts: int = 0

    @property
    def distributed(self) -> int:
        return sum(self.points.values())

    @property
    def remaining(self) -> int:
        return self.pool - self.distributed

    def __len__(self) -> int:
        return len(self.points)

    def get(self, account: str) -> int:
        return self.points.get(account, 0)

    def to_rows(self) -> List[List[str]]:
        """Sorted [account, amount] rows, the shape merkle builders take."""
        return [[account, str(amount)] for account, amount in sorted(self.points.items())]

    def to_dict(self) -> dict:
        return {
            "pool": str(self.pool),
            "distributed": str(self.distributed),
            "eligible_accounts": self.eligible_accounts,
            "points": {account: str(amount) for account, amount in self.points.items()},
        }


def scale_scores(scores: Mapping[str, float], min_score_threshold: float,
                 precision_scale: int) -> Dict[str, int]:
    """Drop scores under the threshold and truncate the rest to integers."""
    scaled = {}
    for account, score in scores.items():
        if score >= min_score_threshold:
            scaled[account] = max(0, int(score * precision_scale))
    return scaled


def allocate_points(scores: Mapping[str, float], pool: int,
                    min_score_threshold: float = DEFAULT_MIN_SCORE_THRESHOLD,
                    precision_scale: int = DEFAULT_PRECISION_SCALE) -> Allocation:
    """Distribute ``pool`` across ``scores``. Degenerate input yields an empty Allocation."""
    if isinstance(pool, bool) or not isinstance(pool, int) or pool < 0:
        raise ValueError(f"Pool must be a non-negative integer, got {pool!r}")

    allocation = Allocation(pool=pool)
    scaled = scale_scores(scores, min_score_threshold, precision_scale)
    logger.info("Filtering scores above threshold %s: %d -> %d accounts",
                min_score_threshold, len(scores), len(scaled))
    allocation.eligible_accounts = len(scaled)

    if not scaled:
        logger.warning("No accounts meet minimum score threshold")
        return allocation

    total_scaled = sum(scaled.values())
    if total_scaled == 0:
        logger.warning("Total scaled score is zero, no points to assign")
        return allocation

    ordered = sorted(scaled.items(), key=lambda item: (-item[1], item[0]))
    remaining = pool
    last = len(ordered) - 1

    for i, (account, scaled_score) in enumerate(ordered):
        if i == last:
            awarded = remaining
        else:
            awarded = min(scaled_score * pool // total_scaled, remaining)
        if awarded:
            allocation.points[account] = awarded
            remaining -= awarded
        if remaining == 0:
            break

    distributed = allocation.distributed
    if distributed > pool:
        logger.critical("Over-assigned points: %d > pool %d", distributed, pool)
        raise AllocationInvariantError(distributed, pool)

    logger.info("Distributed %d of %d points across %d accounts",
                distributed, pool, len(allocation.points))
    return allocation
