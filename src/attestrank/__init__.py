"""attestrank: trust-aware PageRank over attestation graphs, with exact reward allocation."""

from attestrank.errors import (
    AttestRankError, InvalidAccountError, ConfigError, AllocationInvariantError,
)
from attestrank.accounts import AccountIdentity, to_account, account_from_public_key
from attestrank.config import TrustConfig, PageRankConfig
from attestrank.graph import AttestationGraph, Edge, EligibleEdges
from attestrank.distance import UNREACHABLE, trust_distances
from attestrank.pagerank import (
    PageRankResult, TrustStatistics,
    calculate_pagerank, trust_statistics, ISOLATED_SCORE,
)
from attestrank.allocation import Allocation, allocate_points
from attestrank.weights import decode_weight, weight_from_int
from attestrank.endorsements import Endorsement, EndorsementSet, build_graph
from attestrank.engine import RewardSource, Distribution, compute_distribution
from attestrank.settings import EngineSettings

__version__ = "0.1.0"

__all__ = [
    "AttestRankError",
    "InvalidAccountError",
    "ConfigError",
    "AllocationInvariantError",
    "AccountIdentity",
    "to_account",
    "account_from_public_key",
    "TrustConfig",
    "PageRankConfig",
    "AttestationGraph",
    "Edge",
    "EligibleEdges",
    "UNREACHABLE",
    "trust_distances",
    "PageRankResult",
    "TrustStatistics",
    "calculate_pagerank",
    "trust_statistics",
    "ISOLATED_SCORE",
    "Allocation",
    "allocate_points",
    "decode_weight",
    "weight_from_int",
    "Endorsement",
    "EndorsementSet",
    "build_graph",
    "RewardSource",
    "Distribution",
    "compute_distribution",
    "EngineSettings",
]
