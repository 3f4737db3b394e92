"""
attestrank config: TrustConfig and PageRankConfig.

An empty TrustConfig means standard PageRank. Out-of-range trust values are
clamped, never rejected.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable, Set

from .accounts import to_account

DEFAULT_TRUST_MULTIPLIER = 2.0
DEFAULT_TRUST_BOOST = 0.15


def clamp_multiplier(value: float) -> float:
    """At least 1.0x. NaN falls back to 1.0."""
    return value if value >= 1.0 else 1.0


def clamp_boost(value: float) -> float:
    """Into [0.0, 1.0]. NaN falls back to 0.0."""
    if not value >= 0.0:
        return 0.0
    return min(value, 1.0)


@dataclass(frozen=True)
class TrustConfig:
    """Trusted seed accounts plus how much they are favoured.

    Frozen so the clamps cannot be bypassed; use the ``with_*`` builders.
    The seed set itself is edited through ``add/remove_trusted_seed``.
    """
    trusted_seeds: Set[str] = field(default_factory=set)
    trust_multiplier: float = 1.0   # edge weight amplification from seeds
    trust_boost: float = 0.0        # share of teleportation mass reserved for seeds

    def __post_init__(self):
        object.__setattr__(self, "trusted_seeds", {to_account(s) for s in self.trusted_seeds})
        object.__setattr__(self, "trust_multiplier", clamp_multiplier(self.trust_multiplier))
        object.__setattr__(self, "trust_boost", clamp_boost(self.trust_boost))

    @classmethod
    def from_seeds(cls, seeds: Iterable[str],
                   trust_multiplier: float = DEFAULT_TRUST_MULTIPLIER,
                   trust_boost: float = DEFAULT_TRUST_BOOST) -> "TrustConfig":
        """Trust config with the usual 2x multiplier and 15% boost."""
        return cls(set(seeds), trust_multiplier, trust_boost)

    def with_trust_multiplier(self, multiplier: float) -> "TrustConfig":
        return replace(self, trusted_seeds=set(self.trusted_seeds), trust_multiplier=multiplier)

    def with_trust_boost(self, boost: float) -> "TrustConfig":
        return replace(self, trusted_seeds=set(self.trusted_seeds), trust_boost=boost)

    @property
    def enabled(self) -> bool:
        return bool(self.trusted_seeds)

    def is_trusted_seed(self, account: str) -> bool:
        return account in self.trusted_seeds

    def add_trusted_seed(self, account: str) -> None:
        self.trusted_seeds.add(to_account(account))

    def remove_trusted_seed(self, account: str) -> bool:
        """Remove a seed. Returns False if it was not present."""
        account = to_account(account)
        if account not in self.trusted_seeds:
            return False
        self.trusted_seeds.discard(account)
        return True

    def sorted_seeds(self) -> list[str]:
        return sorted(self.trusted_seeds)

    def effective_weight(self, source: str, base_weight: float) -> float:
        """Edge weight after applying the seed multiplier."""
        if source in self.trusted_seeds:
            return base_weight * self.trust_multiplier
        return base_weight

    def to_dict(self) -> dict:
        if not self.enabled:
            return {"enabled": False}
        return {
            "enabled": True,
            "trusted_seeds": self.sorted_seeds(),
            "trust_multiplier": self.trust_multiplier,
            "trust_boost": self.trust_boost,
        }


@dataclass
class PageRankConfig:
    """Iteration parameters for trust-aware PageRank."""
    damping_factor: float = 0.85
    max_iterations: int = 100
    tolerance: float = 1e-6
    trust_config: TrustConfig = field(default_factory=TrustConfig)

    def with_trust_config(self, trust_config: TrustConfig) -> "PageRankConfig":
        return replace(self, trust_config=trust_config)

    def with_trusted_seeds(self, seeds: Iterable[str]) -> "PageRankConfig":
        return replace(self, trust_config=TrustConfig.from_seeds(seeds))

    @property
    def has_trust_enabled(self) -> bool:
        return self.trust_config.enabled

    def to_dict(self) -> dict:
        return {
            "damping_factor": self.damping_factor,
            "max_iterations": self.max_iterations,
            "tolerance": self.tolerance,
        }
