"""
attestrank settings: operator configuration for a distribution run.

Loaded from a JSON file or ``ATTESTRANK_*`` environment variables and
validated with pydantic. Trust values are clamped like TrustConfig does;
everything else that is out of range is a ConfigError.
"""

from __future__ import annotations

import json
import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from .accounts import to_account
from .allocation import DEFAULT_MIN_SCORE_THRESHOLD, DEFAULT_PRECISION_SCALE
from .config import (
    DEFAULT_TRUST_BOOST, DEFAULT_TRUST_MULTIPLIER,
    PageRankConfig, TrustConfig, clamp_boost, clamp_multiplier,
)
from .errors import ConfigError

ENV_PREFIX = "ATTESTRANK_"


class EngineSettings(BaseModel):
    """Everything an operator decides for one epoch's distribution."""
    schema_uid: str = ""
    total_pool: int = Field(0, ge=0)
    trusted_seeds: list[str] = Field(default_factory=list)
    trust_multiplier: float = DEFAULT_TRUST_MULTIPLIER
    trust_boost: float = DEFAULT_TRUST_BOOST
    damping_factor: float = Field(0.85, gt=0.0, lt=1.0)
    max_iterations: int = Field(100, ge=0)
    tolerance: float = Field(1e-6, gt=0.0)
    min_score_threshold: float = Field(DEFAULT_MIN_SCORE_THRESHOLD, ge=0.0)
    precision_scale: int = Field(DEFAULT_PRECISION_SCALE, ge=1)

    @field_validator("trusted_seeds")
    @classmethod
    def canonical_seeds(cls, v: list[str]) -> list[str]:
        return sorted({to_account(s) for s in v})

    @field_validator("trust_multiplier")
    @classmethod
    def clamp_trust_multiplier(cls, v: float) -> float:
        return clamp_multiplier(v)

    @field_validator("trust_boost")
    @classmethod
    def clamp_trust_boost(cls, v: float) -> float:
        return clamp_boost(v)

    # ─── Loading ────────────────────────────────────────────────

    @classmethod
    def from_dict(cls, data: Mapping) -> "EngineSettings":
        try:
            return cls.model_validate(dict(data))
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

    @classmethod
    def from_file(cls, filepath: str) -> "EngineSettings":
        with open(filepath) as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigError(f"Config file {filepath} is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {filepath} must contain a JSON object")
        return cls.from_dict(data)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EngineSettings":
        """Read ATTESTRANK_<FIELD> variables. Seeds are comma-separated."""
        environ = os.environ if environ is None else environ
        data = {}
        for name in cls.model_fields:
            raw = environ.get(ENV_PREFIX + name.upper())
            if raw is None or raw == "":
                continue
            if name == "trusted_seeds":
                data[name] = [s.strip() for s in raw.split(",") if s.strip()]
            else:
                data[name] = raw
        return cls.from_dict(data)

    def merged(self, **overrides) -> "EngineSettings":
        """Copy with non-None overrides applied and re-validated."""
        data = self.model_dump()
        data.update({k: v for k, v in overrides.items() if v is not None})
        return self.from_dict(data)

    # ─── Conversion ─────────────────────────────────────────────

    def to_trust_config(self) -> TrustConfig:
        if not self.trusted_seeds:
            return TrustConfig()
        return TrustConfig(set(self.trusted_seeds), self.trust_multiplier, self.trust_boost)

    def to_pagerank_config(self) -> PageRankConfig:
        return PageRankConfig(
            damping_factor=self.damping_factor,
            max_iterations=self.max_iterations,
            tolerance=self.tolerance,
            trust_config=self.to_trust_config(),
        )

    def to_reward_source(self):
        from .engine import RewardSource
        return RewardSource(
            schema_uid=self.schema_uid,
            total_pool=self.total_pool,
            config=self.to_pagerank_config(),
            min_score_threshold=self.min_score_threshold,
            precision_scale=self.precision_scale,
        )
