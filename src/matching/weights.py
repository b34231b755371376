"""Scoring weights and ranking thresholds.

Weights come from named sets in a YAML file (``config/weights.yaml``) and
are bundled with the thresholds into an immutable ``MatchingConfig`` that
is passed to the aggregator and ranking engine at construction.
"""
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from src.matching.exceptions import WeightsConfigError

logger = logging.getLogger(__name__)

WEIGHT_SUM_TOLERANCE = 1e-6


class ScoringWeights(BaseModel):
    """Fractions applied to each sub-score. Must sum to 1.0."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    skills: float = Field(default=0.40, ge=0, le=1)
    experience: float = Field(default=0.20, ge=0, le=1)
    location: float = Field(default=0.15, ge=0, le=1)
    availability: float = Field(default=0.15, ge=0, le=1)
    preferences: float = Field(default=0.10, ge=0, le=1)

    @model_validator(mode="after")
    def _check_sum(self) -> "ScoringWeights":
        total = self.skills + self.experience + self.location + self.availability + self.preferences
        if not math.isclose(total, 1.0, abs_tol=WEIGHT_SUM_TOLERANCE):
            raise ValueError(f"weights must sum to 1.0, got {total:.4f}")
        return self


@dataclass(frozen=True)
class MatchingConfig:
    """Everything the engine needs to score and rank, fixed at startup."""

    weights: ScoringWeights = field(default_factory=ScoringWeights)
    min_match_score: int = 30
    cache_limit: int = 50
    default_limit: int = 20
    batch_size: int = 500
    timeout_seconds: Optional[float] = None

    def __post_init__(self):
        if not 0 <= self.min_match_score <= 100:
            raise WeightsConfigError(f"min_match_score must be within 0-100, got {self.min_match_score}")
        if self.cache_limit <= 0:
            raise WeightsConfigError(f"cache_limit must be positive, got {self.cache_limit}")
        if self.default_limit <= 0:
            raise WeightsConfigError(f"default_limit must be positive, got {self.default_limit}")


def load_weight_sets(path: Path | str) -> dict[str, ScoringWeights]:
    """
    Load every named weight set from a YAML file.

    Args:
        path: YAML file mapping set names to weight mappings

    Returns:
        Dict of set name to validated weights

    Raises:
        WeightsConfigError: If the file is missing, malformed or a set is invalid
    """
    try:
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise WeightsConfigError(f"Could not read weights file {path}: {e}") from e

    if not isinstance(raw, dict):
        raise WeightsConfigError(f"Weights file {path} must map set names to weights")

    weight_sets: dict[str, ScoringWeights] = {}
    for name, values in raw.items():
        try:
            weight_sets[name] = ScoringWeights(**(values or {}))
        except (ValidationError, TypeError) as e:
            raise WeightsConfigError(f"Invalid weight set '{name}': {e}") from e
    return weight_sets


def load_weights(path: Path | str, name: str = "default") -> ScoringWeights:
    """Load a single named weight set."""
    weight_sets = load_weight_sets(path)
    if name not in weight_sets:
        raise WeightsConfigError(
            f"Unknown weight set '{name}'. Available: {', '.join(sorted(weight_sets))}"
        )
    return weight_sets[name]


def load_matching_config(settings) -> MatchingConfig:
    """Build a MatchingConfig from application settings."""
    weights = load_weights(settings.weights_path, settings.weight_set)
    logger.info("Using weight set '%s': %s", settings.weight_set, weights.model_dump())
    return MatchingConfig(
        weights=weights,
        min_match_score=settings.min_match_score,
        cache_limit=settings.cache_limit,
        default_limit=settings.default_limit,
        batch_size=settings.population_batch_size,
        timeout_seconds=settings.ranking_timeout_seconds,
    )
