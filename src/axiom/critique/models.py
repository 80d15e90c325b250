#!/usr/bin/env python3
"""
Critique models and scoring.

The Devil's Advocate layer attaches a CritiqueResult to a token after it has
passed validation. Survival scoring is a severity-weighted mean of the
per-argument survival scores.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Iterable, List

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class CritiqueModel(BaseModel):
    """Base for critique payloads; accepts the camelCase keys LLMs return."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ArgumentSeverity(str, Enum):
    MINOR = "minor"
    MODERATE = "moderate"
    MAJOR = "major"


class RiskSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Recommendation(str, Enum):
    PROCEED = "proceed"
    RECONSIDER = "reconsider"
    REJECT = "reject"


class CritiqueScope(str, Enum):
    BATCH = "batch"
    INDIVIDUAL = "individual"


class CounterArgument(CritiqueModel):
    """A specific challenge against one proposal item."""

    target: str = "node"
    target_id: str = ""
    target_label: str = ""
    argument: str = ""
    severity: ArgumentSeverity = ArgumentSeverity.MODERATE
    survival_score: float = Field(default=1.0, ge=0.0, le=1.0)


class RiskFactor(CritiqueModel):
    """A category-level risk assessment."""

    category: str
    description: str = ""
    severity: RiskSeverity = RiskSeverity.MEDIUM


class CritiqueResult(CritiqueModel):
    """Output of the critique agent for one proposal."""

    proposal_id: str
    correlation_id: str
    scope: CritiqueScope = CritiqueScope.BATCH
    survived: bool
    survival_score: float = Field(ge=0.0, le=1.0)
    adjusted_confidence: float = 0.0
    counter_arguments: List[CounterArgument] = Field(default_factory=list)
    blind_spots: List[str] = Field(default_factory=list)
    risk_factors: List[RiskFactor] = Field(default_factory=list)
    recommendation: Recommendation
    critiqued_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    critique_model: str = ""
    duration_ms: float = 0.0


# ============================================================================
# Configuration
# ============================================================================

class CritiqueTriggerConfig(BaseModel):
    """When to invoke the critique agent."""

    min_confidence: float = Field(default=0.85, ge=0.0, le=1.0)
    skip_below_confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    min_connections: int = Field(default=3, ge=0)
    entity_types: List[str] = Field(
        default_factory=lambda: ["decision", "claim", "argument"]
    )
    probabilistic_rate: float = Field(default=0.0, ge=0.0, le=1.0)


class CritiqueBehaviorConfig(BaseModel):
    """How the critique agent operates and how its score is judged."""

    scope: CritiqueScope = CritiqueScope.BATCH
    model: str = ""
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_counter_arguments: int = Field(default=5, ge=0)
    survival_threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    reject_threshold: float = Field(default=0.3, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def _thresholds_ordered(self) -> "CritiqueBehaviorConfig":
        if self.reject_threshold > self.survival_threshold:
            raise ValueError("reject_threshold must not exceed survival_threshold")
        return self


# ============================================================================
# Scoring
# ============================================================================

SEVERITY_WEIGHTS: Dict[ArgumentSeverity, float] = {
    ArgumentSeverity.MAJOR: 0.50,
    ArgumentSeverity.MODERATE: 0.30,
    ArgumentSeverity.MINOR: 0.20,
}


def calculate_survival_score(counter_arguments: Iterable[CounterArgument]) -> float:
    """Severity-weighted mean of per-argument survival scores.

    No counter-arguments means full survival (1.0).
    """
    total_weight = 0.0
    weighted = 0.0
    for arg in counter_arguments:
        weight = SEVERITY_WEIGHTS[arg.severity]
        total_weight += weight
        weighted += weight * arg.survival_score

    if total_weight <= 0:
        return 1.0
    return min(1.0, max(0.0, weighted / total_weight))


def adjust_confidence(original: float, survival_score: float) -> float:
    """Scale a confidence by the survival score, rounded to 2 decimals.

    Halves round up, so 0.5 * 0.25 gives 0.13. The result never exceeds
    the original confidence.
    """
    return min(original, math.floor(original * survival_score * 100 + 0.5) / 100)


def recommend(
    survival_score: float,
    survival_threshold: float,
    reject_threshold: float,
) -> Recommendation:
    if survival_score >= survival_threshold:
        return Recommendation.PROCEED
    if survival_score >= reject_threshold:
        return Recommendation.RECONSIDER
    return Recommendation.REJECT
