"""Adversarial critique of validated proposals."""

from axiom.critique.models import (
    ArgumentSeverity,
    CounterArgument,
    CritiqueBehaviorConfig,
    CritiqueResult,
    CritiqueScope,
    CritiqueTriggerConfig,
    Recommendation,
    RiskFactor,
    RiskSeverity,
    SEVERITY_WEIGHTS,
    adjust_confidence,
    calculate_survival_score,
    recommend,
)
from axiom.critique.agent import (
    CritiqueAgent,
    DevilsAdvocateAgent,
    LLMBackend,
    LLMResponse,
)

__all__ = [
    "ArgumentSeverity",
    "CounterArgument",
    "CritiqueAgent",
    "CritiqueBehaviorConfig",
    "CritiqueResult",
    "CritiqueScope",
    "CritiqueTriggerConfig",
    "DevilsAdvocateAgent",
    "LLMBackend",
    "LLMResponse",
    "Recommendation",
    "RiskFactor",
    "RiskSeverity",
    "SEVERITY_WEIGHTS",
    "adjust_confidence",
    "calculate_survival_score",
    "recommend",
]
