#!/usr/bin/env python3
"""
Tests for critique scoring and configuration models.
"""

import pytest
from pydantic import ValidationError

from axiom.critique.models import (
    ArgumentSeverity,
    CounterArgument,
    CritiqueBehaviorConfig,
    CritiqueResult,
    CritiqueTriggerConfig,
    Recommendation,
    adjust_confidence,
    calculate_survival_score,
    recommend,
)


def _arg(score, severity=ArgumentSeverity.MODERATE):
    return CounterArgument(target_id="n0", argument="weak", severity=severity, survival_score=score)


# =============================================================================
# Survival score
# =============================================================================


class TestSurvivalScore:

    def test_no_arguments_is_full_survival(self):
        assert calculate_survival_score([]) == 1.0

    def test_single_argument(self):
        assert calculate_survival_score([_arg(0.4)]) == pytest.approx(0.4)

    def test_severity_weighting(self):
        args = [_arg(0.0, ArgumentSeverity.MAJOR), _arg(1.0, ArgumentSeverity.MINOR)]
        # (0.5 * 0.0 + 0.2 * 1.0) / 0.7
        assert calculate_survival_score(args) == pytest.approx(0.2 / 0.7)

    def test_major_outweighs_minor(self):
        major_low = [_arg(0.2, ArgumentSeverity.MAJOR), _arg(0.8, ArgumentSeverity.MINOR)]
        minor_low = [_arg(0.8, ArgumentSeverity.MAJOR), _arg(0.2, ArgumentSeverity.MINOR)]
        assert calculate_survival_score(major_low) < calculate_survival_score(minor_low)

    @pytest.mark.parametrize("scores", [
        [0.0], [1.0], [0.0, 1.0, 0.5], [0.33, 0.66, 0.99, 0.01],
    ])
    def test_bounded(self, scores):
        score = calculate_survival_score([_arg(s) for s in scores])
        assert 0.0 <= score <= 1.0

    def test_argument_scores_are_validated(self):
        with pytest.raises(ValidationError):
            _arg(1.5)


# =============================================================================
# Confidence adjustment and recommendation
# =============================================================================


class TestAdjustment:

    def test_scales_and_rounds(self):
        assert adjust_confidence(0.9, 0.8) == 0.72

    def test_never_increases(self):
        assert adjust_confidence(0.5, 1.0) == 0.5
        assert adjust_confidence(0.333, 1.0) <= 0.333

    def test_zero_survival(self):
        assert adjust_confidence(0.9, 0.0) == 0.0

    @pytest.mark.parametrize("original,score", [(0.5, 0.25), (0.25, 0.5)])
    def test_exact_half_rounds_up(self, original, score):
        assert adjust_confidence(original, score) == 0.13

    @pytest.mark.parametrize("score,expected", [
        (0.7, Recommendation.PROCEED),
        (0.95, Recommendation.PROCEED),
        (0.5, Recommendation.RECONSIDER),
        (0.3, Recommendation.RECONSIDER),
        (0.29, Recommendation.REJECT),
    ])
    def test_recommend(self, score, expected):
        assert recommend(score, 0.7, 0.3) == expected


# =============================================================================
# Config models
# =============================================================================


class TestConfig:

    def test_trigger_defaults(self):
        trigger = CritiqueTriggerConfig()
        assert trigger.min_confidence == 0.85
        assert trigger.skip_below_confidence == 0.5
        assert trigger.min_connections == 3
        assert trigger.entity_types == ["decision", "claim", "argument"]
        assert trigger.probabilistic_rate == 0.0

    def test_behavior_defaults(self):
        behavior = CritiqueBehaviorConfig()
        assert behavior.survival_threshold == 0.7
        assert behavior.reject_threshold == 0.3
        assert behavior.max_counter_arguments == 5

    def test_thresholds_must_be_ordered(self):
        with pytest.raises(ValidationError):
            CritiqueBehaviorConfig(survival_threshold=0.3, reject_threshold=0.7)

    def test_rate_bounded(self):
        with pytest.raises(ValidationError):
            CritiqueTriggerConfig(probabilistic_rate=1.5)

    def test_result_accepts_camel_case(self):
        result = CritiqueResult.model_validate({
            "proposalId": "p1",
            "correlationId": "c1",
            "survived": True,
            "survivalScore": 0.8,
            "recommendation": "proceed",
            "counterArguments": [{"targetId": "n0", "survivalScore": 0.8}],
        })
        assert result.proposal_id == "p1"
        assert result.counter_arguments[0].target_id == "n0"
        assert result.counter_arguments[0].severity == ArgumentSeverity.MODERATE
