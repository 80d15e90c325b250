#!/usr/bin/env python3
"""
Critique guards: whether to run the Devil's Advocate, and how to read its score.
"""

from __future__ import annotations

import random
from typing import Callable, Optional, Sequence

from axiom.core.specs import GuardFn, TransitionContext
from axiom.core.tokens import Token
from axiom.critique.models import CritiqueBehaviorConfig, CritiqueTriggerConfig
from axiom.guards.helpers import field, items


def max_confidence(payload) -> float:
    """Highest confidence among a proposal's nodes and edges (0 when empty)."""
    values = [0.0]
    for item in items(payload, "nodes") + items(payload, "edges"):
        confidence = field(item, "confidence")
        if isinstance(confidence, (int, float)):
            values.append(float(confidence))
    return max(values)


def should_critique(
    trigger: CritiqueTriggerConfig,
    enabled: bool,
    rng: Optional[Callable[[], float]] = None,
) -> GuardFn:
    """Build the critique trigger guard.

    Low-confidence proposals always skip (they go to human review anyway);
    otherwise high confidence, many connections, a high-stakes entity type
    or a random sample trigger a critique.

    The random sample is drawn at most once per token and kept on
    ``token.meta.critique_sample``, so the skip guard built from the same
    config is always its exact negation.
    """
    def sample(token: Token) -> float:
        if token.meta.critique_sample is None:
            draw = rng() if rng is not None else random.Random(token.id).random()
            token.meta.critique_sample = draw
        return token.meta.critique_sample

    def guard(tokens: Sequence[Token], context: Optional[TransitionContext] = None) -> bool:
        if not enabled or not tokens:
            return False
        payload = tokens[0].payload

        confidence = max_confidence(payload)
        if confidence < trigger.skip_below_confidence:
            return False
        if confidence >= trigger.min_confidence:
            return True
        if len(items(payload, "edges")) >= trigger.min_connections:
            return True
        if any(field(n, "type") in trigger.entity_types for n in items(payload, "nodes")):
            return True
        if trigger.probabilistic_rate > 0 and sample(tokens[0]) < trigger.probabilistic_rate:
            return True
        return False
    return guard


def _score(tokens: Sequence[Token]) -> Optional[float]:
    if not tokens:
        return None
    result = tokens[0].meta.critique_result
    if result is None:
        return None
    return result.survival_score


def survived(behavior: CritiqueBehaviorConfig) -> GuardFn:
    def guard(tokens: Sequence[Token], context: Optional[TransitionContext] = None) -> bool:
        score = _score(tokens)
        return score is not None and score >= behavior.survival_threshold
    return guard


def reconsider(behavior: CritiqueBehaviorConfig) -> GuardFn:
    def guard(tokens: Sequence[Token], context: Optional[TransitionContext] = None) -> bool:
        score = _score(tokens)
        return score is not None and behavior.reject_threshold <= score < behavior.survival_threshold
    return guard


def critique_rejected(behavior: CritiqueBehaviorConfig) -> GuardFn:
    def guard(tokens: Sequence[Token], context: Optional[TransitionContext] = None) -> bool:
        score = _score(tokens)
        return score is not None and score < behavior.reject_threshold
    return guard
