#!/usr/bin/env python3
"""
Decision guards: route a token by its validation result and retry budget.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

from axiom.core.specs import GuardFn, TransitionContext
from axiom.core.tokens import Token
from axiom.guards.helpers import field, items
from axiom.validation import ValidationSeverity


def _result(tokens: Sequence[Token]) -> Any:
    return field(tokens[0].payload, "validation_result")


def _severities(result: Any) -> list:
    return [field(v, "severity") for v in items(result, "violations")]


def is_valid(tokens: Sequence[Token], context: Optional[TransitionContext] = None) -> bool:
    """Validator said valid and there is no error-severity violation."""
    if not tokens:
        return False
    result = _result(tokens)
    if result is None:
        return False
    return bool(field(result, "valid")) and ValidationSeverity.ERROR not in _severities(result)


def has_errors(tokens: Sequence[Token], context: Optional[TransitionContext] = None) -> bool:
    if not tokens:
        return False
    result = _result(tokens)
    return result is not None and ValidationSeverity.ERROR in _severities(result)


def has_warnings_only(tokens: Sequence[Token], context: Optional[TransitionContext] = None) -> bool:
    if not tokens:
        return False
    result = _result(tokens)
    if result is None:
        return False
    severities = _severities(result)
    return bool(severities) and all(s == ValidationSeverity.WARNING for s in severities)


def can_retry(token: Token) -> bool:
    return token.retry_count < token.max_retries


def should_escalate(token: Token) -> bool:
    return token.retry_count >= token.max_retries


def max_steps_reached(step_count: int, max_steps: int) -> bool:
    return step_count >= max_steps


def token_can_retry(tokens: Sequence[Token], context: Optional[TransitionContext] = None) -> bool:
    return bool(tokens) and can_retry(tokens[0])


def token_should_escalate(tokens: Sequence[Token], context: Optional[TransitionContext] = None) -> bool:
    return bool(tokens) and should_escalate(tokens[0])


def all_levels_passed(tokens: Sequence[Token], context: Optional[TransitionContext] = None) -> bool:
    if not tokens:
        return False
    result = _result(tokens)
    return result is not None and all(
        bool(field(result, f"level{n}_passed")) for n in (1, 2, 3)
    )


def level_passed(level: int) -> GuardFn:
    if level not in (1, 2, 3):
        raise ValueError(f"Validation level must be 1, 2 or 3, not {level}")

    def guard(tokens: Sequence[Token], context: Optional[TransitionContext] = None) -> bool:
        if not tokens:
            return False
        result = _result(tokens)
        return result is not None and bool(field(result, f"level{level}_passed"))
    return guard
