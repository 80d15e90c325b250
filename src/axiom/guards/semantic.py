#!/usr/bin/env python3
"""
Level 3 guards: semantic checks.

These are extension points and currently pass any non-empty token set.
"""

from __future__ import annotations

from typing import Optional, Sequence

from axiom.core.specs import GuardFn, TransitionContext
from axiom.core.tokens import Token


def _passthrough() -> GuardFn:
    def guard(tokens: Sequence[Token], context: Optional[TransitionContext] = None) -> bool:
        return bool(tokens)
    return guard


def semantically_relevant(threshold: float = 0.5) -> GuardFn:
    return _passthrough()


def content_coherent(threshold: float = 0.3) -> GuardFn:
    return _passthrough()


def not_duplicate(threshold: float = 0.95) -> GuardFn:
    return _passthrough()
