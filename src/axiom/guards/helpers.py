#!/usr/bin/env python3
"""
Guard combinators.

A guard is a pure, synchronous predicate ``(tokens, context=None) -> bool``
over the first token of each input place. Guards are total: they answer
False on an empty token list and never raise on an unexpected payload.
"""

from __future__ import annotations

from typing import Any, Callable, List, Optional, Sequence

from axiom.core.colors import TokenColor
from axiom.core.specs import GuardFn, NamedGuard, TransitionContext
from axiom.core.tokens import Token


def field(obj: Any, name: str, default: Any = None) -> Any:
    """Read ``name`` from a model or a mapping, falling back to ``default``."""
    if obj is None:
        return default
    if isinstance(obj, dict):
        return obj.get(name, default)
    return getattr(obj, name, default)


def items(obj: Any, name: str) -> List[Any]:
    """A list-valued field, or [] when missing or not a sequence."""
    value = field(obj, name)
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


def has_min_tokens(n: int) -> GuardFn:
    def guard(tokens: Sequence[Token], context: Optional[TransitionContext] = None) -> bool:
        return len(tokens) >= n and len(tokens) > 0
    return guard


def has_color(color: TokenColor) -> GuardFn:
    def guard(tokens: Sequence[Token], context: Optional[TransitionContext] = None) -> bool:
        return bool(tokens) and tokens[0].color == color
    return guard


def all_of(*guards: GuardFn) -> GuardFn:
    def guard(tokens: Sequence[Token], context: Optional[TransitionContext] = None) -> bool:
        return bool(tokens) and all(g(tokens, context) for g in guards)
    return guard


def any_of(*guards: GuardFn) -> GuardFn:
    def guard(tokens: Sequence[Token], context: Optional[TransitionContext] = None) -> bool:
        return bool(tokens) and any(g(tokens, context) for g in guards)
    return guard


def not_(inner: GuardFn) -> GuardFn:
    """Negate a guard. Still False on an empty token list."""
    def guard(tokens: Sequence[Token], context: Optional[TransitionContext] = None) -> bool:
        return bool(tokens) and not inner(tokens, context)
    return guard


def named(guard_id: str, name: str, fn: Callable[..., bool]) -> NamedGuard:
    return NamedGuard(id=guard_id, name=name, fn=fn)
