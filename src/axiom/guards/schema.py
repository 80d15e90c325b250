#!/usr/bin/env python3
"""
Level 1 guards: structural checks on a proposal payload.
"""

from __future__ import annotations

from typing import Optional, Sequence

from axiom.core.specs import TransitionContext
from axiom.core.tokens import Token
from axiom.guards.helpers import field, items


def _non_empty_str(value) -> bool:
    return isinstance(value, str) and value.strip() != ""


def nodes_have_required_fields(tokens: Sequence[Token], context: Optional[TransitionContext] = None) -> bool:
    """Every node has a non-empty id and a non-blank title."""
    if not tokens:
        return False
    return all(
        _non_empty_str(field(node, "id")) and _non_empty_str(field(node, "title"))
        for node in items(tokens[0].payload, "nodes")
    )


def edges_have_required_fields(tokens: Sequence[Token], context: Optional[TransitionContext] = None) -> bool:
    """Every edge has an id and both endpoints (by id or by title)."""
    if not tokens:
        return False
    for edge in items(tokens[0].payload, "edges"):
        if not _non_empty_str(field(edge, "id")):
            return False
        if not (field(edge, "from_id") or field(edge, "from_title")):
            return False
        if not (field(edge, "to_id") or field(edge, "to_title")):
            return False
    return True


def schema_valid(tokens: Sequence[Token], context: Optional[TransitionContext] = None) -> bool:
    if not tokens:
        return False
    payload = tokens[0].payload
    if not items(payload, "nodes") and not items(payload, "edges"):
        return False
    return nodes_have_required_fields(tokens, context) and edges_have_required_fields(tokens, context)
