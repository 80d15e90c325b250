#!/usr/bin/env python3
"""
Level 2 guards: graph constraints on a proposal payload.
"""

from __future__ import annotations

from typing import Optional, Sequence

from axiom.core.specs import TransitionContext
from axiom.core.tokens import Token
from axiom.guards.helpers import field, items


def no_self_loops(tokens: Sequence[Token], context: Optional[TransitionContext] = None) -> bool:
    """No edge links a node to itself; id form is checked first, then titles."""
    if not tokens:
        return False
    for edge in items(tokens[0].payload, "edges"):
        from_id, to_id = field(edge, "from_id"), field(edge, "to_id")
        if from_id and to_id:
            if from_id == to_id:
                return False
            continue
        from_title, to_title = field(edge, "from_title"), field(edge, "to_title")
        if from_title and to_title and from_title == to_title:
            return False
    return True


def _edge_key(edge) -> tuple:
    from_id, to_id = field(edge, "from_id"), field(edge, "to_id")
    if from_id and to_id:
        return (from_id, to_id, field(edge, "label"))
    return (field(edge, "from_title"), field(edge, "to_title"), field(edge, "label"))


def no_duplicate_edges(tokens: Sequence[Token], context: Optional[TransitionContext] = None) -> bool:
    """No two edges share source, target and label."""
    if not tokens:
        return False
    seen = set()
    for edge in items(tokens[0].payload, "edges"):
        key = _edge_key(edge)
        if key in seen:
            return False
        seen.add(key)
    return True


def referenced_nodes_exist(tokens: Sequence[Token], context: Optional[TransitionContext] = None) -> bool:
    """Edges referencing an id must reference a proposed node.

    An edge that also carries a title for that end may point at an existing
    node outside the proposal.
    """
    if not tokens:
        return False
    payload = tokens[0].payload
    node_ids = {field(n, "id") for n in items(payload, "nodes")}
    for edge in items(payload, "edges"):
        from_id, to_id = field(edge, "from_id"), field(edge, "to_id")
        if from_id and from_id not in node_ids and not field(edge, "from_title"):
            return False
        if to_id and to_id not in node_ids and not field(edge, "to_title"):
            return False
    return True
