#!/usr/bin/env python3
"""
AXIOM - Place runtime

A place is an ordered holding area for tokens. Sinks are terminal: tokens
that reach them stay there and cannot be taken or cleared.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from axiom.core.colors import TokenColor
from axiom.core.specs import PlaceSpec, PlaceState
from axiom.core.tokens import Token

logger = logging.getLogger(__name__)


class Place:
    """
    Runtime execution of a place.

    Holds tokens in arrival order. Color and capacity are checked on every
    push; the spec itself is never mutated.
    """

    def __init__(self, spec: PlaceSpec):
        """
        Args:
            spec: Static description of the place (id, colors, capacity, sink flag)
        """
        self.spec = spec
        self.tokens: List[Token] = []

    @property
    def id(self) -> str:
        return self.spec.id

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def is_sink(self) -> bool:
        return self.spec.is_sink

    @property
    def is_source(self) -> bool:
        return self.spec.is_source

    @property
    def accepted_colors(self) -> frozenset:
        return self.spec.accepted_colors

    @property
    def token_count(self) -> int:
        return len(self.tokens)

    @property
    def is_empty(self) -> bool:
        return not self.tokens

    @property
    def is_full(self) -> bool:
        return self.spec.capacity is not None and len(self.tokens) >= self.spec.capacity

    def accepts_color(self, color: TokenColor) -> bool:
        return self.spec.accepts_color(color)

    def can_accept(self, token: Token) -> bool:
        return self.accepts_color(token.color) and not self.is_full

    def push(self, token: Token) -> bool:
        """
        Append a token at the back of the queue.

        Args:
            token: Token to add; its color must be accepted here

        Returns:
            True when added, False when the color is refused or the place is
            at capacity (never raises)
        """
        if not self.can_accept(token):
            logger.debug(f"[{self.id}] refused {token!r}")
            return False
        self.tokens.append(token)
        return True

    def pull(self, n: Optional[int] = None) -> List[Token]:
        """
        Peek at tokens without removing them.

        Args:
            n: How many tokens from the front to return; all when None

        Returns:
            The first ``n`` tokens in FIFO order, fewer if the place holds fewer
        """
        if n is None:
            return list(self.tokens)
        return self.tokens[:max(n, 0)]

    def take(self, n: int = 1) -> List[Token]:
        """
        Remove and return tokens from the front.

        Args:
            n: How many tokens to remove

        Returns:
            The removed tokens; always empty for a sink
        """
        if self.is_sink or n <= 0:
            return []
        taken = self.tokens[:n]
        del self.tokens[:n]
        return taken

    def clear(self) -> List[Token]:
        """Remove and return every token. A no-op on sinks."""
        if self.is_sink:
            return []
        cleared, self.tokens = self.tokens, []
        return cleared

    def reset(self) -> None:
        """Drop every token, sinks included. Used by engine reset."""
        self.tokens = []

    def snapshot(self) -> PlaceState:
        return PlaceState(spec=self.spec, tokens=tuple(self.tokens), token_count=len(self.tokens))

    def __repr__(self) -> str:
        return f"Place({self.id!r}, tokens={len(self.tokens)})"
