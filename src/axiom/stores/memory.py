#!/usr/bin/env python3
"""
In-memory token store, for tests and short-lived engines.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from axiom.core.tokens import Token
from axiom.stores.base import TokenFilter, parse_timestamp, retention_cutoff


class InMemoryTokenStore:
    """Keeps a deep copy of each token as it was when last saved."""

    def __init__(self):
        self._tokens: Dict[str, Token] = {}

    async def save(self, token: Token) -> None:
        self._tokens[token.id] = token.model_copy(deep=True)

    async def get(self, token_id: str) -> Optional[Token]:
        return self._tokens.get(token_id)

    async def get_by_correlation_id(self, correlation_id: str) -> List[Token]:
        return [t for t in self._tokens.values() if t.correlation_id == correlation_id]

    async def delete(self, token_id: str) -> None:
        self._tokens.pop(token_id, None)

    async def save_all(self, tokens: Sequence[Token]) -> None:
        for token in tokens:
            await self.save(token)

    async def get_all(self) -> List[Token]:
        return list(self._tokens.values())

    async def clear(self) -> None:
        self._tokens.clear()

    async def cleanup(self, retention_days: float) -> int:
        cutoff = retention_cutoff(retention_days)
        stale = [
            token_id for token_id, token in self._tokens.items()
            if parse_timestamp(token.meta.created_at) < cutoff
        ]
        for token_id in stale:
            del self._tokens[token_id]
        return len(stale)

    async def query(self, token_filter: TokenFilter) -> List[Token]:
        return [t for t in self._tokens.values() if token_filter.matches(t)]

    @property
    def size(self) -> int:
        return len(self._tokens)
