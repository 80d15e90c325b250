#!/usr/bin/env python3
"""
Token store protocol.

Stores hold snapshots of tokens for audit and inspection. The engine writes
to them fire-and-forget; a store failure never affects a running workflow.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Protocol, Sequence, runtime_checkable

from axiom.core.colors import TokenColor
from axiom.core.tokens import Token


@dataclass(frozen=True)
class TokenFilter:
    """Criteria for querying tokens; unset fields match everything."""
    correlation_id: Optional[str] = None
    color: Optional[TokenColor] = None
    current_place: Optional[str] = None
    created_after: Optional[str] = None
    created_before: Optional[str] = None

    def matches(self, token: Token) -> bool:
        meta = token.meta
        if self.correlation_id is not None and meta.correlation_id != self.correlation_id:
            return False
        if self.color is not None and token.color != self.color:
            return False
        if self.current_place is not None and meta.current_place != self.current_place:
            return False
        created = parse_timestamp(meta.created_at)
        if self.created_after is not None and created <= parse_timestamp(self.created_after):
            return False
        if self.created_before is not None and created >= parse_timestamp(self.created_before):
            return False
        return True


@runtime_checkable
class TokenStore(Protocol):
    async def save(self, token: Token) -> None: ...

    async def get(self, token_id: str) -> Optional[Token]: ...

    async def get_by_correlation_id(self, correlation_id: str) -> List[Token]: ...

    async def delete(self, token_id: str) -> None: ...

    async def save_all(self, tokens: Sequence[Token]) -> None: ...

    async def get_all(self) -> List[Token]: ...

    async def clear(self) -> None: ...

    async def cleanup(self, retention_days: float) -> int: ...

    async def query(self, token_filter: TokenFilter) -> List[Token]: ...


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def retention_cutoff(retention_days: float) -> datetime:
    return datetime.now(timezone.utc) - timedelta(days=retention_days)
