#!/usr/bin/env python3
"""
JSON Lines token store.

An append log of token snapshots: each save appends the token, each delete
appends a tombstone, and the latest entry per id wins when the log is
replayed. ``cleanup`` and ``compact`` rewrite the file down to the live
tokens. Payloads are stored as JSON, so after a reload they come back as
plain data rather than the model they were saved from.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from pydantic import ValidationError

from axiom.core.tokens import Token
from axiom.events.transport import AsyncFileTransport
from axiom.stores.base import TokenFilter, parse_timestamp, retention_cutoff

logger = logging.getLogger(__name__)


class JsonlTokenStore:
    """File-backed token store."""

    def __init__(self, filepath: str | Path):
        self.filepath = Path(filepath)
        self._tokens: Dict[str, Token] = {}
        self._replay()
        self._transport = AsyncFileTransport(self.filepath)

    def _replay(self) -> None:
        if not self.filepath.exists():
            return
        with open(self.filepath, 'r', encoding='utf-8') as f:
            for lineno, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    entry = json.loads(line)
                    if entry.get("op") == "delete":
                        self._tokens.pop(entry["id"], None)
                    else:
                        token = Token.model_validate(entry["token"])
                        self._tokens[token.id] = token
                except (json.JSONDecodeError, KeyError, ValidationError):
                    logger.warning(f"Skipping unreadable line {lineno} of {self.filepath}")

    async def _append(self, entry: dict) -> None:
        await self._transport.send(_encode(entry))

    async def save(self, token: Token) -> None:
        snapshot = token.model_copy(deep=True)
        self._tokens[snapshot.id] = snapshot
        await self._append({"op": "save", "token": snapshot.model_dump(mode="json")})

    async def get(self, token_id: str) -> Optional[Token]:
        return self._tokens.get(token_id)

    async def get_by_correlation_id(self, correlation_id: str) -> List[Token]:
        return [t for t in self._tokens.values() if t.correlation_id == correlation_id]

    async def delete(self, token_id: str) -> None:
        if self._tokens.pop(token_id, None) is not None:
            await self._append({"op": "delete", "id": token_id})

    async def save_all(self, tokens: Sequence[Token]) -> None:
        for token in tokens:
            await self.save(token)

    async def get_all(self) -> List[Token]:
        return list(self._tokens.values())

    async def clear(self) -> None:
        self._tokens.clear()
        await self._transport.truncate()

    async def cleanup(self, retention_days: float) -> int:
        """
        Drop tokens created more than ``retention_days`` ago and compact the log.

        Returns:
            Number of tokens removed
        """
        cutoff = retention_cutoff(retention_days)
        stale = [
            token_id for token_id, token in self._tokens.items()
            if parse_timestamp(token.meta.created_at) < cutoff
        ]
        for token_id in stale:
            del self._tokens[token_id]
        await self.compact()
        if stale:
            logger.info(f"Removed {len(stale)} token(s) older than {retention_days} days from {self.filepath}")
        return len(stale)

    async def compact(self) -> None:
        """Rewrite the log as one save entry per live token, dropping superseded saves and tombstones."""
        entries = [
            _encode({"op": "save", "token": token.model_dump(mode="json")})
            for token in self._tokens.values()
        ]
        await self._transport.rewrite(entries)

    async def query(self, token_filter: TokenFilter) -> List[Token]:
        return [t for t in self._tokens.values() if token_filter.matches(t)]

    async def close(self) -> None:
        await self._transport.close()


def _encode(entry: dict) -> bytes:
    return json.dumps(entry, separators=(',', ':'), default=str).encode('utf-8')
