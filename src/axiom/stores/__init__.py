"""Token persistence."""

from axiom.stores.base import TokenFilter, TokenStore
from axiom.stores.jsonl import JsonlTokenStore
from axiom.stores.memory import InMemoryTokenStore

__all__ = ["InMemoryTokenStore", "JsonlTokenStore", "TokenFilter", "TokenStore"]
