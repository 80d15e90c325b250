#!/usr/bin/env python3
"""
Tests for the in-memory and JSON Lines token stores.
"""

import json
from datetime import datetime, timedelta, timezone

import pytest

from axiom.core.colors import TokenColor
from axiom.core.tokens import create_token
from axiom.stores import InMemoryTokenStore, JsonlTokenStore, TokenFilter, TokenStore


def _token(color=TokenColor.PROPOSAL, place="P_proposals", correlation_id=None, age_days=0):
    token = create_token({"title": "note"}, color, place, correlation_id=correlation_id)
    if age_days:
        token.meta.created_at = (datetime.now(timezone.utc) - timedelta(days=age_days)).isoformat()
    return token


@pytest.fixture(params=["memory", "jsonl"])
def any_store(request, tmp_path):
    if request.param == "memory":
        return InMemoryTokenStore()
    return JsonlTokenStore(tmp_path / "tokens.jsonl")


# =============================================================================
# Shared behaviour
# =============================================================================


class TestStoreContract:

    def test_satisfies_protocol(self, any_store):
        assert isinstance(any_store, TokenStore)

    async def test_save_and_get(self, any_store):
        token = _token()
        await any_store.save(token)
        loaded = await any_store.get(token.id)
        assert loaded.id == token.id
        assert loaded.color == TokenColor.PROPOSAL

    async def test_saved_copy_is_a_snapshot(self, any_store):
        token = _token()
        await any_store.save(token)
        token.retry_count = 2
        assert (await any_store.get(token.id)).retry_count == 0

    async def test_get_missing(self, any_store):
        assert await any_store.get("nope") is None

    async def test_latest_save_wins(self, any_store):
        token = _token()
        await any_store.save(token)
        token.move_to("P_deciding")
        await any_store.save(token)
        assert (await any_store.get(token.id)).meta.current_place == "P_deciding"
        assert len(await any_store.get_all()) == 1

    async def test_by_correlation_id(self, any_store):
        await any_store.save_all([_token(correlation_id="a"), _token(correlation_id="a"), _token(correlation_id="b")])
        assert len(await any_store.get_by_correlation_id("a")) == 2

    async def test_delete_and_clear(self, any_store):
        first, second = _token(), _token()
        await any_store.save_all([first, second])
        await any_store.delete(first.id)
        assert await any_store.get(first.id) is None
        await any_store.clear()
        assert await any_store.get_all() == []

    async def test_cleanup(self, any_store):
        await any_store.save_all([_token(age_days=40), _token(age_days=1)])
        assert await any_store.cleanup(30) == 1
        assert len(await any_store.get_all()) == 1

    async def test_query(self, any_store):
        await any_store.save_all([
            _token(TokenColor.PROPOSAL, "P_proposals", "x"),
            _token(TokenColor.REJECTED, "P_rejected", "x"),
            _token(TokenColor.REJECTED, "P_rejected", "y"),
        ])
        assert len(await any_store.query(TokenFilter(color=TokenColor.REJECTED))) == 2
        assert len(await any_store.query(TokenFilter(correlation_id="x", current_place="P_rejected"))) == 1
        assert len(await any_store.query(TokenFilter())) == 3

    async def test_query_by_creation_time(self, any_store):
        await any_store.save_all([_token(age_days=10), _token(age_days=1)])
        cutoff = (datetime.now(timezone.utc) - timedelta(days=5)).isoformat()
        assert len(await any_store.query(TokenFilter(created_after=cutoff))) == 1
        assert len(await any_store.query(TokenFilter(created_before=cutoff))) == 1


# =============================================================================
# JSON Lines specifics
# =============================================================================


class TestJsonlStore:

    async def test_survives_reopen(self, tmp_path):
        path = tmp_path / "tokens.jsonl"
        store = JsonlTokenStore(path)
        kept, dropped = _token(), _token()
        await store.save_all([kept, dropped])
        await store.delete(dropped.id)
        await store.close()

        reopened = JsonlTokenStore(path)
        assert await reopened.get(dropped.id) is None
        loaded = await reopened.get(kept.id)
        assert loaded.payload == {"title": "note"}
        await reopened.close()

    async def test_log_format(self, tmp_path):
        path = tmp_path / "tokens.jsonl"
        store = JsonlTokenStore(path)
        token = _token()
        await store.save(token)
        await store.delete(token.id)
        await store.close()

        entries = [json.loads(line) for line in path.read_text().splitlines()]
        assert [e["op"] for e in entries] == ["save", "delete"]
        assert entries[0]["token"]["meta"]["id"] == token.id

    async def test_clear_truncates(self, tmp_path):
        path = tmp_path / "tokens.jsonl"
        store = JsonlTokenStore(path)
        await store.save(_token())
        await store.clear()
        await store.close()
        assert path.read_text() == ""

    async def test_unreadable_lines_are_skipped(self, tmp_path, caplog):
        path = tmp_path / "tokens.jsonl"
        token = _token()
        path.write_text(
            "not json\n"
            + json.dumps({"op": "save", "token": token.model_dump(mode="json")}) + "\n"
        )
        store = JsonlTokenStore(path)
        assert await store.get(token.id) is not None
        assert any("Skipping unreadable line 1" in r.getMessage() for r in caplog.records)
        await store.close()

    async def test_cleanup_rewrites_the_log(self, tmp_path):
        path = tmp_path / "tokens.jsonl"
        store = JsonlTokenStore(path)
        old, fresh = _token(age_days=40), _token(age_days=1)
        await store.save_all([old, fresh])
        fresh.color = TokenColor.VERIFIED
        await store.save(fresh)

        assert await store.cleanup(30) == 1
        entries = [json.loads(line) for line in path.read_text().splitlines()]
        assert [(e["op"], e["token"]["meta"]["id"]) for e in entries] == [("save", fresh.id)]
        assert entries[0]["token"]["color"] == TokenColor.VERIFIED.value

        await store.save(_token())
        await store.close()
        assert len(path.read_text().splitlines()) == 2

    async def test_compact_drops_tombstones(self, tmp_path):
        path = tmp_path / "tokens.jsonl"
        store = JsonlTokenStore(path)
        kept, dropped = _token(), _token()
        await store.save_all([kept, dropped])
        await store.delete(dropped.id)
        await store.compact()
        await store.close()

        assert not (tmp_path / "tokens.jsonl.tmp").exists()
        reopened = JsonlTokenStore(path)
        assert [t.id for t in await reopened.get_all()] == [kept.id]
        assert len(path.read_text().splitlines()) == 1
        await reopened.close()

    async def test_close_then_save_fails(self, tmp_path):
        store = JsonlTokenStore(tmp_path / "tokens.jsonl")
        await store.close()
        with pytest.raises(ValueError):
            await store.save(_token())


async def test_memory_store_size():
    store = InMemoryTokenStore()
    await store.save_all([_token(), _token()])
    assert store.size == 2
