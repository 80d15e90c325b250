#!/usr/bin/env python3
"""
JSON Lines transports.

Events go to a file one JSON object per line. The event bridge emits
synchronously, so it uses SyncFileTransport; the file token store is async
and appends through AsyncFileTransport, which keeps disk I/O off the loop.
"""

from __future__ import annotations

import asyncio
import json
import threading
from pathlib import Path
from typing import IO, Iterable, Optional, Protocol, runtime_checkable

from axiom.events.types import AxiomEvent


@runtime_checkable
class EventTransport(Protocol):
    def send(self, data: bytes, content_type: str) -> None:
        ...


class JSONEventEncoder:
    """Compact JSON, one event per record."""

    def encode(self, event: AxiomEvent) -> bytes:
        return json.dumps(event.to_dict(), separators=(',', ':'), default=str).encode('utf-8')

    def content_type(self) -> str:
        return "application/json"


class JsonlFile:
    """An append-mode JSONL file handle shared by both transports."""

    def __init__(self, filepath: str | Path):
        """
        Open (and create, along with missing parent directories) a JSONL file.

        Args:
            filepath: File that records are appended to
        """
        self.filepath = Path(filepath)
        self.filepath.parent.mkdir(parents=True, exist_ok=True)
        self._handle: Optional[IO[str]] = open(self.filepath, 'a', encoding='utf-8')

    @property
    def closed(self) -> bool:
        return self._handle is None

    def _require_open(self) -> IO[str]:
        if self._handle is None:
            raise ValueError(f"{self.filepath} is closed")
        return self._handle

    def append(self, data: bytes) -> None:
        """
        Write one record and flush it.

        Args:
            data: UTF-8 encoded JSON, without the trailing newline

        Raises:
            ValueError: The file has been closed
        """
        handle = self._require_open()
        handle.write(data.decode('utf-8') + '\n')
        handle.flush()

    def truncate(self) -> None:
        handle = self._require_open()
        handle.seek(0)
        handle.truncate()
        handle.flush()

    def rewrite(self, records: Iterable[bytes]) -> None:
        """
        Replace the file contents with ``records``.

        The new contents are written to a sibling temp file which then
        replaces the original, so a crash mid-write leaves the old file
        intact. The append handle is reopened on the new file.

        Args:
            records: UTF-8 encoded JSON records, one per line
        """
        self._require_open()
        tmp_path = self.filepath.with_name(self.filepath.name + '.tmp')
        with open(tmp_path, 'w', encoding='utf-8') as tmp:
            for data in records:
                tmp.write(data.decode('utf-8') + '\n')
        self.close()
        tmp_path.replace(self.filepath)
        self._handle = open(self.filepath, 'a', encoding='utf-8')

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None


class SyncFileTransport:
    """Blocking JSONL transport, safe to share between threads."""

    def __init__(self, filepath: str | Path):
        """
        Args:
            filepath: Event log file; created if missing
        """
        self._file = JsonlFile(filepath)
        self._lock = threading.Lock()

    @property
    def filepath(self) -> Path:
        return self._file.filepath

    def send(self, data: bytes, content_type: str = "application/json") -> None:
        """
        Append one encoded event (blocking).

        Args:
            data: Encoded event
            content_type: MIME type of ``data``; only JSON is written
        """
        with self._lock:
            self._file.append(data)

    def close(self) -> None:
        """Close the file. Later sends raise ValueError."""
        with self._lock:
            self._file.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class AsyncFileTransport:
    """
    JSONL transport whose writes run in a worker thread, one at a time.

    An asyncio.Lock serialises writes, so records land in the order their
    coroutines acquired it and a rewrite never interleaves with an append.
    """

    def __init__(self, filepath: str | Path):
        """
        Args:
            filepath: Log file; created if missing
        """
        self._file = JsonlFile(filepath)
        self._lock = asyncio.Lock()

    @property
    def filepath(self) -> Path:
        return self._file.filepath

    async def send(self, data: bytes, content_type: str = "application/json") -> None:
        """
        Append one encoded record without blocking the event loop.

        Args:
            data: Encoded record
            content_type: MIME type of ``data``; only JSON is written
        """
        async with self._lock:
            await asyncio.to_thread(self._file.append, data)

    async def truncate(self) -> None:
        """Discard everything written so far."""
        async with self._lock:
            await asyncio.to_thread(self._file.truncate)

    async def rewrite(self, records: Iterable[bytes]) -> None:
        """
        Atomically replace the file contents.

        Args:
            records: Encoded records that make up the new file
        """
        records = list(records)
        async with self._lock:
            await asyncio.to_thread(self._file.rewrite, records)

    async def close(self) -> None:
        async with self._lock:
            if not self._file.closed:
                await asyncio.to_thread(self._file.close)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
