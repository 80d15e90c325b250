#!/usr/bin/env python3
"""
Event bridge.

Routes engine events to registered handlers, a bounded buffer of recent
events, the ``axiom.events`` logger and optionally a JSONL transport.
A failing handler or transport is logged and never interrupts emission.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Callable, Deque, Dict, List, Optional, Set, Union

from axiom.events.transport import EventTransport, JSONEventEncoder
from axiom.events.types import (
    MINIMAL_EVENTS,
    NORMAL_EVENTS,
    AxiomEvent,
    EventType,
    Verbosity,
)

logger = logging.getLogger(__name__)

EventHandler = Callable[[AxiomEvent], None]

WILDCARD = "*"

_LEVELS = {
    EventType.ENGINE_MAX_STEPS: logging.WARNING,
    EventType.WORKFLOW_FAILED: logging.ERROR,
    EventType.CRITIQUE_REJECTED: logging.WARNING,
}


class EventBridge:
    """Fan-out point for AXIOM events."""

    def __init__(
        self,
        verbosity: Union[Verbosity, str] = Verbosity.NORMAL,
        log_events: bool = True,
        buffer_size: int = 100,
        transport: Optional[EventTransport] = None,
    ):
        self.verbosity = Verbosity(verbosity)
        self.log_events = log_events
        self.transport = transport
        self._encoder = JSONEventEncoder()
        self._handlers: Dict[EventType, Set[EventHandler]] = {}
        self._wildcard_handlers: Set[EventHandler] = set()
        self._recent: Deque[AxiomEvent] = deque(maxlen=buffer_size)

    def emit(self, event: AxiomEvent) -> None:
        self._recent.append(event)

        if self.log_events and self.should_log(event.type):
            level = _LEVELS.get(event.type, logging.INFO)
            logger.log(level, f"[AXIOM {event.type.value}] {dict(event.data)}")

        if self.transport is not None:
            try:
                self.transport.send(self._encoder.encode(event), self._encoder.content_type())
            except Exception:
                logger.exception(f"Event transport failed for {event.type.value}")

        for handler in list(self._handlers.get(event.type, ())):
            try:
                handler(event)
            except Exception:
                logger.exception(f"Event handler error for {event.type.value}")

        for handler in list(self._wildcard_handlers):
            try:
                handler(event)
            except Exception:
                logger.exception(f"Wildcard handler error for {event.type.value}")

    def on(self, event_type: Union[EventType, str], handler: EventHandler) -> None:
        """Register a handler. Pass ``"*"`` to receive every event."""
        if event_type == WILDCARD:
            self._wildcard_handlers.add(handler)
            return
        self._handlers.setdefault(EventType(event_type), set()).add(handler)

    def off(self, event_type: Union[EventType, str], handler: EventHandler) -> None:
        if event_type == WILDCARD:
            self._wildcard_handlers.discard(handler)
            return
        handlers = self._handlers.get(EventType(event_type))
        if handlers:
            handlers.discard(handler)

    def recent_events(self, count: Optional[int] = None) -> List[AxiomEvent]:
        events = list(self._recent)
        if count is None:
            return events
        return events[-count:] if count > 0 else []

    def clear(self) -> None:
        """Forget buffered events; handlers stay registered."""
        self._recent.clear()

    def should_log(self, event_type: EventType) -> bool:
        if self.verbosity == Verbosity.MINIMAL:
            return event_type in MINIMAL_EVENTS
        if self.verbosity == Verbosity.NORMAL:
            return event_type in NORMAL_EVENTS
        return True
