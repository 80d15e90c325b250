"""Event vocabulary, bridge and transports."""

from axiom.events.bridge import EventBridge, EventHandler
from axiom.events.transport import (
    AsyncFileTransport,
    EventTransport,
    JSONEventEncoder,
    SyncFileTransport,
)
from axiom.events.types import (
    MINIMAL_EVENTS,
    NORMAL_EVENTS,
    AxiomEvent,
    EventType,
    Verbosity,
)

__all__ = [
    "AsyncFileTransport",
    "AxiomEvent",
    "EventBridge",
    "EventHandler",
    "EventTransport",
    "EventType",
    "JSONEventEncoder",
    "MINIMAL_EVENTS",
    "NORMAL_EVENTS",
    "SyncFileTransport",
    "Verbosity",
]
