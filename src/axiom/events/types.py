#!/usr/bin/env python3
"""
AXIOM event vocabulary.

Events are emitted for every significant state change so that logging,
persistence and UIs can follow a workflow without touching the engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional


class EventType(str, Enum):
    TOKEN_CREATED = "token:created"
    TOKEN_MOVED = "token:moved"
    TOKEN_UPDATED = "token:updated"
    TOKEN_DELETED = "token:deleted"

    TRANSITION_ENABLED = "transition:enabled"
    TRANSITION_FIRED = "transition:fired"
    TRANSITION_BLOCKED = "transition:blocked"

    ENGINE_STARTED = "engine:started"
    ENGINE_PAUSED = "engine:paused"
    ENGINE_RESUMED = "engine:resumed"
    ENGINE_STOPPED = "engine:stopped"
    ENGINE_STEP = "engine:step"
    ENGINE_MAX_STEPS = "engine:max_steps"

    WORKFLOW_COMPLETED = "workflow:completed"
    WORKFLOW_FAILED = "workflow:failed"

    CRITIQUE_STARTED = "critique:started"
    CRITIQUE_COMPLETED = "critique:completed"
    CRITIQUE_SKIPPED = "critique:skipped"
    CRITIQUE_ESCALATED = "critique:escalated"
    CRITIQUE_REJECTED = "critique:rejected"


class Verbosity(str, Enum):
    MINIMAL = "minimal"
    NORMAL = "normal"
    VERBOSE = "verbose"


# Always logged, even in minimal mode
MINIMAL_EVENTS = frozenset({
    EventType.TRANSITION_FIRED,
    EventType.ENGINE_STARTED,
    EventType.ENGINE_STOPPED,
    EventType.ENGINE_MAX_STEPS,
    EventType.WORKFLOW_COMPLETED,
    EventType.WORKFLOW_FAILED,
    EventType.CRITIQUE_COMPLETED,
    EventType.CRITIQUE_REJECTED,
})

NORMAL_EVENTS = MINIMAL_EVENTS | {
    EventType.TOKEN_CREATED,
    EventType.TOKEN_MOVED,
    EventType.TOKEN_DELETED,
    EventType.TRANSITION_BLOCKED,
    EventType.ENGINE_PAUSED,
    EventType.ENGINE_RESUMED,
    EventType.CRITIQUE_STARTED,
    EventType.CRITIQUE_SKIPPED,
    EventType.CRITIQUE_ESCALATED,
}


@dataclass(frozen=True)
class AxiomEvent:
    """Immutable snapshot of something that happened.

    ``data`` is wrapped read-only at construction; handlers cannot alter
    what later handlers see.
    """
    type: EventType
    data: Mapping[str, Any] = field(default_factory=dict)
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def __post_init__(self):
        object.__setattr__(self, "type", EventType(self.type))
        object.__setattr__(self, "data", MappingProxyType(dict(self.data)))

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type.value, "timestamp": self.timestamp, "data": dict(self.data)}

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        return self.data.get(key, default)
