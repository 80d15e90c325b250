#!/usr/bin/env python3
"""
AXIOM - Engine

Sequential executor for a colored Petri net:

1. Find all enabled transitions (inputs present, guards pass)
2. Select the highest-priority one (ties keep registration order)
3. Fire it: take tokens, run the action, route the results by color
4. Record the firing on every output token and emit events
5. Repeat until nothing is enabled, the engine is paused, or the step
   ceiling is reached
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Set, Tuple, Union

from axiom.common.timebase import MonotonicClock, Timebase, UTCClock
from axiom.core.exceptions import (
    NetConfigurationError,
    TokenRejectedError,
    UnknownPlaceError,
)
from axiom.core.place import Place
from axiom.core.specs import NetDefinition, PlaceSpec, PlaceState, TransitionContext, TransitionSpec
from axiom.core.tokens import Token, TransitionRecord
from axiom.core.transition import Transition
from axiom.events.bridge import EventBridge
from axiom.events.types import AxiomEvent, EventType
from axiom.stores.base import TokenStore

logger = logging.getLogger(__name__)

EngineEventHandler = Callable[[AxiomEvent], None]

DEFAULT_MAX_STEPS = 100


@dataclass(frozen=True)
class EngineState:
    step_count: int
    is_running: bool
    is_paused: bool
    places: Tuple[PlaceState, ...]
    enabled_transitions: Tuple[str, ...]


@dataclass(frozen=True)
class EngineStats:
    total_tokens_processed: int
    transitions_fired: int
    average_step_duration_ms: float


class AxiomEngine:
    """Runs one workflow net, one step at a time."""

    def __init__(
        self,
        token_store: TokenStore,
        event_bridge: Optional[EventBridge] = None,
        max_steps: int = DEFAULT_MAX_STEPS,
        timebase: Optional[Timebase] = None,
    ):
        if max_steps < 1:
            raise ValueError("max_steps must be at least 1")
        self.token_store = token_store
        self.event_bridge = event_bridge or EventBridge()
        self.max_steps = max_steps
        # Wall-clock for audit timestamps, monotonic for durations
        self.timebase = timebase or UTCClock()
        self.duration_clock: Timebase = timebase or MonotonicClock()

        self._places: Dict[str, Place] = {}
        self._transitions: Dict[str, Transition] = {}
        self._local_handlers: Dict[EventType, Set[EngineEventHandler]] = {}
        self._pending_writes: Set[asyncio.Task] = set()

        self._step_count = 0
        self._is_running = False
        self._is_paused = False
        self._total_tokens_processed = 0
        self._transitions_fired = 0
        self._total_step_duration_ms = 0.0

    # ========================================================================
    # Configuration
    # ========================================================================

    def add_place(self, spec: PlaceSpec) -> Place:
        if spec.id in self._places:
            raise NetConfigurationError(f'Place "{spec.id}" already exists')
        place = Place(spec)
        self._places[spec.id] = place
        return place

    def add_transition(self, spec: TransitionSpec) -> Transition:
        if spec.id in self._transitions:
            raise NetConfigurationError(f'Transition "{spec.id}" already exists')
        place_specs = {pid: place.spec for pid, place in self._places.items()}
        transition = Transition(spec, place_specs, timebase=self.duration_clock)
        self._transitions[spec.id] = transition
        return transition

    def wire(self, net: NetDefinition) -> "AxiomEngine":
        """Register every place and transition of a net definition."""
        for place_spec in net.places:
            self.add_place(place_spec)
        for transition_spec in net.transitions:
            self.add_transition(transition_spec)
        logger.debug(
            f"Wired net {net.name}: {len(net.places)} places, {len(net.transitions)} transitions"
        )
        return self

    # ========================================================================
    # Token management
    # ========================================================================

    def add_token(self, place_id: str, token: Token) -> None:
        place = self._places.get(place_id)
        if place is None:
            raise UnknownPlaceError(place_id)
        if not place.push(token):
            raise TokenRejectedError(place_id, token)

        token.meta.current_place = place_id
        self._persist(token)
        self._total_tokens_processed += 1

        self._emit(EventType.TOKEN_CREATED, {
            "token_id": token.id,
            "correlation_id": token.correlation_id,
            "color": token.color.value,
            "place_id": place_id,
        })

    def get_tokens_in_place(self, place_id: str) -> List[Token]:
        place = self._places.get(place_id)
        if place is None:
            return []
        return place.pull()

    def find_token(self, token_id: str) -> Optional[Token]:
        for place in self._places.values():
            for token in place.tokens:
                if token.id == token_id:
                    return token
        return None

    def _persist(self, token: Token) -> None:
        """Save a token without waiting; failures are logged and dropped"""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(f"No running event loop; token {token.id} was not persisted")
            return
        task = loop.create_task(self._save(token.model_copy(deep=True)))
        self._pending_writes.add(task)
        task.add_done_callback(self._pending_writes.discard)

    async def _save(self, token: Token) -> None:
        try:
            await self.token_store.save(token)
        except Exception:
            logger.exception(f"Failed to persist token {token.id}")

    async def drain_persistence(self) -> None:
        """Wait for every outstanding store write to finish."""
        while self._pending_writes:
            await asyncio.gather(*list(self._pending_writes))

    # ========================================================================
    # Execution control
    # ========================================================================

    def _context(self) -> TransitionContext:
        return TransitionContext(
            engine=self,
            timestamp=self.timebase.isoformat(),
            step_number=self._step_count,
        )

    async def step(self) -> bool:
        """Fire the highest-priority enabled transition.

        Returns True if a transition fired, False if none was enabled.
        """
        step_start = self.duration_clock.now()
        context = self._context()

        enabled = self._enabled(context)
        enabled_ids = [t.id for t in enabled]

        for transition in self._transitions.values():
            if transition in enabled:
                continue
            failed = transition.blocked_guards(self._places, context)
            if failed:
                self._emit(EventType.TRANSITION_BLOCKED, {
                    "transition_id": transition.id,
                    "failed_guards": failed,
                })

        if not enabled:
            self._emit(EventType.ENGINE_STEP, {
                "step_number": self._step_count,
                "transition_fired": None,
                "enabled_transitions": [],
            })
            return False

        selected = enabled[0]
        reason = f"Step {self._step_count}: highest priority enabled transition"
        if len(enabled) > 1:
            reason += f" (over {', '.join(enabled_ids[1:])})"

        input_tokens = [
            self._places[pid].tokens[0] for pid in selected.input_place_ids
        ]
        input_places = {pid: self._places[pid] for pid in selected.input_place_ids}
        output_places = {pid: self._places[pid] for pid in selected.output_place_ids}

        logger.debug(f"Firing {selected.id} at step {self._step_count}")
        record: TransitionRecord = await selected.fire(input_places, output_places, context, reason)

        output_tokens = list(selected.last_outputs)

        self._step_count += 1
        self._transitions_fired += 1
        self._total_step_duration_ms += (self.duration_clock.now() - step_start) * 1000

        self._emit(EventType.TRANSITION_FIRED, {
            "transition_id": record.transition_id,
            "input_token_ids": [t.id for t in input_tokens],
            "output_token_ids": [t.id for t in output_tokens],
            "reason": record.reason,
            "duration_ms": record.duration_ms,
        })

        for token in output_tokens:
            self._persist(token)
            self._emit(EventType.TOKEN_MOVED, {
                "token_id": token.id,
                "from_place": token.meta.previous_place,
                "to_place": token.meta.current_place,
                "transition_id": record.transition_id,
            })

        self._emit(EventType.ENGINE_STEP, {
            "step_number": self._step_count,
            "transition_fired": selected.id,
            "enabled_transitions": enabled_ids,
        })
        return True

    async def run(self) -> None:
        """Step until quiescent, paused, or at the step ceiling.

        Action errors propagate after ``engine:stopped`` has been emitted.
        """
        if self._is_running:
            return

        self._is_running = True
        self._is_paused = False
        stop_reason = "completed"

        self._emit(EventType.ENGINE_STARTED, {"max_steps": self.max_steps})

        try:
            while self._is_running:
                if self._is_paused:
                    stop_reason = "paused"
                    break
                if self._step_count >= self.max_steps:
                    logger.warning(f"Step ceiling of {self.max_steps} reached; halting")
                    self._emit(EventType.ENGINE_MAX_STEPS, {
                        "max_steps": self.max_steps,
                        "step_count": self._step_count,
                    })
                    stop_reason = "max_steps"
                    break
                if not await self.step():
                    break
                # Let other tasks (persistence, pause requests) run between steps
                await asyncio.sleep(0)
        except Exception:
            stop_reason = "error"
            raise
        finally:
            self._is_running = False
            self._emit(EventType.ENGINE_STOPPED, {
                "step_count": self._step_count,
                "reason": stop_reason,
            })

    def pause(self) -> None:
        """Request a pause; honoured at the next step boundary."""
        if not self._is_running:
            return
        self._is_paused = True
        self._emit(EventType.ENGINE_PAUSED, {"step_count": self._step_count})

    async def resume(self) -> None:
        if not self._is_paused:
            return
        self._is_paused = False
        self._emit(EventType.ENGINE_RESUMED, {"step_count": self._step_count})
        await self.run()

    def reset(self) -> None:
        """Wipe every place (sinks included) and all counters. Topology stays."""
        for place in self._places.values():
            place.reset()
        self._step_count = 0
        self._is_running = False
        self._is_paused = False
        self._total_tokens_processed = 0
        self._transitions_fired = 0
        self._total_step_duration_ms = 0.0

    # ========================================================================
    # State queries
    # ========================================================================

    def _enabled(self, context: TransitionContext) -> List[Transition]:
        enabled = [t for t in self._transitions.values() if t.is_enabled(self._places, context)]
        # sorted() is stable, so equal priorities keep registration order
        return sorted(enabled, key=lambda t: -t.priority)

    def get_enabled_transitions(self) -> List[Transition]:
        return self._enabled(self._context())

    def get_places(self) -> List[PlaceState]:
        return [place.snapshot() for place in self._places.values()]

    def get_place(self, place_id: str) -> Optional[Place]:
        return self._places.get(place_id)

    def get_transition(self, transition_id: str) -> Optional[Transition]:
        return self._transitions.get(transition_id)

    @property
    def state(self) -> EngineState:
        return EngineState(
            step_count=self._step_count,
            is_running=self._is_running,
            is_paused=self._is_paused,
            places=tuple(self.get_places()),
            enabled_transitions=tuple(t.id for t in self.get_enabled_transitions()),
        )

    @property
    def stats(self) -> EngineStats:
        average = (
            self._total_step_duration_ms / self._transitions_fired
            if self._transitions_fired else 0.0
        )
        return EngineStats(
            total_tokens_processed=self._total_tokens_processed,
            transitions_fired=self._transitions_fired,
            average_step_duration_ms=average,
        )

    @property
    def is_running(self) -> bool:
        return self._is_running

    @property
    def is_paused(self) -> bool:
        return self._is_paused

    @property
    def steps(self) -> int:
        return self._step_count

    # ========================================================================
    # Events
    # ========================================================================

    def on(self, event_type: Union[EventType, str], handler: EngineEventHandler) -> None:
        self._local_handlers.setdefault(EventType(event_type), set()).add(handler)

    def off(self, event_type: Union[EventType, str], handler: EngineEventHandler) -> None:
        handlers = self._local_handlers.get(EventType(event_type))
        if handlers:
            handlers.discard(handler)

    def emit(self, event_type: EventType, data: Dict[str, Any]) -> None:
        """Emit an event through the bridge and local handlers.

        Public so that workflow actions can report their own events.
        """
        self._emit(event_type, data)

    def _emit(self, event_type: EventType, data: Dict[str, Any]) -> None:
        event = AxiomEvent(type=event_type, data=data, timestamp=self.timebase.isoformat())
        self.event_bridge.emit(event)
        for handler in list(self._local_handlers.get(event_type, ())):
            try:
                handler(event)
            except Exception:
                logger.exception(f"Local handler error for {event_type.value}")
