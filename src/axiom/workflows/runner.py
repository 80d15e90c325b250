#!/usr/bin/env python3
"""
Workflow runners.

Drive one token through a wired engine and summarise where it ended up.
Unlike ``AxiomEngine.run``, the runners never raise for a failing action:
the failure is logged, reported as ``workflow:failed`` and returned.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from axiom.core.engine import AxiomEngine
from axiom.core.specs import NetDefinition
from axiom.core.tokens import Token, TransitionRecord
from axiom.events.types import EventType
from axiom.feedback import CorrectionFeedback
from axiom.proposals import Proposal
from axiom.workflows.collaborators import CouncilPayload
from axiom.workflows.council_net import create_council_token
from axiom.workflows.ids import CouncilPlaceId, PlaceId
from axiom.workflows.validation_net import create_proposal_token

logger = logging.getLogger(__name__)


@dataclass
class WorkflowResult:
    success: bool
    final_place: str
    total_steps: int
    total_retries: int
    feedback_history: List[CorrectionFeedback] = field(default_factory=list)
    transition_history: List[TransitionRecord] = field(default_factory=list)
    error: Optional[str] = None
    token: Optional[Token] = None


@dataclass
class CouncilResult:
    output: CouncilPayload
    final_place: str
    total_steps: int
    stalled: bool
    error: Optional[str] = None

    @property
    def emitted(self) -> bool:
        return self.final_place == CouncilPlaceId.P_COUNCIL_OUTPUT.value


class WorkflowRunner:
    """Runs proposals through a validation (or critique) net, one at a time."""

    def __init__(self, engine: AxiomEngine, net: NetDefinition, max_retries: int = 3):
        self.engine = engine
        self.net = net
        self.max_retries = max_retries
        engine.wire(net)

    async def process_proposal(self, proposal: Proposal) -> WorkflowResult:
        engine = self.engine
        engine.reset()

        token = create_proposal_token(proposal, max_retries=self.max_retries)
        engine.add_token(self.net.source_place or PlaceId.P_PROPOSALS.value, token)
        start = engine.duration_clock.now()

        error: Optional[str] = None
        try:
            await engine.run()
        except Exception as e:
            logger.exception(f"Workflow for {token.correlation_id} failed")
            error = f"{type(e).__name__}: {e}"

        await engine.drain_persistence()

        current = engine.find_token(token.id) or token
        final_place = current.meta.current_place
        success = error is None and final_place == PlaceId.P_COMMITTED.value
        duration_ms = (engine.duration_clock.now() - start) * 1000

        if success:
            engine.emit(EventType.WORKFLOW_COMPLETED, {
                "workflow_id": current.correlation_id,
                "total_steps": engine.steps,
                "total_retries": current.retry_count,
                "duration_ms": duration_ms,
            })
        else:
            engine.emit(EventType.WORKFLOW_FAILED, {
                "workflow_id": current.correlation_id,
                "reason": error or f"ended in {final_place}",
                "last_error": error,
            })

        return WorkflowResult(
            success=success,
            final_place=final_place,
            total_steps=engine.steps,
            total_retries=current.retry_count,
            feedback_history=list(current.feedback_history),
            transition_history=list(current.meta.transition_history),
            error=error,
            token=current,
        )


async def run_council(engine: AxiomEngine, payload: CouncilPayload) -> CouncilResult:
    """Push one query through an engine wired with the council net.

    A token left outside the sinks (for example when synthesis produced no
    proposals and there is no empty sink) is reported as stalled.
    """
    engine.reset()
    token = create_council_token(payload)
    engine.add_token(CouncilPlaceId.P_COUNCIL_QUERY.value, token)

    error: Optional[str] = None
    try:
        await engine.run()
    except Exception as e:
        logger.exception(f"Council run {token.correlation_id} failed")
        error = f"{type(e).__name__}: {e}"

    await engine.drain_persistence()

    current = engine.find_token(token.id) or token
    final_place = current.meta.current_place
    place = engine.get_place(final_place)
    stalled = error is None and (place is None or not place.is_sink)
    if stalled:
        logger.info(f"Council token {token.id} stalled in {final_place}")

    return CouncilResult(
        output=current.payload,
        final_place=final_place,
        total_steps=engine.steps,
        stalled=stalled,
        error=error,
    )
