#!/usr/bin/env python3
"""
Critique extension of the validation net.

Replaces T_commit with a Devil's Advocate stage between P_verified and the
sinks:

    P_verified --T_critique--> P_critiqued --T_critique_accept--> P_committed
         |                          |------T_critique_escalate--> P_escalated
         |                          '------T_critique_reject----> P_rejected
         '--T_skip_critique--> P_committed
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional

from axiom.core.colors import TokenColor
from axiom.core.specs import NetDefinition, PlaceSpec, TransitionContext, TransitionSpec
from axiom.core.tokens import Token
from axiom.critique.agent import CritiqueAgent
from axiom.critique.models import CritiqueBehaviorConfig, CritiqueTriggerConfig, adjust_confidence
from axiom.events.types import EventType
from axiom.guards.critique import critique_rejected, reconsider, should_critique, survived
from axiom.guards.helpers import named, not_
from axiom.proposals import ValidatedProposal
from axiom.workflows.collaborators import ValidationCollaborators
from axiom.workflows.ids import PlaceId, TransitionId
from axiom.workflows.validation_net import HAS_TOKENS, create_validation_net, strip_validation

logger = logging.getLogger(__name__)

SKIP_REASON = "trigger-conditions-not-met"


def critique_places() -> List[PlaceSpec]:
    return [
        PlaceSpec(
            id=PlaceId.P_CRITIQUED.value,
            name="Critiqued",
            description="Critiqued, awaiting routing decision",
            accepted_colors=frozenset({TokenColor.CRITIQUED}),
        ),
        PlaceSpec(
            id=PlaceId.P_ESCALATED.value,
            name="Escalated",
            description="Critique raised concerns; needs a human decision",
            accepted_colors=frozenset({TokenColor.ESCALATED}),
            is_sink=True,
        ),
    ]


def _emit(context: Optional[TransitionContext], event_type: EventType, token: Token, **data: Any) -> None:
    if context is None or context.engine is None:
        return
    context.engine.emit(event_type, {
        "token_id": token.id,
        "correlation_id": token.correlation_id,
        **data,
    })


def apply_survival(proposal: Any, survival_score: float) -> Any:
    """Scale every node and edge confidence by the survival score."""
    return proposal.model_copy(update={
        "nodes": [
            n.model_copy(update={"confidence": adjust_confidence(n.confidence, survival_score)})
            for n in proposal.nodes
        ],
        "edges": [
            e.model_copy(update={"confidence": adjust_confidence(e.confidence, survival_score)})
            for e in proposal.edges
        ],
    })


# ============================================================================
# Transitions
# ============================================================================

def t_critique(
    agent: CritiqueAgent,
    trigger: CritiqueTriggerConfig,
    enabled: bool,
    rng: Optional[Callable[[], float]] = None,
) -> TransitionSpec:
    async def action(tokens: List[Token], context: TransitionContext) -> List[Token]:
        token = tokens[0]
        _emit(context, EventType.CRITIQUE_STARTED, token)

        result = await agent.critique(token)
        token.meta.critique_result = result
        token.meta.critique_duration_ms = result.duration_ms
        token.color = TokenColor.CRITIQUED

        _emit(
            context, EventType.CRITIQUE_COMPLETED, token,
            survival_score=result.survival_score,
            recommendation=result.recommendation.value,
        )
        return [token]

    return TransitionSpec(
        id=TransitionId.T_CRITIQUE.value,
        name="Critique",
        description="Run the Devil's Advocate agent",
        input_places=[PlaceId.P_VERIFIED.value],
        output_places=[PlaceId.P_CRITIQUED.value],
        guards=[
            HAS_TOKENS,
            named("should_critique", "Should critique", should_critique(trigger, enabled, rng)),
        ],
        action=action,
        priority=20,
    )


def t_skip_critique(
    collaborators: ValidationCollaborators,
    trigger: CritiqueTriggerConfig,
    enabled: bool,
    rng: Optional[Callable[[], float]] = None,
) -> TransitionSpec:
    async def action(tokens: List[Token], context: TransitionContext) -> List[Token]:
        token = tokens[0]
        await collaborators.commit(strip_validation(token.payload))
        token.meta.critique_skipped = True
        token.meta.critique_skip_reason = SKIP_REASON
        token.color = TokenColor.COMMITTED
        _emit(context, EventType.CRITIQUE_SKIPPED, token, reason=SKIP_REASON)
        return [token]

    return TransitionSpec(
        id=TransitionId.T_SKIP_CRITIQUE.value,
        name="Skip Critique",
        description="Bypass critique and commit directly",
        input_places=[PlaceId.P_VERIFIED.value],
        output_places=[PlaceId.P_COMMITTED.value],
        guards=[
            HAS_TOKENS,
            named("skip_critique", "Skip critique", not_(should_critique(trigger, enabled, rng))),
        ],
        action=action,
        priority=15,
    )


def t_critique_accept(
    collaborators: ValidationCollaborators,
    behavior: CritiqueBehaviorConfig,
) -> TransitionSpec:
    async def action(tokens: List[Token], context: TransitionContext) -> List[Token]:
        token = tokens[0]
        result = token.meta.critique_result
        payload = token.payload

        if result is not None and isinstance(payload, ValidatedProposal):
            payload = apply_survival(payload, result.survival_score)
            token.payload = payload

        await collaborators.commit(strip_validation(payload))
        token.color = TokenColor.COMMITTED
        return [token]

    return TransitionSpec(
        id=TransitionId.T_CRITIQUE_ACCEPT.value,
        name="Critique Accept",
        description="Survived critique; commit with adjusted confidence",
        input_places=[PlaceId.P_CRITIQUED.value],
        output_places=[PlaceId.P_COMMITTED.value],
        guards=[HAS_TOKENS, named("survived", "Survived critique", survived(behavior))],
        action=action,
        priority=20,
    )


def t_critique_escalate(behavior: CritiqueBehaviorConfig) -> TransitionSpec:
    def action(tokens: List[Token], context: TransitionContext) -> List[Token]:
        token = tokens[0]
        token.color = TokenColor.ESCALATED
        _emit(
            context, EventType.CRITIQUE_ESCALATED, token,
            survival_score=token.meta.critique_result.survival_score,
        )
        return [token]

    return TransitionSpec(
        id=TransitionId.T_CRITIQUE_ESCALATE.value,
        name="Critique Escalate",
        description="Critique raised concerns; hand to a human",
        input_places=[PlaceId.P_CRITIQUED.value],
        output_places=[PlaceId.P_ESCALATED.value],
        guards=[HAS_TOKENS, named("reconsider", "Reconsider", reconsider(behavior))],
        action=action,
        priority=15,
    )


def t_critique_reject(behavior: CritiqueBehaviorConfig) -> TransitionSpec:
    def action(tokens: List[Token], context: TransitionContext) -> List[Token]:
        token = tokens[0]
        token.color = TokenColor.REJECTED
        _emit(
            context, EventType.CRITIQUE_REJECTED, token,
            survival_score=token.meta.critique_result.survival_score,
        )
        return [token]

    return TransitionSpec(
        id=TransitionId.T_CRITIQUE_REJECT.value,
        name="Critique Reject",
        description="Survival score below the reject threshold",
        input_places=[PlaceId.P_CRITIQUED.value],
        output_places=[PlaceId.P_REJECTED.value],
        guards=[HAS_TOKENS, named("critique_rejected", "Critique rejected", critique_rejected(behavior))],
        action=action,
        priority=10,
    )


# ============================================================================
# Factories
# ============================================================================

def extend_with_critique(
    base: NetDefinition,
    critique_agent: CritiqueAgent,
    trigger: Optional[CritiqueTriggerConfig] = None,
    behavior: Optional[CritiqueBehaviorConfig] = None,
    enabled: bool = True,
    collaborators: Optional[ValidationCollaborators] = None,
    rng: Optional[Callable[[], float]] = None,
) -> NetDefinition:
    """Return a copy of ``base`` with T_commit replaced by the critique stage.

    ``collaborators.commit`` is what the critique commit paths call; pass
    the same collaborators the base net was built with.
    """
    trigger = trigger or CritiqueTriggerConfig()
    behavior = behavior or CritiqueBehaviorConfig()
    collaborators = collaborators or ValidationCollaborators()

    transitions = [t for t in base.transitions if t.id != TransitionId.T_COMMIT.value]
    transitions += [
        t_critique(critique_agent, trigger, enabled, rng),
        t_skip_critique(collaborators, trigger, enabled, rng),
        t_critique_accept(collaborators, behavior),
        t_critique_escalate(behavior),
        t_critique_reject(behavior),
    ]
    return NetDefinition(
        name=f"{base.name}+critique",
        places=[*base.places, *critique_places()],
        transitions=transitions,
        source_place=base.source_place,
    )


def create_critique_net(
    critique_agent: CritiqueAgent,
    collaborators: Optional[ValidationCollaborators] = None,
    trigger: Optional[CritiqueTriggerConfig] = None,
    behavior: Optional[CritiqueBehaviorConfig] = None,
    enabled: bool = True,
    rng: Optional[Callable[[], float]] = None,
) -> NetDefinition:
    """Validation net plus critique, sharing one set of collaborators."""
    collaborators = collaborators or ValidationCollaborators()
    return extend_with_critique(
        create_validation_net(collaborators),
        critique_agent,
        trigger=trigger,
        behavior=behavior,
        enabled=enabled,
        collaborators=collaborators,
        rng=rng,
    )
