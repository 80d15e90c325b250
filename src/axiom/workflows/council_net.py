#!/usr/bin/env python3
"""
Council net: a linear generator -> critic -> synthesizer pipeline.

    P_council_query --T_generate--> P_generated --T_critique--> P_council_critiqued
        --T_synthesize--> P_synthesized --T_emit--> P_council_output

T_emit only fires when the synthesizer produced proposals. Without the
optional empty sink such a token stays in P_synthesized; with
``empty_sink=True`` it is discarded into P_council_empty instead.
"""

from __future__ import annotations

import logging
import uuid
from typing import List, Optional, Sequence

from axiom.core.colors import TokenColor
from axiom.core.specs import NetDefinition, PlaceSpec, TransitionContext, TransitionSpec
from axiom.core.tokens import Token, create_token
from axiom.guards.helpers import field, has_min_tokens, named, not_
from axiom.workflows.collaborators import CouncilAgents, CouncilPayload
from axiom.workflows.ids import CouncilPlaceId, CouncilTransitionId

logger = logging.getLogger(__name__)

CRITIC_FAILED_NOTE = "Critic agent failed; proposals passed through without critique"


def council_places(empty_sink: bool = False) -> List[PlaceSpec]:
    places = [
        PlaceSpec(
            id=CouncilPlaceId.P_COUNCIL_QUERY.value,
            name="Council Query",
            description="User query awaiting council processing",
            accepted_colors=frozenset({TokenColor.COUNCIL_QUERY}),
            is_source=True,
        ),
        PlaceSpec(
            id=CouncilPlaceId.P_GENERATED.value,
            name="Generated",
            description="Generator has produced proposals",
            accepted_colors=frozenset({TokenColor.COUNCIL_GENERATED}),
        ),
        PlaceSpec(
            id=CouncilPlaceId.P_COUNCIL_CRITIQUED.value,
            name="Critiqued",
            description="Critic has evaluated the proposals",
            accepted_colors=frozenset({TokenColor.COUNCIL_CRITIQUED}),
        ),
        PlaceSpec(
            id=CouncilPlaceId.P_SYNTHESIZED.value,
            name="Synthesized",
            description="Synthesizer has produced refined proposals",
            accepted_colors=frozenset({TokenColor.COUNCIL_SYNTHESIZED}),
        ),
        PlaceSpec(
            id=CouncilPlaceId.P_COUNCIL_OUTPUT.value,
            name="Council Output",
            description="Final council output",
            accepted_colors=frozenset({TokenColor.COUNCIL_OUTPUT}),
            is_sink=True,
        ),
    ]
    if empty_sink:
        places.append(PlaceSpec(
            id=CouncilPlaceId.P_COUNCIL_EMPTY.value,
            name="Council Empty",
            description="Synthesis produced no proposals",
            accepted_colors=frozenset({TokenColor.COUNCIL_EMPTY}),
            is_sink=True,
        ))
    return places


def has_proposals(tokens: Sequence[Token], context: Optional[TransitionContext] = None) -> bool:
    return bool(tokens) and field(tokens[0].payload, "has_proposals") is True


HAS_TOKENS = named("has_tokens", "Has tokens", has_min_tokens(1))


def _stage(
    transition_id: CouncilTransitionId,
    name: str,
    source: CouncilPlaceId,
    target: CouncilPlaceId,
    action,
    guards=None,
    priority: int = 10,
) -> TransitionSpec:
    return TransitionSpec(
        id=transition_id.value,
        name=name,
        input_places=[source.value],
        output_places=[target.value],
        guards=guards or [HAS_TOKENS],
        action=action,
        priority=priority,
    )


def create_council_net(agents: CouncilAgents, empty_sink: bool = False) -> NetDefinition:
    async def generate(tokens: List[Token], context: TransitionContext) -> List[Token]:
        token = tokens[0]
        payload: CouncilPayload = token.payload
        payload.generator_response = await agents.generate(payload)
        token.color = TokenColor.COUNCIL_GENERATED
        return [token]

    async def critique(tokens: List[Token], context: TransitionContext) -> List[Token]:
        token = tokens[0]
        payload: CouncilPayload = token.payload
        try:
            payload.critic_response = await agents.critique(payload)
        except Exception:
            # The critic is advisory; its failure must not lose the proposals
            logger.exception(f"Council critic failed for {token.id}; passing proposals through")
            payload.critic_response = f"[{CRITIC_FAILED_NOTE}]"
            payload.notes = [*payload.notes, CRITIC_FAILED_NOTE]
        token.color = TokenColor.COUNCIL_CRITIQUED
        return [token]

    async def synthesize(tokens: List[Token], context: TransitionContext) -> List[Token]:
        token = tokens[0]
        payload: CouncilPayload = token.payload
        synthesis = await agents.synthesize(payload)
        payload.synthesizer_response = synthesis.response
        payload.has_proposals = synthesis.has_proposals
        payload.notes = [*payload.notes, *synthesis.notes]
        token.color = TokenColor.COUNCIL_SYNTHESIZED
        return [token]

    def emit(tokens: List[Token], context: TransitionContext) -> List[Token]:
        token = tokens[0]
        token.color = TokenColor.COUNCIL_OUTPUT
        return [token]

    def discard_empty(tokens: List[Token], context: TransitionContext) -> List[Token]:
        token = tokens[0]
        token.color = TokenColor.COUNCIL_EMPTY
        return [token]

    transitions = [
        _stage(CouncilTransitionId.T_GENERATE, "Generate",
               CouncilPlaceId.P_COUNCIL_QUERY, CouncilPlaceId.P_GENERATED, generate),
        _stage(CouncilTransitionId.T_CRITIQUE, "Critique",
               CouncilPlaceId.P_GENERATED, CouncilPlaceId.P_COUNCIL_CRITIQUED, critique),
        _stage(CouncilTransitionId.T_SYNTHESIZE, "Synthesize",
               CouncilPlaceId.P_COUNCIL_CRITIQUED, CouncilPlaceId.P_SYNTHESIZED, synthesize),
        _stage(CouncilTransitionId.T_EMIT, "Emit",
               CouncilPlaceId.P_SYNTHESIZED, CouncilPlaceId.P_COUNCIL_OUTPUT, emit,
               guards=[HAS_TOKENS, named("has_proposals", "Synthesized proposals are non-empty", has_proposals)]),
    ]
    if empty_sink:
        transitions.append(_stage(
            CouncilTransitionId.T_DISCARD_EMPTY, "Discard Empty",
            CouncilPlaceId.P_SYNTHESIZED, CouncilPlaceId.P_COUNCIL_EMPTY, discard_empty,
            guards=[HAS_TOKENS, named("no_proposals", "Synthesized proposals are empty", not_(has_proposals))],
            priority=5,
        ))

    return NetDefinition(
        name="council",
        places=council_places(empty_sink),
        transitions=transitions,
        source_place=CouncilPlaceId.P_COUNCIL_QUERY.value,
    )


def create_council_token(payload: CouncilPayload, correlation_id: Optional[str] = None) -> Token:
    """Council tokens never retry."""
    return create_token(
        payload,
        TokenColor.COUNCIL_QUERY,
        current_place=CouncilPlaceId.P_COUNCIL_QUERY.value,
        correlation_id=correlation_id or str(uuid.uuid4()),
        max_retries=0,
    )
