#!/usr/bin/env python3
"""
Validation net.

    P_proposals --T_validate--> P_deciding --T_accept--> P_verified --T_commit--> P_committed
                                    |   \\
                       T_prepare_retry   T_reject --> P_rejected
                                    v
                               P_feedback --T_regenerate--> P_proposals

Each failed validation turns its violations into corrective feedback, which
accumulates on the token and is handed to the regenerator in full. Once the
retry budget is spent, an erroneous proposal is rejected.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from axiom.core.colors import TokenColor
from axiom.core.specs import NetDefinition, PlaceSpec, TransitionContext, TransitionSpec
from axiom.core.tokens import Token, ValidationRecord, create_token
from axiom.feedback import FeedbackBuilder
from axiom.guards.decision import has_errors, is_valid, token_can_retry, token_should_escalate
from axiom.guards.helpers import has_min_tokens, named
from axiom.proposals import Proposal, ValidatedProposal
from axiom.validation import ValidationSeverity
from axiom.workflows.collaborators import ValidationCollaborators
from axiom.workflows.ids import PlaceId, TransitionId

logger = logging.getLogger(__name__)


# ============================================================================
# Places
# ============================================================================

def validation_places() -> List[PlaceSpec]:
    return [
        PlaceSpec(
            id=PlaceId.P_PROPOSALS.value,
            name="Proposals",
            description="Incoming proposals from the generator",
            accepted_colors=frozenset({TokenColor.PROPOSAL}),
            is_source=True,
        ),
        PlaceSpec(
            id=PlaceId.P_VALIDATING.value,
            name="Validating",
            description="Under validation",
            accepted_colors=frozenset({TokenColor.VALIDATING}),
        ),
        PlaceSpec(
            id=PlaceId.P_DECIDING.value,
            name="Deciding",
            description="Decision point: accept, retry or reject",
            accepted_colors=frozenset({TokenColor.DECIDING}),
        ),
        PlaceSpec(
            id=PlaceId.P_VERIFIED.value,
            name="Verified",
            description="Passed validation, awaiting commit",
            accepted_colors=frozenset({TokenColor.VERIFIED}),
        ),
        PlaceSpec(
            id=PlaceId.P_FEEDBACK.value,
            name="Feedback",
            description="Awaiting regeneration with corrective feedback",
            accepted_colors=frozenset({TokenColor.FEEDBACK}),
        ),
        PlaceSpec(
            id=PlaceId.P_COMMITTED.value,
            name="Committed",
            description="Written to the knowledge graph",
            accepted_colors=frozenset({TokenColor.COMMITTED}),
            is_sink=True,
        ),
        PlaceSpec(
            id=PlaceId.P_REJECTED.value,
            name="Rejected",
            description="Retries exhausted",
            accepted_colors=frozenset({TokenColor.REJECTED}),
            is_sink=True,
        ),
    ]


HAS_TOKENS = named("has_tokens", "Has tokens", has_min_tokens(1))


def strip_validation(payload: Any) -> Any:
    """The bare proposal inside a decision-stage payload."""
    if isinstance(payload, ValidatedProposal):
        return payload.to_proposal()
    return payload


# ============================================================================
# Transitions
# ============================================================================

def t_validate(collaborators: ValidationCollaborators) -> TransitionSpec:
    async def action(tokens: List[Token], context: TransitionContext) -> List[Token]:
        token = tokens[0]
        proposal: Proposal = token.payload
        result = await collaborators.validate(proposal)

        # Unique rule ids in the order the validator reported them
        rules = list(dict.fromkeys(v.rule_id for v in result.violations))
        failed = [
            r for r in rules
            if any(v.rule_id == r and v.severity == ValidationSeverity.ERROR for v in result.violations)
        ]
        per_rule_ms = result.duration_ms / max(len(rules), 1)

        meta = token.meta
        meta.validation_trace.extend(
            ValidationRecord(
                rule_id=r,
                passed=r not in failed,
                checked_at=result.validated_at,
                duration_ms=per_rule_ms,
            )
            for r in rules
        )
        meta.constraints_checked.extend(rules)
        meta.constraints_passed.extend(r for r in rules if r not in failed)
        meta.constraints_failed.extend(failed)

        token.payload = proposal.with_validation(result)
        token.color = TokenColor.DECIDING
        logger.debug(
            f"{token.id}: valid={result.valid}, {len(result.violations)} violation(s)"
        )
        return [token]

    return TransitionSpec(
        id=TransitionId.T_VALIDATE.value,
        name="Validate",
        description="Run the proposal through the validator",
        input_places=[PlaceId.P_PROPOSALS.value],
        output_places=[PlaceId.P_DECIDING.value],
        guards=[HAS_TOKENS],
        action=action,
        priority=10,
    )


def t_accept() -> TransitionSpec:
    def action(tokens: List[Token], context: TransitionContext) -> List[Token]:
        token = tokens[0]
        token.color = TokenColor.VERIFIED
        return [token]

    return TransitionSpec(
        id=TransitionId.T_ACCEPT.value,
        name="Accept",
        description="Proposal passed validation",
        input_places=[PlaceId.P_DECIDING.value],
        output_places=[PlaceId.P_VERIFIED.value],
        guards=[HAS_TOKENS, named("is_valid", "Is valid", is_valid)],
        action=action,
        priority=20,
    )


def t_prepare_retry() -> TransitionSpec:
    def action(tokens: List[Token], context: TransitionContext) -> List[Token]:
        token = tokens[0]
        payload: ValidatedProposal = token.payload
        attempt = token.retry_count + 1

        new_feedback = FeedbackBuilder.from_violations(
            payload.validation_result.violations,
            attempt,
            token.max_retries,
        )
        # Accumulated, never replaced
        token.feedback_history = [*token.feedback_history, *new_feedback]
        payload.feedback_history = list(token.feedback_history)
        payload.attempt = attempt

        token.color = TokenColor.FEEDBACK
        return [token]

    return TransitionSpec(
        id=TransitionId.T_PREPARE_RETRY.value,
        name="Prepare Retry",
        description="Build corrective feedback for regeneration",
        input_places=[PlaceId.P_DECIDING.value],
        output_places=[PlaceId.P_FEEDBACK.value],
        guards=[
            HAS_TOKENS,
            named("has_errors", "Has errors", has_errors),
            named("can_retry", "Can retry", token_can_retry),
        ],
        action=action,
        priority=15,
    )


def t_regenerate(collaborators: ValidationCollaborators) -> TransitionSpec:
    async def action(tokens: List[Token], context: TransitionContext) -> List[Token]:
        token = tokens[0]
        history = list(token.feedback_history)

        regenerated = await collaborators.regenerate(strip_validation(token.payload), history)
        token.payload = regenerated.model_copy(update={
            "feedback_history": history,
            "correlation_id": token.correlation_id,
        })
        token.retry_count += 1
        token.color = TokenColor.PROPOSAL
        return [token]

    return TransitionSpec(
        id=TransitionId.T_REGENERATE.value,
        name="Regenerate",
        description="Request a new proposal with the accumulated feedback",
        input_places=[PlaceId.P_FEEDBACK.value],
        output_places=[PlaceId.P_PROPOSALS.value],
        guards=[HAS_TOKENS],
        action=action,
        priority=10,
    )


def t_reject() -> TransitionSpec:
    def action(tokens: List[Token], context: TransitionContext) -> List[Token]:
        token = tokens[0]
        token.color = TokenColor.REJECTED
        return [token]

    return TransitionSpec(
        id=TransitionId.T_REJECT.value,
        name="Reject",
        description="Retries exhausted with errors remaining",
        input_places=[PlaceId.P_DECIDING.value],
        output_places=[PlaceId.P_REJECTED.value],
        guards=[
            HAS_TOKENS,
            named("has_errors", "Has errors", has_errors),
            named("cannot_retry", "Cannot retry", token_should_escalate),
        ],
        action=action,
        priority=10,
    )


def t_commit(collaborators: ValidationCollaborators) -> TransitionSpec:
    async def action(tokens: List[Token], context: TransitionContext) -> List[Token]:
        token = tokens[0]
        await collaborators.commit(strip_validation(token.payload))
        token.color = TokenColor.COMMITTED
        return [token]

    return TransitionSpec(
        id=TransitionId.T_COMMIT.value,
        name="Commit",
        description="Write the verified proposal to the knowledge graph",
        input_places=[PlaceId.P_VERIFIED.value],
        output_places=[PlaceId.P_COMMITTED.value],
        guards=[HAS_TOKENS],
        action=action,
        priority=10,
    )


# ============================================================================
# Factory
# ============================================================================

def create_validation_net(collaborators: Optional[ValidationCollaborators] = None) -> NetDefinition:
    collaborators = collaborators or ValidationCollaborators()
    return NetDefinition(
        name="validation",
        places=validation_places(),
        transitions=[
            t_validate(collaborators),
            t_accept(),
            t_prepare_retry(),
            t_regenerate(collaborators),
            t_reject(),
            t_commit(collaborators),
        ],
        source_place=PlaceId.P_PROPOSALS.value,
    )


def create_proposal_token(proposal: Proposal, max_retries: int = 3) -> Token:
    """Wrap a proposal in a token for the proposals place."""
    return create_token(
        proposal,
        TokenColor.PROPOSAL,
        current_place=PlaceId.P_PROPOSALS.value,
        correlation_id=proposal.correlation_id,
        max_retries=max_retries,
    )
