#!/usr/bin/env python3
"""
External collaborators of the workflow nets.

The nets never validate, generate or store anything themselves; they call
out to these. Pass-through defaults let a net run without any of them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Awaitable, Callable, List, Protocol, runtime_checkable

from pydantic import BaseModel, Field

from axiom.feedback import CorrectionFeedback
from axiom.proposals import Proposal
from axiom.validation import ValidationResult

ValidateFn = Callable[[Proposal], Awaitable[ValidationResult]]
RegenerateFn = Callable[[Proposal, List[CorrectionFeedback]], Awaitable[Proposal]]
CommitFn = Callable[[Proposal], Awaitable[None]]


async def accept_all(proposal: Proposal) -> ValidationResult:
    """Validator that finds nothing wrong."""
    return ValidationResult(proposal_id=proposal.id, valid=True)


async def resubmit(proposal: Proposal, feedback: List[CorrectionFeedback]) -> Proposal:
    """Regenerator that returns the same proposal as a new attempt."""
    return proposal.model_copy(update={
        "attempt": proposal.attempt + 1,
        "feedback_history": [*proposal.feedback_history, *feedback],
        "generated_at": datetime.now(timezone.utc).isoformat(),
    })


async def discard(proposal: Proposal) -> None:
    """Committer that writes nowhere."""
    return None


@dataclass
class ValidationCollaborators:
    """The validator, regenerator and committer a validation net calls."""
    validate: ValidateFn = accept_all
    regenerate: RegenerateFn = resubmit
    commit: CommitFn = discard


# ============================================================================
# Council
# ============================================================================

class CouncilPayload(BaseModel):
    """Payload carried through the council pipeline."""

    query: str
    context: str = ""
    context_node_ids: List[str] = Field(default_factory=list)
    generator_response: str = ""
    critic_response: str = ""
    synthesizer_response: str = ""
    has_proposals: bool = False
    notes: List[str] = Field(default_factory=list)


@dataclass
class CouncilSynthesis:
    """What the synthesizer hands back."""
    response: str
    has_proposals: bool
    notes: List[str] = field(default_factory=list)


@runtime_checkable
class CouncilAgents(Protocol):
    """Generator, critic and synthesizer behind the council net."""

    async def generate(self, payload: CouncilPayload) -> str:
        ...

    async def critique(self, payload: CouncilPayload) -> str:
        ...

    async def synthesize(self, payload: CouncilPayload) -> CouncilSynthesis:
        ...
