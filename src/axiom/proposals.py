#!/usr/bin/env python3
"""
Knowledge-graph proposals.

A proposal is a batch of AI-suggested nodes and edges. It is the payload
carried by tokens through the validation and critique nets.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from axiom.feedback import CorrectionFeedback
from axiom.validation import ValidationResult


class ProposalStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class NodeProposal(BaseModel):
    """A suggested note in the knowledge graph."""

    id: str = ""
    title: str = ""
    content: str = ""
    type: Optional[str] = None
    suggested_connections: List[str] = Field(default_factory=list)
    confidence: float = 0.0
    status: ProposalStatus = ProposalStatus.PENDING


class EdgeProposal(BaseModel):
    """A suggested connection between two notes.

    Endpoints may be given by id, by title, or both; id form wins when
    both ends carry one.
    """

    id: str = ""
    from_title: str = ""
    to_title: str = ""
    from_id: Optional[str] = None
    to_id: Optional[str] = None
    label: str = ""
    rationale: str = ""
    confidence: float = 0.0
    status: ProposalStatus = ProposalStatus.PENDING


class Proposal(BaseModel):
    """A batch of suggested nodes and edges from one generation attempt."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    correlation_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    nodes: List[NodeProposal] = Field(default_factory=list)
    edges: List[EdgeProposal] = Field(default_factory=list)
    attempt: int = 1
    feedback_history: List[CorrectionFeedback] = Field(default_factory=list)
    generated_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    generated_by: str = "unknown"

    def with_validation(self, result: ValidationResult) -> "ValidatedProposal":
        """Attach a validation result, producing the decision-stage payload."""
        data = self.model_dump()
        data["validation_result"] = result
        return ValidatedProposal.model_validate(data)


class ValidatedProposal(Proposal):
    """A proposal together with the validator's verdict on it."""

    validation_result: ValidationResult

    def to_proposal(self) -> Proposal:
        """Strip the validation result again (what gets committed)."""
        return Proposal.model_validate(self.model_dump(exclude={"validation_result"}))
