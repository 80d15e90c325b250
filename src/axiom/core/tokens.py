#!/usr/bin/env python3
"""
Tokens and their audit envelope.

Every token carries its complete history: each transition that moved it
appends a TransitionRecord with a mandatory reason, and corrective feedback
only ever accumulates.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from axiom.core.colors import TokenColor
from axiom.critique.models import CritiqueResult
from axiom.feedback import CorrectionFeedback


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class TransitionRecord(BaseModel):
    """A single transition firing, as seen by the tokens it produced."""

    model_config = ConfigDict(frozen=True)

    transition_id: str
    fired_at: str
    from_place: str
    to_place: str
    duration_ms: float = 0.0
    guard_results: Dict[str, bool] = Field(default_factory=dict)
    reason: str

    @field_validator("reason")
    @classmethod
    def _reason_required(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("every transition record needs a non-empty reason")
        return value


class ValidationRecord(BaseModel):
    """Outcome of one validation rule for one attempt."""

    rule_id: str
    passed: bool
    checked_at: str
    duration_ms: float = 0.0
    details: Any = None


class TokenMetadata(BaseModel):
    """Audit envelope; always inspectable."""

    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    correlation_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    created_at: str = Field(default_factory=_utc_now)
    updated_at: Optional[str] = None
    current_place: str
    previous_place: Optional[str] = None
    transition_history: List[TransitionRecord] = Field(default_factory=list)

    generation_model: Optional[str] = None
    generation_latency_ms: Optional[float] = None

    validation_trace: List[ValidationRecord] = Field(default_factory=list)
    constraints_checked: List[str] = Field(default_factory=list)
    constraints_passed: List[str] = Field(default_factory=list)
    constraints_failed: List[str] = Field(default_factory=list)

    critique_result: Optional[CritiqueResult] = None
    critique_duration_ms: Optional[float] = None
    critique_skipped: Optional[bool] = None
    critique_skip_reason: Optional[str] = None
    # Probabilistic trigger draw, taken once so both critique guards agree
    critique_sample: Optional[float] = None


class Token(BaseModel):
    """A typed token carrying a payload through the net."""

    model_config = ConfigDict(validate_assignment=True)

    payload: Any
    color: TokenColor
    retry_count: int = Field(default=0, ge=0)
    max_retries: int = Field(default=3, ge=0)
    feedback_history: List[CorrectionFeedback] = Field(default_factory=list)
    meta: TokenMetadata

    @property
    def id(self) -> str:
        return self.meta.id

    @property
    def correlation_id(self) -> str:
        return self.meta.correlation_id

    def move_to(self, place_id: str, at: Optional[str] = None) -> None:
        """Record that this token now sits in ``place_id``.

        Args:
            place_id: Destination place
            at: ISO timestamp of the move; the current UTC time when omitted
        """
        self.meta.previous_place = self.meta.current_place
        self.meta.current_place = place_id
        self.meta.updated_at = at or _utc_now()

    def __repr__(self) -> str:
        return (
            f"Token(id={self.meta.id!r}, color={self.color.value!r}, "
            f"place={self.meta.current_place!r}, retry={self.retry_count}/{self.max_retries})"
        )


def create_token(
    payload: Any,
    color: TokenColor,
    current_place: str,
    correlation_id: Optional[str] = None,
    max_retries: int = 3,
) -> Token:
    """Create a token with a fresh id and an empty audit trail."""
    meta = TokenMetadata(current_place=current_place)
    if correlation_id is not None:
        meta.correlation_id = correlation_id
    return Token(
        payload=payload,
        color=color,
        max_retries=max_retries,
        meta=meta,
    )
