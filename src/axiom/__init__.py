"""
AXIOM - a colored Petri net engine for governing AI knowledge-graph proposals.

Proposals enter a workflow net as tokens and are validated, critiqued,
retried with corrective feedback, escalated or committed. Every move is
recorded on the token.
"""

import logging

from axiom.core import (
    AxiomEngine,
    AxiomError,
    NamedGuard,
    NetConfigurationError,
    NetDefinition,
    PlaceSpec,
    Token,
    TokenColor,
    TokenRejectedError,
    TokenRoutingError,
    TransitionContext,
    TransitionSpec,
    UnknownPlaceError,
    create_token,
)
from axiom.events import AxiomEvent, EventBridge, EventType
from axiom.feedback import CorrectionFeedback, FeedbackBuilder, format_feedback_for_llm
from axiom.proposals import EdgeProposal, NodeProposal, Proposal
from axiom.validation import ValidationResult, Violation
from axiom.stores import InMemoryTokenStore, JsonlTokenStore
from axiom.config import AxiomSettings, create_default_engine, prune_token_store

# Library should not configure root logging; be quiet by default
logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "AxiomEngine",
    "AxiomError",
    "AxiomEvent",
    "AxiomSettings",
    "CorrectionFeedback",
    "EdgeProposal",
    "EventBridge",
    "EventType",
    "FeedbackBuilder",
    "InMemoryTokenStore",
    "JsonlTokenStore",
    "NamedGuard",
    "NetConfigurationError",
    "NetDefinition",
    "NodeProposal",
    "PlaceSpec",
    "Proposal",
    "Token",
    "TokenColor",
    "TokenRejectedError",
    "TokenRoutingError",
    "TransitionContext",
    "TransitionSpec",
    "UnknownPlaceError",
    "ValidationResult",
    "Violation",
    "create_default_engine",
    "create_token",
    "format_feedback_for_llm",
    "prune_token_store",
]
