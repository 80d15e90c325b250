#!/usr/bin/env python3
"""
Place and transition identifiers for the built-in workflow nets.
"""

from enum import Enum


class PlaceId(str, Enum):
    P_PROPOSALS = "P_proposals"
    P_VALIDATING = "P_validating"
    P_DECIDING = "P_deciding"
    P_VERIFIED = "P_verified"
    P_FEEDBACK = "P_feedback"
    P_COMMITTED = "P_committed"
    P_REJECTED = "P_rejected"
    # Critique extension
    P_CRITIQUED = "P_critiqued"
    P_ESCALATED = "P_escalated"


class TransitionId(str, Enum):
    T_VALIDATE = "T_validate"
    T_ACCEPT = "T_accept"
    T_PREPARE_RETRY = "T_prepare_retry"
    T_REGENERATE = "T_regenerate"
    T_REJECT = "T_reject"
    T_COMMIT = "T_commit"
    # Critique extension
    T_CRITIQUE = "T_critique"
    T_SKIP_CRITIQUE = "T_skip_critique"
    T_CRITIQUE_ACCEPT = "T_critique_accept"
    T_CRITIQUE_ESCALATE = "T_critique_escalate"
    T_CRITIQUE_REJECT = "T_critique_reject"


class CouncilPlaceId(str, Enum):
    P_COUNCIL_QUERY = "P_council_query"
    P_GENERATED = "P_generated"
    P_COUNCIL_CRITIQUED = "P_council_critiqued"
    P_SYNTHESIZED = "P_synthesized"
    P_COUNCIL_OUTPUT = "P_council_output"
    P_COUNCIL_EMPTY = "P_council_empty"


class CouncilTransitionId(str, Enum):
    T_GENERATE = "T_generate"
    T_CRITIQUE = "T_critique"
    T_SYNTHESIZE = "T_synthesize"
    T_EMIT = "T_emit"
    T_DISCARD_EMPTY = "T_discard_empty"
