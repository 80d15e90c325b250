#!/usr/bin/env python3
"""
Color sets for the AXIOM net.

A token's color is its semantic type tag. Places declare which colors they
accept and transitions route output tokens by color.
"""

from enum import Enum


class TokenColor(str, Enum):
    """Finite set of token colors."""

    # Validation / critique nets
    PROPOSAL = "proposal"
    GENERATING = "generating"
    VALIDATING = "validating"
    DECIDING = "deciding"
    VERIFIED = "verified"
    FEEDBACK = "feedback"
    CRITIQUED = "critiqued"
    COMMITTED = "committed"
    REJECTED = "rejected"
    ESCALATED = "escalated"

    # Council net
    COUNCIL_QUERY = "council_query"
    COUNCIL_GENERATED = "council_generated"
    COUNCIL_CRITIQUED = "council_critiqued"
    COUNCIL_SYNTHESIZED = "council_synthesized"
    COUNCIL_OUTPUT = "council_output"
    COUNCIL_EMPTY = "council_empty"


# Terminal states of the validation workflow
SINK_COLORS = frozenset({TokenColor.COMMITTED, TokenColor.REJECTED})

# In-flight states of the validation workflow
ACTIVE_COLORS = frozenset({
    TokenColor.PROPOSAL,
    TokenColor.GENERATING,
    TokenColor.VALIDATING,
    TokenColor.DECIDING,
    TokenColor.FEEDBACK,
})
