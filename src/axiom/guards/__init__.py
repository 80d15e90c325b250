"""
Guard library.

Pure synchronous predicates over token sets, grouped by validation level.
"""

from axiom.guards.constraints import no_duplicate_edges, no_self_loops, referenced_nodes_exist
from axiom.guards.critique import critique_rejected, max_confidence, reconsider, should_critique, survived
from axiom.guards.decision import (
    all_levels_passed,
    can_retry,
    has_errors,
    has_warnings_only,
    is_valid,
    level_passed,
    max_steps_reached,
    should_escalate,
    token_can_retry,
    token_should_escalate,
)
from axiom.guards.helpers import all_of, any_of, has_color, has_min_tokens, named, not_
from axiom.guards.schema import edges_have_required_fields, nodes_have_required_fields, schema_valid
from axiom.guards.semantic import content_coherent, not_duplicate, semantically_relevant

__all__ = [
    "all_levels_passed",
    "all_of",
    "any_of",
    "can_retry",
    "content_coherent",
    "critique_rejected",
    "edges_have_required_fields",
    "has_color",
    "has_errors",
    "has_min_tokens",
    "has_warnings_only",
    "is_valid",
    "level_passed",
    "max_confidence",
    "max_steps_reached",
    "named",
    "no_duplicate_edges",
    "no_self_loops",
    "nodes_have_required_fields",
    "not_",
    "not_duplicate",
    "reconsider",
    "referenced_nodes_exist",
    "schema_valid",
    "semantically_relevant",
    "should_critique",
    "should_escalate",
    "survived",
    "token_can_retry",
    "token_should_escalate",
]
