#!/usr/bin/env python3
"""
Tests for corrective feedback construction and LLM formatting.
"""

import pytest

from axiom.feedback import (
    CorrectionAction,
    CorrectionSuggestion,
    FeedbackBuilder,
    format_feedback_for_llm,
    map_fix_type_to_action,
)
from axiom.validation import ValidationSeverity, ViolationFixType


# =============================================================================
# Fix type mapping
# =============================================================================


@pytest.mark.parametrize("fix_type,action", [
    (ViolationFixType.DELETE_CONNECTION, CorrectionAction.REMOVE),
    (ViolationFixType.DELETE_ENTITY, CorrectionAction.REMOVE),
    (ViolationFixType.CREATE_CONNECTION, CorrectionAction.MODIFY),
    (ViolationFixType.UPDATE_PROPERTY, CorrectionAction.MODIFY),
    (ViolationFixType.MANUAL, CorrectionAction.REPHRASE),
    ("split_entity", CorrectionAction.MODIFY),
])
def test_map_fix_type_to_action(fix_type, action):
    assert map_fix_type_to_action(fix_type) == action


# =============================================================================
# Builder
# =============================================================================


class TestFeedbackBuilder:

    def test_from_violation(self, make_violation):
        feedback = FeedbackBuilder.from_violation(make_violation("self-loop"), 1, 3)

        assert feedback.rule_id == "self-loop"
        assert feedback.constraint == "Connections cannot link a note to itself"
        assert feedback.level == 2
        assert feedback.severity == ValidationSeverity.ERROR
        assert feedback.expected == "source != target"
        assert feedback.actual == "e1"
        assert feedback.suggestion.action == CorrectionAction.REMOVE
        assert feedback.attempt_number == 1
        assert feedback.max_attempts == 3

    def test_offending_value_preferred_over_focus(self, make_violation):
        violation = make_violation("self-loop").model_copy(update={"offending_value": "n0 -> n0"})
        assert FeedbackBuilder.from_violation(violation, 1, 3).actual == "n0 -> n0"

    def test_unknown_rule(self, make_violation):
        feedback = FeedbackBuilder.from_violation(make_violation("mystery-rule"), 2, 3)
        assert feedback.constraint == "Constraint: mystery-rule"
        assert feedback.level == 2
        # Falls back to the suggestion text
        assert feedback.expected == "Remove the self-referencing connection"

    def test_no_suggestion(self, make_violation):
        feedback = FeedbackBuilder.from_violation(make_violation("mystery-rule", fix_type=None), 1, 3)
        assert feedback.suggestion is None
        assert feedback.expected is None

    @pytest.mark.parametrize("rule_id,level", [
        ("schema-missing-title", 1),
        ("semantic-drift", 3),
        ("orphan-note", 2),
        ("anything-else", 2),
    ])
    def test_infer_level(self, rule_id, level):
        assert FeedbackBuilder.infer_level(rule_id) == level

    def test_from_violations_preserves_order(self, make_violation):
        violations = [make_violation("self-loop"), make_violation("orphan-note", "warning")]
        feedback = FeedbackBuilder.from_violations(violations, 2, 3)
        assert [f.rule_id for f in feedback] == ["self-loop", "orphan-note"]
        assert all(f.attempt_number == 2 for f in feedback)

    def test_custom(self):
        feedback = FeedbackBuilder.custom(
            "manual-review", "Reviewer asked for sources", attempt_number=1, max_attempts=3,
        )
        assert feedback.level == 2
        assert feedback.severity == ValidationSeverity.ERROR
        assert feedback.constraint == "Reviewer asked for sources"


# =============================================================================
# Formatting
# =============================================================================


class TestFormatting:

    def test_empty(self):
        assert format_feedback_for_llm([]) == ""

    def test_errors_before_warnings(self, make_violation):
        feedback = FeedbackBuilder.from_violations(
            [make_violation("weakly-connected", "warning"), make_violation("self-loop")], 1, 3,
        )
        text = format_feedback_for_llm(feedback)

        assert text.startswith("## Validation Feedback from Previous Attempt")
        assert "### Errors (1) - Must Fix" in text
        assert "### Warnings (1) - Should Fix" in text
        assert text.index("### Errors") < text.index("### Warnings")
        assert "- **[self-loop]** self-loop violated" in text
        assert "  Constraint: Connections cannot link a note to itself" in text
        assert "  Suggestion: remove - Remove the self-referencing connection" in text
        assert text.endswith("Attempt 1 of 3. Please correct the issues above and regenerate.")

    def test_warnings_have_no_constraint_line(self, make_violation):
        feedback = FeedbackBuilder.from_violations([make_violation("weakly-connected", "warning")], 2, 3)
        text = format_feedback_for_llm(feedback)
        assert "Constraint:" not in text
        assert "### Errors" not in text
        assert "Attempt 2 of 3." in text

    def test_custom_suggestion_rendered(self):
        feedback = FeedbackBuilder.custom(
            "tone", "Too informal", attempt_number=1, max_attempts=2,
            suggestion=CorrectionSuggestion(action=CorrectionAction.REPHRASE, details="Use neutral wording"),
        )
        assert "Suggestion: rephrase - Use neutral wording" in format_feedback_for_llm([feedback])
