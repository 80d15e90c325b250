#!/usr/bin/env python3
"""
Corrective feedback.

Instead of bare rejection, validator violations are mapped into structured
correction records the generator can act on. Feedback accumulates across
retries so every regeneration attempt sees the full history.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Iterable, List, Literal, Optional

from pydantic import BaseModel

from axiom.validation import (
    ValidationSeverity,
    Violation,
    ViolationFixType,
    ViolationSuggestion,
)


class CorrectionAction(str, Enum):
    MODIFY = "modify"
    REMOVE = "remove"
    MERGE = "merge"
    REPHRASE = "rephrase"


class CorrectionSuggestion(BaseModel):
    action: CorrectionAction
    details: str


class CorrectionFeedback(BaseModel):
    """Structured correction for one violation of one attempt."""

    rule_id: str
    constraint: str
    level: Literal[1, 2, 3]
    severity: ValidationSeverity
    actual: Any = None
    expected: Any = None
    message: str
    suggestion: Optional[CorrectionSuggestion] = None
    attempt_number: int
    max_attempts: int


# ============================================================================
# Lookup tables
# ============================================================================

FIX_TYPE_TO_ACTION: Dict[ViolationFixType, CorrectionAction] = {
    ViolationFixType.DELETE_CONNECTION: CorrectionAction.REMOVE,
    ViolationFixType.DELETE_ENTITY: CorrectionAction.REMOVE,
    ViolationFixType.CREATE_CONNECTION: CorrectionAction.MODIFY,
    ViolationFixType.UPDATE_PROPERTY: CorrectionAction.MODIFY,
    ViolationFixType.MANUAL: CorrectionAction.REPHRASE,
}

CONSTRAINT_DESCRIPTIONS: Dict[str, str] = {
    "orphan-note": "Notes must have at least one connection",
    "self-loop": "Connections cannot link a note to itself",
    "duplicate-connection": "No duplicate connections between same notes",
    "bidirectional-connection": "Bidirectional connections should be intentional",
    "weakly-connected": "Notes should have more than one connection",
    "stale-suggestion": "AI suggestions should be reviewed promptly",
}

LEVEL_2_RULES = frozenset(CONSTRAINT_DESCRIPTIONS)

EXPECTED_VALUES: Dict[str, str] = {
    "self-loop": "source != target",
    "duplicate-connection": "unique connection",
    "orphan-note": "at least 1 connection",
    "weakly-connected": "at least 2 connections",
}


def map_fix_type_to_action(fix_type: Any) -> CorrectionAction:
    """Map a validator fix type onto a correction action (unknown -> modify)."""
    try:
        return FIX_TYPE_TO_ACTION[ViolationFixType(fix_type)]
    except ValueError:
        return CorrectionAction.MODIFY


class FeedbackBuilder:
    """Pure mapping from validator violations to correction records."""

    @classmethod
    def from_violations(
        cls,
        violations: Iterable[Violation],
        attempt_number: int,
        max_attempts: int,
    ) -> List[CorrectionFeedback]:
        return [cls.from_violation(v, attempt_number, max_attempts) for v in violations]

    @classmethod
    def from_violation(
        cls,
        violation: Violation,
        attempt_number: int,
        max_attempts: int,
    ) -> CorrectionFeedback:
        actual = violation.offending_value
        if actual is None:
            actual = violation.focus_id
        return CorrectionFeedback(
            rule_id=violation.rule_id,
            constraint=cls.constraint_description(violation.rule_id),
            level=cls.infer_level(violation.rule_id),
            severity=violation.severity,
            actual=actual,
            expected=cls.infer_expected(violation),
            message=violation.message,
            suggestion=cls.convert_suggestion(violation.suggestion),
            attempt_number=attempt_number,
            max_attempts=max_attempts,
        )

    @staticmethod
    def custom(
        rule_id: str,
        message: str,
        *,
        attempt_number: int,
        max_attempts: int,
        level: Literal[1, 2, 3] = 2,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
        actual: Any = None,
        expected: Any = None,
        suggestion: Optional[CorrectionSuggestion] = None,
    ) -> CorrectionFeedback:
        """Build feedback that did not come from the validator."""
        return CorrectionFeedback(
            rule_id=rule_id,
            constraint=message,
            level=level,
            severity=severity,
            actual=actual,
            expected=expected,
            message=message,
            suggestion=suggestion,
            attempt_number=attempt_number,
            max_attempts=max_attempts,
        )

    @staticmethod
    def constraint_description(rule_id: str) -> str:
        return CONSTRAINT_DESCRIPTIONS.get(rule_id, f"Constraint: {rule_id}")

    @staticmethod
    def infer_level(rule_id: str) -> Literal[1, 2, 3]:
        if rule_id.startswith("schema-"):
            return 1
        if rule_id.startswith("semantic-"):
            return 3
        # Known constraint rules and anything unrecognised
        return 2

    @staticmethod
    def infer_expected(violation: Violation) -> Any:
        if violation.rule_id in EXPECTED_VALUES:
            return EXPECTED_VALUES[violation.rule_id]
        if violation.suggestion is not None:
            return violation.suggestion.description
        return None

    @staticmethod
    def convert_suggestion(
        suggestion: Optional[ViolationSuggestion],
    ) -> Optional[CorrectionSuggestion]:
        if suggestion is None:
            return None
        return CorrectionSuggestion(
            action=map_fix_type_to_action(suggestion.type),
            details=suggestion.description,
        )


def format_feedback_for_llm(feedback: List[CorrectionFeedback]) -> str:
    """Render feedback as a regeneration prompt section.

    Errors (must fix) come before warnings (should fix); the footer reports
    the attempt count of the first entry.
    """
    if not feedback:
        return ""

    errors = [f for f in feedback if f.severity == ValidationSeverity.ERROR]
    warnings = [f for f in feedback if f.severity == ValidationSeverity.WARNING]

    lines = ["## Validation Feedback from Previous Attempt", ""]

    if errors:
        lines.append(f"### Errors ({len(errors)}) - Must Fix")
        lines.append("")
        for err in errors:
            lines.append(f"- **[{err.rule_id}]** {err.message}")
            lines.append(f"  Constraint: {err.constraint}")
            if err.suggestion:
                lines.append(
                    f"  Suggestion: {err.suggestion.action.value} - {err.suggestion.details}"
                )
        lines.append("")

    if warnings:
        lines.append(f"### Warnings ({len(warnings)}) - Should Fix")
        lines.append("")
        for warn in warnings:
            lines.append(f"- **[{warn.rule_id}]** {warn.message}")
            if warn.suggestion:
                lines.append(
                    f"  Suggestion: {warn.suggestion.action.value} - {warn.suggestion.details}"
                )
        lines.append("")

    first = feedback[0]
    lines.append(
        f"Attempt {first.attempt_number} of {first.max_attempts}. "
        "Please correct the issues above and regenerate."
    )
    return "\n".join(lines)
