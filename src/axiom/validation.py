#!/usr/bin/env python3
"""
Validator contract.

The concrete rule set lives outside AXIOM; these models describe what an
external validator hands back for a proposal.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ValidationSeverity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class ViolationFixType(str, Enum):
    CREATE_CONNECTION = "create_connection"
    DELETE_CONNECTION = "delete_connection"
    DELETE_ENTITY = "delete_entity"
    UPDATE_PROPERTY = "update_property"
    MANUAL = "manual"


class ViolationSuggestion(BaseModel):
    """A suggested fix for a violation."""

    type: ViolationFixType
    description: str
    params: Optional[Dict[str, Any]] = None
    auto_applicable: bool = False


class Violation(BaseModel):
    """One instance where a validation rule detected a problem."""

    id: str
    rule_id: str
    severity: ValidationSeverity
    focus_type: str = "entity"
    focus_id: str = ""
    message: str
    property_path: Optional[str] = None
    offending_value: Any = None
    suggestion: Optional[ViolationSuggestion] = None
    detected_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )


class ValidationResult(BaseModel):
    """Output of running all three validation levels against a proposal."""

    proposal_id: str
    valid: bool
    level1_passed: bool = True
    level2_passed: bool = True
    level3_passed: bool = True
    violations: List[Violation] = Field(default_factory=list)
    validated_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    duration_ms: float = 0.0

    @property
    def errors(self) -> List[Violation]:
        return [v for v in self.violations if v.severity == ValidationSeverity.ERROR]

    @property
    def warnings(self) -> List[Violation]:
        return [v for v in self.violations if v.severity == ValidationSeverity.WARNING]
