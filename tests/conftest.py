#!/usr/bin/env python3
"""
Shared fixtures for AXIOM tests.

Collaborators here are scripted stand-ins for the external validator,
generator, committer and LLM backends.
"""

import json
from typing import List, Optional

import pytest

from axiom.common.timebase import DictatedClock
from axiom.core.engine import AxiomEngine
from axiom.critique.agent import LLMResponse
from axiom.events.bridge import EventBridge
from axiom.feedback import CorrectionFeedback
from axiom.proposals import EdgeProposal, NodeProposal, Proposal
from axiom.stores.memory import InMemoryTokenStore
from axiom.validation import (
    ValidationResult,
    ValidationSeverity,
    Violation,
    ViolationFixType,
    ViolationSuggestion,
)
from axiom.workflows.collaborators import ValidationCollaborators


# =============================================================================
# Builders
# =============================================================================


def build_proposal(
    node_confidences=(0.9,),
    edges: Optional[List[EdgeProposal]] = None,
    node_type: Optional[str] = None,
) -> Proposal:
    nodes = [
        NodeProposal(id=f"n{i}", title=f"Note {i}", content="text", confidence=c, type=node_type)
        for i, c in enumerate(node_confidences)
    ]
    return Proposal(nodes=nodes, edges=edges or [], generated_by="test")


def build_violation(
    rule_id: str = "self-loop",
    severity: str = "error",
    fix_type: Optional[ViolationFixType] = ViolationFixType.DELETE_CONNECTION,
) -> Violation:
    suggestion = None
    if fix_type is not None:
        suggestion = ViolationSuggestion(type=fix_type, description="Remove the self-referencing connection")
    return Violation(
        id=f"v-{rule_id}",
        rule_id=rule_id,
        severity=ValidationSeverity(severity),
        focus_type="connection",
        focus_id="e1",
        message=f"{rule_id} violated",
        suggestion=suggestion,
    )


class ScriptedValidator:
    """Fails the first ``failures`` calls with one error, then passes."""

    def __init__(self, failures: int, rule_id: str = "self-loop"):
        self.failures = failures
        self.rule_id = rule_id
        self.calls = 0

    async def __call__(self, proposal: Proposal) -> ValidationResult:
        self.calls += 1
        if self.calls <= self.failures:
            return ValidationResult(
                proposal_id=proposal.id,
                valid=False,
                level2_passed=False,
                violations=[build_violation(self.rule_id)],
            )
        return ValidationResult(proposal_id=proposal.id, valid=True)


class RecordingRegenerator:
    def __init__(self):
        self.calls: List[List[CorrectionFeedback]] = []

    async def __call__(self, proposal: Proposal, feedback: List[CorrectionFeedback]) -> Proposal:
        self.calls.append(list(feedback))
        return proposal.model_copy(update={"attempt": proposal.attempt + 1})


class RecordingCommitter:
    def __init__(self):
        self.committed: List[Proposal] = []

    async def __call__(self, proposal: Proposal) -> None:
        self.committed.append(proposal)


class ScriptedBackend:
    """LLM backend that replays canned replies."""

    def __init__(self, *replies: str, model: str = "scripted"):
        self.replies = list(replies)
        self.model = model
        self.prompts: List[str] = []

    async def generate(self, prompt, system_prompt=None, temperature=None) -> LLMResponse:
        self.prompts.append(prompt)
        text = self.replies.pop(0) if self.replies else "{}"
        return LLMResponse(text=text, model=self.model)


def critique_reply(*scores, severity: str = "moderate") -> str:
    return json.dumps({
        "counterArguments": [
            {
                "target": "node",
                "targetId": f"n{i}",
                "argument": "doubtful",
                "severity": severity,
                "survivalScore": s,
            }
            for i, s in enumerate(scores)
        ],
        "blindSpots": [],
        "riskFactors": [],
    })


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def make_proposal():
    return build_proposal


@pytest.fixture
def make_violation():
    return build_violation


@pytest.fixture
def proposal():
    return build_proposal()


@pytest.fixture
def store():
    return InMemoryTokenStore()


@pytest.fixture
def bridge():
    return EventBridge(log_events=False, buffer_size=1000)


@pytest.fixture
def clock():
    return DictatedClock(1_700_000_000.0)


@pytest.fixture
def engine(store, bridge, clock):
    return AxiomEngine(token_store=store, event_bridge=bridge, timebase=clock)


@pytest.fixture
def committer():
    return RecordingCommitter()


@pytest.fixture
def regenerator():
    return RecordingRegenerator()


@pytest.fixture
def collaborators_for(committer, regenerator):
    """Collaborators whose validator fails ``failures`` times."""
    def build(failures: int = 0, rule_id: str = "self-loop") -> ValidationCollaborators:
        return ValidationCollaborators(
            validate=ScriptedValidator(failures, rule_id),
            regenerate=regenerator,
            commit=committer,
        )
    return build


@pytest.fixture
def scripted_backend():
    return ScriptedBackend


@pytest.fixture
def reply():
    return critique_reply
