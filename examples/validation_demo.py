#!/usr/bin/env python3
"""
AXIOM validation + critique demo

- A validator that rejects self-loops
- A generator that drops the offending edge when given feedback
- A scripted Devil's Advocate
- Prints the audit trail of the committed token
"""

import asyncio
import json
import logging
from typing import List

from axiom import AxiomSettings, create_default_engine
from axiom.critique import DevilsAdvocateAgent, LLMResponse
from axiom.feedback import CorrectionFeedback, format_feedback_for_llm
from axiom.proposals import EdgeProposal, NodeProposal, Proposal
from axiom.validation import (
    ValidationResult,
    ValidationSeverity,
    Violation,
    ViolationFixType,
    ViolationSuggestion,
)
from axiom.workflows import ValidationCollaborators, WorkflowRunner, create_critique_net


async def validate(proposal: Proposal) -> ValidationResult:
    violations = [
        Violation(
            id=f"v-{edge.id}",
            rule_id="self-loop",
            severity=ValidationSeverity.ERROR,
            focus_type="connection",
            focus_id=edge.id,
            message=f'Connection "{edge.label}" links "{edge.from_title}" to itself',
            suggestion=ViolationSuggestion(
                type=ViolationFixType.DELETE_CONNECTION,
                description="Remove the self-referencing connection",
            ),
        )
        for edge in proposal.edges
        if edge.from_id and edge.from_id == edge.to_id
    ]
    return ValidationResult(proposal_id=proposal.id, valid=not violations, violations=violations)


async def regenerate(proposal: Proposal, feedback: List[CorrectionFeedback]) -> Proposal:
    print("\nRegenerating with feedback:\n")
    print(format_feedback_for_llm(feedback))
    bad = {f.actual for f in feedback}
    return proposal.model_copy(update={
        "edges": [e for e in proposal.edges if e.id not in bad],
        "attempt": proposal.attempt + 1,
    })


async def commit(proposal: Proposal) -> None:
    print(f"\nCommitted {len(proposal.nodes)} node(s), {len(proposal.edges)} edge(s)")
    for node in proposal.nodes:
        print(f"  {node.title}: confidence {node.confidence}")


class ScriptedLLM:
    async def generate(self, prompt, system_prompt=None, temperature=None) -> LLMResponse:
        reply = {
            "counterArguments": [{
                "target": "node",
                "targetId": "n1",
                "argument": "The claim cites no source",
                "severity": "moderate",
                "survivalScore": 0.8,
            }],
            "blindSpots": ["No counter-examples considered"],
            "riskFactors": [],
        }
        return LLMResponse(text=json.dumps(reply), model="scripted")


async def main():
    logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")

    settings = AxiomSettings()
    engine = create_default_engine(settings)
    collaborators = ValidationCollaborators(validate=validate, regenerate=regenerate, commit=commit)
    net = create_critique_net(
        DevilsAdvocateAgent(ScriptedLLM(), settings.critique.behavior),
        collaborators=collaborators,
        trigger=settings.critique.triggers,
        behavior=settings.critique.behavior,
        enabled=settings.critique.enabled,
    )
    print(net.to_mermaid())

    runner = WorkflowRunner(engine, net, max_retries=settings.workflow.max_retries)
    proposal = Proposal(
        nodes=[
            NodeProposal(id="n1", title="Petri nets model concurrency", type="claim", confidence=0.9),
            NodeProposal(id="n2", title="Workflow engines", confidence=0.8),
        ],
        edges=[
            EdgeProposal(id="e1", from_id="n1", to_id="n2", from_title="Petri nets model concurrency",
                         to_title="Workflow engines", label="underpins", confidence=0.85),
            EdgeProposal(id="e2", from_id="n2", to_id="n2", from_title="Workflow engines",
                         to_title="Workflow engines", label="extends", confidence=0.6),
        ],
        generated_by="demo",
    )

    result = await runner.process_proposal(proposal)

    print(f"\nFinal place: {result.final_place} after {result.total_steps} steps, "
          f"{result.total_retries} retr{'y' if result.total_retries == 1 else 'ies'}")
    print("\nAudit trail:")
    for record in result.transition_history:
        print(f"  {record.transition_id}: {record.from_place} -> {record.to_place} ({record.reason})")


if __name__ == "__main__":
    asyncio.run(main())
