#!/usr/bin/env python3
"""
Tests for Mermaid rendering of net definitions.
"""

from axiom.util import to_mermaid
from axiom.workflows import create_council_net, create_critique_net, create_validation_net
from axiom.workflows.collaborators import CouncilSynthesis


class NullCritic:
    async def critique(self, token):
        raise AssertionError("not called")


class NullCouncil:
    async def generate(self, payload):
        return ""

    async def critique(self, payload):
        return ""

    async def synthesize(self, payload):
        return CouncilSynthesis(response="", has_proposals=False)


def test_validation_net_diagram():
    diagram = create_validation_net().to_mermaid()
    lines = diagram.splitlines()

    assert lines[0] == "graph TD"
    assert '    P_proposals(("[SOURCE]</br>Proposals"))' in lines
    assert '    P_committed((("Committed")))' in lines
    assert "    P_deciding --> T_accept" in lines
    assert "    T_accept --> P_verified" in lines
    assert any(line.startswith("    T_accept[") and "priority=20" in line for line in lines)


def test_critique_net_diagram():
    diagram = to_mermaid(create_critique_net(NullCritic()))
    assert '    P_escalated((("Escalated")))' in diagram.splitlines()
    assert "T_critique_escalate --> P_escalated" in diagram
    assert "T_commit" not in diagram


def test_council_net_diagram():
    diagram = to_mermaid(create_council_net(NullCouncil(), empty_sink=True))
    assert "P_synthesized --> T_discard_empty" in diagram
    assert "T_emit --> P_council_output" in diagram
