#!/usr/bin/env python3
"""
Tests for the council pipeline: generate, critique, synthesize, emit.
"""

from typing import List

import pytest

from axiom.workflows import (
    CouncilAgents,
    CouncilPayload,
    CouncilPlaceId,
    CouncilSynthesis,
    create_council_net,
    create_council_token,
    run_council,
)
from axiom.workflows.council_net import CRITIC_FAILED_NOTE


class StubCouncil:

    def __init__(self, has_proposals: bool = True, critic_fails: bool = False):
        self.has_proposals = has_proposals
        self.critic_fails = critic_fails
        self.order: List[str] = []

    async def generate(self, payload: CouncilPayload) -> str:
        self.order.append("generate")
        return f"ideas about {payload.query}"

    async def critique(self, payload: CouncilPayload) -> str:
        self.order.append("critique")
        if self.critic_fails:
            raise TimeoutError("critic timed out")
        return f"critique of: {payload.generator_response}"

    async def synthesize(self, payload: CouncilPayload) -> CouncilSynthesis:
        self.order.append("synthesize")
        return CouncilSynthesis(
            response=f"final ({payload.critic_response})",
            has_proposals=self.has_proposals,
            notes=["synthesized"],
        )


@pytest.fixture
def council(engine):
    def wire(agents, empty_sink=False):
        engine.wire(create_council_net(agents, empty_sink=empty_sink))
        return engine
    return wire


# =============================================================================
# Net shape
# =============================================================================


class TestNetShape:

    def test_linear_pipeline(self):
        net = create_council_net(StubCouncil())
        assert [t.id for t in net.transitions] == ["T_generate", "T_critique", "T_synthesize", "T_emit"]
        assert net.source_place == CouncilPlaceId.P_COUNCIL_QUERY.value
        assert net.get_place(CouncilPlaceId.P_COUNCIL_EMPTY.value) is None

    def test_empty_sink_is_optional(self):
        net = create_council_net(StubCouncil(), empty_sink=True)
        assert net.get_transition("T_discard_empty") is not None
        assert net.get_place(CouncilPlaceId.P_COUNCIL_EMPTY.value).is_sink

    def test_stub_satisfies_protocol(self):
        assert isinstance(StubCouncil(), CouncilAgents)

    def test_council_tokens_never_retry(self):
        token = create_council_token(CouncilPayload(query="q"), correlation_id="c-1")
        assert token.max_retries == 0
        assert token.correlation_id == "c-1"


# =============================================================================
# Runs
# =============================================================================


class TestCouncilRuns:

    async def test_full_pipeline(self, council):
        agents = StubCouncil()
        engine = council(agents)
        result = await run_council(engine, CouncilPayload(query="graph theory", context="notes"))

        assert result.emitted
        assert not result.stalled
        assert result.final_place == CouncilPlaceId.P_COUNCIL_OUTPUT.value
        assert result.total_steps == 4
        assert agents.order == ["generate", "critique", "synthesize"]

        output = result.output
        assert output.generator_response == "ideas about graph theory"
        assert output.critic_response == "critique of: ideas about graph theory"
        assert output.synthesizer_response.startswith("final (")
        assert output.has_proposals
        assert output.notes == ["synthesized"]

    async def test_empty_synthesis_stalls_without_sink(self, council):
        engine = council(StubCouncil(has_proposals=False))
        result = await run_council(engine, CouncilPayload(query="q"))

        assert result.stalled
        assert not result.emitted
        assert result.final_place == CouncilPlaceId.P_SYNTHESIZED.value
        assert result.total_steps == 3

    async def test_empty_synthesis_discarded_with_sink(self, council):
        engine = council(StubCouncil(has_proposals=False), empty_sink=True)
        result = await run_council(engine, CouncilPayload(query="q"))

        assert not result.stalled
        assert not result.emitted
        assert result.final_place == CouncilPlaceId.P_COUNCIL_EMPTY.value

    async def test_critic_failure_passes_proposals_through(self, council):
        agents = StubCouncil(critic_fails=True)
        engine = council(agents)
        result = await run_council(engine, CouncilPayload(query="q"))

        assert result.emitted
        assert result.error is None
        assert CRITIC_FAILED_NOTE in result.output.notes
        assert CRITIC_FAILED_NOTE in result.output.critic_response
        assert agents.order == ["generate", "critique", "synthesize"]

    async def test_generator_failure_is_reported(self, council):
        class BrokenGenerator(StubCouncil):
            async def generate(self, payload):
                raise RuntimeError("model offline")

        engine = council(BrokenGenerator())
        result = await run_council(engine, CouncilPayload(query="q"))

        assert "model offline" in result.error
        assert not result.stalled
        assert not result.emitted

    async def test_every_stage_leaves_a_reason(self, council):
        engine = council(StubCouncil())
        result = await run_council(engine, CouncilPayload(query="q"))

        tokens = engine.get_tokens_in_place(CouncilPlaceId.P_COUNCIL_OUTPUT.value)
        history = tokens[0].meta.transition_history
        assert [r.transition_id for r in history] == ["T_generate", "T_critique", "T_synthesize", "T_emit"]
        assert all(r.reason for r in history)
        assert result.total_steps == len(history)
