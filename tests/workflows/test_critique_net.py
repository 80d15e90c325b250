#!/usr/bin/env python3
"""
Tests for the critique extension: critique, skip, accept, escalate, reject.
"""

import itertools

import pytest

from axiom.core.tokens import Token
from axiom.critique.agent import DevilsAdvocateAgent
from axiom.critique.models import (
    CritiqueBehaviorConfig,
    CritiqueResult,
    CritiqueTriggerConfig,
    recommend,
)
from axiom.events.types import EventType
from axiom.proposals import EdgeProposal
from axiom.workflows import (
    PlaceId,
    TransitionId,
    WorkflowRunner,
    create_critique_net,
    create_validation_net,
    extend_with_critique,
)


class FixedScoreAgent:
    """Critique agent that always reports the same survival score."""

    def __init__(self, score: float):
        self.score = score
        self.seen = []

    async def critique(self, token: Token) -> CritiqueResult:
        self.seen.append(token.id)
        recommendation = recommend(self.score, 0.7, 0.3)
        return CritiqueResult(
            proposal_id=token.payload.id,
            correlation_id=token.correlation_id,
            survived=self.score >= 0.7,
            survival_score=self.score,
            adjusted_confidence=0.0,
            recommendation=recommendation,
            duration_ms=12.5,
        )


def _events(bridge, event_type):
    return [e for e in bridge.recent_events() if e.type == event_type]


@pytest.fixture
def run_critique(engine, collaborators_for):
    async def run(proposal, agent, **kwargs):
        net = create_critique_net(agent, collaborators=collaborators_for(0), **kwargs)
        return await WorkflowRunner(engine, net).process_proposal(proposal)
    return run


# =============================================================================
# Net shape
# =============================================================================


class TestNetShape:

    def test_commit_is_replaced(self):
        net = create_critique_net(FixedScoreAgent(1.0))
        ids = [t.id for t in net.transitions]
        assert TransitionId.T_COMMIT.value not in ids
        for tid in ("T_critique", "T_skip_critique", "T_critique_accept",
                    "T_critique_escalate", "T_critique_reject"):
            assert tid in ids

    def test_escalated_is_a_sink(self):
        net = create_critique_net(FixedScoreAgent(1.0))
        escalated = net.get_place(PlaceId.P_ESCALATED.value)
        assert escalated is not None and escalated.is_sink
        assert net.get_place(PlaceId.P_CRITIQUED.value) is not None

    def test_extend_leaves_base_untouched(self):
        base = create_validation_net()
        extended = extend_with_critique(base, FixedScoreAgent(1.0))
        assert base.get_transition(TransitionId.T_COMMIT.value) is not None
        assert extended.name == "validation+critique"
        assert extended.source_place == base.source_place

    def test_critique_outranks_skip(self):
        net = create_critique_net(FixedScoreAgent(1.0))
        assert (net.get_transition("T_critique").priority
                > net.get_transition("T_skip_critique").priority)


# =============================================================================
# Outcomes
# =============================================================================


class TestOutcomes:

    async def test_survivor_commits_with_adjusted_confidence(self, run_critique, make_proposal, committer, bridge):
        proposal = make_proposal(
            node_confidences=(0.9,),
            edges=[EdgeProposal(id="e1", from_id="n0", to_id="x", to_title="X", confidence=0.5)],
        )
        agent = FixedScoreAgent(0.8)
        result = await run_critique(proposal, agent)

        assert result.success
        assert result.final_place == PlaceId.P_COMMITTED.value
        assert agent.seen == [result.token.id]

        committed = committer.committed[0]
        assert committed.nodes[0].confidence == 0.72
        assert committed.edges[0].confidence == 0.4
        assert result.token.payload.nodes[0].confidence == 0.72

        meta = result.token.meta
        assert meta.critique_result.survival_score == 0.8
        assert meta.critique_duration_ms == 12.5
        assert not meta.critique_skipped

        assert _events(bridge, EventType.CRITIQUE_STARTED)
        completed = _events(bridge, EventType.CRITIQUE_COMPLETED)
        assert completed[0].get("survival_score") == 0.8
        assert completed[0].get("recommendation") == "proceed"

    async def test_reconsider_escalates(self, run_critique, make_proposal, committer, bridge):
        result = await run_critique(make_proposal(node_confidences=(0.9,)), FixedScoreAgent(0.5))

        assert not result.success
        assert result.final_place == PlaceId.P_ESCALATED.value
        assert committer.committed == []
        assert _events(bridge, EventType.CRITIQUE_ESCALATED)[0].get("survival_score") == 0.5

    async def test_low_survival_rejects(self, run_critique, make_proposal, committer, bridge):
        result = await run_critique(make_proposal(node_confidences=(0.9,)), FixedScoreAgent(0.1))

        assert result.final_place == PlaceId.P_REJECTED.value
        assert result.token.meta.transition_history[-1].transition_id == "T_critique_reject"
        assert committer.committed == []
        assert _events(bridge, EventType.CRITIQUE_REJECTED)

    async def test_custom_thresholds(self, run_critique, make_proposal):
        behavior = CritiqueBehaviorConfig(survival_threshold=0.4, reject_threshold=0.2)
        result = await run_critique(make_proposal(), FixedScoreAgent(0.5), behavior=behavior)
        assert result.final_place == PlaceId.P_COMMITTED.value


# =============================================================================
# Skipping
# =============================================================================


class TestSkip:

    async def test_untriggered_proposal_skips(self, run_critique, make_proposal, committer, bridge):
        agent = FixedScoreAgent(0.0)
        result = await run_critique(make_proposal(node_confidences=(0.6,)), agent)

        assert result.success
        assert agent.seen == []
        assert result.token.meta.critique_skipped is True
        assert result.token.meta.critique_skip_reason == "trigger-conditions-not-met"
        assert result.token.meta.transition_history[-1].transition_id == "T_skip_critique"
        assert committer.committed[0].nodes[0].confidence == 0.6
        assert _events(bridge, EventType.CRITIQUE_SKIPPED)[0].get("reason") == "trigger-conditions-not-met"

    async def test_low_confidence_skips_even_when_sampled(self, run_critique, make_proposal):
        agent = FixedScoreAgent(0.0)
        trigger = CritiqueTriggerConfig(probabilistic_rate=1.0)
        result = await run_critique(make_proposal(node_confidences=(0.3,)), agent, trigger=trigger)
        assert result.success
        assert agent.seen == []

    async def test_disabled(self, run_critique, make_proposal):
        agent = FixedScoreAgent(0.0)
        result = await run_critique(make_proposal(node_confidences=(0.99,)), agent, enabled=False)
        assert result.success
        assert agent.seen == []

    async def test_sampled_proposal_is_critiqued(self, run_critique, make_proposal):
        agent = FixedScoreAgent(0.9)
        trigger = CritiqueTriggerConfig(probabilistic_rate=0.5)
        result = await run_critique(
            make_proposal(node_confidences=(0.6,)), agent, trigger=trigger, rng=lambda: 0.0,
        )
        assert result.success
        assert len(agent.seen) == 1

    async def test_default_sampler_always_picks_exactly_one_path(self, engine, collaborators_for, make_proposal):
        trigger = CritiqueTriggerConfig(probabilistic_rate=0.5)
        net = create_critique_net(FixedScoreAgent(0.9), collaborators=collaborators_for(0), trigger=trigger)
        runner = WorkflowRunner(engine, net)
        for _ in range(10):
            result = await runner.process_proposal(make_proposal(node_confidences=(0.6,)))
            assert result.final_place == PlaceId.P_COMMITTED.value

    async def test_changing_sampler_is_drawn_once_per_token(self, engine, collaborators_for, make_proposal):
        draws = itertools.cycle([0.9, 0.1, 0.4, 0.6])
        agent = FixedScoreAgent(0.9)
        trigger = CritiqueTriggerConfig(probabilistic_rate=0.5)
        net = create_critique_net(
            agent, collaborators=collaborators_for(0), trigger=trigger, rng=lambda: next(draws),
        )
        runner = WorkflowRunner(engine, net)

        samples = []
        for _ in range(8):
            result = await runner.process_proposal(make_proposal(node_confidences=(0.6,)))
            assert result.final_place == PlaceId.P_COMMITTED.value
            samples.append(result.token.meta.critique_sample)

        assert samples == [0.9, 0.1, 0.4, 0.6, 0.9, 0.1, 0.4, 0.6]
        assert len(agent.seen) == 4


# =============================================================================
# With the LLM-backed agent
# =============================================================================


async def test_devils_advocate_in_the_net(run_critique, make_proposal, scripted_backend, reply):
    agent = DevilsAdvocateAgent(scripted_backend(reply(0.1, severity="major")))
    result = await run_critique(make_proposal(node_confidences=(0.95,)), agent)

    assert result.final_place == PlaceId.P_REJECTED.value
    assert result.token.meta.critique_result.counter_arguments[0].argument == "doubtful"
