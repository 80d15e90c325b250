#!/usr/bin/env python3
"""
Devil's Advocate critique agent.

Stress-tests a validated proposal with an LLM before it is committed. The
agent is tolerant of its backend: an unparseable reply degrades to an empty
critique (full survival) rather than failing the workflow, and a single bad
item in an otherwise valid reply is clamped or dropped on its own.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Protocol, Type, TypeVar, runtime_checkable

from pydantic import BaseModel, ValidationError

from axiom.common.timebase import MonotonicClock, Timebase

from axiom.critique.models import (
    CounterArgument,
    CritiqueBehaviorConfig,
    CritiqueResult,
    CritiqueScope,
    Recommendation,
    RiskFactor,
    adjust_confidence,
    calculate_survival_score,
    recommend,
)

if TYPE_CHECKING:
    from axiom.core.tokens import Token

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


@dataclass
class LLMResponse:
    """Text returned by an LLM backend along with the model that produced it."""
    text: str
    model: str = ""


@runtime_checkable
class LLMBackend(Protocol):
    async def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
    ) -> LLMResponse:
        ...


@runtime_checkable
class CritiqueAgent(Protocol):
    """Anything that can critique a token sitting in the verified place."""

    async def critique(self, token: "Token") -> CritiqueResult:
        ...


CRITIQUE_SYSTEM_PROMPT = """You are a Devil's Advocate reviewing AI-generated knowledge graph proposals before they are committed.
Be thorough and constructive. Point out vague connections, doubtful claims, redundancy and missing context.
Score each counter-argument's survival from 0.0 (critical flaw) to 1.0 (no issue).
Always return valid JSON without markdown fences."""

_RESPONSE_SHAPE = """Return JSON:
{
  "counterArguments": [{"target": "node|edge", "targetId": "...", "targetLabel": "...", "argument": "...", "severity": "minor|moderate|major", "survivalScore": 0.0}],
  "blindSpots": ["..."],
  "riskFactors": [{"category": "accuracy|completeness|coherence|redundancy|scope", "description": "...", "severity": "low|medium|high"}]
}"""

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```")


def _empty_raw() -> Dict[str, Any]:
    return {"counterArguments": [], "blindSpots": [], "riskFactors": []}


class DevilsAdvocateAgent:
    """Critique agent backed by an LLM."""

    id = "devils-advocate"
    name = "Devil's Advocate"

    def __init__(
        self,
        backend: LLMBackend,
        config: Optional[CritiqueBehaviorConfig] = None,
        timebase: Optional[Timebase] = None,
    ):
        """
        Args:
            backend: LLM used to generate the critique
            config: Scope, thresholds and limits; defaults when omitted
            timebase: Clock used to time each critique (monotonic by default)
        """
        self.backend = backend
        self.config = config or CritiqueBehaviorConfig()
        self.timebase = timebase or MonotonicClock()

    async def critique(self, token: "Token") -> CritiqueResult:
        proposal = token.payload
        start = self.timebase.now()

        if self.config.scope == CritiqueScope.BATCH:
            prompt = self.build_batch_prompt(proposal)
        else:
            prompt = self.build_individual_prompt(proposal)

        response = await self.backend.generate(
            prompt,
            system_prompt=CRITIQUE_SYSTEM_PROMPT,
            temperature=self.config.temperature,
        )

        counter_arguments, blind_spots, risk_factors = self.parse_response(response.text)
        counter_arguments = counter_arguments[: self.config.max_counter_arguments]

        survival_score = calculate_survival_score(counter_arguments)
        recommendation = recommend(
            survival_score,
            self.config.survival_threshold,
            self.config.reject_threshold,
        )

        return CritiqueResult(
            proposal_id=str(getattr(proposal, "id", "")),
            correlation_id=token.correlation_id,
            scope=self.config.scope,
            survived=recommendation == Recommendation.PROCEED,
            survival_score=survival_score,
            adjusted_confidence=adjust_confidence(_max_confidence(proposal), survival_score),
            counter_arguments=counter_arguments,
            blind_spots=blind_spots,
            risk_factors=risk_factors,
            recommendation=recommendation,
            critique_model=response.model,
            duration_ms=(self.timebase.now() - start) * 1000,
        )

    def parse_response(self, text: str):
        """Parse an LLM reply into (counter_arguments, blind_spots, risk_factors).

        Accepts bare JSON or JSON inside a markdown fence; anything else
        yields an empty critique. Items are validated one at a time: an
        out-of-range survival score is clamped into [0, 1] and an item that
        still fails validation is dropped with a warning, so one bad entry
        never discards the rest.
        """
        raw = _load_json(text)
        if raw is None:
            logger.warning("Failed to parse critique response, returning empty result")
            raw = _empty_raw()

        counter_arguments = _validate_items(
            CounterArgument,
            [_clamp_survival(item) for item in _as_list(raw, "counterArguments")],
            "counter-argument",
        )
        risk_factors = _validate_items(RiskFactor, _as_list(raw, "riskFactors"), "risk factor")
        blind_spots = [str(b) for b in _as_list(raw, "blindSpots")]

        return counter_arguments, blind_spots, risk_factors

    # ------------------------------------------------------------------
    # Prompts
    # ------------------------------------------------------------------

    def build_batch_prompt(self, proposal: Any) -> str:
        nodes = list(getattr(proposal, "nodes", None) or [])
        edges = list(getattr(proposal, "edges", None) or [])
        node_lines = "\n".join(
            f'- [{n.id}] "{n.title}" (confidence: {n.confidence})' for n in nodes
        )
        edge_lines = "\n".join(
            f'- [{e.id}] "{e.from_title}" -[{e.label}]-> "{e.to_title}" (confidence: {e.confidence})'
            for e in edges
        )
        return (
            "Critique this batch of proposed knowledge graph changes as a whole.\n\n"
            f"### New Nodes ({len(nodes)}):\n{node_lines or '(none)'}\n\n"
            f"### New Connections ({len(edges)}):\n{edge_lines or '(none)'}\n\n"
            "Look for systemic weak patterns, missing perspectives, redundancy, "
            "incoherence and scope problems.\n\n"
            + _RESPONSE_SHAPE
        )

    def build_individual_prompt(self, proposal: Any) -> str:
        nodes = list(getattr(proposal, "nodes", None) or [])
        edges = list(getattr(proposal, "edges", None) or [])
        node_lines = "\n".join(
            f'- [{n.id}] "{n.title}": {(n.content or "no content")[:200]} (confidence: {n.confidence})'
            for n in nodes
        )
        edge_lines = "\n".join(
            f'- [{e.id}] "{e.from_title}" -[{e.label}]-> "{e.to_title}": '
            f'{e.rationale or "no rationale"} (confidence: {e.confidence})'
            for e in edges
        )
        return (
            "Critique each proposed knowledge graph item individually.\n\n"
            f"### Nodes:\n{node_lines or '(none)'}\n\n"
            f"### Connections:\n{edge_lines or '(none)'}\n\n"
            "Items with no issues should still appear with survivalScore 1.0.\n\n"
            + _RESPONSE_SHAPE
        )


def _load_json(text: str) -> Optional[Dict[str, Any]]:
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError):
        match = _FENCE_RE.search(text or "")
        if not match:
            return None
        try:
            data = json.loads(match.group(1).strip())
        except json.JSONDecodeError:
            return None
    return data if isinstance(data, dict) else None


def _max_confidence(proposal: Any) -> float:
    items = list(getattr(proposal, "nodes", None) or []) + list(getattr(proposal, "edges", None) or [])
    return max([0.0] + [float(getattr(i, "confidence", 0) or 0) for i in items])


def _as_list(raw: Dict[str, Any], key: str) -> List[Any]:
    value = raw.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        logger.warning(f"Critique response field {key!r} is not a list, ignoring it")
        return []
    return value


def _clamp_survival(item: Any) -> Any:
    if not isinstance(item, dict):
        return item
    for key in ("survivalScore", "survival_score"):
        score = item.get(key)
        if isinstance(score, (int, float)) and not isinstance(score, bool):
            if not 0.0 <= score <= 1.0:
                logger.warning(f"Clamping out-of-range survival score {score} for {item.get('targetId', '?')}")
                item = {**item, key: min(1.0, max(0.0, float(score)))}
    return item


def _validate_items(model: Type[M], items: List[Any], kind: str) -> List[M]:
    valid: List[M] = []
    for index, item in enumerate(items):
        try:
            valid.append(model.model_validate(item))
        except ValidationError as e:
            logger.warning(f"Skipping invalid {kind} #{index} in critique response: {e.error_count()} error(s)")
    return valid
