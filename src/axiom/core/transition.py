#!/usr/bin/env python3
"""
AXIOM - Transition runtime

A transition is enabled when each of its input places holds a token and
every guard passes over the first token of each input place. Firing takes
those tokens, runs the action and deposits each result in the output place
its color routes to.
"""

from __future__ import annotations

import inspect
import logging
from typing import Dict, List, Mapping, Optional, Sequence

from axiom.common.timebase import MonotonicClock, Timebase
from axiom.core.colors import TokenColor
from axiom.core.exceptions import GuardError, NetConfigurationError, TokenRoutingError
from axiom.core.place import Place
from axiom.core.specs import NamedGuard, PlaceSpec, TransitionContext, TransitionSpec
from axiom.core.tokens import Token, TransitionRecord

logger = logging.getLogger(__name__)


def build_routes(
    spec: TransitionSpec,
    places: Mapping[str, PlaceSpec],
) -> tuple[Dict[TokenColor, str], Optional[str]]:
    """Resolve a transition's color routing against known place specs.

    Returns the explicit color table plus the id of the output place that
    takes every unclaimed color, if any. Raises NetConfigurationError for
    unknown places or ambiguous routes.
    """
    for place_id in list(spec.input_places) + list(spec.output_places):
        if place_id not in places:
            raise NetConfigurationError(
                f'Transition "{spec.id}" references unknown place "{place_id}"'
            )

    if spec.routes is not None:
        table: Dict[TokenColor, str] = {}
        for color, place_id in spec.routes.items():
            color = TokenColor(color)
            if place_id not in spec.output_places:
                raise NetConfigurationError(
                    f'Transition "{spec.id}" routes {color.value} to "{place_id}", '
                    f"which is not one of its output places"
                )
            if not places[place_id].accepts_color(color):
                raise NetConfigurationError(
                    f'Transition "{spec.id}" routes {color.value} to "{place_id}", '
                    f"which does not accept that color"
                )
            table[color] = place_id
        return table, None

    table = {}
    fallback: Optional[str] = None
    for place_id in spec.output_places:
        accepted = places[place_id].accepted_colors
        if not accepted:
            if fallback is not None:
                raise NetConfigurationError(
                    f'Transition "{spec.id}" has two catch-all output places '
                    f'("{fallback}", "{place_id}"); give it explicit routes'
                )
            fallback = place_id
            continue
        for color in accepted:
            if color in table:
                raise NetConfigurationError(
                    f'Transition "{spec.id}": color {color.value} is accepted by both '
                    f'"{table[color]}" and "{place_id}"; give it explicit routes'
                )
            table[color] = place_id
    return table, fallback


class Transition:
    """Runtime execution of a transition"""

    def __init__(
        self,
        spec: TransitionSpec,
        places: Mapping[str, PlaceSpec],
        timebase: Optional[Timebase] = None,
    ):
        self.spec = spec
        self.timebase = timebase or MonotonicClock()
        self._routes, self._fallback = build_routes(spec, places)
        # Tokens deposited by the most recent fire
        self.last_outputs: List[Token] = []

    @property
    def id(self) -> str:
        return self.spec.id

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def priority(self) -> int:
        return self.spec.priority

    @property
    def input_place_ids(self) -> List[str]:
        return list(self.spec.input_places)

    @property
    def output_place_ids(self) -> List[str]:
        return list(self.spec.output_places)

    @property
    def guards(self) -> List[NamedGuard]:
        return list(self.spec.guards)

    def route_for(self, color: TokenColor) -> Optional[str]:
        """Output place id for a color, or None when the color is unrouted"""
        return self._routes.get(color, self._fallback)

    # ------------------------------------------------------------------
    # Enabling
    # ------------------------------------------------------------------

    def _gather_input_tokens(self, places: Mapping[str, Place]) -> Optional[List[Token]]:
        tokens: List[Token] = []
        for place_id in self.spec.input_places:
            place = places.get(place_id)
            if place is None or place.is_empty:
                return None
            tokens.extend(place.pull(1))
        return tokens

    def _run_guard(
        self,
        guard: NamedGuard,
        tokens: Sequence[Token],
        context: Optional[TransitionContext],
    ) -> bool:
        result = guard(tokens, context)
        if inspect.isawaitable(result):
            if inspect.iscoroutine(result):
                result.close()
            raise GuardError(
                f'Guard "{guard.id}" on transition "{self.id}" returned an awaitable; '
                "guards must be synchronous"
            )
        return bool(result)

    def is_enabled(self, places: Mapping[str, Place], context: Optional[TransitionContext]) -> bool:
        tokens = self._gather_input_tokens(places)
        if tokens is None:
            return False
        for guard in self.spec.guards:
            if not self._run_guard(guard, tokens, context):
                return False
        return True

    def evaluate_guards(
        self,
        tokens: Sequence[Token],
        context: Optional[TransitionContext],
    ) -> Dict[str, bool]:
        """Evaluate every guard (no short-circuit) for the audit record"""
        return {guard.id: self._run_guard(guard, tokens, context) for guard in self.spec.guards}

    def blocked_guards(self, places: Mapping[str, Place], context: Optional[TransitionContext]) -> List[str]:
        """Ids of failing guards when all input places hold tokens, else []"""
        tokens = self._gather_input_tokens(places)
        if tokens is None:
            return []
        results = self.evaluate_guards(tokens, context)
        return [guard_id for guard_id, passed in results.items() if not passed]

    # ------------------------------------------------------------------
    # Firing
    # ------------------------------------------------------------------

    async def fire(
        self,
        input_places: Mapping[str, Place],
        output_places: Mapping[str, Place],
        context: TransitionContext,
        reason: str,
    ) -> TransitionRecord:
        """Fire the transition and return the record appended to each output token.

        Raises TokenRoutingError when an output token has no route or its
        destination refuses it; tokens already deposited stay deposited.
        """
        if not reason or not reason.strip():
            raise ValueError(f'Transition "{self.id}" fired without a reason')

        start = self.timebase.now()

        input_tokens: List[Token] = []
        for place_id in self.spec.input_places:
            place = input_places.get(place_id)
            if place is not None:
                input_tokens.extend(place.take(1))

        guard_results = self.evaluate_guards(input_tokens, context)

        if input_tokens:
            from_place = input_tokens[0].meta.current_place
        elif self.spec.input_places:
            from_place = self.spec.input_places[0]
        else:
            from_place = "unknown"

        result = self.spec.action(input_tokens, context)
        if inspect.isawaitable(result):
            result = await result
        output_tokens: List[Token] = list(result or [])

        self.last_outputs = []
        destinations: List[str] = []
        for token in output_tokens:
            dest = self.route_for(token.color)
            if dest is None:
                raise TokenRoutingError(self.id, token)
            place = output_places.get(dest)
            if place is None or not place.can_accept(token):
                raise TokenRoutingError(self.id, token, dest)
            token.move_to(dest, at=context.timestamp)
            place.push(token)
            destinations.append(dest)
            self.last_outputs.append(token)
            logger.debug(f"[{self.id}] routed {token!r} -> {dest}")

        duration_ms = (self.timebase.now() - start) * 1000

        to_place = destinations[0] if destinations else (
            self.spec.output_places[0] if self.spec.output_places else "unknown"
        )
        record = TransitionRecord(
            transition_id=self.id,
            fired_at=context.timestamp,
            from_place=from_place,
            to_place=to_place,
            duration_ms=duration_ms,
            guard_results=guard_results,
            reason=reason,
        )

        for token, dest in zip(output_tokens, destinations):
            entry = record if dest == to_place else record.model_copy(update={"to_place": dest})
            token.meta.transition_history = [*token.meta.transition_history, entry]

        return record

    def __repr__(self) -> str:
        return f"Transition({self.id!r}, priority={self.priority})"
