#!/usr/bin/env python3
"""
AXIOM exceptions.

All engine errors inherit from AxiomError for easy catching. Configuration
errors are raised while a net is being wired, never while it runs.
"""

from typing import Any, Optional


class AxiomError(Exception):
    """Base exception for all AXIOM errors."""


class NetConfigurationError(AxiomError):
    """Duplicate ids, unknown place references or ambiguous routing in a net."""


class UnknownPlaceError(AxiomError):
    """A place id was used that the engine does not know about."""

    def __init__(self, place_id: str):
        super().__init__(f'Place "{place_id}" not found')
        self.place_id = place_id


class TokenRejectedError(AxiomError):
    """A place refused a token handed to the engine from outside."""

    def __init__(self, place_id: str, token: Any):
        super().__init__(
            f'Place "{place_id}" rejected token (at capacity or wrong color)'
        )
        self.place_id = place_id
        self.token = token


class TokenRoutingError(AxiomError):
    """A fired transition produced a token it has no destination for.

    The token is attached so the caller can still inspect it; it has
    already left its input place.
    """

    def __init__(self, transition_id: str, token: Any, place_id: Optional[str] = None):
        color = getattr(token, "color", None)
        if place_id is None:
            msg = f'Transition "{transition_id}" has no route for color {color!r}'
        else:
            msg = (
                f'Transition "{transition_id}" routed color {color!r} to '
                f'"{place_id}" but the place refused it'
            )
        super().__init__(msg)
        self.transition_id = transition_id
        self.token = token
        self.place_id = place_id


class GuardError(AxiomError):
    """A guard broke its contract (for example by returning an awaitable)."""
