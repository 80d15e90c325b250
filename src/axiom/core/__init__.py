"""
AXIOM core - tokens, places, transitions and the engine that runs them.
"""

from axiom.core.colors import ACTIVE_COLORS, SINK_COLORS, TokenColor
from axiom.core.engine import AxiomEngine, EngineState, EngineStats
from axiom.core.exceptions import (
    AxiomError,
    GuardError,
    NetConfigurationError,
    TokenRejectedError,
    TokenRoutingError,
    UnknownPlaceError,
)
from axiom.core.place import Place
from axiom.core.specs import (
    NamedGuard,
    NetDefinition,
    PlaceSpec,
    PlaceState,
    TransitionContext,
    TransitionSpec,
)
from axiom.core.tokens import (
    Token,
    TokenMetadata,
    TransitionRecord,
    ValidationRecord,
    create_token,
)
from axiom.core.transition import Transition

__all__ = [
    "ACTIVE_COLORS",
    "AxiomEngine",
    "AxiomError",
    "EngineState",
    "EngineStats",
    "GuardError",
    "NamedGuard",
    "NetConfigurationError",
    "NetDefinition",
    "Place",
    "PlaceSpec",
    "PlaceState",
    "SINK_COLORS",
    "Token",
    "TokenColor",
    "TokenMetadata",
    "TokenRejectedError",
    "TokenRoutingError",
    "Transition",
    "TransitionContext",
    "TransitionRecord",
    "TransitionSpec",
    "UnknownPlaceError",
    "ValidationRecord",
    "create_token",
]
