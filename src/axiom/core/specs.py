#!/usr/bin/env python3
"""
AXIOM - Specification Layer

Static configuration of places, transitions and whole nets. Runtime objects
in place.py and transition.py are built from these.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, FrozenSet, List, Optional, Sequence, Tuple, Union

from axiom.core.colors import TokenColor
from axiom.core.tokens import Token

if TYPE_CHECKING:
    from axiom.core.engine import AxiomEngine


# Signature: (tokens, context) -> bool
GuardFn = Callable[[Sequence[Token], Optional["TransitionContext"]], bool]

# Signature: (tokens, context) -> tokens, sync or async
ActionFn = Callable[
    [List[Token], "TransitionContext"],
    Union[List[Token], Awaitable[List[Token]]],
]


@dataclass(frozen=True)
class TransitionContext:
    """What an action or guard may know about the firing in progress."""
    engine: Optional["AxiomEngine"]
    timestamp: str
    step_number: int


@dataclass
class PlaceSpec:
    """Specification for a place in the net"""
    id: str
    name: str
    description: str = ""
    accepted_colors: FrozenSet[TokenColor] = frozenset()  # Empty accepts every color
    capacity: Optional[int] = None  # None is unlimited
    is_sink: bool = False
    is_source: bool = False

    def __post_init__(self):
        self.accepted_colors = frozenset(TokenColor(c) for c in self.accepted_colors)
        if self.capacity is not None and self.capacity < 0:
            raise ValueError(f"Place {self.id} capacity must be >= 0")

    def accepts_color(self, color: TokenColor) -> bool:
        return not self.accepted_colors or color in self.accepted_colors


@dataclass(frozen=True)
class NamedGuard:
    """A guard predicate with an id for audit records."""
    id: str
    name: str
    fn: GuardFn

    def __call__(self, tokens: Sequence[Token], context: Optional[TransitionContext] = None) -> bool:
        return self.fn(tokens, context)


@dataclass
class TransitionSpec:
    """Specification for a transition in the net"""
    id: str
    name: str
    input_places: List[str]
    output_places: List[str]
    action: ActionFn
    description: str = ""
    guards: List[NamedGuard] = field(default_factory=list)
    priority: int = 0
    routes: Optional[Dict[TokenColor, str]] = None  # Derived from output places when None


@dataclass
class NetDefinition:
    """A closed set of places and transitions forming one workflow net."""
    name: str
    places: List[PlaceSpec] = field(default_factory=list)
    transitions: List[TransitionSpec] = field(default_factory=list)
    source_place: Optional[str] = None

    def get_place(self, place_id: str) -> Optional[PlaceSpec]:
        for spec in self.places:
            if spec.id == place_id:
                return spec
        return None

    def get_transition(self, transition_id: str) -> Optional[TransitionSpec]:
        for spec in self.transitions:
            if spec.id == transition_id:
                return spec
        return None

    def to_mermaid(self) -> str:
        """Generate Mermaid diagram of the net"""
        from axiom.util import to_mermaid
        return to_mermaid(self)


@dataclass(frozen=True)
class PlaceState:
    """Immutable snapshot of a place."""
    spec: PlaceSpec
    tokens: Tuple[Token, ...]
    token_count: int
