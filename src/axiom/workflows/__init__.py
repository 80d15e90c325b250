"""Built-in workflow nets and the runners that drive them."""

from axiom.workflows.collaborators import (
    CouncilAgents,
    CouncilPayload,
    CouncilSynthesis,
    ValidationCollaborators,
)
from axiom.workflows.council_net import create_council_net, create_council_token
from axiom.workflows.critique_net import create_critique_net, extend_with_critique
from axiom.workflows.ids import CouncilPlaceId, CouncilTransitionId, PlaceId, TransitionId
from axiom.workflows.runner import CouncilResult, WorkflowResult, WorkflowRunner, run_council
from axiom.workflows.validation_net import create_proposal_token, create_validation_net

__all__ = [
    "CouncilAgents",
    "CouncilPayload",
    "CouncilPlaceId",
    "CouncilResult",
    "CouncilSynthesis",
    "CouncilTransitionId",
    "PlaceId",
    "TransitionId",
    "ValidationCollaborators",
    "WorkflowResult",
    "WorkflowRunner",
    "create_council_net",
    "create_council_token",
    "create_critique_net",
    "create_proposal_token",
    "create_validation_net",
    "extend_with_critique",
    "run_council",
]
