"""Math tutor agents for the solve-and-explain exchange.

The solver carries the hosted code interpreter tool so it can run code to
check its answer; the explainer is instructions only.
"""

from foundry_groupchat.models import AgentDescriptor
from foundry_groupchat.prompts.math_tutor import (
    EXPLAINER_AGENT_DESCRIPTION,
    EXPLAINER_AGENT_INSTRUCTIONS,
    EXPLAINER_AGENT_NAME,
    SOLVER_AGENT_DESCRIPTION,
    SOLVER_AGENT_INSTRUCTIONS,
    SOLVER_AGENT_NAME,
)


def _code_interpreter_tool() -> dict:
    """Hosted code interpreter tool definition for Foundry agents."""
    return {"type": "code_interpreter"}


def create_solver_agent(known_id: str | None = None, model: str | None = None) -> AgentDescriptor:
    """Create the equation solver definition."""
    return AgentDescriptor(
        name=SOLVER_AGENT_NAME,
        instructions=SOLVER_AGENT_INSTRUCTIONS,
        description=SOLVER_AGENT_DESCRIPTION,
        tools=(_code_interpreter_tool(),),
        model=model,
        known_id=known_id,
    )


def create_explainer_agent(known_id: str | None = None, model: str | None = None) -> AgentDescriptor:
    """Create the solution explainer definition."""
    return AgentDescriptor(
        name=EXPLAINER_AGENT_NAME,
        instructions=EXPLAINER_AGENT_INSTRUCTIONS,
        description=EXPLAINER_AGENT_DESCRIPTION,
        model=model,
        known_id=known_id,
    )
