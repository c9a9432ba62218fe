"""Orchestrator agent used as the judge for speaker selection and approval."""

from foundry_groupchat.models import AgentDescriptor
from foundry_groupchat.prompts.orchestrator import (
    ORCHESTRATOR_AGENT_DESCRIPTION,
    ORCHESTRATOR_AGENT_INSTRUCTIONS,
    ORCHESTRATOR_AGENT_NAME,
)


def create_orchestrator_agent(known_id: str | None = None, model: str | None = None) -> AgentDescriptor:
    """Create the orchestrator definition for remote judge calls."""
    return AgentDescriptor(
        name=ORCHESTRATOR_AGENT_NAME,
        instructions=ORCHESTRATOR_AGENT_INSTRUCTIONS,
        description=ORCHESTRATOR_AGENT_DESCRIPTION,
        model=model,
        known_id=known_id,
    )
