"""Verifier — fact-checks the draft and is the participant expected to approve it."""

from foundry_groupchat.models import AgentDescriptor
from foundry_groupchat.prompts.verifier import (
    VERIFIER_AGENT_DESCRIPTION,
    VERIFIER_AGENT_INSTRUCTIONS,
    VERIFIER_AGENT_NAME,
)


def create_verifier_agent(known_id: str | None = None, model: str | None = None) -> AgentDescriptor:
    """Create the verifier definition."""
    return AgentDescriptor(
        name=VERIFIER_AGENT_NAME,
        instructions=VERIFIER_AGENT_INSTRUCTIONS,
        description=VERIFIER_AGENT_DESCRIPTION,
        model=model,
        known_id=known_id,
    )
