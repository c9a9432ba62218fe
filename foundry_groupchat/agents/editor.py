"""Editor — reviews drafts and suggests improvements."""

from foundry_groupchat.models import AgentDescriptor
from foundry_groupchat.prompts.editor import EDITOR_AGENT_DESCRIPTION, EDITOR_AGENT_INSTRUCTIONS, EDITOR_AGENT_NAME


def create_editor_agent(known_id: str | None = None, model: str | None = None) -> AgentDescriptor:
    """Create the editor definition."""
    return AgentDescriptor(
        name=EDITOR_AGENT_NAME,
        instructions=EDITOR_AGENT_INSTRUCTIONS,
        description=EDITOR_AGENT_DESCRIPTION,
        model=model,
        known_id=known_id,
    )
