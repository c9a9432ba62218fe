"""Writer assistant — drafts and revises the artifact."""

from foundry_groupchat.models import AgentDescriptor
from foundry_groupchat.prompts.writer import WRITER_AGENT_DESCRIPTION, WRITER_AGENT_INSTRUCTIONS, WRITER_AGENT_NAME


def create_writer_agent(known_id: str | None = None, model: str | None = None) -> AgentDescriptor:
    """Create the writer assistant definition."""
    return AgentDescriptor(
        name=WRITER_AGENT_NAME,
        instructions=WRITER_AGENT_INSTRUCTIONS,
        description=WRITER_AGENT_DESCRIPTION,
        model=model,
        known_id=known_id,
    )
