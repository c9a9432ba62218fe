"""Agent definitions for the group chat and the single-agent exchanges."""

from foundry_groupchat.agents.editor import create_editor_agent
from foundry_groupchat.agents.math_tutor import create_explainer_agent, create_solver_agent
from foundry_groupchat.agents.orchestrator import create_orchestrator_agent
from foundry_groupchat.agents.verifier import create_verifier_agent
from foundry_groupchat.agents.writer import create_writer_agent
from foundry_groupchat.config import AgentIdsConfig
from foundry_groupchat.models import AgentDescriptor
from foundry_groupchat.prompts.editor import EDITOR_AGENT_NAME
from foundry_groupchat.prompts.verifier import VERIFIER_AGENT_NAME
from foundry_groupchat.prompts.writer import WRITER_AGENT_NAME

# Default group chat roster, in selection order.
GROUP_CHAT_ROSTER = (WRITER_AGENT_NAME, EDITOR_AGENT_NAME, VERIFIER_AGENT_NAME)

# Participants whose messages may carry the approval token.
GROUP_CHAT_APPROVERS = frozenset({VERIFIER_AGENT_NAME})


def build_catalog(agent_ids: AgentIdsConfig | None = None, model: str | None = None) -> list[AgentDescriptor]:
    """All agent definitions, with known remote ids where configured."""
    ids = agent_ids or AgentIdsConfig()
    return [
        create_writer_agent(ids.writer, model),
        create_editor_agent(ids.editor, model),
        create_verifier_agent(ids.verifier, model),
        create_orchestrator_agent(ids.orchestrator, model),
        create_solver_agent(ids.solver, model),
        create_explainer_agent(ids.explainer, model),
    ]


__all__ = [
    "GROUP_CHAT_APPROVERS",
    "GROUP_CHAT_ROSTER",
    "build_catalog",
    "create_editor_agent",
    "create_explainer_agent",
    "create_orchestrator_agent",
    "create_solver_agent",
    "create_verifier_agent",
    "create_writer_agent",
]
