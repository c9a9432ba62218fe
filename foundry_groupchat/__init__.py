"""Multi-agent group chat over Azure AI Foundry Agent Service."""

from foundry_groupchat.exceptions import (
    AgentUnavailable,
    FoundryGroupChatError,
    ProvisioningFailure,
    RemoteTransportError,
    RunCancelled,
    RunFailed,
    RunTimeout,
    SelectionAmbiguous,
    SessionNonConvergent,
)
from foundry_groupchat.executor import PollingRunWaiter, RunExecutor
from foundry_groupchat.models import (
    NO_RESPONSE,
    AgentDescriptor,
    GroupChatResult,
    GroupSession,
    Message,
    MessageRole,
    RunStatus,
    SessionState,
    TerminationReason,
)
from foundry_groupchat.registry import AgentRegistry
from foundry_groupchat.workflow import GroupChatCoordinator, build_group_chat

__all__ = [
    "NO_RESPONSE",
    "AgentDescriptor",
    "AgentRegistry",
    "AgentUnavailable",
    "FoundryGroupChatError",
    "GroupChatCoordinator",
    "GroupChatResult",
    "GroupSession",
    "Message",
    "MessageRole",
    "PollingRunWaiter",
    "ProvisioningFailure",
    "RemoteTransportError",
    "RunCancelled",
    "RunExecutor",
    "RunFailed",
    "RunStatus",
    "RunTimeout",
    "SelectionAmbiguous",
    "SessionNonConvergent",
    "SessionState",
    "TerminationReason",
    "build_group_chat",
]
