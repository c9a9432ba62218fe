"""Remote task client interfaces.

The core only talks to the remote agent service through these two
protocols. ``foundry_groupchat.foundry_client`` implements both for Azure AI
Foundry Agent Service.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

from foundry_groupchat.models import AgentHandle, Message, MessageRole, RunStatus


@runtime_checkable
class RemoteTaskClient(Protocol):
    async def create_thread(self) -> str: ...

    async def append_message(self, thread_id: str, role: MessageRole, text: str) -> None: ...

    async def start_run(self, thread_id: str, agent_id: str, additional_instructions: str | None = None) -> str: ...

    async def get_run_status(self, thread_id: str, run_id: str) -> RunStatus: ...

    async def list_messages(self, thread_id: str) -> list[Message]:
        """Messages of the thread, newest first."""
        ...

    async def cancel_run(self, thread_id: str, run_id: str) -> None: ...

    async def delete_thread(self, thread_id: str) -> None: ...


@runtime_checkable
class AgentProvisioning(Protocol):
    async def get_or_create_agent(
        self,
        name: str,
        instructions: str,
        tools: Sequence[dict[str, Any]] = (),
        model: str | None = None,
        description: str = "",
    ) -> AgentHandle: ...

    async def get_agent_by_id(self, agent_id: str) -> AgentHandle | None: ...
