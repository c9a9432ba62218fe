"""Azure AI Foundry Agent Service client — threads, messages, runs and agents.

Implements ``RemoteTaskClient`` and ``AgentProvisioning`` on top of the async
``AgentsClient`` from ``azure-ai-agents``.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from azure.ai.agents.aio import AgentsClient
from azure.ai.agents.models import ListSortOrder
from azure.ai.agents.models import MessageRole as FoundryMessageRole
from azure.core.exceptions import ResourceNotFoundError
from azure.identity.aio import DefaultAzureCredential

from foundry_groupchat.config import FoundryConfig
from foundry_groupchat.models import AgentHandle, Message, MessageRole, RunStatus

logger = logging.getLogger(__name__)

# Foundry run statuses that the core collapses into its five-state lifecycle.
_STATUS_MAP: dict[str, RunStatus] = {
    "queued": RunStatus.QUEUED,
    "in_progress": RunStatus.IN_PROGRESS,
    "requires_action": RunStatus.IN_PROGRESS,
    "cancelling": RunStatus.IN_PROGRESS,
    "completed": RunStatus.COMPLETED,
    "failed": RunStatus.FAILED,
    "expired": RunStatus.FAILED,
    "cancelled": RunStatus.CANCELLED,
}


def map_run_status(status: Any) -> RunStatus:
    """Translate a Foundry run status (enum or string) into a ``RunStatus``."""
    key = str(getattr(status, "value", status)).lower()
    try:
        return _STATUS_MAP[key]
    except KeyError:
        raise ValueError(f"Unknown run status from service: {status!r}") from None


def _to_message(thread_message: Any) -> Message:
    role_value = str(getattr(thread_message.role, "value", thread_message.role)).lower()
    role = MessageRole.USER if role_value == "user" else MessageRole.AGENT
    text = ""
    for item in thread_message.text_messages or []:
        if item.text and item.text.value:
            text = item.text.value
            break
    kwargs: dict[str, Any] = {}
    if thread_message.created_at is not None:
        kwargs["created_at"] = thread_message.created_at
    return Message(role=role, content=text, **kwargs)


class FoundryTaskClient:
    """Both remote capabilities, backed by ``azure.ai.agents.aio.AgentsClient``.

    Acts as an async context manager; closing it closes the SDK client and the
    credential it created (a credential passed in by the caller is left open).
    """

    def __init__(
        self,
        endpoint: str,
        *,
        credential: Any | None = None,
        default_model: str = "gpt-4o",
        agents_client: AgentsClient | None = None,
    ) -> None:
        self._owns_credential = credential is None and agents_client is None
        self._credential = credential or (DefaultAzureCredential() if agents_client is None else None)
        self._client = agents_client or AgentsClient(endpoint=endpoint, credential=self._credential)
        self.default_model = default_model

    @classmethod
    def from_config(cls, config: FoundryConfig) -> FoundryTaskClient:
        return cls(config.project_endpoint, default_model=config.model_deployment_name)

    async def __aenter__(self) -> FoundryTaskClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.close()
        if self._owns_credential and self._credential is not None:
            await self._credential.close()

    # -- threads, messages, runs --

    async def create_thread(self) -> str:
        thread = await self._client.threads.create()
        return thread.id

    async def append_message(self, thread_id: str, role: MessageRole, text: str) -> None:
        foundry_role = FoundryMessageRole.USER if role is MessageRole.USER else FoundryMessageRole.AGENT
        await self._client.messages.create(thread_id=thread_id, role=foundry_role, content=text)

    async def start_run(self, thread_id: str, agent_id: str, additional_instructions: str | None = None) -> str:
        run = await self._client.runs.create(
            thread_id=thread_id,
            agent_id=agent_id,
            additional_instructions=additional_instructions,
        )
        return run.id

    async def get_run_status(self, thread_id: str, run_id: str) -> RunStatus:
        run = await self._client.runs.get(thread_id=thread_id, run_id=run_id)
        status = map_run_status(run.status)
        if status is RunStatus.FAILED and run.last_error:
            logger.warning("Run %s failed: %s", run_id, run.last_error)
        return status

    async def list_messages(self, thread_id: str) -> list[Message]:
        messages: list[Message] = []
        async for thread_message in self._client.messages.list(thread_id=thread_id, order=ListSortOrder.DESCENDING):
            messages.append(_to_message(thread_message))
        return messages

    async def cancel_run(self, thread_id: str, run_id: str) -> None:
        await self._client.runs.cancel(thread_id=thread_id, run_id=run_id)

    async def delete_thread(self, thread_id: str) -> None:
        await self._client.threads.delete(thread_id)

    # -- agent provisioning --

    async def get_agent_by_id(self, agent_id: str) -> AgentHandle | None:
        try:
            agent = await self._client.get_agent(agent_id)
        except ResourceNotFoundError:
            return None
        return AgentHandle(id=agent.id, name=agent.name, model=agent.model)

    async def get_or_create_agent(
        self,
        name: str,
        instructions: str,
        tools: Sequence[dict[str, Any]] = (),
        model: str | None = None,
        description: str = "",
    ) -> AgentHandle:
        async for agent in self._client.list_agents():
            if agent.name == name:
                logger.info("Reusing agent %s (%s)", name, agent.id)
                return AgentHandle(id=agent.id, name=agent.name, model=agent.model)

        agent = await self._client.create_agent(
            model=model or self.default_model,
            name=name,
            instructions=instructions,
            description=description or None,
            tools=list(tools) or None,
        )
        logger.info("Created agent %s (%s)", name, agent.id)
        return AgentHandle(id=agent.id, name=agent.name, model=agent.model)
