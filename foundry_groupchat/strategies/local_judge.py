"""Local judge — an agent-framework orchestrator agent over Azure OpenAI.

Used instead of the remote orchestrator agent when Azure OpenAI settings are
configured; judge calls then skip the thread/run round trip.
"""

import asyncio

from agent_framework import Agent
from agent_framework.azure import AzureOpenAIChatClient

from foundry_groupchat.config import AzureOpenAIConfig
from foundry_groupchat.exceptions import RunCancelled
from foundry_groupchat.prompts.orchestrator import (
    ORCHESTRATOR_AGENT_DESCRIPTION,
    ORCHESTRATOR_AGENT_INSTRUCTIONS,
    ORCHESTRATOR_AGENT_NAME,
)


def create_judge_agent(config: AzureOpenAIConfig) -> Agent:
    """Orchestrator agent answering judge prompts on the configured Azure OpenAI deployment."""
    chat_client = AzureOpenAIChatClient(
        endpoint=config.endpoint,
        api_key=config.api_key,
        deployment_name=config.deployment_name,
        api_version=config.api_version,
    )
    return Agent(
        client=chat_client,
        instructions=ORCHESTRATOR_AGENT_INSTRUCTIONS,
        name=ORCHESTRATOR_AGENT_NAME,
        description=ORCHESTRATOR_AGENT_DESCRIPTION,
    )


class AgentCompletion:
    """Judge calls answered by a local agent-framework agent.

    A set ``cancel_event`` abandons the pending agent call.
    """

    def __init__(self, agent: Agent) -> None:
        self._agent = agent

    async def complete(self, prompt: str, *, cancel_event: asyncio.Event | None = None) -> str:
        if cancel_event is None:
            response = await self._agent.run(prompt)
            return response.text or ""
        if cancel_event.is_set():
            raise RunCancelled("Judge call cancelled before start")

        call = asyncio.ensure_future(self._agent.run(prompt))
        cancelled = asyncio.ensure_future(cancel_event.wait())
        try:
            await asyncio.wait({call, cancelled}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (call, cancelled):
                if not task.done():
                    task.cancel()

        if not call.done() or call.cancelled():
            raise RunCancelled("Judge call cancelled by caller")
        response = call.result()
        return response.text or ""


def create_local_judge(config: AzureOpenAIConfig) -> AgentCompletion:
    return AgentCompletion(create_judge_agent(config))
