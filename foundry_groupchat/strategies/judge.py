"""Judge completions — single-turn calls that decide control flow.

Selection and termination policies only see the ``Completion`` protocol.
``RemoteAgentCompletion`` answers judge prompts with a provisioned Foundry
agent; ``foundry_groupchat.strategies.local_judge`` answers them with a local
agent-framework agent.

Judge calls take the session's ``cancel_event``: once it is set a pending call
stops and raises ``RunCancelled``.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Protocol

from foundry_groupchat.executor import RunExecutor, execute_and_release
from foundry_groupchat.models import AgentDescriptor, Message, MessageRole


class Completion(Protocol):
    async def complete(self, prompt: str, *, cancel_event: asyncio.Event | None = None) -> str: ...


def author_label(message: Message) -> str:
    if message.role is MessageRole.USER:
        return "user"
    return message.author_name or "agent"


def format_transcript(messages: Sequence[Message]) -> str:
    """Render messages as ``author: content`` blocks for judge prompts."""
    return "\n\n".join(f"{author_label(m)}: {m.content}" for m in messages)


class RemoteAgentCompletion:
    """Judge calls answered by a provisioned Foundry agent.

    Each call opens its own thread, deleted once the answer is read.
    """

    def __init__(self, executor: RunExecutor, agent: AgentDescriptor) -> None:
        self._executor = executor
        self._agent = agent

    async def complete(self, prompt: str, *, cancel_event: asyncio.Event | None = None) -> str:
        return await execute_and_release(self._executor, self._agent, prompt, cancel_event=cancel_event)
