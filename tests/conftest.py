import asyncio
import itertools
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

import pytest

from foundry_groupchat.agents import build_catalog
from foundry_groupchat.executor import PollingRunWaiter, RunExecutor
from foundry_groupchat.models import AgentDescriptor, AgentHandle, Message, MessageRole, RunStatus
from foundry_groupchat.registry import AgentRegistry

DEFAULT_STATUSES = [RunStatus.QUEUED, RunStatus.IN_PROGRESS, RunStatus.COMPLETED]

Replies = str | Sequence[str | None] | Callable[[str], str | None] | None


@dataclass
class AgentScript:
    """How a fake agent behaves: its replies and the statuses each run reports."""

    replies: Replies = "ok"
    statuses: list[Any] = field(default_factory=lambda: list(DEFAULT_STATUSES))
    run_count: int = 0

    def statuses_for_next_run(self) -> list[RunStatus]:
        if self.statuses and isinstance(self.statuses[0], list):
            index = min(self.run_count, len(self.statuses) - 1)
            return list(self.statuses[index])
        return list(self.statuses)

    def reply_for(self, text: str, index: int) -> str | None:
        if self.replies is None or isinstance(self.replies, str):
            return self.replies
        if callable(self.replies):
            return self.replies(text)
        return self.replies[min(index, len(self.replies) - 1)]


@dataclass
class FakeRun:
    thread_id: str
    agent_name: str
    input_text: str
    statuses: list[RunStatus]
    reply_index: int
    last: RunStatus = RunStatus.QUEUED
    replied: bool = False


class FakeTaskClient:
    """In-memory stand-in for the remote agent service (both protocols)."""

    def __init__(self) -> None:
        self._ids = itertools.count(1)
        self.agents: dict[str, AgentHandle] = {}
        self.scripts: dict[str, AgentScript] = {}
        self.threads: dict[str, list[Message]] = {}
        self.runs: dict[str, FakeRun] = {}
        self.run_inputs: list[tuple[str, str]] = []
        self.additional_instructions: list[str | None] = []
        self.deleted_threads: list[str] = []
        self.cancelled_runs: list[str] = []
        self.created_agents: list[str] = []
        self.lookups: list[str] = []
        self.poll_failures = 0
        self.poll_delay = 0.0
        self.fail_create_thread = False
        self.fail_provisioning = False
        self.fail_lookup = False
        self.provision_delay = 0.0

    # -- scripting helpers --

    def add_agent(self, name: str, agent_id: str | None = None) -> AgentHandle:
        handle = AgentHandle(id=agent_id or f"asst_{next(self._ids)}", name=name, model="gpt-4o")
        self.agents[handle.id] = handle
        return handle

    def script(self, name: str, replies: Replies = "ok", statuses: list[Any] | None = None) -> AgentScript:
        script = AgentScript(replies=replies, statuses=statuses or list(DEFAULT_STATUSES))
        self.scripts[name] = script
        return script

    def resolved(self, name: str) -> AgentDescriptor:
        """A provisioned descriptor for ``name`` backed by this fake."""
        handle = self.add_agent(name)
        return AgentDescriptor(name=name, instructions=f"You are {name}.", remote_id=handle.id)

    # -- RemoteTaskClient --

    async def create_thread(self) -> str:
        if self.fail_create_thread:
            raise ConnectionError("service unavailable")
        thread_id = f"thread_{next(self._ids)}"
        self.threads[thread_id] = []
        return thread_id

    async def append_message(self, thread_id: str, role: MessageRole, text: str) -> None:
        self.threads[thread_id].append(Message(role=role, content=text))

    async def start_run(self, thread_id: str, agent_id: str, additional_instructions: str | None = None) -> str:
        name = self.agents[agent_id].name
        script = self.scripts.setdefault(name, AgentScript())
        text = self.threads[thread_id][-1].content
        self.run_inputs.append((name, text))
        self.additional_instructions.append(additional_instructions)

        run_id = f"run_{next(self._ids)}"
        self.runs[run_id] = FakeRun(
            thread_id=thread_id,
            agent_name=name,
            input_text=text,
            statuses=script.statuses_for_next_run(),
            reply_index=script.run_count,
        )
        script.run_count += 1
        return run_id

    async def get_run_status(self, thread_id: str, run_id: str) -> RunStatus:
        if self.poll_delay:
            await asyncio.sleep(self.poll_delay)
        if self.poll_failures:
            self.poll_failures -= 1
            raise TimeoutError("poll failed")
        run = self.runs[run_id]
        if run.statuses:
            run.last = run.statuses.pop(0)
        if run.last is RunStatus.COMPLETED and not run.replied:
            run.replied = True
            reply = self.scripts[run.agent_name].reply_for(run.input_text, run.reply_index)
            if reply is not None:
                self.threads[thread_id].append(Message(role=MessageRole.AGENT, content=reply))
        return run.last

    async def list_messages(self, thread_id: str) -> list[Message]:
        return list(reversed(self.threads[thread_id]))

    async def cancel_run(self, thread_id: str, run_id: str) -> None:
        self.cancelled_runs.append(run_id)

    async def delete_thread(self, thread_id: str) -> None:
        self.deleted_threads.append(thread_id)

    # -- AgentProvisioning --

    async def get_agent_by_id(self, agent_id: str) -> AgentHandle | None:
        self.lookups.append(agent_id)
        if self.fail_lookup:
            raise ConnectionError("lookup failed")
        return self.agents.get(agent_id)

    async def get_or_create_agent(
        self,
        name: str,
        instructions: str,
        tools: Sequence[dict[str, Any]] = (),
        model: str | None = None,
        description: str = "",
    ) -> AgentHandle:
        await asyncio.sleep(self.provision_delay)
        if self.fail_provisioning:
            raise PermissionError("not authorized")
        for handle in self.agents.values():
            if handle.name == name:
                return handle
        self.created_agents.append(name)
        return self.add_agent(name)


class ScriptedCompletion:
    """Judge stand-in answering from a list, recording every prompt."""

    def __init__(self, *answers: str | Exception) -> None:
        self.answers = list(answers)
        self.prompts: list[str] = []

    async def complete(self, prompt: str, *, cancel_event: asyncio.Event | None = None) -> str:
        self.prompts.append(prompt)
        answer = self.answers[min(len(self.prompts) - 1, len(self.answers) - 1)]
        if isinstance(answer, Exception):
            raise answer
        return answer


@pytest.fixture
def fake_client() -> FakeTaskClient:
    return FakeTaskClient()


@pytest.fixture
def executor(fake_client: FakeTaskClient) -> RunExecutor:
    return RunExecutor(fake_client, waiter=PollingRunWaiter(interval=0.001, timeout=2.0))


@pytest.fixture
def registry(fake_client: FakeTaskClient) -> AgentRegistry:
    return AgentRegistry(fake_client, build_catalog())


@pytest.fixture
def team(fake_client: FakeTaskClient) -> list[AgentDescriptor]:
    """Writer, editor and verifier, provisioned on the fake service."""
    return [fake_client.resolved(name) for name in ("WriterAssistant", "Editor", "Verifier")]
