import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from foundry_groupchat.exceptions import RunCancelled
from foundry_groupchat.strategies.local_judge import AgentCompletion


@pytest.mark.asyncio
async def test_agent_completion_returns_response_text():
    agent = SimpleNamespace(run=AsyncMock(return_value=SimpleNamespace(text="Editor")))

    answer = await AgentCompletion(agent).complete("Who is next?")

    assert answer == "Editor"
    agent.run.assert_awaited_once_with("Who is next?")


@pytest.mark.asyncio
async def test_agent_completion_empty_response():
    agent = SimpleNamespace(run=AsyncMock(return_value=SimpleNamespace(text=None)))
    assert await AgentCompletion(agent).complete("Approve?") == ""


@pytest.mark.asyncio
async def test_agent_completion_answers_before_cancel():
    agent = SimpleNamespace(run=AsyncMock(return_value=SimpleNamespace(text="Verifier")))

    answer = await AgentCompletion(agent).complete("Who is next?", cancel_event=asyncio.Event())

    assert answer == "Verifier"


@pytest.mark.asyncio
async def test_agent_completion_stops_when_cancelled():
    async def slow_run(prompt):
        await asyncio.sleep(5)
        return SimpleNamespace(text="Editor")

    agent = SimpleNamespace(run=slow_run)
    loop = asyncio.get_running_loop()
    cancel = asyncio.Event()
    loop.call_later(0.05, cancel.set)

    started = loop.time()
    with pytest.raises(RunCancelled):
        await AgentCompletion(agent).complete("Who is next?", cancel_event=cancel)
    assert loop.time() - started < 0.5


@pytest.mark.asyncio
async def test_agent_completion_cancelled_before_start():
    agent = SimpleNamespace(run=AsyncMock(return_value=SimpleNamespace(text="Editor")))
    cancel = asyncio.Event()
    cancel.set()

    with pytest.raises(RunCancelled):
        await AgentCompletion(agent).complete("Who is next?", cancel_event=cancel)
    agent.run.assert_not_awaited()
