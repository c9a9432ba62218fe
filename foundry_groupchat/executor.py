"""Run executor — turns one asynchronous remote run into a synchronous result.

Each call opens a fresh thread, posts the input as a user message, starts a
run of the agent on it and waits for the run to finish. Waiting is delegated
to a ``RunWaiter`` so a push-based backend can replace polling without
touching the callers.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from typing import Protocol

from foundry_groupchat.client import RemoteTaskClient
from foundry_groupchat.exceptions import RemoteTransportError, RunCancelled, RunFailed, RunTimeout
from foundry_groupchat.models import NO_RESPONSE, AgentDescriptor, Message, MessageRole, Run, RunResult, RunStatus

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 0.5
DEFAULT_RUN_TIMEOUT = 300.0


class RunWaiter(Protocol):
    async def wait(self, client: RemoteTaskClient, run: Run, *, cancel_event: asyncio.Event | None = None) -> Run:
        """Return once ``run`` is terminal, raising ``RunTimeout`` or ``RunCancelled`` otherwise."""
        ...


async def _sleep_or_cancelled(delay: float, cancel_event: asyncio.Event | None) -> bool:
    """Sleep for ``delay`` seconds; True if the cancel event fired meanwhile."""
    if cancel_event is None:
        await asyncio.sleep(delay)
        return False
    if cancel_event.is_set():
        return True
    try:
        await asyncio.wait_for(cancel_event.wait(), timeout=delay)
    except asyncio.TimeoutError:
        return False
    return True


class PollingRunWaiter:
    """Poll the run status at a fixed interval until it is terminal.

    There is no backoff. A failed status read is logged and retried on the
    next tick; the timeout bounds the whole wait, status reads included.
    """

    def __init__(self, interval: float = DEFAULT_POLL_INTERVAL, timeout: float = DEFAULT_RUN_TIMEOUT) -> None:
        if interval <= 0:
            raise ValueError("Poll interval must be positive.")
        if timeout <= 0:
            raise ValueError("Run timeout must be positive.")
        self.interval = interval
        self.timeout = timeout

    async def wait(self, client: RemoteTaskClient, run: Run, *, cancel_event: asyncio.Event | None = None) -> Run:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeout

        while not run.status.is_terminal:
            remaining = deadline - loop.time()
            if remaining <= 0:
                raise RunTimeout(self.timeout, thread_id=run.thread_id, run_id=run.run_id)

            if await _sleep_or_cancelled(min(self.interval, remaining), cancel_event):
                raise RunCancelled(
                    f"Run {run.run_id} cancelled by caller",
                    thread_id=run.thread_id,
                    run_id=run.run_id,
                )

            remaining = deadline - loop.time()
            if remaining <= 0:
                raise RunTimeout(self.timeout, thread_id=run.thread_id, run_id=run.run_id)
            try:
                status = await asyncio.wait_for(client.get_run_status(run.thread_id, run.run_id), timeout=remaining)
            except Exception as exc:
                logger.warning("Polling run %s failed, retrying next tick: %s", run.run_id, exc)
                continue

            if run.advance(status):
                logger.debug("Run %s is now %s", run.run_id, status.value)
            elif status is not run.status:
                logger.debug("Ignoring stale status %s for run %s (at %s)", status.value, run.run_id, run.status.value)

        return run


def extract_response_text(messages: Sequence[Message]) -> str | None:
    """Text of the newest agent message that has any, scanning newest to oldest."""
    for message in messages:
        if message.role is MessageRole.AGENT and message.content.strip():
            return message.content
    return None


class RunExecutor:
    """Drive one request/response exchange with a single agent."""

    def __init__(self, client: RemoteTaskClient, *, waiter: RunWaiter | None = None) -> None:
        self._client = client
        self._waiter = waiter or PollingRunWaiter()

    @property
    def client(self) -> RemoteTaskClient:
        return self._client

    async def execute(
        self,
        agent: AgentDescriptor,
        text: str,
        *,
        additional_instructions: str | None = None,
        cancel_event: asyncio.Event | None = None,
        on_thread: Callable[[str], None] | None = None,
    ) -> str:
        """Run ``agent`` on ``text`` and return its reply text.

        Returns ``NO_RESPONSE`` when the run completed without any text.

        Raises:
            RunFailed: The run ended FAILED or CANCELLED (``RunTimeout`` when it
                never finished).
            RunCancelled: ``cancel_event`` was set while waiting.
            RemoteTransportError: The thread, message or run could not be created.
        """
        result = await self.run(
            agent,
            text,
            additional_instructions=additional_instructions,
            cancel_event=cancel_event,
            on_thread=on_thread,
        )
        return result.text

    async def run(
        self,
        agent: AgentDescriptor,
        text: str,
        *,
        additional_instructions: str | None = None,
        cancel_event: asyncio.Event | None = None,
        on_thread: Callable[[str], None] | None = None,
    ) -> RunResult:
        """Same as ``execute`` but returns the full ``RunResult``."""
        if agent.remote_id is None:
            raise ValueError(f"Agent {agent.name!r} has not been provisioned")
        if cancel_event is not None and cancel_event.is_set():
            raise RunCancelled(f"Run of {agent.name} cancelled before start")

        try:
            thread_id = await self._client.create_thread()
        except Exception as exc:
            raise RemoteTransportError(f"Could not create a thread for {agent.name}: {exc}") from exc
        if on_thread is not None:
            on_thread(thread_id)

        try:
            await self._client.append_message(thread_id, MessageRole.USER, text)
            run_id = await self._client.start_run(thread_id, agent.remote_id, additional_instructions)
        except Exception as exc:
            raise RemoteTransportError(f"Could not start a run of {agent.name}: {exc}") from exc

        run = Run(thread_id=thread_id, run_id=run_id, agent_id=agent.remote_id)
        logger.info("Started run %s of %s on thread %s", run_id, agent.name, thread_id)

        try:
            await self._waiter.wait(self._client, run, cancel_event=cancel_event)
        except (RunTimeout, RunCancelled):
            await self._cancel_remote_run(run)
            raise
        except asyncio.CancelledError:
            await self._cancel_remote_run(run)
            raise

        if run.status is not RunStatus.COMPLETED:
            raise RunFailed(run.status, thread_id=thread_id, run_id=run_id)

        try:
            messages = await self._client.list_messages(thread_id)
        except Exception as exc:
            raise RemoteTransportError(f"Could not read the reply of {agent.name}: {exc}") from exc

        reply = extract_response_text(messages)
        if reply is None:
            logger.info("Run %s of %s completed without text", run_id, agent.name)
            reply = NO_RESPONSE
        return RunResult(thread_id=thread_id, run_id=run_id, status=run.status, text=reply)

    async def _cancel_remote_run(self, run: Run) -> None:
        """Ask the service to stop ``run``; failures are only logged."""
        try:
            await self._client.cancel_run(run.thread_id, run.run_id)
        except Exception as exc:
            logger.warning("Could not cancel run %s: %s", run.run_id, exc)


async def execute_and_release(
    executor: RunExecutor,
    agent: AgentDescriptor,
    text: str,
    *,
    additional_instructions: str | None = None,
    cancel_event: asyncio.Event | None = None,
) -> str:
    """One stand-alone exchange: execute, then delete the thread it used."""
    threads: list[str] = []
    try:
        return await executor.execute(
            agent,
            text,
            additional_instructions=additional_instructions,
            cancel_event=cancel_event,
            on_thread=threads.append,
        )
    finally:
        for thread_id in threads:
            try:
                await executor.client.delete_thread(thread_id)
            except Exception as exc:
                logger.warning("Could not delete thread %s: %s", thread_id, exc)
