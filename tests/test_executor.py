import asyncio

import pytest

from foundry_groupchat.exceptions import RemoteTransportError, RunCancelled, RunFailed, RunTimeout
from foundry_groupchat.executor import PollingRunWaiter, RunExecutor, execute_and_release, extract_response_text
from foundry_groupchat.models import NO_RESPONSE, AgentDescriptor, Message, MessageRole, RunStatus


@pytest.fixture
def writer(fake_client):
    return fake_client.resolved("WriterAssistant")


@pytest.mark.asyncio
async def test_execute_returns_agent_reply(fake_client, executor, writer):
    fake_client.script("WriterAssistant", replies="A bright, airy linen shirt.")

    reply = await executor.execute(writer, "Describe a linen shirt")

    assert reply == "A bright, airy linen shirt."
    assert fake_client.run_inputs == [("WriterAssistant", "Describe a linen shirt")]


@pytest.mark.asyncio
async def test_run_reports_thread_and_status(fake_client, executor, writer):
    threads = []
    result = await executor.run(writer, "hello", on_thread=threads.append)

    assert result.status is RunStatus.COMPLETED
    assert threads == [result.thread_id]
    assert result.run_id in fake_client.runs


@pytest.mark.asyncio
async def test_additional_instructions_are_forwarded(fake_client, executor, writer):
    await executor.execute(writer, "hello", additional_instructions="Be brief.")
    assert fake_client.additional_instructions == ["Be brief."]


@pytest.mark.asyncio
async def test_completed_run_without_text_returns_sentinel(fake_client, executor, writer):
    fake_client.script("WriterAssistant", replies=None)
    assert await executor.execute(writer, "hello") == NO_RESPONSE


@pytest.mark.asyncio
async def test_blank_reply_counts_as_no_text(fake_client, executor, writer):
    fake_client.script("WriterAssistant", replies="   ")
    assert await executor.execute(writer, "hello") == NO_RESPONSE


@pytest.mark.parametrize("status", [RunStatus.FAILED, RunStatus.CANCELLED])
@pytest.mark.asyncio
async def test_unsuccessful_terminal_status_raises(fake_client, executor, writer, status):
    fake_client.script("WriterAssistant", statuses=[RunStatus.IN_PROGRESS, status])

    with pytest.raises(RunFailed) as exc_info:
        await executor.execute(writer, "hello")

    assert exc_info.value.status is status
    assert exc_info.value.run_id is not None


@pytest.mark.asyncio
async def test_stale_status_does_not_move_run_backwards(fake_client, executor, writer):
    fake_client.script(
        "WriterAssistant",
        replies="done",
        statuses=[RunStatus.IN_PROGRESS, RunStatus.QUEUED, RunStatus.IN_PROGRESS, RunStatus.COMPLETED],
    )
    result = await executor.run(writer, "hello")
    assert result.status is RunStatus.COMPLETED
    assert result.text == "done"


@pytest.mark.asyncio
async def test_poll_errors_are_retried(fake_client, executor, writer):
    fake_client.poll_failures = 2
    fake_client.script("WriterAssistant", replies="recovered")
    assert await executor.execute(writer, "hello") == "recovered"


@pytest.mark.asyncio
async def test_timeout_cancels_remote_run(fake_client, writer):
    fake_client.script("WriterAssistant", statuses=[RunStatus.IN_PROGRESS])
    executor = RunExecutor(fake_client, waiter=PollingRunWaiter(interval=0.01, timeout=0.05))

    with pytest.raises(RunTimeout) as exc_info:
        await executor.execute(writer, "hello")

    assert exc_info.value.status is RunStatus.FAILED
    assert fake_client.cancelled_runs == [exc_info.value.run_id]


@pytest.mark.asyncio
async def test_timeout_is_a_run_failure(fake_client, writer):
    fake_client.script("WriterAssistant", statuses=[RunStatus.QUEUED])
    executor = RunExecutor(fake_client, waiter=PollingRunWaiter(interval=0.01, timeout=0.03))
    with pytest.raises(RunFailed):
        await executor.execute(writer, "hello")


@pytest.mark.asyncio
async def test_timeout_bounds_a_hanging_status_read(fake_client, writer):
    fake_client.poll_delay = 5
    executor = RunExecutor(fake_client, waiter=PollingRunWaiter(interval=0.01, timeout=0.1))
    loop = asyncio.get_running_loop()

    started = loop.time()
    with pytest.raises(RunTimeout) as exc_info:
        await executor.execute(writer, "hello")

    assert loop.time() - started < 1
    assert fake_client.cancelled_runs == [exc_info.value.run_id]


@pytest.mark.asyncio
async def test_cancel_event_stops_polling(fake_client, writer):
    fake_client.script("WriterAssistant", statuses=[RunStatus.IN_PROGRESS])
    executor = RunExecutor(fake_client, waiter=PollingRunWaiter(interval=0.01, timeout=5.0))
    cancel = asyncio.Event()
    asyncio.get_running_loop().call_later(0.05, cancel.set)

    with pytest.raises(RunCancelled):
        await executor.execute(writer, "hello", cancel_event=cancel)

    assert len(fake_client.cancelled_runs) == 1


@pytest.mark.asyncio
async def test_cancel_event_set_before_start(fake_client, executor, writer):
    cancel = asyncio.Event()
    cancel.set()

    with pytest.raises(RunCancelled):
        await executor.execute(writer, "hello", cancel_event=cancel)

    assert fake_client.threads == {}


@pytest.mark.asyncio
async def test_task_cancellation_cancels_remote_run(fake_client, writer):
    fake_client.script("WriterAssistant", statuses=[RunStatus.IN_PROGRESS])
    executor = RunExecutor(fake_client, waiter=PollingRunWaiter(interval=0.01, timeout=5.0))

    task = asyncio.create_task(executor.execute(writer, "hello"))
    await asyncio.sleep(0.05)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
    assert len(fake_client.cancelled_runs) == 1


@pytest.mark.asyncio
async def test_thread_creation_failure_is_a_transport_error(fake_client, executor, writer):
    fake_client.fail_create_thread = True
    with pytest.raises(RemoteTransportError):
        await executor.execute(writer, "hello")


@pytest.mark.asyncio
async def test_unprovisioned_agent_is_rejected(executor):
    with pytest.raises(ValueError):
        await executor.execute(AgentDescriptor(name="Ghost", instructions=""), "hello")


@pytest.mark.asyncio
async def test_execute_and_release_deletes_thread(fake_client, executor, writer):
    reply = await execute_and_release(executor, writer, "hello")

    assert reply == "ok"
    assert fake_client.deleted_threads == list(fake_client.threads)


@pytest.mark.asyncio
async def test_execute_and_release_deletes_thread_on_failure(fake_client, executor, writer):
    fake_client.script("WriterAssistant", statuses=[RunStatus.FAILED])

    with pytest.raises(RunFailed):
        await execute_and_release(executor, writer, "hello")

    assert len(fake_client.deleted_threads) == 1


def test_extract_response_text_prefers_newest_agent_message():
    newest_first = [
        Message(MessageRole.AGENT, ""),
        Message(MessageRole.AGENT, "second answer"),
        Message(MessageRole.AGENT, "first answer"),
        Message(MessageRole.USER, "question"),
    ]
    assert extract_response_text(newest_first) == "second answer"


def test_extract_response_text_ignores_user_messages():
    assert extract_response_text([Message(MessageRole.USER, "question")]) is None
    assert extract_response_text([]) is None


@pytest.mark.parametrize("kwargs", [{"interval": 0}, {"timeout": 0}, {"interval": -1}])
def test_waiter_rejects_non_positive_settings(kwargs):
    with pytest.raises(ValueError):
        PollingRunWaiter(**kwargs)
