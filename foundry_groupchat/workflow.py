"""Group chat workflow — the turn-taking coordinator and its builder."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Sequence

from foundry_groupchat.exceptions import RemoteTransportError, RunCancelled, RunFailed, SessionNonConvergent
from foundry_groupchat.executor import RunExecutor
from foundry_groupchat.models import (
    AgentDescriptor,
    GroupChatResult,
    GroupSession,
    Message,
    SessionState,
    TerminationReason,
)
from foundry_groupchat.strategies.history import DEFAULT_HISTORY_WINDOW, HistoryReducer
from foundry_groupchat.strategies.judge import Completion
from foundry_groupchat.strategies.selection import JudgeSelection, SelectionStrategy, SequentialSelection
from foundry_groupchat.strategies.termination import (
    DEFAULT_MAXIMUM_ITERATIONS,
    DEFAULT_TERMINATION_TOKEN,
    ApprovalTokenTermination,
    CombinedTermination,
    IterationCapTermination,
    JudgeTermination,
    TerminationStrategy,
)

logger = logging.getLogger(__name__)

DEFAULT_TURN_CEILING = 50


class GroupChatCoordinator:
    """Run a multi-agent session one turn at a time until it converges.

    Each turn: reduce the transcript to a view, pick a speaker, run that
    agent on the last message of the view, append its reply, then ask the
    termination strategy whether to stop. ``turn_ceiling`` is an absolute
    limit for strategies that never fire; hitting it completes the session
    as non-convergent.

    Per-turn failures: a failed or timed-out run is retried on the same
    speaker up to ``turn_retries`` times, then the session is aborted as
    FAILED. Transport errors abort at once. The result of an aborted session
    still carries the partial transcript and the error text.

    A set ``cancel_event`` stops the pending run or judge call; the session
    ends CANCELLED with the turns completed so far.

    One session at a time: ``run`` refuses to start while a session is
    running. Remote threads created during a session are deleted when it
    stops, whatever the outcome.
    """

    def __init__(
        self,
        executor: RunExecutor,
        participants: Sequence[AgentDescriptor],
        *,
        selection: SelectionStrategy | None = None,
        termination: TerminationStrategy | None = None,
        reducer: HistoryReducer | None = None,
        turn_ceiling: int = DEFAULT_TURN_CEILING,
        turn_retries: int = 0,
        strict: bool = False,
    ) -> None:
        unresolved = [p.name for p in participants if not p.is_resolved]
        if unresolved:
            raise ValueError(f"Participants are not provisioned: {', '.join(unresolved)}")
        if turn_ceiling < 1:
            raise ValueError("turn_ceiling must be at least 1.")
        if turn_retries < 0:
            raise ValueError("turn_retries must not be negative.")

        self._executor = executor
        self._selection = selection or SequentialSelection()
        self._termination = termination or CombinedTermination(
            ApprovalTokenTermination(),
            IterationCapTermination(),
        )
        self._reducer = reducer or HistoryReducer()
        self._turn_ceiling = turn_ceiling
        self._turn_retries = turn_retries
        self._strict = strict
        self.session = GroupSession(participants)

    @property
    def participants(self) -> tuple[AgentDescriptor, ...]:
        return self.session.participants

    def reset(self) -> None:
        """Clear the session back to CREATED."""
        if self.session.state is SessionState.RUNNING:
            raise RuntimeError("Cannot reset a running session.")
        self.session.reset()

    async def run(self, seed: str, *, cancel_event: asyncio.Event | None = None) -> GroupChatResult:
        """Run a session seeded with ``seed`` and return its result.

        Raises:
            RuntimeError: A session is already running on this coordinator.
            SessionNonConvergent: ``strict`` is set and the session was cut off.
        """
        session = self.session
        if session.state is SessionState.RUNNING:
            raise RuntimeError("A group session is already running on this coordinator.")
        if session.state is not SessionState.CREATED:
            session.reset()

        session.start(seed)
        logger.info("Group session started with %s", ", ".join(p.name for p in session.participants))
        try:
            try:
                await self._loop(session, cancel_event)
            except RunCancelled as exc:
                logger.info("Group session cancelled after %d turns", session.turn_count)
                session.cancel(str(exc))
            except (RunFailed, RemoteTransportError) as exc:
                logger.error("Group session aborted after %d turns: %s", session.turn_count, exc)
                session.fail(str(exc))
            except asyncio.CancelledError:
                session.cancel("Session task was cancelled")
                raise
        finally:
            await self._release_threads(session)
            result = session.snapshot()
            if not result.is_complete:
                session.reset()

        if result.is_complete:
            logger.info(
                "Group session completed after %d turns (%s)",
                result.turn_count,
                result.termination_reason.value if result.termination_reason else "?",
            )
            if self._strict and not result.converged:
                raise SessionNonConvergent(result)
        return result

    async def _loop(self, session: GroupSession, cancel_event: asyncio.Event | None) -> None:
        while True:
            if cancel_event is not None and cancel_event.is_set():
                raise RunCancelled("Group session cancelled by caller")

            view = self._reducer.reduce(session.transcript)
            speaker = await self._select(session.participants, view, cancel_event)
            logger.info("Turn %d: routing to %s", session.turn_count + 1, speaker.name)

            text = await self._run_turn(session, speaker, view[-1].content, cancel_event)
            session.append_turn(speaker.name, text)
            logger.info("Turn %d: %s responded (%d chars)", session.turn_count, speaker.name, len(text))

            reason = await self._termination.evaluate(
                session.transcript,
                session.turn_count,
                cancel_event=cancel_event,
            )
            if reason is None and session.turn_count >= self._turn_ceiling:
                logger.warning("No termination signal after %d turns, stopping", session.turn_count)
                reason = TerminationReason.NON_CONVERGENT
            if reason is not None:
                session.complete(reason)
                return

    async def _select(
        self,
        participants: tuple[AgentDescriptor, ...],
        view: Sequence[Message],
        cancel_event: asyncio.Event | None,
    ) -> AgentDescriptor:
        if len(participants) == 1:
            return participants[0]
        return await self._selection.select_next(participants, view, cancel_event=cancel_event)

    async def _run_turn(
        self,
        session: GroupSession,
        speaker: AgentDescriptor,
        text: str,
        cancel_event: asyncio.Event | None,
    ) -> str:
        attempt = 0
        while True:
            try:
                return await self._executor.execute(
                    speaker,
                    text,
                    cancel_event=cancel_event,
                    on_thread=session.track_thread,
                )
            except RunFailed as exc:
                if attempt >= self._turn_retries:
                    raise
                attempt += 1
                logger.warning(
                    "Turn of %s failed (%s), retrying %d/%d",
                    speaker.name,
                    exc,
                    attempt,
                    self._turn_retries,
                )

    async def _release_threads(self, session: GroupSession) -> None:
        client = self._executor.client
        while session.thread_ids:
            thread_id = session.thread_ids.pop()
            try:
                await client.delete_thread(thread_id)
            except Exception as exc:
                logger.warning("Could not delete thread %s: %s", thread_id, exc)


def build_group_chat(
    executor: RunExecutor,
    participants: Sequence[AgentDescriptor],
    *,
    judge: Completion | None = None,
    selection: str = "judge",
    termination: str = "token",
    max_rounds: int = DEFAULT_MAXIMUM_ITERATIONS,
    termination_token: str = DEFAULT_TERMINATION_TOKEN,
    approvers: Iterable[str] | None = None,
    fallback_speaker: str | None = None,
    history_window: int = DEFAULT_HISTORY_WINDOW,
    turn_ceiling: int = DEFAULT_TURN_CEILING,
    turn_retries: int = 0,
    strict: bool = False,
) -> GroupChatCoordinator:
    """Build a coordinator with the given participants and policies.

    Args:
        executor: Runs each turn against the remote service.
        participants: Provisioned agents, in roster order.
        judge: Completion used by the judge-based policies.
        selection: ``"judge"`` or ``"sequential"``.
        termination: ``"token"`` (substring match) or ``"judge"``. The
            iteration cap of ``max_rounds`` is always added.
        max_rounds: Maximum completed turns before the session is cut off.
        termination_token: Word that signals approval.
        approvers: Participants allowed to approve; None lets anyone.
        fallback_speaker: Speaker used when the selection judge gives an
            unusable answer; None picks the first eligible participant.
        history_window: Messages shown to judges and agents.
        turn_ceiling: Absolute turn limit, raised to ``max_rounds`` if lower.
        turn_retries: Extra attempts for a failed turn before aborting.
        strict: Raise ``SessionNonConvergent`` instead of returning a cut-off result.

    Returns:
        A coordinator ready to run.
    """
    if selection == "judge":
        if judge is None:
            raise ValueError("Judge selection needs a judge completion.")
        selection_strategy: SelectionStrategy = JudgeSelection(judge, default=fallback_speaker)
    elif selection == "sequential":
        selection_strategy = SequentialSelection()
    else:
        raise ValueError(f"Unknown selection policy: {selection}")

    if termination == "judge":
        if judge is None:
            raise ValueError("Judge termination needs a judge completion.")
        approval: TerminationStrategy = JudgeTermination(
            judge,
            termination_token,
            approvers=approvers,
            reducer=HistoryReducer(history_window),
        )
    elif termination == "token":
        approval = ApprovalTokenTermination(termination_token, approvers)
    else:
        raise ValueError(f"Unknown termination policy: {termination}")

    return GroupChatCoordinator(
        executor,
        participants,
        selection=selection_strategy,
        termination=CombinedTermination(approval, IterationCapTermination(max_rounds)),
        reducer=HistoryReducer(history_window),
        turn_ceiling=max(turn_ceiling, max_rounds),
        turn_retries=turn_retries,
        strict=strict,
    )
