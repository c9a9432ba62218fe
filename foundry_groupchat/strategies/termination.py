"""Termination strategies — decide whether the group has converged.

Every policy answers ``evaluate(history, turn_count)`` with the reason to
stop, or None to continue. ``should_stop`` is the boolean view of the same
decision. Both only read their inputs, so identical input gives an
identical answer (judge policies up to the judge's own determinism).
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from typing import Protocol

from foundry_groupchat.exceptions import RunCancelled
from foundry_groupchat.models import Message, MessageRole, TerminationReason
from foundry_groupchat.prompts.orchestrator import TERMINATION_PROMPT
from foundry_groupchat.strategies.history import HistoryReducer
from foundry_groupchat.strategies.judge import Completion, format_transcript

logger = logging.getLogger(__name__)

DEFAULT_MAXIMUM_ITERATIONS = 10
DEFAULT_TERMINATION_TOKEN = "approve"


class TerminationStrategy(Protocol):
    async def evaluate(
        self,
        history: Sequence[Message],
        turn_count: int,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> TerminationReason | None: ...

    async def should_stop(
        self,
        history: Sequence[Message],
        turn_count: int,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> bool: ...


class _Termination(ABC):
    @abstractmethod
    async def evaluate(
        self,
        history: Sequence[Message],
        turn_count: int,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> TerminationReason | None: ...

    async def should_stop(
        self,
        history: Sequence[Message],
        turn_count: int,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> bool:
        return await self.evaluate(history, turn_count, cancel_event=cancel_event) is not None


def _last_agent_message(history: Sequence[Message], approvers: frozenset[str] | None) -> Message | None:
    """The last message if an agent allowed to approve wrote it."""
    if not history:
        return None
    last = history[-1]
    if last.role is MessageRole.USER:
        return None
    if approvers is not None and last.author_name not in approvers:
        return None
    return last


class IterationCapTermination(_Termination):
    """Stop once ``turn_count`` reaches ``maximum_iterations``."""

    def __init__(self, maximum_iterations: int = DEFAULT_MAXIMUM_ITERATIONS) -> None:
        if maximum_iterations < 1:
            raise ValueError("maximum_iterations must be at least 1.")
        self.maximum_iterations = maximum_iterations

    async def evaluate(
        self,
        history: Sequence[Message],
        turn_count: int,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> TerminationReason | None:
        if turn_count >= self.maximum_iterations:
            return TerminationReason.ITERATION_CAP
        return None


class ApprovalTokenTermination(_Termination):
    """Stop when the last agent message contains the token, case-insensitive.

    With ``approvers`` set, only those participants can approve.
    """

    def __init__(self, token: str = DEFAULT_TERMINATION_TOKEN, approvers: Iterable[str] | None = None) -> None:
        if not token.strip():
            raise ValueError("Termination token must not be empty.")
        self.token = token
        self.approvers = frozenset(approvers) if approvers is not None else None

    async def evaluate(
        self,
        history: Sequence[Message],
        turn_count: int,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> TerminationReason | None:
        last = _last_agent_message(history, self.approvers)
        if last is not None and self.token.lower() in last.content.lower():
            return TerminationReason.APPROVED
        return None


class JudgeTermination(_Termination):
    """Ask a judge whether reviewer suggestions are all addressed.

    The judge sees only the window of ``reducer`` and must answer with
    exactly the canonical token to approve. A failed judge call counts as
    "continue"; the iteration cap is the safety net. Cancellation propagates.
    """

    def __init__(
        self,
        completion: Completion,
        token: str = DEFAULT_TERMINATION_TOKEN,
        *,
        approvers: Iterable[str] | None = None,
        reducer: HistoryReducer | None = None,
        prompt_template: str = TERMINATION_PROMPT,
    ) -> None:
        if not token.strip():
            raise ValueError("Termination token must not be empty.")
        self._completion = completion
        self.token = token
        self.approvers = frozenset(approvers) if approvers is not None else None
        self._reducer = reducer or HistoryReducer()
        self._prompt_template = prompt_template

    async def evaluate(
        self,
        history: Sequence[Message],
        turn_count: int,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> TerminationReason | None:
        if _last_agent_message(history, self.approvers) is None:
            return None
        view = self._reducer.reduce(history)
        prompt = self._prompt_template.format(token=self.token, history=format_transcript(view))
        try:
            answer = await self._completion.complete(prompt, cancel_event=cancel_event)
        except RunCancelled:
            raise
        except Exception as exc:
            logger.warning("Termination judge call failed, continuing: %s", exc)
            return None
        if answer.strip(" \t\r\n\"'`*.!").lower() == self.token.lower():
            return TerminationReason.APPROVED
        return None


class CombinedTermination(_Termination):
    """Stop when any policy fires; an approval wins over a cap on the same turn."""

    def __init__(self, *policies: TerminationStrategy) -> None:
        if not policies:
            raise ValueError("CombinedTermination needs at least one policy.")
        self.policies = policies

    async def evaluate(
        self,
        history: Sequence[Message],
        turn_count: int,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> TerminationReason | None:
        fired: TerminationReason | None = None
        for policy in self.policies:
            reason = await policy.evaluate(history, turn_count, cancel_event=cancel_event)
            if reason is TerminationReason.APPROVED:
                return reason
            if fired is None:
                fired = reason
        return fired
