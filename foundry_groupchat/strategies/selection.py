"""Selection strategies — decide which participant speaks next."""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Sequence
from typing import Protocol

from foundry_groupchat.exceptions import RunCancelled, SelectionAmbiguous
from foundry_groupchat.models import AgentDescriptor, Message, MessageRole
from foundry_groupchat.prompts.orchestrator import SELECTION_PROMPT
from foundry_groupchat.strategies.judge import Completion, author_label

logger = logging.getLogger(__name__)

# Wrapping a judge may put around a bare name: quotes, markdown, trailing punctuation.
_STRIP_CHARS = " \t\r\n\"'`*_.,:;!"


class SelectionStrategy(Protocol):
    async def select_next(
        self,
        participants: Sequence[AgentDescriptor],
        history: Sequence[Message],
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> AgentDescriptor:
        """Return a member of ``participants``; never the last author when there are two or more."""
        ...


def last_author(history: Sequence[Message]) -> str | None:
    """Name of the agent that wrote the most recent message, None for user input."""
    if not history or history[-1].role is MessageRole.USER:
        return None
    return history[-1].author_name


def default_speaker(
    participants: Sequence[AgentDescriptor],
    history: Sequence[Message],
    preferred: str | None = None,
) -> AgentDescriptor:
    """``preferred`` if it may speak now, otherwise the first participant that did not write the last message."""
    if not participants:
        raise ValueError("No participants to select from.")
    author = last_author(history)
    candidates = [p for p in participants if p.name != author] or list(participants)
    for participant in candidates:
        if participant.name == preferred:
            return participant
    return candidates[0]


class SequentialSelection:
    """Static policy: the participant after the last author, in roster order.

    User input hands the turn to the first participant.
    """

    async def select_next(
        self,
        participants: Sequence[AgentDescriptor],
        history: Sequence[Message],
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> AgentDescriptor:
        if not participants:
            raise ValueError("No participants to select from.")
        names = [p.name for p in participants]
        author = last_author(history)
        if author in names:
            return participants[(names.index(author) + 1) % len(participants)]
        return participants[0]


class JudgeSelection:
    """Judge policy: ask a completion to name the next speaker.

    The judge sees the last message of the view and the roster. An answer
    that does not name exactly one participant, or names the last author,
    falls back to ``default`` (when it is not the last author) or else to
    the first participant that is not; every fallback is logged and counted.
    Cancellation is not a fallback: ``RunCancelled`` propagates.
    """

    def __init__(
        self,
        completion: Completion,
        *,
        default: str | None = None,
        prompt_template: str = SELECTION_PROMPT,
    ) -> None:
        self._completion = completion
        self._default = default
        self._prompt_template = prompt_template
        self.fallback_count = 0

    async def select_next(
        self,
        participants: Sequence[AgentDescriptor],
        history: Sequence[Message],
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> AgentDescriptor:
        if not participants:
            raise ValueError("No participants to select from.")
        if len(participants) == 1:
            return participants[0]

        try:
            answer = await self._completion.complete(
                self._build_prompt(participants, history),
                cancel_event=cancel_event,
            )
            return self.parse(answer, participants, last_author(history))
        except RunCancelled:
            raise
        except SelectionAmbiguous as exc:
            reason = str(exc)
        except Exception as exc:
            reason = f"selection judge call failed: {exc}"

        fallback = default_speaker(participants, history, self._default)
        self.fallback_count += 1
        logger.warning("Routing to default speaker %s. %s", fallback.name, reason)
        return fallback

    def _build_prompt(self, participants: Sequence[AgentDescriptor], history: Sequence[Message]) -> str:
        roster = "\n".join(
            f"- {p.name}: {p.description}" if p.description else f"- {p.name}" for p in participants
        )
        last = history[-1] if history else None
        return self._prompt_template.format(
            participants=roster,
            author=author_label(last) if last else "user",
            response=last.content if last else "",
        )

    @staticmethod
    def parse(answer: str, participants: Sequence[AgentDescriptor], author: str | None) -> AgentDescriptor:
        """Map the judge answer to exactly one participant.

        Raises:
            SelectionAmbiguous: No participant, several participants, or the
                last author is named.
        """
        cleaned = answer.strip(_STRIP_CHARS).lower()
        chosen = [p for p in participants if p.name.lower() == cleaned]
        if not chosen:
            chosen = [
                p for p in participants if re.search(rf"\b{re.escape(p.name)}\b", answer, flags=re.IGNORECASE)
            ]

        if not chosen:
            raise SelectionAmbiguous(answer, "no participant named")
        if len(chosen) > 1:
            raise SelectionAmbiguous(answer, "several participants named")
        if chosen[0].name == author:
            raise SelectionAmbiguous(answer, f"{author} wrote the last message")
        return chosen[0]
