"""Core data model: messages, runs, agent descriptors and group sessions."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

# Returned in place of a result when a completed run produced no text.
NO_RESPONSE = "No response from the agent."


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MessageRole(str, Enum):
    USER = "user"
    AGENT = "agent"


@dataclass(frozen=True)
class Message:
    role: MessageRole
    content: str
    author_name: str | None = None
    created_at: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "role": self.role.value,
            "author_name": self.author_name,
            "content": self.content,
            "created_at": self.created_at.isoformat(),
        }


class RunStatus(str, Enum):
    QUEUED = "queued"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATUSES

    @property
    def rank(self) -> int:
        if self is RunStatus.QUEUED:
            return 0
        if self is RunStatus.IN_PROGRESS:
            return 1
        return 2


_TERMINAL_STATUSES = frozenset({RunStatus.COMPLETED, RunStatus.FAILED, RunStatus.CANCELLED})


@dataclass
class Run:
    """One execution of an agent against a thread.

    Status only moves forward: a report of an earlier status is ignored and a
    terminal status is never replaced.
    """

    thread_id: str
    run_id: str
    agent_id: str
    status: RunStatus = RunStatus.QUEUED

    def advance(self, status: RunStatus) -> bool:
        """Move to ``status`` if that is a forward transition. Returns whether it moved."""
        if self.status.is_terminal or status.rank < self.status.rank:
            return False
        if status is self.status:
            return False
        self.status = status
        return True


@dataclass(frozen=True)
class RunResult:
    thread_id: str
    run_id: str
    status: RunStatus
    text: str


@dataclass(frozen=True)
class AgentHandle:
    """Opaque reference to an agent provisioned on the remote service."""

    id: str
    name: str
    model: str | None = None


@dataclass(frozen=True)
class AgentDescriptor:
    """A named agent identity.

    Catalog entries carry no ``remote_id``; the registry hands out copies with
    ``remote_id`` filled in once the agent is provisioned.
    """

    name: str
    instructions: str
    description: str = ""
    tools: tuple[dict[str, Any], ...] = ()
    model: str | None = None
    known_id: str | None = None
    remote_id: str | None = None

    @property
    def is_resolved(self) -> bool:
        return self.remote_id is not None


class SessionState(str, Enum):
    CREATED = "created"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


class TerminationReason(str, Enum):
    APPROVED = "approved"
    ITERATION_CAP = "iteration_cap"
    NON_CONVERGENT = "non_convergent"

    @property
    def is_cutoff(self) -> bool:
        return self is not TerminationReason.APPROVED


@dataclass(frozen=True)
class GroupChatResult:
    """Snapshot of a group session, taken when the session stops."""

    state: SessionState
    transcript: tuple[Message, ...]
    turn_count: int
    termination_reason: TerminationReason | None = None
    error: str | None = None

    @property
    def is_complete(self) -> bool:
        return self.state is SessionState.COMPLETED

    @property
    def converged(self) -> bool:
        return self.is_complete and self.termination_reason is TerminationReason.APPROVED

    @property
    def final_text(self) -> str:
        for message in reversed(self.transcript):
            if message.role is MessageRole.AGENT:
                return message.content
        return ""


class GroupSession:
    """Mutable state of one multi-agent conversation.

    The transcript is append-only and ``turn_count`` moves with it: one seed
    message, then exactly one agent message per completed turn.
    """

    def __init__(self, participants: tuple[AgentDescriptor, ...] | list[AgentDescriptor]) -> None:
        if not participants:
            raise ValueError("A group session needs at least one participant.")
        names = [p.name for p in participants]
        if len(set(names)) != len(names):
            raise ValueError(f"Participant names must be unique: {names}")
        self.participants: tuple[AgentDescriptor, ...] = tuple(participants)
        self._transcript: list[Message] = []
        self.turn_count = 0
        self.state = SessionState.CREATED
        self.termination_reason: TerminationReason | None = None
        self.error: str | None = None
        self.thread_ids: list[str] = []

    @property
    def transcript(self) -> tuple[Message, ...]:
        return tuple(self._transcript)

    @property
    def is_complete(self) -> bool:
        return self.state is SessionState.COMPLETED

    def start(self, seed: str) -> None:
        self._require(SessionState.CREATED)
        self._transcript.append(Message(role=MessageRole.USER, content=seed))
        self.state = SessionState.RUNNING

    def append_turn(self, speaker: str, text: str) -> Message:
        self._require(SessionState.RUNNING)
        message = Message(role=MessageRole.AGENT, content=text, author_name=speaker)
        self._transcript.append(message)
        self.turn_count += 1
        return message

    def track_thread(self, thread_id: str) -> None:
        self.thread_ids.append(thread_id)

    def complete(self, reason: TerminationReason) -> None:
        self._require(SessionState.RUNNING)
        self.termination_reason = reason
        self.state = SessionState.COMPLETED

    def fail(self, error: str) -> None:
        self._require(SessionState.RUNNING)
        self.error = error
        self.state = SessionState.FAILED

    def cancel(self, error: str | None = None) -> None:
        self._require(SessionState.RUNNING)
        self.error = error
        self.state = SessionState.CANCELLED

    def reset(self) -> None:
        """Drop the conversation and go back to CREATED."""
        self._transcript.clear()
        self.turn_count = 0
        self.termination_reason = None
        self.error = None
        self.thread_ids.clear()
        self.state = SessionState.CREATED

    def snapshot(self) -> GroupChatResult:
        return GroupChatResult(
            state=self.state,
            transcript=self.transcript,
            turn_count=self.turn_count,
            termination_reason=self.termination_reason,
            error=self.error,
        )

    def _require(self, state: SessionState) -> None:
        if self.state is not state:
            raise RuntimeError(f"Session is {self.state.value}, expected {state.value}")
