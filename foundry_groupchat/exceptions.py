"""Error taxonomy for agent provisioning, remote runs and group sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from foundry_groupchat.models import GroupChatResult, RunStatus


class FoundryGroupChatError(Exception):
    """Base class for every error raised by this package."""


class ProvisioningFailure(FoundryGroupChatError):
    """An agent identity could not be created or resolved."""


class AgentUnavailable(ProvisioningFailure):
    """A named agent has no remote identity and cannot take part."""

    def __init__(self, name: str, reason: str = "") -> None:
        self.name = name
        message = f"Agent {name!r} is unavailable"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class RemoteTransportError(FoundryGroupChatError):
    """A call to the remote agent service failed outside of the poll loop."""


class RunError(FoundryGroupChatError):
    """A single remote run did not produce a result."""

    def __init__(self, message: str, *, thread_id: str | None = None, run_id: str | None = None) -> None:
        super().__init__(message)
        self.thread_id = thread_id
        self.run_id = run_id


class RunFailed(RunError):
    """The run reached a FAILED or CANCELLED terminal status."""

    def __init__(
        self,
        status: RunStatus,
        *,
        thread_id: str | None = None,
        run_id: str | None = None,
        detail: str = "",
    ) -> None:
        self.status = status
        message = f"Run {run_id} on thread {thread_id} ended with status {status.value}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message, thread_id=thread_id, run_id=run_id)


class RunTimeout(RunFailed):
    """The run did not reach a terminal status within the allowed time."""

    def __init__(self, timeout: float, *, thread_id: str | None = None, run_id: str | None = None) -> None:
        from foundry_groupchat.models import RunStatus

        self.timeout = timeout
        super().__init__(
            RunStatus.FAILED,
            thread_id=thread_id,
            run_id=run_id,
            detail=f"timed out after {timeout:g}s",
        )


class RunCancelled(RunError):
    """Polling was aborted by the caller's cancellation signal."""


class SelectionAmbiguous(FoundryGroupChatError):
    """The selection judge answered with something that is not a valid speaker."""

    def __init__(self, answer: str, reason: str) -> None:
        self.answer = answer
        super().__init__(f"Cannot route on judge answer {answer!r}: {reason}")


class SessionNonConvergent(FoundryGroupChatError):
    """A group session hit its turn cap without an approval signal."""

    def __init__(self, result: GroupChatResult) -> None:
        self.result = result
        super().__init__(
            f"Group session stopped after {result.turn_count} turns without approval "
            f"({result.termination_reason.value if result.termination_reason else 'unknown'})"
        )
