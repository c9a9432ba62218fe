"""Agent service — the request/response surface over the orchestrations.

A request names an orchestration and carries the seed text. Three are
available: a single-agent exchange, the solve-and-explain chain and the
writer/editor/verifier group chat. Errors that end an orchestration are
returned in the response next to whatever transcript was produced.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from foundry_groupchat.agents import GROUP_CHAT_APPROVERS, GROUP_CHAT_ROSTER
from foundry_groupchat.config import WorkflowConfig
from foundry_groupchat.exceptions import FoundryGroupChatError
from foundry_groupchat.executor import RunExecutor, execute_and_release
from foundry_groupchat.models import GroupChatResult, Message
from foundry_groupchat.prompts.math_tutor import (
    EXPLAIN_PROMPT,
    EXPLAINER_AGENT_NAME,
    RUN_ADDITIONAL_INSTRUCTIONS,
    SOLVE_PROMPT,
    SOLVER_AGENT_NAME,
)
from foundry_groupchat.prompts.orchestrator import ORCHESTRATOR_AGENT_NAME
from foundry_groupchat.registry import AgentRegistry
from foundry_groupchat.strategies.judge import Completion, RemoteAgentCompletion
from foundry_groupchat.workflow import build_group_chat

logger = logging.getLogger(__name__)


class OrchestrationKind(str, Enum):
    SINGLE_AGENT = "single"
    SOLVE_AND_EXPLAIN = "solve"
    GROUP_CHAT = "group"


@dataclass(frozen=True)
class OrchestrationRequest:
    kind: OrchestrationKind
    text: str
    agent: str | None = None


@dataclass(frozen=True)
class OrchestrationResponse:
    kind: OrchestrationKind
    final_text: str = ""
    transcript: tuple[Message, ...] = ()
    is_complete: bool = False
    converged: bool | None = None
    termination_reason: str | None = None
    error: str | None = None
    outputs: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "final_text": self.final_text,
            "transcript": [m.to_dict() for m in self.transcript],
            "is_complete": self.is_complete,
            "converged": self.converged,
            "termination_reason": self.termination_reason,
            "error": self.error,
            "outputs": dict(self.outputs),
        }

    @classmethod
    def from_group_result(cls, result: GroupChatResult) -> OrchestrationResponse:
        return cls(
            kind=OrchestrationKind.GROUP_CHAT,
            final_text=result.final_text,
            transcript=result.transcript,
            is_complete=result.is_complete,
            converged=result.converged,
            termination_reason=result.termination_reason.value if result.termination_reason else None,
            error=result.error,
        )


class AgentService:
    """Dispatch orchestration requests to the executor, registry and coordinator.

    The registry may be shared by many services; everything else a request
    touches (threads, runs, the group session) belongs to that request.
    """

    def __init__(
        self,
        executor: RunExecutor,
        registry: AgentRegistry,
        *,
        workflow: WorkflowConfig | None = None,
        judge: Completion | None = None,
        roster: tuple[str, ...] = GROUP_CHAT_ROSTER,
        approvers: frozenset[str] | None = GROUP_CHAT_APPROVERS,
    ) -> None:
        self._executor = executor
        self._registry = registry
        self._workflow = workflow or WorkflowConfig()
        self._judge = judge
        self._roster = roster
        self._approvers = approvers

    async def handle(
        self,
        request: OrchestrationRequest,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> OrchestrationResponse:
        if not request.text.strip():
            return OrchestrationResponse(kind=request.kind, error="Request text must not be empty.")

        try:
            if request.kind is OrchestrationKind.GROUP_CHAT:
                result = await self.run_group_chat(request.text, cancel_event=cancel_event)
                return OrchestrationResponse.from_group_result(result)

            if request.kind is OrchestrationKind.SOLVE_AND_EXPLAIN:
                solution, explanation = await self.solve_and_explain(request.text, cancel_event=cancel_event)
                return OrchestrationResponse(
                    kind=request.kind,
                    final_text=explanation,
                    is_complete=True,
                    outputs={"solution": solution, "explanation": explanation},
                )

            if not request.agent:
                return OrchestrationResponse(kind=request.kind, error="A single-agent request must name an agent.")
            text = await self.run_single(request.agent, request.text, cancel_event=cancel_event)
            return OrchestrationResponse(kind=request.kind, final_text=text, is_complete=True)
        except FoundryGroupChatError as exc:
            logger.error("%s request failed: %s", request.kind.value, exc)
            return OrchestrationResponse(kind=request.kind, error=str(exc))

    async def run_single(
        self,
        agent_name: str,
        text: str,
        *,
        additional_instructions: str | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> str:
        """One exchange with one named agent."""
        agent = await self._registry.get_or_create(agent_name)
        return await execute_and_release(
            self._executor,
            agent,
            text,
            additional_instructions=additional_instructions,
            cancel_event=cancel_event,
        )

    async def solve_and_explain(self, equation: str, *, cancel_event: asyncio.Event | None = None) -> tuple[str, str]:
        """Solve ``equation`` with the math tutor, then have the explainer walk through the solution."""
        solution = await self.run_single(
            SOLVER_AGENT_NAME,
            SOLVE_PROMPT.format(equation=equation),
            additional_instructions=RUN_ADDITIONAL_INSTRUCTIONS,
            cancel_event=cancel_event,
        )
        explanation = await self.run_single(
            EXPLAINER_AGENT_NAME,
            EXPLAIN_PROMPT.format(solution=solution),
            additional_instructions=RUN_ADDITIONAL_INSTRUCTIONS,
            cancel_event=cancel_event,
        )
        return solution, explanation

    async def run_group_chat(self, seed: str, *, cancel_event: asyncio.Event | None = None) -> GroupChatResult:
        """Run the group chat roster on ``seed`` with the configured policies."""
        participants = await self._registry.resolve(self._roster)
        workflow = self._workflow
        needs_judge = workflow.selection == "judge" or workflow.termination == "judge"
        coordinator = build_group_chat(
            self._executor,
            participants,
            judge=await self._get_judge() if needs_judge else None,
            selection=workflow.selection,
            termination=workflow.termination,
            max_rounds=workflow.max_rounds,
            termination_token=workflow.termination_token,
            approvers=self._approvers,
            fallback_speaker=self._roster[0] if self._roster else None,
            history_window=workflow.history_window,
            turn_ceiling=workflow.turn_ceiling,
            turn_retries=workflow.turn_retries,
        )
        return await coordinator.run(seed, cancel_event=cancel_event)

    async def _get_judge(self) -> Completion:
        if self._judge is None:
            orchestrator = await self._registry.get_or_create(ORCHESTRATOR_AGENT_NAME)
            self._judge = RemoteAgentCompletion(self._executor, orchestrator)
        return self._judge
