"""Main entrypoint for the Foundry multi-agent group chat.

Usage:
    python main.py "Write a product description for a linen summer shirt"
    python main.py --mode solve "3x + 11 = 14"
    python main.py --mode single --agent Editor "Review this text: ..."
    python main.py                      # interactive group chat
"""

import argparse
import asyncio
import json
import logging

from foundry_groupchat.agents import build_catalog
from foundry_groupchat.config import Config, load_config
from foundry_groupchat.executor import PollingRunWaiter, RunExecutor
from foundry_groupchat.foundry_client import FoundryTaskClient
from foundry_groupchat.models import Message, MessageRole
from foundry_groupchat.registry import AgentRegistry
from foundry_groupchat.service import AgentService, OrchestrationKind, OrchestrationRequest, OrchestrationResponse
from foundry_groupchat.strategies.judge import Completion


def get_judge(config: Config) -> Completion | None:
    """Local judge when Azure OpenAI is configured; None selects the remote orchestrator agent."""
    if config.azure_openai is None:
        return None
    from foundry_groupchat.strategies.local_judge import create_local_judge

    return create_local_judge(config.azure_openai)


def _print_message(msg: Message) -> None:
    """Pretty-print a single transcript message."""
    author = "user" if msg.role is MessageRole.USER else msg.author_name or "?"
    if msg.content:
        print(f"  [{author}]: {msg.content}")


def _print_response(response: OrchestrationResponse) -> None:
    for index, msg in enumerate(response.transcript):
        if index:
            print(f"\n--- Turn {index}: {msg.author_name} responded ---")
        _print_message(msg)

    for name, text in response.outputs.items():
        print(f"\n--- {name} ---\n{text}")
    if not response.transcript and not response.outputs and response.final_text:
        print(response.final_text)

    print(f"\n{'=' * 60}")
    if response.error:
        print(f"Failed: {response.error}")
    elif response.kind is OrchestrationKind.GROUP_CHAT and not response.converged:
        print(f"Stopped without approval ({response.termination_reason}).")
    else:
        print("Workflow complete.")
    print(f"{'=' * 60}")


async def run(request: OrchestrationRequest, service: AgentService, as_json: bool = False) -> OrchestrationResponse:
    """Run one request through the service and print the outcome."""
    if not as_json:
        print(f"\n{'=' * 60}")
        print(f"Task ({request.kind.value}): {request.text}")
        print(f"{'=' * 60}\n")

    response = await service.handle(request)

    if as_json:
        print(json.dumps(response.to_dict(), indent=2))
    else:
        _print_response(response)
    return response


def apply_command(
    line: str, kind: OrchestrationKind, agent: str | None
) -> tuple[OrchestrationKind, str | None] | None:
    """Apply a ``/mode <kind>`` or ``/agent <name>`` line.

    Returns the new (kind, agent) pair, or None when ``line`` is a task.
    Raises ValueError for an unknown command or mode.
    """
    if not line.startswith("/"):
        return None
    command, _, value = line[1:].partition(" ")
    value = value.strip()
    if command == "mode":
        return OrchestrationKind(value), agent
    if command == "agent":
        return kind, value or None
    raise ValueError(f"Unknown command: /{command}")


async def interactive(service: AgentService, kind: OrchestrationKind, agent: str | None):
    """Read tasks from stdin; ``/mode`` and ``/agent`` switch the orchestration."""
    print("Foundry Multi-Agent Group Chat")
    print(f"Modes: {', '.join(k.value for k in OrchestrationKind)}. Switch with /mode <mode> or /agent <name>.")
    print("Type 'quit' to exit.\n")

    while True:
        try:
            line = input(f"[{kind.value}{':' + agent if agent else ''}] You: ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nBye.")
            break

        if not line or line.lower() in ("quit", "exit", "q"):
            print("Bye.")
            break

        try:
            switched = apply_command(line, kind, agent)
        except ValueError as exc:
            print(exc)
            continue
        if switched is not None:
            kind, agent = switched
            continue

        await run(OrchestrationRequest(kind=kind, text=line, agent=agent), service)
        print()


async def amain(args: argparse.Namespace, config: Config) -> int:
    async with FoundryTaskClient.from_config(config.foundry) as client:
        workflow = config.workflow
        executor = RunExecutor(
            client,
            waiter=PollingRunWaiter(interval=workflow.poll_interval, timeout=workflow.run_timeout_seconds),
        )
        registry = AgentRegistry(client, build_catalog(config.agent_ids, config.foundry.model_deployment_name))
        service = AgentService(executor, registry, workflow=workflow, judge=get_judge(config))

        kind = OrchestrationKind(args.mode)
        if args.task:
            request = OrchestrationRequest(kind=kind, text=" ".join(args.task), agent=args.agent)
            response = await run(request, service, as_json=args.json)
            return 1 if response.error else 0

        await interactive(service, kind, args.agent)
        return 0


def main():
    ap = argparse.ArgumentParser(description="Run Foundry agents as a group chat or single exchanges")
    ap.add_argument(
        "--mode",
        choices=[k.value for k in OrchestrationKind],
        default=OrchestrationKind.GROUP_CHAT.value,
        help="Orchestration to run (default: group)",
    )
    ap.add_argument("--agent", default=None, help="Agent name for --mode single")
    ap.add_argument("--json", action="store_true", help="Print the response as JSON")
    ap.add_argument("task", nargs="*", help="Task text; omit for interactive mode")
    args = ap.parse_args()

    config = load_config()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    raise SystemExit(asyncio.run(amain(args, config)))


if __name__ == "__main__":
    main()
