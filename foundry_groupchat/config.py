"""Centralized configuration — loads env vars and exposes typed settings."""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

SELECTION_MODES = ("judge", "sequential")
TERMINATION_MODES = ("token", "judge")


@dataclass(frozen=True)
class FoundryConfig:
    project_endpoint: str
    model_deployment_name: str = "gpt-4o"


@dataclass(frozen=True)
class AgentIdsConfig:
    """Known remote ids of already provisioned agents, keyed by agent role."""

    writer: str | None = None
    editor: str | None = None
    verifier: str | None = None
    orchestrator: str | None = None
    solver: str | None = None
    explainer: str | None = None


@dataclass(frozen=True)
class AzureOpenAIConfig:
    endpoint: str
    api_key: str
    deployment_name: str = "gpt-4o-mini"
    api_version: str = "2025-01-01-preview"


@dataclass(frozen=True)
class WorkflowConfig:
    max_rounds: int = 10
    poll_interval_ms: int = 500
    run_timeout_seconds: float = 300.0
    history_window: int = 3
    termination_token: str = "approve"
    turn_ceiling: int = 50
    turn_retries: int = 0
    selection: str = "judge"
    termination: str = "token"

    @property
    def poll_interval(self) -> float:
        return self.poll_interval_ms / 1000


@dataclass(frozen=True)
class Config:
    foundry: FoundryConfig
    agent_ids: AgentIdsConfig
    workflow: WorkflowConfig
    azure_openai: AzureOpenAIConfig | None = None
    log_level: str = "INFO"


def _optional(name: str) -> str | None:
    return os.environ.get(name) or None


def load_workflow_config() -> WorkflowConfig:
    """Workflow knobs only; nothing here is required."""
    workflow = WorkflowConfig(
        max_rounds=int(os.environ.get("WORKFLOW_MAX_ROUNDS", "10")),
        poll_interval_ms=int(os.environ.get("RUN_POLL_INTERVAL_MS", "500")),
        run_timeout_seconds=float(os.environ.get("RUN_TIMEOUT_SECONDS", "300")),
        history_window=int(os.environ.get("WORKFLOW_HISTORY_WINDOW", "3")),
        termination_token=os.environ.get("WORKFLOW_TERMINATION_TOKEN", "approve"),
        turn_ceiling=int(os.environ.get("WORKFLOW_TURN_CEILING", "50")),
        turn_retries=int(os.environ.get("WORKFLOW_TURN_RETRIES", "0")),
        selection=os.environ.get("WORKFLOW_SELECTION", "judge").lower(),
        termination=os.environ.get("WORKFLOW_TERMINATION", "token").lower(),
    )

    if workflow.max_rounds < 1:
        raise ValueError("WORKFLOW_MAX_ROUNDS must be at least 1.")
    if workflow.poll_interval_ms <= 0:
        raise ValueError("RUN_POLL_INTERVAL_MS must be positive.")
    if workflow.run_timeout_seconds <= 0:
        raise ValueError("RUN_TIMEOUT_SECONDS must be positive.")
    if workflow.history_window < 1:
        raise ValueError("WORKFLOW_HISTORY_WINDOW must be at least 1.")
    if not workflow.termination_token.strip():
        raise ValueError("WORKFLOW_TERMINATION_TOKEN must not be empty.")
    if workflow.turn_ceiling < workflow.max_rounds:
        raise ValueError("WORKFLOW_TURN_CEILING must not be lower than WORKFLOW_MAX_ROUNDS.")
    if workflow.turn_retries < 0:
        raise ValueError("WORKFLOW_TURN_RETRIES must not be negative.")
    if workflow.selection not in SELECTION_MODES:
        raise ValueError(f"WORKFLOW_SELECTION must be one of {', '.join(SELECTION_MODES)}.")
    if workflow.termination not in TERMINATION_MODES:
        raise ValueError(f"WORKFLOW_TERMINATION must be one of {', '.join(TERMINATION_MODES)}.")
    return workflow


def load_config() -> Config:
    """Load configuration from environment variables.

    A ``.env`` file in the working directory is read first, if present.
    """
    load_dotenv()

    # Azure AI Foundry project (required)
    endpoint = os.environ.get("AZURE_AI_PROJECT_ENDPOINT", "")
    if not endpoint:
        raise ValueError(
            "AZURE_AI_PROJECT_ENDPOINT must be set "
            "(e.g. https://<resource>.services.ai.azure.com/api/projects/<project>)"
        )
    foundry = FoundryConfig(
        project_endpoint=endpoint,
        model_deployment_name=os.environ.get("AZURE_AI_MODEL_DEPLOYMENT_NAME", "gpt-4o"),
    )

    # Previously provisioned agents (optional)
    agent_ids = AgentIdsConfig(
        writer=_optional("WRITER_AGENT_ID"),
        editor=_optional("EDITOR_AGENT_ID"),
        verifier=_optional("VERIFIER_AGENT_ID"),
        orchestrator=_optional("ORCHESTRATOR_AGENT_ID"),
        solver=_optional("SOLVER_AGENT_ID"),
        explainer=_optional("EXPLAINER_AGENT_ID"),
    )

    # Azure OpenAI for local judge calls (optional; both values or neither)
    azure_openai = None
    aoai_endpoint = _optional("AZURE_OPENAI_ENDPOINT")
    aoai_key = _optional("AZURE_OPENAI_API_KEY")
    if aoai_endpoint and aoai_key:
        azure_openai = AzureOpenAIConfig(
            endpoint=aoai_endpoint,
            api_key=aoai_key,
            deployment_name=os.environ.get("AZURE_OPENAI_CHAT_DEPLOYMENT_NAME", "gpt-4o-mini"),
            api_version=os.environ.get("AZURE_OPENAI_API_VERSION", "2025-01-01-preview"),
        )
    elif aoai_endpoint or aoai_key:
        raise ValueError("AZURE_OPENAI_ENDPOINT and AZURE_OPENAI_API_KEY must be set together.")

    return Config(
        foundry=foundry,
        agent_ids=agent_ids,
        workflow=load_workflow_config(),
        azure_openai=azure_openai,
        log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    )
