"""Turn-taking policies: speaker selection, termination and history reduction."""

from foundry_groupchat.strategies.history import HistoryReducer
from foundry_groupchat.strategies.judge import Completion, RemoteAgentCompletion
from foundry_groupchat.strategies.selection import (
    JudgeSelection,
    SelectionStrategy,
    SequentialSelection,
    default_speaker,
)
from foundry_groupchat.strategies.termination import (
    ApprovalTokenTermination,
    CombinedTermination,
    IterationCapTermination,
    JudgeTermination,
    TerminationStrategy,
)

__all__ = [
    "ApprovalTokenTermination",
    "CombinedTermination",
    "Completion",
    "HistoryReducer",
    "IterationCapTermination",
    "JudgeSelection",
    "JudgeTermination",
    "RemoteAgentCompletion",
    "SelectionStrategy",
    "SequentialSelection",
    "TerminationStrategy",
    "default_speaker",
]
