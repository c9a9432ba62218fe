"""History reducer — bounds the conversation view shown to judges and agents."""

from collections.abc import Sequence

from foundry_groupchat.models import Message

DEFAULT_HISTORY_WINDOW = 3


class HistoryReducer:
    """Keep only the most recent ``window`` messages.

    ``reduce`` returns a new tuple; the transcript passed in is never changed.
    """

    def __init__(self, window: int = DEFAULT_HISTORY_WINDOW) -> None:
        if window < 1:
            raise ValueError("History window must be at least 1.")
        self.window = window

    def reduce(self, history: Sequence[Message]) -> tuple[Message, ...]:
        return tuple(history[-self.window :])
