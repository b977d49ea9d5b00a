from __future__ import annotations

from typing import Iterable


class ValidationError(ValueError):
    """Client-side rejection raised before any backend call."""

    def __init__(self, messages: Iterable[str] | str):
        if isinstance(messages, str):
            messages = [messages]
        self.messages = list(messages)
        super().__init__("; ".join(self.messages))
