"""UI session state."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..prompts import DEFAULT_SYSTEM, DEFAULT_USER


class Phase(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    GENERATING = "generating"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class UIState:
    phase: Phase
    text: str = ""

    @classmethod
    def idle(cls) -> "UIState":
        return cls(Phase.IDLE)

    @classmethod
    def loading(cls) -> "UIState":
        return cls(Phase.LOADING, "Loading model...")

    @classmethod
    def generating(cls) -> "UIState":
        return cls(Phase.GENERATING, "Generating response...")

    @classmethod
    def success(cls, text: str) -> "UIState":
        return cls(Phase.SUCCESS, text)

    @classmethod
    def error(cls, message: str) -> "UIState":
        return cls(Phase.ERROR, message)


@dataclass
class PromptFields:
    """Live contents of the two prompt text areas for one browser session."""

    system_prompt: str = DEFAULT_SYSTEM
    user_request: str = DEFAULT_USER

    def snapshot(self) -> tuple[str, str]:
        return self.system_prompt, self.user_request
