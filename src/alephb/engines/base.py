"""Engine protocol and dataclasses."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Literal, Protocol


Role = Literal["system", "user", "assistant"]


class GenerationError(RuntimeError):
    """Raised when the engine output does not have the expected chat shape."""


@dataclass
class DeviceSpec:
    kind: Literal["cuda", "mps", "cpu"]
    gpu_index: int | None


@dataclass(frozen=True)
class ChatMessage:
    role: Role
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass
class GenerationResult:
    """Validated view of a text-generation pipeline output.

    The pipeline returns one entry per input sequence; for chat input the
    ``generated_text`` field holds the input turns followed by the generated
    assistant turn. Only the first sequence is used.
    """

    generated_turns: list[ChatMessage]

    @classmethod
    def from_pipeline_output(cls, output: Any) -> "GenerationResult":
        if not isinstance(output, (list, tuple)) or len(output) == 0:
            raise GenerationError("Empty output from model")
        first = output[0]
        if not isinstance(first, dict) or "generated_text" not in first:
            raise GenerationError("Model output has no generated_text field")
        turns_raw = first["generated_text"]
        if not isinstance(turns_raw, (list, tuple)):
            raise GenerationError(
                f"Expected a list of chat turns, got {type(turns_raw).__name__}"
            )
        turns: list[ChatMessage] = []
        for index, item in enumerate(turns_raw):
            if not isinstance(item, dict):
                raise GenerationError(f"Chat turn {index} is not a mapping")
            role = item.get("role")
            content = item.get("content")
            if not isinstance(role, str) or not isinstance(content, str):
                raise GenerationError(f"Chat turn {index} is missing role or content")
            turns.append(ChatMessage(role=role, content=content))
        if not turns:
            raise GenerationError("Model returned no chat turns")
        return cls(generated_turns=turns)

    @property
    def last_text(self) -> str:
        return self.generated_turns[-1].content


class TextGenerationEngine(Protocol):
    def __call__(self, messages: list[dict[str, str]], *, max_new_tokens: int) -> Any:
        ...


EngineLoader = Callable[[], TextGenerationEngine]
