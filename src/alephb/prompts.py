"""Prompt builders."""
from __future__ import annotations

from .engines.base import ChatMessage


DEFAULT_SYSTEM = "You are a helpful assistant."
DEFAULT_USER = "Tell me a funny joke."


def build_chat_messages(system_prompt: str, user_request: str) -> list[ChatMessage]:
    # Chat templates rely on the system turn coming first.
    return [
        ChatMessage(role="system", content=system_prompt),
        ChatMessage(role="user", content=user_request),
    ]


def to_pipeline_messages(messages: list[ChatMessage]) -> list[dict[str, str]]:
    return [message.to_dict() for message in messages]
