"""Generation request handling."""
from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Callable

from .engines.base import GenerationResult
from .prompts import build_chat_messages, to_pipeline_messages
from .session import EngineSession
from .ui.state import UIState

logger = logging.getLogger(__name__)

DEFAULT_MAX_NEW_TOKENS = 128

FieldReader = Callable[[], tuple[str, str]]


def _error_message(exc: BaseException) -> str:
    return str(exc) or exc.__class__.__name__


async def handle_generate_request(
    session: EngineSession,
    read_fields: FieldReader,
    max_new_tokens: int = DEFAULT_MAX_NEW_TOKENS,
) -> AsyncIterator[UIState]:
    """Run one generate action and yield each display state in order.

    ``read_fields`` is called only after the engine is ready, so edits made
    while the model loads are picked up.
    """
    try:
        if not session.is_loaded:
            yield UIState.loading()
        engine = await session.ensure_loaded()

        system_prompt, user_request = read_fields()
        messages = build_chat_messages(system_prompt, user_request)

        yield UIState.generating()
        output = await asyncio.to_thread(
            engine, to_pipeline_messages(messages), max_new_tokens=max_new_tokens
        )
        text = GenerationResult.from_pipeline_output(output).last_text
    except Exception as exc:  # noqa: BLE001
        logger.exception("Error generating response")
        yield UIState.error(_error_message(exc))
        return

    logger.info("Generated response: %s", text)
    yield UIState.success(text)
