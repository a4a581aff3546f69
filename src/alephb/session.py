"""Engine session with lazy single-flight loading."""
from __future__ import annotations

import asyncio
import logging

from .config import ModelSpec
from .engines.base import EngineLoader, TextGenerationEngine

logger = logging.getLogger(__name__)


def _retrieve_exception(task: asyncio.Task) -> None:
    # every waiter may have been cancelled; the failure is already logged in _load
    if not task.cancelled():
        task.exception()


class EngineSession:
    """Holds at most one loaded engine for the lifetime of the app.

    The loader runs the first time :meth:`ensure_loaded` is awaited. Callers
    arriving while that load is still running share it instead of starting a
    second one. A failed load leaves the slot empty so the next call retries.
    """

    def __init__(self, loader: EngineLoader, model: ModelSpec | None = None) -> None:
        self._loader = loader
        self.model = model
        self._engine: TextGenerationEngine | None = None
        self._inflight: asyncio.Task | None = None

    @property
    def is_loaded(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> TextGenerationEngine | None:
        return self._engine

    async def ensure_loaded(self) -> TextGenerationEngine:
        if self._engine is not None:
            return self._engine
        if self._inflight is None:
            self._inflight = asyncio.ensure_future(self._load())
            self._inflight.add_done_callback(_retrieve_exception)
        # shield so a cancelled caller does not abort the load other callers wait on
        return await asyncio.shield(self._inflight)

    async def _load(self) -> TextGenerationEngine:
        try:
            engine = await asyncio.to_thread(self._loader)
        except Exception:
            logger.warning("Engine load failed for %s", self._model_label(), exc_info=True)
            raise
        finally:
            self._inflight = None
        self._engine = engine
        return engine

    def _model_label(self) -> str:
        return self.model.key if self.model is not None else "<unnamed>"
