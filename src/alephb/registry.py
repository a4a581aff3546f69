"""Model registry helpers."""
from __future__ import annotations

from .config import ModelSpec


class ModelRegistry:
    def __init__(self, models: list[ModelSpec]):
        self._models = models

    def keys(self) -> list[str]:
        return [model.key for model in self._models]

    def get(self, key: str) -> ModelSpec:
        for model in self._models:
            if model.key == key:
                return model
        raise KeyError(f"Model not found: {key} (available: {', '.join(self.keys())})")
