"""Configuration loading and dataclasses."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import yaml

from .prompts import DEFAULT_SYSTEM, DEFAULT_USER


@dataclass
class AppConfig:
    title: str = "Web-based Inference - Prototype Aleph-B"
    host: str = "127.0.0.1"
    port: int = 7860
    concurrency_limit: int = 1
    offline_mode: bool = False
    log_level: str = "INFO"


@dataclass
class GenerationDefaults:
    max_new_tokens: int = 128
    default_system_prompt: str = DEFAULT_SYSTEM
    default_user_request: str = DEFAULT_USER


@dataclass
class ModelSpec:
    key: str
    display_name: str
    model_id: str
    dtype: str = "q4"
    device: str = "auto"


def _builtin_models() -> list[ModelSpec]:
    return [
        ModelSpec(
            key="qwen2.5-0.5b-instruct",
            display_name="Qwen2.5 0.5B Instruct",
            model_id="Qwen/Qwen2.5-0.5B-Instruct",
        ),
        ModelSpec(
            key="lfm2-2.6b",
            display_name="LFM2 2.6B",
            model_id="LiquidAI/LFM2-2.6B",
        ),
    ]


@dataclass
class RootConfig:
    app: AppConfig = field(default_factory=AppConfig)
    generation_defaults: GenerationDefaults = field(default_factory=GenerationDefaults)
    default_model: str = "lfm2-2.6b"
    models: list[ModelSpec] = field(default_factory=_builtin_models)


def _get(data: dict[str, Any], key: str, default: Any) -> Any:
    return data.get(key, default) if isinstance(data, dict) else default


def load_config(path: str) -> RootConfig:
    with open(path, "r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}

    app_raw = _get(raw, "app", {})
    gen_raw = _get(raw, "generation_defaults", {})
    models_raw = _get(raw, "models", None)

    app = AppConfig(
        title=_get(app_raw, "title", AppConfig.title),
        host=_get(app_raw, "host", AppConfig.host),
        port=int(_get(app_raw, "port", AppConfig.port)),
        concurrency_limit=int(_get(app_raw, "concurrency_limit", AppConfig.concurrency_limit)),
        offline_mode=bool(_get(app_raw, "offline_mode", AppConfig.offline_mode)),
        log_level=str(_get(app_raw, "log_level", AppConfig.log_level)).upper(),
    )

    gen = GenerationDefaults(
        max_new_tokens=int(_get(gen_raw, "max_new_tokens", GenerationDefaults.max_new_tokens)),
        default_system_prompt=_get(
            gen_raw, "default_system_prompt", GenerationDefaults.default_system_prompt
        ),
        default_user_request=_get(
            gen_raw, "default_user_request", GenerationDefaults.default_user_request
        ),
    )

    if isinstance(models_raw, list):
        models: list[ModelSpec] = []
        for item in models_raw:
            models.append(
                ModelSpec(
                    key=_get(item, "key", ""),
                    display_name=_get(item, "display_name", "") or _get(item, "key", ""),
                    model_id=_get(item, "model_id", ""),
                    dtype=_get(item, "dtype", ModelSpec.dtype),
                    device=_get(item, "device", ModelSpec.device),
                )
            )
    else:
        models = _builtin_models()

    return RootConfig(
        app=app,
        generation_defaults=gen,
        default_model=_get(raw, "default_model", RootConfig.default_model),
        models=models,
    )
