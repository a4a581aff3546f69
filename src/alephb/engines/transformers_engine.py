"""Hugging Face transformers text-generation engine."""
from __future__ import annotations

import logging
import time
from typing import Any

import torch
from transformers import BitsAndBytesConfig, pipeline

from ..config import ModelSpec
from .base import DeviceSpec, TextGenerationEngine

logger = logging.getLogger(__name__)

TASK = "text-generation"

_FLOAT_DTYPES = {
    "float32": torch.float32,
    "float16": torch.float16,
    "bfloat16": torch.bfloat16,
}
_QUANTIZED_DTYPES = ("q4", "q8")
DTYPES = ("auto", *_FLOAT_DTYPES, *_QUANTIZED_DTYPES)
DEVICES = ("auto", "cuda", "mps", "cpu")


def _mps_available() -> bool:
    backend = getattr(torch.backends, "mps", None)
    return bool(backend is not None and backend.is_available())


def resolve_device(kind: str, gpu_index: int | None = 0) -> DeviceSpec:
    """Map a configured device name onto what this machine actually has."""
    if kind not in DEVICES:
        raise ValueError(f"Unsupported device: {kind}")
    if kind in ("auto", "cuda") and torch.cuda.is_available():
        return DeviceSpec(kind="cuda", gpu_index=gpu_index if gpu_index is not None else 0)
    if kind in ("auto", "mps") and _mps_available():
        return DeviceSpec(kind="mps", gpu_index=None)
    if kind != "auto" and kind != "cpu":
        raise ValueError(f"Device not supported on this machine: {kind}")
    return DeviceSpec(kind="cpu", gpu_index=None)


def build_pipeline_kwargs(dtype: str, device: DeviceSpec) -> dict[str, Any]:
    if dtype not in DTYPES:
        raise ValueError(f"Unsupported dtype: {dtype}")

    if dtype in _QUANTIZED_DTYPES:
        if device.kind == "cuda":
            if dtype == "q4":
                quant = BitsAndBytesConfig(
                    load_in_4bit=True,
                    bnb_4bit_quant_type="nf4",
                    bnb_4bit_compute_dtype=torch.float16,
                )
            else:
                quant = BitsAndBytesConfig(load_in_8bit=True)
            # bitsandbytes weights are placed by accelerate, not moved afterwards
            return {
                "device_map": {"": device.gpu_index or 0},
                "model_kwargs": {"quantization_config": quant},
            }
        logger.warning(
            "%s quantization needs a CUDA device; loading unquantized on %s",
            dtype,
            device.kind,
        )
        dtype = "auto"

    kwargs: dict[str, Any] = {"dtype": _FLOAT_DTYPES.get(dtype, "auto")}
    if device.kind == "cuda":
        kwargs["device"] = f"cuda:{device.gpu_index or 0}"
    else:
        kwargs["device"] = device.kind
    return kwargs


def load_pipeline(model: ModelSpec, device: DeviceSpec) -> TextGenerationEngine:
    kwargs = build_pipeline_kwargs(model.dtype, device)
    logger.info(
        "Loading %s (%s) on %s with dtype=%s", model.key, model.model_id, device.kind, model.dtype
    )
    start = time.perf_counter()
    generator = pipeline(TASK, model=model.model_id, **kwargs)
    logger.info("Loaded %s in %.2fs", model.key, time.perf_counter() - start)
    return generator
