"""Aleph-B UI entrypoint."""
from __future__ import annotations

import argparse
import logging
import os

import gradio as gr

from .config import AppConfig, RootConfig, load_config
from .engines.transformers_engine import DEVICES, DTYPES, load_pipeline, resolve_device
from .handler import handle_generate_request
from .registry import ModelRegistry
from .session import EngineSession
from .ui.render import CSS, render_state
from .ui.state import PromptFields, UIState

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "configs/alephb.yaml"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Aleph-B local inference page")
    parser.add_argument("--config", default=DEFAULT_CONFIG_PATH)
    parser.add_argument("--host")
    parser.add_argument("--port", type=int)
    parser.add_argument("--title")
    parser.add_argument("--model", help="registry key of the model to load")
    parser.add_argument("--device", choices=DEVICES)
    parser.add_argument("--dtype", choices=DTYPES)
    parser.add_argument("--max-new-tokens", type=int)
    parser.add_argument("--concurrency-limit", type=int)
    parser.add_argument("--log-level")
    parser.add_argument("--offline", action="store_true")
    parser.add_argument("--share", action="store_true")
    return parser.parse_args(argv)


def load_root_config(path: str) -> RootConfig:
    if not os.path.exists(path):
        return RootConfig()
    return load_config(path)


def apply_overrides(cfg: RootConfig, args: argparse.Namespace) -> RootConfig:
    if args.title:
        cfg.app.title = args.title
    if args.host:
        cfg.app.host = args.host
    if args.port is not None:
        cfg.app.port = args.port
    if args.concurrency_limit is not None:
        cfg.app.concurrency_limit = args.concurrency_limit
    if args.log_level:
        cfg.app.log_level = args.log_level.upper()
    if args.offline:
        cfg.app.offline_mode = True
    if args.max_new_tokens is not None:
        cfg.generation_defaults.max_new_tokens = args.max_new_tokens
    if args.model:
        cfg.default_model = args.model
    for model in cfg.models:
        if model.key != cfg.default_model:
            continue
        if args.device:
            model.device = args.device
        if args.dtype:
            model.dtype = args.dtype
    return cfg


def configure_logging(level: str) -> None:
    root = logging.getLogger("alephb")
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    root.setLevel(level)


def ensure_offline(cfg: AppConfig) -> None:
    if cfg.offline_mode:
        os.environ.setdefault("HF_HUB_OFFLINE", "1")
        os.environ.setdefault("TRANSFORMERS_OFFLINE", "1")


def build_session(cfg: RootConfig) -> EngineSession:
    model = ModelRegistry(cfg.models).get(cfg.default_model)

    def _load():
        return load_pipeline(model, resolve_device(model.device))

    return EngineSession(_load, model=model)


def build_app(cfg: RootConfig, session: EngineSession) -> gr.Blocks:
    defaults = cfg.generation_defaults
    max_new_tokens = defaults.max_new_tokens
    model_name = session.model.display_name if session.model is not None else "unknown model"

    with gr.Blocks(title=cfg.app.title, css=CSS) as demo:
        gr.Markdown(f"# {cfg.app.title}\nRuns **{model_name}** locally.")

        fields_state = gr.State(
            PromptFields(
                system_prompt=defaults.default_system_prompt,
                user_request=defaults.default_user_request,
            )
        )
        system_box = gr.Textbox(
            label="System prompt",
            value=defaults.default_system_prompt,
            lines=3,
            elem_id="system-prompt",
        )
        user_box = gr.Textbox(
            label="User request",
            value=defaults.default_user_request,
            lines=3,
            elem_id="user-request",
        )
        generate_btn = gr.Button("Generate response", variant="primary", elem_id="generate-btn")
        output_html = gr.HTML(render_state(UIState.idle()), elem_id="output-container")

        def _set_system(value: str, fields: PromptFields) -> PromptFields:
            fields.system_prompt = value
            return fields

        def _set_user(value: str, fields: PromptFields) -> PromptFields:
            fields.user_request = value
            return fields

        async def _generate(system_val: str, user_val: str, fields: PromptFields):
            fields.system_prompt = system_val
            fields.user_request = user_val
            async for state in handle_generate_request(session, fields.snapshot, max_new_tokens):
                yield render_state(state)

        system_box.input(_set_system, inputs=[system_box, fields_state], outputs=[fields_state], queue=False)
        user_box.input(_set_user, inputs=[user_box, fields_state], outputs=[fields_state], queue=False)
        generate_btn.click(
            _generate,
            inputs=[system_box, user_box, fields_state],
            outputs=[output_html],
        )

    return demo


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    cfg = load_root_config(args.config)
    cfg = apply_overrides(cfg, args)
    configure_logging(cfg.app.log_level)
    ensure_offline(cfg.app)

    session = build_session(cfg)
    logger.info("Configured model %s (%s)", session.model.key, session.model.model_id)

    app = build_app(cfg, session)
    app.queue(default_concurrency_limit=cfg.app.concurrency_limit)
    app.launch(server_name=cfg.app.host, server_port=cfg.app.port, share=args.share)


if __name__ == "__main__":
    main()
