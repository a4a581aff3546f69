"""HTML rendering for the output region."""
from __future__ import annotations

import html

from .state import Phase, UIState

CSS = """
.alert { padding: 0.75rem 1rem; border-radius: 0.375rem; border: 1px solid transparent; }
.alert-info { color: #055160; background: #cff4fc; border-color: #b6effb; }
.alert-success { color: #0f5132; background: #d1e7dd; border-color: #badbcc; white-space: pre-wrap; }
.alert-danger { color: #842029; background: #f8d7da; border-color: #f5c2c7; }
.spinner { display: inline-block; width: 1rem; height: 1rem; vertical-align: -0.125em;
  border: 0.2em solid currentColor; border-right-color: transparent; border-radius: 50%;
  animation: alephb-spin 0.75s linear infinite; }
@keyframes alephb-spin { to { transform: rotate(360deg); } }
"""


def _alert(kind: str, body: str) -> str:
    return f'<div class="alert alert-{kind}" role="alert">{body}</div>'


def render_state(state: UIState) -> str:
    if state.phase is Phase.IDLE:
        return ""
    if state.phase in (Phase.LOADING, Phase.GENERATING):
        return _alert(
            "info",
            '<span class="spinner" role="status" aria-hidden="true"></span>'
            f'<span style="margin-left: 0.5rem">{html.escape(state.text)}</span>',
        )
    if state.phase is Phase.SUCCESS:
        # generated text is untrusted
        return _alert("success", html.escape(state.text))
    return _alert("danger", f"Error generating response: {html.escape(state.text)}")
