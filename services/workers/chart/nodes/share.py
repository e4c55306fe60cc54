from __future__ import annotations
from typing import Any, Dict, MutableMapping
from ..core.codec import encode_state
from ..core.types import ChartConfig
from ..core.state import _with_phase, _emit_callback


def share_node(state: MutableMapping[str, Any]) -> Dict[str, Any]:
    rows = state.get("rows") or []
    config: ChartConfig = state.get("config") or ChartConfig()
    previous = state.get("previous_token")

    token = encode_state(rows, config, max_length=state.get("max_token_length"))
    published = token is not None
    if not published:
        # keep the last link that fit
        token = previous

    payload = {
        "published": published,
        "tokenLength": len(token) if token else 0,
    }
    update = _with_phase(state, "share", payload, token=token)
    _emit_callback(state, "share", payload)
    return update
