from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from langgraph.graph import END, StateGraph

from .nodes import infer_node, suggest_node, plan_node, share_node
from .core.state import ChartState, PhaseCallback
from .core.types import ChartConfig, Row, SessionSnapshot, columns_of

logger = logging.getLogger(__name__)


def _route_after_suggest(state: Mapping[str, Any]) -> str:
    # nothing to chart or share for an empty dataset
    return "plan" if state.get("rows") else END


def build_graph():
    g = StateGraph(ChartState)
    g.add_node("infer", infer_node)
    g.add_node("suggest", suggest_node)
    g.add_node("plan", plan_node)
    g.add_node("share", share_node)

    g.set_entry_point("infer")
    g.add_edge("infer", "suggest")
    g.add_conditional_edges("suggest", _route_after_suggest, {"plan": "plan", END: END})
    g.add_edge("plan", "share")
    g.add_edge("share", END)
    return g.compile()


PIPELINE = build_graph()


def run_pipeline(
    rows: Sequence[Row],
    config: Optional[ChartConfig] = None,
    *,
    auto_pick: bool = False,
    previous_token: Optional[str] = None,
    max_token_length: Optional[int] = None,
    on_phase: Optional[PhaseCallback] = None,
) -> SessionSnapshot:
    """Recompute every derived structure for ``rows`` and ``config``."""
    row_list: List[Dict[str, Any]] = [dict(row) for row in rows]
    initial_state: Dict[str, Any] = {
        "rows": row_list,
        "columns": columns_of(row_list),
        "config": config or ChartConfig(),
        "auto_pick": auto_pick,
        "previous_token": previous_token,
        "token": previous_token,
        "max_token_length": max_token_length,
        "phase_outputs": {},
    }
    if on_phase:
        initial_state["on_phase"] = on_phase

    final_state = PIPELINE.invoke(initial_state)

    return SessionSnapshot(
        columns=final_state.get("columns", []) or [],
        column_meta=final_state.get("column_meta", []) or [],
        suggestions=final_state.get("suggestions", []) or [],
        config=final_state.get("config") or ChartConfig(),
        plan=final_state.get("chart_plan"),
        token=final_state.get("token"),
        phases=final_state.get("phase_outputs", {}) or {},
    )


def _snapshot_to_dict(snapshot: SessionSnapshot) -> Dict[str, Any]:
    return {
        "columns": [column.to_dict() for column in snapshot.column_meta],
        "suggestions": [suggestion.to_dict() for suggestion in snapshot.suggestions],
        "config": snapshot.config.to_dict(),
        "plan": snapshot.plan.to_dict() if snapshot.plan else None,
        "token": snapshot.token,
        "phases": snapshot.phases,
    }


def lambda_handler(event: Mapping[str, Any], _context: Any) -> Dict[str, Any]:
    action = event.get("action")
    if not action:
        raise ValueError("action is required")

    if action == "restore":
        from .session import ChartSession

        session = ChartSession()
        if not session.restore_from_token(event.get("token")):
            return {"restored": False}
        return {"restored": True, "rows": session.rows, **_snapshot_to_dict(session.snapshot)}

    if action == "render":
        rows = event.get("rows")
        if not isinstance(rows, list):
            raise ValueError("rows must be a list of objects")
        settings = event.get("settings")
        config = ChartConfig.from_settings(settings) if isinstance(settings, Mapping) else None
        snapshot = run_pipeline(rows, config, auto_pick=config is None)
        logger.info(
            "rendered chart",
            extra={"row_count": len(rows), "chart_kind": snapshot.plan.chart_kind if snapshot.plan else None},
        )
        return _snapshot_to_dict(snapshot)

    raise ValueError(f"Unsupported action: {action}")
