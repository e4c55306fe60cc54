from __future__ import annotations
from typing import Any, Callable, Dict, List, Mapping, MutableMapping, Optional, TypedDict
from .constants import PHASE_ORDER
from .types import ChartConfig, ChartPlan, ColumnMeta, Suggestion

PhaseCallback = Callable[[str, Mapping[str, Any], int, int], None]


class ChartState(TypedDict, total=False):
    rows: List[Dict[str, Any]]
    columns: List[str]
    config: ChartConfig
    auto_pick: bool
    max_token_length: Optional[int]
    previous_token: Optional[str]
    column_meta: List[ColumnMeta]
    suggestions: List[Suggestion]
    chart_plan: Optional[ChartPlan]
    token: Optional[str]
    phase_outputs: Dict[str, Dict[str, Any]]
    on_phase: Optional[PhaseCallback]


def _with_phase(state: MutableMapping[str, Any], phase: str, payload: Dict[str, Any], **extra: Any) -> Dict[str, Any]:
    phases = dict(state.get("phase_outputs") or {})
    phases[phase] = payload
    update: Dict[str, Any] = {"phase_outputs": phases}
    update.update(extra)
    return update

def _emit_callback(state: Mapping[str, Any], phase: str, payload: Mapping[str, Any]) -> None:
    callback = state.get("on_phase")
    if not callable(callback):
        return
    index = PHASE_ORDER.index(phase)
    callback(phase, payload, index, len(PHASE_ORDER))
