from __future__ import annotations
from typing import Any, Dict, List, MutableMapping, Sequence
from ..core.types import ChartConfig, ColumnMeta, Suggestion
from ..core.state import _with_phase, _emit_callback


def suggest_charts(meta: Sequence[ColumnMeta]) -> List[Suggestion]:
    """Propose chart encodings for the inferred columns.

    Every rule that applies contributes one suggestion; the first suggestion
    is the one picked automatically when a dataset is loaded.
    """
    dates = [column.name for column in meta if column.kind == "date"]
    numbers = [column.name for column in meta if column.kind == "number"]
    categories = [column.name for column in meta if column.kind == "string"]

    suggestions: List[Suggestion] = []
    if dates and numbers:
        suggestions.append(
            Suggestion(
                label=f"Line: {numbers[0]} over {dates[0]}",
                chart_kind="line",
                x=dates[0],
                y=(numbers[0],),
                aggregation="none",
            )
        )
    if categories and numbers:
        suggestions.append(
            Suggestion(
                label=f"Bar: {numbers[0]} by {categories[0]}",
                chart_kind="bar",
                x=categories[0],
                y=(numbers[0],),
                aggregation="avg",
            )
        )
    if len(numbers) >= 2:
        suggestions.append(
            Suggestion(
                label=f"Scatter: {numbers[0]} vs {numbers[1]}",
                chart_kind="scatter",
                x=numbers[0],
                y=(numbers[1],),
                aggregation="none",
            )
        )
    if categories and numbers:
        suggestions.append(
            Suggestion(
                label=f"Pie: {numbers[0]} by {categories[0]}",
                chart_kind="pie",
                x=categories[0],
                y=(numbers[0],),
                aggregation="sum",
            )
        )
    return suggestions


def suggest_node(state: MutableMapping[str, Any]) -> Dict[str, Any]:
    meta: List[ColumnMeta] = state.get("column_meta") or []
    suggestions = suggest_charts(meta)
    config: ChartConfig = state.get("config") or ChartConfig()

    picked = None
    if state.get("auto_pick") and suggestions:
        picked = suggestions[0].label
        config = suggestions[0].to_config()
    elif not config.x and meta:
        config = ChartConfig(chart_kind=config.chart_kind, x=meta[0].name, y=list(config.y), aggregation=config.aggregation)

    payload = {
        "suggestions": [suggestion.to_dict() for suggestion in suggestions],
        "autoPicked": picked,
        "config": config.to_dict(),
    }
    update = _with_phase(state, "suggest", payload, suggestions=suggestions, config=config)
    _emit_callback(state, "suggest", payload)
    return update
