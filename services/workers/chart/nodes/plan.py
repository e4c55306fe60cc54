from __future__ import annotations
from typing import Any, Dict, List, MutableMapping, Optional, Sequence
from ..core.aggregate import aggregate, group_by
from ..core.types import ChartConfig, ChartPlan, ColumnMeta, PlanDataset, Row, cell
from ..core.state import _with_phase, _emit_callback
from ..core.utils import looks_like_date, try_parse_number


def resolve_chart_kind(rows: Sequence[Row], config: ChartConfig, meta: Sequence[ColumnMeta], x: str) -> str:
    if config.chart_kind != "auto":
        return config.chart_kind
    kinds = {column.name: column.kind for column in meta}
    if x in kinds:
        return "line" if kinds[x] == "date" else "bar"
    if rows and looks_like_date(cell(rows[0], x)):
        return "line"
    return "bar"


def _or_zero(value: Optional[float]) -> float:
    return 0 if value is None else value


def _pie_plan(rows: Sequence[Row], x: str, ys: Sequence[str], fn: str) -> ChartPlan:
    groups = group_by(rows, x)
    labels = list(groups.keys())
    if not ys:
        return ChartPlan(chart_kind="pie", labels=labels)
    y = ys[0]
    fn = "sum" if fn == "none" else fn
    data = [_or_zero(aggregate(groups[key], y, fn)) for key in labels]
    return ChartPlan(chart_kind="pie", labels=labels, datasets=[PlanDataset(label=y, data=data)])


def _scatter_plan(rows: Sequence[Row], x: str, ys: Sequence[str]) -> ChartPlan:
    if not ys:
        return ChartPlan(chart_kind="scatter")
    y = ys[0]
    points: List[Dict[str, float]] = []
    for row in rows:
        x_value = try_parse_number(cell(row, x))
        y_value = try_parse_number(cell(row, y))
        if x_value is None or y_value is None:
            continue
        points.append({"x": x_value, "y": y_value})
    return ChartPlan(chart_kind="scatter", datasets=[PlanDataset(label=f"{y} vs {x}", data=points)])


def _raw_plan(kind: str, rows: Sequence[Row], x: str, ys: Sequence[str]) -> ChartPlan:
    labels = [cell(row, x) for row in rows]
    datasets = [
        PlanDataset(label=y, data=[try_parse_number(cell(row, y)) for row in rows])
        for y in ys
    ]
    return ChartPlan(chart_kind=kind, labels=labels, datasets=datasets)


def _aggregated_plan(kind: str, rows: Sequence[Row], x: str, ys: Sequence[str], fn: str) -> ChartPlan:
    groups = group_by(rows, x)
    labels = list(groups.keys())
    datasets = [
        PlanDataset(label=y, data=[_or_zero(aggregate(groups[key], y, fn)) for key in labels])
        for y in ys
    ]
    return ChartPlan(chart_kind=kind, labels=labels, datasets=datasets)


def build_plan(rows: Sequence[Row], config: ChartConfig, meta: Sequence[ColumnMeta]) -> ChartPlan:
    """Project ``rows`` through ``config`` into labels and data series."""
    x = config.x or (meta[0].name if meta else "")
    ys = list(config.y)
    kind = resolve_chart_kind(rows, config, meta, x)

    if kind == "pie":
        return _pie_plan(rows, x, ys, config.aggregation)
    if kind == "scatter":
        return _scatter_plan(rows, x, ys)
    if config.aggregation == "none":
        return _raw_plan(kind, rows, x, ys)
    return _aggregated_plan(kind, rows, x, ys, config.aggregation)


def plan_node(state: MutableMapping[str, Any]) -> Dict[str, Any]:
    rows = state.get("rows") or []
    config: ChartConfig = state.get("config") or ChartConfig()
    meta = state.get("column_meta") or []
    plan = build_plan(rows, config, meta)

    payload = {
        "chartKind": plan.chart_kind,
        "labels": len(plan.labels),
        "datasets": [dataset.label for dataset in plan.datasets],
    }
    update = _with_phase(state, "plan", payload, chart_plan=plan)
    _emit_callback(state, "plan", payload)
    return update
