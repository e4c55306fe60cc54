from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union, IO
from .constants import (
    AGGREGATIONS,
    CHART_KINDS,
    _DEFAULT_AGGREGATION,
    _DEFAULT_CHART_KIND,
)

# type aliases used across the code
BinaryInput = Union[bytes, bytearray, IO[bytes]]
Row = Mapping[str, Any]

# Absent keys read as ``MISSING``; a blank cell is the empty string.
MISSING = None


def cell(row: Row, column: str) -> Any:
    return row.get(column, MISSING)


def columns_of(rows: Sequence[Row]) -> List[str]:
    if not rows:
        return []
    return [str(name) for name in rows[0].keys()]


@dataclass(frozen=True)
class ColumnMeta:
    name: str
    kind: str

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "kind": self.kind}


@dataclass(frozen=True)
class Suggestion:
    label: str
    chart_kind: str
    x: str
    y: Tuple[str, ...]
    aggregation: str

    def to_config(self) -> "ChartConfig":
        return ChartConfig(chart_kind=self.chart_kind, x=self.x, y=list(self.y), aggregation=self.aggregation)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "chartKind": self.chart_kind,
            "x": self.x,
            "y": list(self.y),
            "aggregation": self.aggregation,
        }


@dataclass
class ChartConfig:
    chart_kind: str = _DEFAULT_CHART_KIND
    x: str = ""
    y: List[str] = field(default_factory=list)
    aggregation: str = _DEFAULT_AGGREGATION

    def to_settings(self) -> Dict[str, Any]:
        """Settings block as stored inside a share token."""
        return {
            "type": self.chart_kind,
            "x": self.x,
            "y": list(self.y),
            "agg": self.aggregation,
        }

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any]) -> "ChartConfig":
        chart_kind = settings.get("type")
        if chart_kind not in CHART_KINDS:
            chart_kind = _DEFAULT_CHART_KIND
        aggregation = settings.get("agg")
        if aggregation not in AGGREGATIONS:
            aggregation = _DEFAULT_AGGREGATION
        x = settings.get("x")
        raw_y = settings.get("y")
        y = [str(name) for name in raw_y] if isinstance(raw_y, list) else []
        return cls(
            chart_kind=chart_kind,
            x=x if isinstance(x, str) else "",
            y=y,
            aggregation=aggregation,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "chartKind": self.chart_kind,
            "x": self.x,
            "y": list(self.y),
            "aggregation": self.aggregation,
        }


@dataclass
class PlanDataset:
    label: str
    data: List[Any]

    def to_dict(self) -> Dict[str, Any]:
        return {"label": self.label, "data": list(self.data)}


@dataclass
class ChartPlan:
    chart_kind: str
    labels: List[Any] = field(default_factory=list)
    datasets: List[PlanDataset] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "chartKind": self.chart_kind,
            "labels": list(self.labels),
            "datasets": [dataset.to_dict() for dataset in self.datasets],
        }


@dataclass
class DecodedState:
    rows: List[Dict[str, Any]]
    config: Optional[ChartConfig]


@dataclass
class SessionSnapshot:
    columns: List[str]
    column_meta: List[ColumnMeta]
    suggestions: List[Suggestion]
    config: ChartConfig
    plan: Optional[ChartPlan]
    token: Optional[str]
    phases: Dict[str, Dict[str, Any]]
