from __future__ import annotations
from typing import Any, Dict, List, MutableMapping, Optional, Sequence
from ..core.constants import _SAMPLE_LIMIT, _TYPE_MAJORITY_RATIO
from ..core.types import ColumnMeta, Row, cell, columns_of
from ..core.state import _with_phase, _emit_callback
from ..core.utils import is_empty, looks_like_date, try_parse_number


def _classify(dates: int, numbers: int, total: int) -> str:
    # date wins over number when both clear the threshold
    if dates > _TYPE_MAJORITY_RATIO * total:
        return "date"
    if numbers > _TYPE_MAJORITY_RATIO * total:
        return "number"
    return "string"


def infer_types(rows: Sequence[Row], columns: Sequence[str], *, sample_limit: Optional[int] = None) -> List[ColumnMeta]:
    """Classify each column as number, date or string from the head of ``rows``."""
    limit = _SAMPLE_LIMIT if sample_limit is None else sample_limit
    sample = rows[: min(len(rows), limit)]
    meta: List[ColumnMeta] = []
    for name in columns:
        total = numbers = dates = 0
        for row in sample:
            total += 1
            value = cell(row, name)
            if is_empty(value):
                continue
            if try_parse_number(value) is not None:
                numbers += 1
            if looks_like_date(value):
                dates += 1
        meta.append(ColumnMeta(name=name, kind=_classify(dates, numbers, total)))
    return meta


def infer_node(state: MutableMapping[str, Any]) -> Dict[str, Any]:
    rows = state.get("rows") or []
    columns = state.get("columns") or columns_of(rows)
    meta = infer_types(rows, columns)

    payload = {
        "rows": len(rows),
        "columns": [column.to_dict() for column in meta],
    }
    update = _with_phase(state, "infer", payload, columns=list(columns), column_meta=meta)
    _emit_callback(state, "infer", payload)
    return update
