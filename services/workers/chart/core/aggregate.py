from __future__ import annotations
from typing import Any, Dict, List, Optional, Sequence, Union
from .types import Row, cell
from .utils import try_parse_number

Number = Union[int, float]


def group_by(rows: Sequence[Row], key: str) -> Dict[Any, List[Row]]:
    """Partition ``rows`` by the value of ``key``, keeping first-seen order."""
    groups: Dict[Any, List[Row]] = {}
    for row in rows:
        groups.setdefault(cell(row, key), []).append(row)
    return groups


def _median(values: List[float]) -> float:
    ordered = sorted(values)
    mid = len(ordered) // 2
    if len(ordered) % 2:
        return ordered[mid]
    return (ordered[mid - 1] + ordered[mid]) / 2


def aggregate(group_rows: Sequence[Row], column: str, fn: str) -> Optional[Number]:
    if fn == "count":
        return len(group_rows)
    if fn not in ("sum", "avg", "median"):
        return None

    values = [
        number
        for number in (try_parse_number(cell(row, column)) for row in group_rows)
        if number is not None
    ]
    # no coercible values means "no data", not zero
    if not values:
        return None
    if fn == "sum":
        return sum(values)
    if fn == "avg":
        return sum(values) / len(values)
    return _median(values)
