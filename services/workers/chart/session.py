"""Session controller holding the current dataset, config and share token.

The controller is the only mutable piece of the system. Every command fully
replaces the session's dataset and/or config and reruns the derivation
pipeline from scratch.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

from .app import run_pipeline
from .core.codec import decode_state
from .core.constants import AGGREGATIONS, CHART_KINDS
from .core.state import PhaseCallback
from .core.types import ChartConfig, Row, SessionSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadDataset:
    rows: Sequence[Row]


@dataclass(frozen=True)
class ChangeConfig:
    chart_kind: Optional[str] = None
    x: Optional[str] = None
    y: Optional[Sequence[str]] = None
    aggregation: Optional[str] = None


@dataclass(frozen=True)
class RequestShare:
    pass


@dataclass(frozen=True)
class RestoreFromToken:
    token: str


Command = Union[LoadDataset, ChangeConfig, RequestShare, RestoreFromToken]


@dataclass
class ChartSession:
    max_token_length: Optional[int] = None
    on_phase: Optional[PhaseCallback] = None
    rows: List[Dict[str, Any]] = field(default_factory=list)
    config: ChartConfig = field(default_factory=ChartConfig)
    token: Optional[str] = None
    snapshot: Optional[SessionSnapshot] = None

    @property
    def columns(self) -> List[str]:
        return self.snapshot.columns if self.snapshot else []

    def _recompute(self, rows: List[Dict[str, Any]], config: ChartConfig, *, auto_pick: bool = False) -> SessionSnapshot:
        snapshot = run_pipeline(
            rows,
            config,
            auto_pick=auto_pick,
            previous_token=self.token,
            max_token_length=self.max_token_length,
            on_phase=self.on_phase,
        )
        self.rows = rows
        self.config = snapshot.config
        self.token = snapshot.token
        self.snapshot = snapshot
        return snapshot

    def load_dataset(self, rows: Sequence[Row]) -> SessionSnapshot:
        """Replace the dataset and pre-fill the config from the first suggestion."""
        return self._recompute([dict(row) for row in rows], ChartConfig(), auto_pick=True)

    def change_config(
        self,
        *,
        chart_kind: Optional[str] = None,
        x: Optional[str] = None,
        y: Optional[Sequence[str]] = None,
        aggregation: Optional[str] = None,
    ) -> SessionSnapshot:
        if chart_kind is not None and chart_kind not in CHART_KINDS:
            raise ValueError(f"Unsupported chart kind: {chart_kind}")
        if aggregation is not None and aggregation not in AGGREGATIONS:
            raise ValueError(f"Unsupported aggregation: {aggregation}")
        config = ChartConfig(
            chart_kind=self.config.chart_kind if chart_kind is None else chart_kind,
            x=self.config.x if x is None else x,
            y=list(self.config.y if y is None else y),
            aggregation=self.config.aggregation if aggregation is None else aggregation,
        )
        return self._recompute(self.rows, config)

    def request_share(self) -> Optional[str]:
        """Re-encode the current state; returns the newest token that fit."""
        if not self.rows:
            return self.token
        return self._recompute(self.rows, self.config).token

    def restore_from_token(self, token: str) -> bool:
        decoded = decode_state(token)
        if decoded is None:
            logger.warning("nothing to restore from share token")
            return False

        snapshot = self.load_dataset(decoded.rows)
        if decoded.config is None:
            return True

        restored = decoded.config
        config = ChartConfig(
            chart_kind=restored.chart_kind,
            x=restored.x or snapshot.config.x,
            y=list(restored.y),
            aggregation=restored.aggregation,
        )
        self._recompute(self.rows, config)
        return True

    def dispatch(self, command: Command) -> Any:
        if isinstance(command, LoadDataset):
            return self.load_dataset(command.rows)
        if isinstance(command, ChangeConfig):
            return self.change_config(
                chart_kind=command.chart_kind,
                x=command.x,
                y=command.y,
                aggregation=command.aggregation,
            )
        if isinstance(command, RequestShare):
            return self.request_share()
        if isinstance(command, RestoreFromToken):
            return self.restore_from_token(command.token)
        raise TypeError(f"Unsupported command: {type(command).__name__}")
