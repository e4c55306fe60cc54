"""Column inference, chart suggestion, chart plans and share tokens."""
from .app import build_graph, run_pipeline
from .session import ChartSession, ChangeConfig, LoadDataset, RequestShare, RestoreFromToken

__all__ = [
    "build_graph",
    "run_pipeline",
    "ChartSession",
    "ChangeConfig",
    "LoadDataset",
    "RequestShare",
    "RestoreFromToken",
]
