import os
from pathlib import Path

PHASE_ORDER = [
    "infer",
    "suggest",
    "plan",
    "share",
]

CHART_KINDS = ("auto", "line", "bar", "scatter", "pie")
AGGREGATIONS = ("none", "sum", "avg", "median", "count")

_DEFAULT_CHART_KIND = "auto"
_DEFAULT_AGGREGATION = "none"

_TYPE_MAJORITY_RATIO = 0.6

_SAMPLE_LIMIT = int(os.environ.get("CHARTSHARE_SAMPLE_LIMIT", "1000"))
_MAX_TOKEN_LENGTH = int(os.environ.get("CHARTSHARE_MAX_TOKEN_LENGTH", "150000"))
_MAX_DECODED_BYTES = 64 * 1024 * 1024
_FETCH_TIMEOUT = float(os.environ.get("CHARTSHARE_FETCH_TIMEOUT", "15"))

_TEMPLATE_DIR = Path(__file__).resolve().parents[1] / "templates"
_EMBED_TEMPLATE_NAME = "embed.html.j2"

SAMPLE_CSV = (
    "date,product,region,sales\n"
    "2025-01-01,A,North,120\n"
    "2025-01-02,A,South,90\n"
    "2025-01-03,B,North,150\n"
    "2025-01-04,B,South,80\n"
    "2025-01-05,A,West,130\n"
    "2025-01-06,C,North,60\n"
    "2025-01-07,C,West,95\n"
    "2025-01-08,B,South,110\n"
)
