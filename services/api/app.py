# services/api/app.py
from __future__ import annotations

import logging
import os
import time
import uuid
from typing import Any, Dict, List, Literal

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from mangum import Mangum
from pydantic import BaseModel, Field

from services.common.share import embed_snippet, share_url
from services.workers.chart.core.codec import encode_state
from services.workers.chart.core.types import ChartConfig, columns_of
from services.workers.chart.io.ingest import IngestError, fetch_rows, ingest_rows, sample_rows
from services.workers.chart.nodes.infer import infer_types
from services.workers.chart.nodes.plan import build_plan
from services.workers.chart.nodes.suggest import suggest_charts
from services.workers.chart.session import ChartSession

# ---- Env ----
CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("CHARTSHARE_CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
    if origin.strip()
]

# ---- Logging ----
logger = logging.getLogger("chartshare.api")
if not logger.handlers:
    logging.basicConfig(level=logging.INFO)
logger.setLevel(logging.INFO)

# ---- App ----
app = FastAPI(title="chartshare API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["*"],
    allow_credentials=False,
)

# ---- Models ----
Row = Dict[str, Any]


class ConfigModel(BaseModel):
    """Chart configuration as chosen in the UI."""
    chartKind: Literal["auto", "line", "bar", "scatter", "pie"] = "auto"
    x: str = ""
    y: List[str] = Field(default_factory=list)
    aggregation: Literal["none", "sum", "avg", "median", "count"] = "none"

    def to_config(self) -> ChartConfig:
        return ChartConfig(chart_kind=self.chartKind, x=self.x, y=list(self.y), aggregation=self.aggregation)


class RowsRequest(BaseModel):
    rows: List[Row]


class ChartRequest(BaseModel):
    rows: List[Row]
    config: ConfigModel = Field(default_factory=ConfigModel)


class RestoreRequest(BaseModel):
    token: str


class FetchRequest(BaseModel):
    url: str


def _describe(rows: List[Row]) -> Dict[str, Any]:
    columns = columns_of(rows)
    meta = infer_types(rows, columns)
    return {
        "rows": rows,
        "rowCount": len(rows),
        "columns": [column.to_dict() for column in meta],
        "suggestions": [suggestion.to_dict() for suggestion in suggest_charts(meta)],
    }


def _plan_for(rows: List[Row], config: ChartConfig) -> Dict[str, Any]:
    meta = infer_types(rows, columns_of(rows))
    return build_plan(rows, config, meta).to_dict()


# ---- Routes ----
@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.get("/sample")
def sample() -> Dict[str, Any]:
    return _describe(sample_rows())


@app.post("/ingest")
async def ingest(request: Request, filename: str = Query("upload.csv")) -> Dict[str, Any]:
    body = await request.body()
    try:
        rows = ingest_rows(filename, body)
    except IngestError as exc:
        logger.warning("ingest failed", extra={"upload_filename": filename, "error": str(exc)})
        raise HTTPException(status_code=400, detail=str(exc))
    return _describe(rows)


@app.post("/ingest/url")
def ingest_url(body: FetchRequest) -> Dict[str, Any]:
    try:
        rows = fetch_rows(body.url)
    except IngestError as exc:
        logger.warning("fetch failed", extra={"url": body.url, "error": str(exc)})
        raise HTTPException(status_code=400, detail=str(exc))
    return _describe(rows)


@app.post("/infer")
def infer(body: RowsRequest) -> Dict[str, Any]:
    meta = infer_types(body.rows, columns_of(body.rows))
    return {"columns": [column.to_dict() for column in meta]}


@app.post("/suggestions")
def suggestions(body: RowsRequest) -> Dict[str, Any]:
    described = _describe(body.rows)
    described.pop("rows")
    return described


@app.post("/plan")
def plan(body: ChartRequest) -> Dict[str, Any]:
    return _plan_for(body.rows, body.config.to_config())


@app.post("/share")
def share(body: ChartRequest) -> Dict[str, Any]:
    token = encode_state(body.rows, body.config.to_config())
    if token is None:
        return {"published": False, "token": None, "url": None, "embed": None}
    url = share_url(token)
    return {
        "published": True,
        "token": token,
        "url": url,
        "embed": embed_snippet(url),
    }


@app.post("/restore")
def restore(body: RestoreRequest) -> Dict[str, Any]:
    session = ChartSession()
    if not session.restore_from_token(body.token):
        return {"restored": False}

    snapshot = session.snapshot
    return {
        "restored": True,
        "rows": session.rows,
        "rowCount": len(session.rows),
        "columns": [column.to_dict() for column in snapshot.column_meta],
        "suggestions": [suggestion.to_dict() for suggestion in snapshot.suggestions],
        "config": snapshot.config.to_dict(),
        "plan": snapshot.plan.to_dict() if snapshot.plan else None,
    }


# ---- Middleware ----
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    try:
        response = await call_next(request)
        duration_ms = int((time.time() - start) * 1000)
        logger.info(
            "request completed",
            extra={
                "path": request.url.path,
                "method": request.method,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
                "request_id": request_id,
            },
        )
        response.headers.setdefault("x-request-id", request_id)
        return response
    except Exception:
        duration_ms = int((time.time() - start) * 1000)
        logger.exception(
            "request failed",
            extra={
                "path": request.url.path,
                "method": request.method,
                "request_id": request_id,
                "duration_ms": duration_ms,
            },
        )
        raise


handler = Mangum(app)
