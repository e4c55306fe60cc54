"""Turn uploaded or downloaded bytes into rows of raw cell values."""
from __future__ import annotations
import io, json, csv, gzip, codecs, math, logging, zipfile
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set, cast, IO
from urllib.parse import urlparse

import pandas as pd
import requests

from ..core.types import BinaryInput
from ..core.constants import _FETCH_TIMEOUT, SAMPLE_CSV

logger = logging.getLogger(__name__)


class IngestError(ValueError):
    """Raised when a payload cannot be read as a table."""


def _ensure_bytes(body: BinaryInput) -> bytes:
    if isinstance(body, bytes):
        return body
    if isinstance(body, bytearray):
        return bytes(body)
    if hasattr(body, "read"):
        return cast(IO[bytes], body).read()
    raise TypeError("body must be bytes-like or a binary stream")


def _decode_text(body: bytes) -> str:
    if body.startswith(codecs.BOM_UTF8):
        body = body[len(codecs.BOM_UTF8):]
    return body.decode("utf-8", errors="replace")


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    if isinstance(value, datetime):
        if value.hour == value.minute == value.second == value.microsecond == 0:
            return value.date().isoformat()
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


class _HeaderNormalizer:
    """Normalizes and deduplicates column headers for delimited inputs."""

    def __init__(self) -> None:
        self._base_counts: Dict[str, int] = {}
        self._used: Set[str] = set()

    def _clean(self, raw: Any, index: int) -> str:
        text = "" if raw is None else str(raw)
        text = text.lstrip("\ufeff").strip()
        if not text:
            return f"column_{index + 1}"
        return text

    def _allocate(self, base: str) -> str:
        count = self._base_counts.get(base, 0)
        candidate = base if count == 0 else f"{base}_{count + 1}"
        while candidate in self._used:
            count += 1
            candidate = f"{base}_{count + 1}"
        self._base_counts[base] = count + 1
        self._used.add(candidate)
        return candidate

    def normalize(self, fieldnames: Sequence[Any]) -> List[str]:
        return [self._allocate(self._clean(name, index)) for index, name in enumerate(fieldnames)]

    def generate_default(self, index: int) -> str:
        return self._allocate(f"column_{index + 1}")


def parse_delimited(text: str, delimiter: str = ",") -> List[Dict[str, Any]]:
    reader = csv.reader(io.StringIO(text), delimiter=delimiter)
    try:
        first_row = next(reader)
    except StopIteration:
        return []
    except csv.Error as exc:
        raise IngestError(f"Unreadable delimited data: {exc}") from exc

    normalizer = _HeaderNormalizer()
    headers = normalizer.normalize(first_row)
    rows: List[Dict[str, Any]] = []
    try:
        for raw_row in reader:
            if not raw_row or all(cell.strip() == "" for cell in raw_row):
                continue
            row = list(raw_row)
            if len(row) < len(headers):
                row.extend([""] * (len(headers) - len(row)))
            while len(headers) < len(row):
                headers.append(normalizer.generate_default(len(headers)))
            rows.append({headers[index]: row[index] for index in range(len(headers))})
    except csv.Error as exc:
        raise IngestError(f"Unreadable delimited data: {exc}") from exc

    # late-added headers must exist on every row
    for record in rows:
        for name in headers:
            record.setdefault(name, "")
    return rows


def _records_to_rows(records: Iterable[Any]) -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []
    for record in records:
        if not isinstance(record, Mapping):
            continue
        rows.append({str(key): "" if value is None else value for key, value in record.items()})
    return rows


def _ingest_json(body: bytes) -> List[Dict[str, Any]]:
    try:
        data = json.loads(_decode_text(body))
    except json.JSONDecodeError as exc:
        raise IngestError(f"Invalid JSON payload: {exc}") from exc
    if isinstance(data, list):
        return _records_to_rows(data)
    if isinstance(data, Mapping):
        return _records_to_rows([data])
    return []


def _ingest_jsonl(body: bytes) -> List[Dict[str, Any]]:
    records = []
    for line in _decode_text(body).splitlines():
        stripped = line.strip()
        if not stripped:
            continue
        try:
            records.append(json.loads(stripped))
        except json.JSONDecodeError:
            logger.debug("skipping malformed JSON line")
    return _records_to_rows(records)


def _ingest_excel(body: bytes) -> List[Dict[str, Any]]:
    try:
        with io.BytesIO(body) as stream:
            frame = pd.read_excel(stream, sheet_name=0, dtype=object)
    except (ValueError, OSError, KeyError, zipfile.BadZipFile) as exc:
        raise IngestError(f"Unreadable spreadsheet: {exc}") from exc

    frame.columns = _HeaderNormalizer().normalize([
        "" if str(col).startswith("Unnamed:") else col for col in frame.columns
    ])
    return [
        {name: _cell_text(value) for name, value in record.items()}
        for record in frame.to_dict(orient="records")
    ]


def _strip_compression_suffix(name: str) -> str:
    lowered = name.lower()
    if lowered.endswith(".gzip"):
        return name[: -len(".gzip")]
    if lowered.endswith(".gz"):
        return name[: -len(".gz")]
    return name


def ingest_rows(key: str, body: BinaryInput) -> List[Dict[str, Any]]:
    """Parse ``body`` into rows, picking the format from the file name ``key``."""
    data = _ensure_bytes(body)
    lowered = key.lower()
    if lowered.endswith(".gz") or lowered.endswith(".gzip"):
        try:
            inflated = gzip.decompress(data)
        except (OSError, EOFError) as exc:
            raise IngestError(f"Invalid GZIP payload: {key}") from exc
        return ingest_rows(_strip_compression_suffix(key), inflated)
    if lowered.endswith(".xls"):
        raise IngestError(f"Legacy .xls workbooks are not supported, save as .xlsx: {key}")
    if lowered.endswith(".xlsx") or lowered.endswith(".xlsm"):
        return _ingest_excel(data)
    if lowered.endswith(".tsv") or lowered.endswith(".tab"):
        return parse_delimited(_decode_text(data), "\t")
    if lowered.endswith(".jsonl") or lowered.endswith(".ndjson"):
        return _ingest_jsonl(data)
    if lowered.endswith(".json"):
        return _ingest_json(data)
    return parse_delimited(_decode_text(data), ",")


def _key_for_response(url: str, content_type: str) -> str:
    path = urlparse(url).path or ""
    name = path.rsplit("/", 1)[-1] or "download"
    lowered = content_type.lower()
    if "application/vnd" in lowered and not name.lower().endswith((".xlsx", ".xls", ".xlsm")):
        return f"{name}.xlsx"
    if "tab-separated" in lowered and not name.lower().endswith((".tsv", ".tab")):
        return f"{name}.tsv"
    if "json" in lowered and not name.lower().endswith((".json", ".jsonl", ".ndjson")):
        return f"{name}.json"
    return name


def fetch_rows(url: str, *, timeout: Optional[float] = None) -> List[Dict[str, Any]]:
    if not url or not url.startswith(("http://", "https://")):
        raise IngestError("url must start with http:// or https://")
    try:
        response = requests.get(url, timeout=timeout or _FETCH_TIMEOUT)
    except requests.RequestException as exc:
        raise IngestError(f"Failed to fetch {url}: {exc}") from exc
    if response.status_code >= 400:
        raise IngestError(f"Received status {response.status_code} from {url}")

    key = _key_for_response(url, response.headers.get("Content-Type", ""))
    logger.info("fetched dataset", extra={"url": url, "bytes": len(response.content), "key": key})
    return ingest_rows(key, response.content)


def sample_rows() -> List[Dict[str, Any]]:
    return parse_delimited(SAMPLE_CSV)
