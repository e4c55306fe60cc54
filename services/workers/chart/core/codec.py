"""Share-token codec.

A token is the canonical JSON document ``{"rows": [...], "settings": {...}}``
compressed with zlib and written in the URL-safe base64 alphabet without
padding, so it can be placed in a URL fragment without escaping.
"""
from __future__ import annotations

import base64
import binascii
import json
import logging
import zlib
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .constants import _MAX_DECODED_BYTES, _MAX_TOKEN_LENGTH
from .types import ChartConfig, DecodedState, Row

logger = logging.getLogger(__name__)


def _payload_bytes(rows: Sequence[Row], config: ChartConfig) -> bytes:
    payload = {"rows": [dict(row) for row in rows], "settings": config.to_settings()}
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"), default=str).encode("utf-8")


def encode_state(
    rows: Sequence[Row],
    config: ChartConfig,
    *,
    max_length: Optional[int] = None,
) -> Optional[str]:
    """Return the share token for ``rows`` and ``config``.

    ``None`` is returned when the token would reach ``max_length``
    characters; callers keep whatever token they published before.
    """
    limit = _MAX_TOKEN_LENGTH if max_length is None else max_length
    compressed = zlib.compress(_payload_bytes(rows, config), 9)
    token = base64.urlsafe_b64encode(compressed).decode("ascii").rstrip("=")
    if len(token) >= limit:
        logger.warning(
            "dataset too large for share token",
            extra={"token_length": len(token), "limit": limit, "rows": len(rows)},
        )
        return None
    return token


def _inflate(data: bytes) -> bytes:
    inflater = zlib.decompressobj()
    inflated = inflater.decompress(data, _MAX_DECODED_BYTES)
    if inflater.unconsumed_tail:
        raise ValueError("decoded payload exceeds size limit")
    if not inflater.eof:
        raise ValueError("truncated payload")
    return inflated


def _rows_from_payload(payload: Any) -> Optional[List[Dict[str, Any]]]:
    if not isinstance(payload, Mapping):
        return None
    rows = payload.get("rows")
    if not isinstance(rows, list):
        return None
    if not all(isinstance(row, Mapping) for row in rows):
        return None
    return [dict(row) for row in rows]


def decode_state(token: Optional[str]) -> Optional[DecodedState]:
    """Reverse :func:`encode_state`.

    Never raises: malformed, truncated or structurally invalid tokens yield
    ``None`` ("nothing to restore").
    """
    if not token or not isinstance(token, str):
        return None
    text = token.strip()
    if text.startswith("#"):
        text = text[1:]
    if not text:
        return None

    try:
        compressed = base64.b64decode(text + "=" * (-len(text) % 4), altchars=b"-_", validate=True)
        payload = json.loads(_inflate(compressed).decode("utf-8"))
    except (binascii.Error, zlib.error, UnicodeDecodeError, ValueError, RecursionError) as exc:
        logger.warning("failed to decode share token: %s", exc)
        return None

    rows = _rows_from_payload(payload)
    if rows is None:
        logger.warning("share token payload has no dataset")
        return None

    settings = payload.get("settings")
    config = ChartConfig.from_settings(settings) if isinstance(settings, Mapping) else None
    return DecodedState(rows=rows, config=config)
