"""Helpers for publishing share tokens as links and embeddable snippets."""
from __future__ import annotations

import os
from typing import Optional
from urllib.parse import urldefrag

from jinja2 import Environment, FileSystemLoader, select_autoescape

from services.workers.chart.core.constants import _EMBED_TEMPLATE_NAME, _TEMPLATE_DIR


SHARE_BASE_URL = os.environ.get("CHARTSHARE_SHARE_BASE_URL", "http://localhost:3000/")

_JINJA_ENV = Environment(
    loader=FileSystemLoader(str(_TEMPLATE_DIR)),
    autoescape=select_autoescape(["html", "xml", "j2"]),
)


def share_url(token: str, base_url: Optional[str] = None) -> str:
    """Return ``base_url`` with ``token`` as its fragment, replacing any existing one."""
    base, _ = urldefrag(base_url or SHARE_BASE_URL)
    return f"{base}#{token}"


def token_from_url(url: str) -> Optional[str]:
    _, fragment = urldefrag(url)
    return fragment or None


def embed_snippet(url: str, *, width: str = "100%", min_height: int = 460) -> str:
    template = _JINJA_ENV.get_template(_EMBED_TEMPLATE_NAME)
    return template.render(url=url, width=width, min_height=min_height).strip()
