"""Small shared utilities for kubectl-peek.

Helpers for raw JSON calls against the API server and kubectl-style
timestamp formatting.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Optional

import urllib3
from kubernetes.client.rest import ApiException

from kubepeek import config
from kubepeek.errors import RemoteQueryError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# JSON over the API client
# ---------------------------------------------------------------------------

def get_json(
    api_client: Any,
    path: str,
    query_params: Optional[list[tuple[str, Any]]] = None,
    accept: str = config.JSON_ACCEPT,
) -> Any:
    """GET *path* through the client's auth and TLS settings and decode JSON.

    Exactly one HTTP request is made. Every failure becomes a
    ``RemoteQueryError`` that keeps the original exception as ``cause``.
    """
    logger.debug("GET %s %s", path, query_params or "")
    try:
        resp = api_client.call_api(
            path,
            "GET",
            query_params=query_params or [],
            header_params={"Accept": accept},
            auth_settings=["BearerToken"],
            _return_http_data_only=True,
            _preload_content=False,
        )
    except ApiException as exc:
        raise RemoteQueryError(
            f"GET {path} failed: {_status_message(exc)}", cause=exc, status=exc.status,
        ) from exc
    except urllib3.exceptions.HTTPError as exc:
        raise RemoteQueryError(f"GET {path} failed: {exc}", cause=exc) from exc

    try:
        return json.loads(resp.data)
    except (TypeError, ValueError) as exc:
        raise RemoteQueryError(f"GET {path} returned a malformed body: {exc}", cause=exc) from exc


def _status_message(exc: ApiException) -> str:
    """Prefer the server's Status message over the bare HTTP reason."""
    try:
        status = json.loads(exc.body)
        if isinstance(status, dict) and status.get("message"):
            return f"({exc.status}) {status['message']}"
    except (TypeError, ValueError):
        pass
    return f"({exc.status}) {exc.reason}"


# ---------------------------------------------------------------------------
# Timestamp helpers
# ---------------------------------------------------------------------------

def parse_timestamp(value: str) -> Optional[datetime]:
    """Parse an RFC 3339 timestamp as emitted by the API server."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (ValueError, TypeError):
        return None


def human_duration(seconds: float) -> str:
    """Format an age the way kubectl does (``45s``, ``3m20s``, ``5h``, ``12d``)."""
    secs = int(seconds)
    if secs < -1:
        return "<invalid>"
    if secs < 0:
        return "0s"
    if secs < 120:
        return f"{secs}s"
    minutes = secs // 60
    if minutes < 10:
        rem = secs % 60
        return f"{minutes}m{rem}s" if rem else f"{minutes}m"
    if minutes < 180:
        return f"{minutes}m"
    hours = minutes // 60
    if hours < 8:
        rem = minutes % 60
        return f"{hours}h{rem}m" if rem else f"{hours}h"
    if hours < 48:
        return f"{hours}h"
    if hours < 24 * 8:
        rem = hours % 24
        return f"{hours // 24}d{rem}h" if rem else f"{hours // 24}d"
    if hours < 24 * 365 * 2:
        return f"{hours // 24}d"
    if hours < 24 * 365 * 8:
        rem = (hours // 24) % 365
        years = hours // 24 // 365
        return f"{years}y{rem}d" if rem else f"{years}y"
    return f"{hours // 24 // 365}y"


def age(timestamp: str, now: Optional[datetime] = None) -> str:
    """Human age of an object created at *timestamp*, ``<unknown>`` if unparseable."""
    created = parse_timestamp(timestamp)
    if created is None:
        return "<unknown>"
    now = now or datetime.now(timezone.utc)
    return human_duration((now - created).total_seconds())
