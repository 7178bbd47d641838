"""Page Fetcher: one bounded list call against the API server.

Builds the collection URL for a resolved resource, sends ``limit``,
``continue`` and ``labelSelector`` through untouched, and returns the page
together with the server's next continue token.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from kubepeek import config
from kubepeek.errors import RemoteQueryError
from kubepeek.models import PageRequest, PageResponse, ResourceIdentifier
from kubepeek.utils import get_json

logger = logging.getLogger(__name__)


def collection_path(identifier: ResourceIdentifier, namespace: str | None) -> str:
    """URL of the list endpoint; cluster-wide when *namespace* is None."""
    if identifier.namespaced and namespace:
        return f"{identifier.api_path}/namespaces/{namespace}/{identifier.resource}"
    return f"{identifier.api_path}/{identifier.resource}"


class PageFetcher:
    """Issues exactly one list request per ``fetch`` call. No retries."""

    def __init__(self, api_client: Any) -> None:
        self._api_client = api_client

    def fetch(
        self,
        identifier: ResourceIdentifier,
        request: PageRequest,
        *,
        as_table: bool = True,
    ) -> PageResponse:
        """Fetch one page.

        Args:
            identifier: Resolved resource type.
            request: Limit, opaque continue token, selector and namespace.
            as_table: Negotiate server-side ``Table`` output. Structured
                output formats pass False to receive full objects.

        Raises:
            RemoteQueryError: on any transport, HTTP or body-shape failure.
        """
        query: list[tuple[str, Any]] = [("limit", request.limit)]
        if request.continue_token:
            query.append(("continue", request.continue_token))
        if request.label_selector:
            query.append(("labelSelector", request.label_selector))

        path = collection_path(identifier, request.namespace)
        body = get_json(
            self._api_client,
            path,
            query,
            accept=config.TABLE_ACCEPT if as_table else config.JSON_ACCEPT,
        )
        page = _to_page(body, path)
        logger.debug(
            "Fetched %d %s from %s (more=%s)",
            len(page.items), identifier, path, page.continue_token is not None,
        )
        return page


def _to_page(body: Any, path: str) -> PageResponse:
    if not isinstance(body, dict):
        raise RemoteQueryError(f"GET {path} returned {type(body).__name__}, expected an object")

    kind = body.get("kind") or ""
    if kind == "Table":
        items = body.get("rows")
    elif kind.endswith("List"):
        items = body.get("items")
    else:
        raise RemoteQueryError(f"GET {path} returned kind {kind!r}, expected a list or table")

    if items is None:
        items = []
    if not isinstance(items, list):
        raise RemoteQueryError(f"GET {path} returned a malformed {kind}")

    metadata = body.get("metadata") or {}
    try:
        return PageResponse(
            kind=kind,
            api_version=body.get("apiVersion") or "",
            items=items,
            columns=body.get("columnDefinitions") or [],
            continue_token=metadata.get("continue") or None,
        )
    except ValidationError as exc:
        raise RemoteQueryError(f"GET {path} returned a malformed {kind}", cause=exc) from exc
