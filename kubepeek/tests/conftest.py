"""
Shared pytest fixtures for kubectl-peek tests.

Provides:
- FakeApiClient: stands in for kubernetes.client.ApiClient.call_api and
  serves canned JSON per request path, recording every call
- PagedCollection: a server-side pager over a fixed list of names that
  issues its own continue tokens
- discovery documents for a small cluster (core, apps, autoscaling, ...)

No real cluster required.
"""

import io
import json
from typing import Any, Callable, Dict, List, Optional

import pytest
from kubernetes.client.rest import ApiException
from rich.console import Console


# =============================================================================
# API client fake
# =============================================================================

class FakeHTTPResponse:
    """Mimics the raw urllib3 response returned with _preload_content=False."""

    def __init__(self, body: Any):
        self.data = body if isinstance(body, bytes) else json.dumps(body).encode("utf-8")


class FakeApiClient:
    """Route table keyed by request path.

    A route is a JSON-able body, raw bytes, an exception to raise, or a
    callable ``(query: dict, headers: dict) -> body``.
    """

    def __init__(self, routes: Optional[Dict[str, Any]] = None):
        self.routes: Dict[str, Any] = dict(routes or {})
        self.calls: List[Dict[str, Any]] = []

    def call_api(self, resource_path, method, path_params=None, query_params=None,
                 header_params=None, **kwargs):
        self.calls.append({
            "path": resource_path,
            "method": method,
            "query": list(query_params or []),
            "headers": dict(header_params or {}),
            "kwargs": kwargs,
        })
        route = self.routes.get(resource_path)
        if route is None:
            raise ApiException(status=404, reason="Not Found")
        if isinstance(route, BaseException):
            raise route
        if callable(route):
            route = route(dict(query_params or []), dict(header_params or {}))
        return FakeHTTPResponse(route)

    def calls_to(self, path: str) -> List[Dict[str, Any]]:
        return [c for c in self.calls if c["path"] == path]


# =============================================================================
# Paged collection (server side of the limit/continue protocol)
# =============================================================================

class PagedCollection:
    """Serves ``names`` in pages; tokens are opaque to the client under test."""

    def __init__(self, names: List[str], namespace: str = "default",
                 token_prefix: str = "tok-", fail_on_call: Optional[int] = None):
        self.names = names
        self.namespace = namespace
        self.token_prefix = token_prefix
        self.fail_on_call = fail_on_call
        self.issued: List[str] = []
        self.received: List[Optional[str]] = []
        self.requests: List[Dict[str, Any]] = []

    def __call__(self, query: Dict[str, Any], headers: Dict[str, str]) -> Dict[str, Any]:
        self.requests.append(query)
        if self.fail_on_call is not None and len(self.requests) == self.fail_on_call:
            raise ApiException(status=500, reason="Internal Server Error")

        limit = int(query["limit"])
        token = query.get("continue")
        self.received.append(token)
        start = int(token[len(self.token_prefix):]) if token else 0
        chunk = self.names[start:start + limit]
        end = start + limit

        metadata: Dict[str, Any] = {"resourceVersion": "12345"}
        if end < len(self.names):
            metadata["continue"] = f"{self.token_prefix}{end}"
            self.issued.append(metadata["continue"])

        if "as=Table" in headers.get("Accept", ""):
            return self._table(chunk, metadata)
        return self._list(chunk, metadata)

    def _table(self, chunk: List[str], metadata: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "kind": "Table",
            "apiVersion": "meta.k8s.io/v1",
            "metadata": metadata,
            "columnDefinitions": [
                {"name": "Name", "type": "string", "format": "name", "priority": 0},
                {"name": "Status", "type": "string", "priority": 0},
                {"name": "Node", "type": "string", "priority": 1},
            ],
            "rows": [
                {
                    "cells": [name, "Running", "node-1"],
                    "object": {
                        "kind": "PartialObjectMetadata",
                        "metadata": {"name": name, "namespace": self.namespace},
                    },
                }
                for name in chunk
            ],
        }

    def _list(self, chunk: List[str], metadata: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "kind": "PodList",
            "apiVersion": "v1",
            "metadata": metadata,
            "items": [
                {
                    "metadata": {
                        "name": name,
                        "namespace": self.namespace,
                        "creationTimestamp": "2024-01-01T00:00:00Z",
                        "labels": {"app": "web"},
                    },
                    "status": {"phase": "Running"},
                }
                for name in chunk
            ],
        }


# =============================================================================
# Discovery documents
# =============================================================================

def _resource(name, kind, namespaced=True, short=None, singular=None):
    return {
        "name": name,
        "singularName": singular if singular is not None else kind.lower(),
        "namespaced": namespaced,
        "kind": kind,
        "verbs": ["get", "list", "watch"],
        "shortNames": short or [],
    }


DISCOVERY_ROUTES: Dict[str, Any] = {
    "/api": {"kind": "APIVersions", "versions": ["v1"]},
    "/api/v1": {
        "kind": "APIResourceList",
        "groupVersion": "v1",
        "resources": [
            _resource("pods", "Pod", short=["po"]),
            {"name": "pods/log", "singularName": "", "namespaced": True, "kind": "Pod", "verbs": ["get"]},
            _resource("nodes", "Node", namespaced=False, short=["no"]),
            _resource("services", "Service", short=["svc"]),
            _resource("events", "Event", short=["ev"]),
        ],
    },
    "/apis": {
        "kind": "APIGroupList",
        "groups": [
            {
                "name": "metrics.k8s.io",
                "versions": [{"groupVersion": "metrics.k8s.io/v1beta1", "version": "v1beta1"}],
                "preferredVersion": {"groupVersion": "metrics.k8s.io/v1beta1", "version": "v1beta1"},
            },
            {
                "name": "apps",
                "versions": [{"groupVersion": "apps/v1", "version": "v1"}],
                "preferredVersion": {"groupVersion": "apps/v1", "version": "v1"},
            },
            {
                "name": "autoscaling",
                "versions": [
                    {"groupVersion": "autoscaling/v2", "version": "v2"},
                    {"groupVersion": "autoscaling/v1", "version": "v1"},
                ],
                "preferredVersion": {"groupVersion": "autoscaling/v2", "version": "v2"},
            },
            {
                "name": "events.k8s.io",
                "versions": [{"groupVersion": "events.k8s.io/v1", "version": "v1"}],
                "preferredVersion": {"groupVersion": "events.k8s.io/v1", "version": "v1"},
            },
        ],
    },
    # metrics.k8s.io/v1beta1 deliberately missing: an unavailable aggregated API
    "/apis/apps/v1": {
        "kind": "APIResourceList",
        "groupVersion": "apps/v1",
        "resources": [_resource("deployments", "Deployment", short=["deploy"])],
    },
    "/apis/autoscaling/v2": {
        "kind": "APIResourceList",
        "groupVersion": "autoscaling/v2",
        "resources": [_resource("horizontalpodautoscalers", "HorizontalPodAutoscaler", short=["hpa"])],
    },
    "/apis/events.k8s.io/v1": {
        "kind": "APIResourceList",
        "groupVersion": "events.k8s.io/v1",
        "resources": [_resource("events", "Event")],
    },
}


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def api_client() -> FakeApiClient:
    """Fake API client that knows the discovery documents and nothing else."""
    return FakeApiClient(DISCOVERY_ROUTES)


@pytest.fixture
def paged() -> Callable[..., PagedCollection]:
    """Factory for PagedCollection instances."""
    return PagedCollection


@pytest.fixture
def fake_client_cls():
    return FakeApiClient


@pytest.fixture
def make_console():
    """Return a factory producing (console, buffer) pairs, 200 columns unless told otherwise.

    ``width=None`` leaves the console at its own default width.
    """
    def _make(width=200):
        buf = io.StringIO()
        return Console(file=buf, width=width, highlight=False, color_system=None), buf
    return _make


@pytest.fixture
def discovery_routes() -> Dict[str, Any]:
    return dict(DISCOVERY_ROUTES)
