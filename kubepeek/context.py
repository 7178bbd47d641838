"""Connection context: API client, discovery mapper and target namespace.

Built once per invocation and handed to the resolver, fetcher and
controller. Nothing here talks to the API server; discovery is lazy.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from kubernetes import client
from kubernetes import config as k8s_config

from kubepeek import config
from kubepeek.errors import ConfigurationError
from kubepeek.resolver import DiscoveryRESTMapper

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PeekContext:
    """Immutable connection settings for one invocation."""
    api_client: Any
    mapper: DiscoveryRESTMapper
    namespace: str


def build_context(
    kubeconfig: Optional[str] = None,
    context: Optional[str] = None,
    namespace: Optional[str] = None,
) -> PeekContext:
    """Load kubeconfig (or in-cluster config) and build a ``PeekContext``.

    The in-cluster service account is only tried when no kubeconfig or
    context was requested explicitly.

    Raises:
        ConfigurationError: If no usable configuration can be loaded.
    """
    try:
        api_client = k8s_config.new_client_from_config(config_file=kubeconfig, context=context)
        ns = namespace or _kubeconfig_namespace(kubeconfig, context)
        logger.debug("Loaded kubeconfig (context=%s, namespace=%s)", context or "<current>", ns)
    except Exception as e1:
        if kubeconfig or context:
            raise ConfigurationError(f"Unable to load kubeconfig: {e1}") from e1
        logger.debug("Failed to load kubeconfig: %s", e1)
        try:
            cfg = client.Configuration()
            k8s_config.load_incluster_config(client_configuration=cfg)
            api_client = client.ApiClient(configuration=cfg)
            ns = namespace or _incluster_namespace()
            logger.debug("Loaded in-cluster config (namespace=%s)", ns)
        except Exception as e2:
            raise ConfigurationError(
                f"Unable to connect to Kubernetes cluster. "
                f"kubeconfig error: {e1}. in-cluster error: {e2}"
            ) from e2

    return PeekContext(api_client=api_client, mapper=DiscoveryRESTMapper(api_client), namespace=ns)


def _kubeconfig_namespace(kubeconfig: Optional[str], context: Optional[str]) -> str:
    """Namespace of the selected (or current) kubeconfig context."""
    contexts, active = k8s_config.list_kube_config_contexts(config_file=kubeconfig)
    selected = active
    if context:
        selected = next((c for c in contexts if c.get("name") == context), active)
    return ((selected or {}).get("context") or {}).get("namespace") or config.DEFAULT_NAMESPACE


def _incluster_namespace() -> str:
    try:
        return Path(config.INCLUSTER_NAMESPACE_FILE).read_text(encoding="utf-8").strip() or config.DEFAULT_NAMESPACE
    except OSError:
        return config.DEFAULT_NAMESPACE
