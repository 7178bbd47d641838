"""kubectl-peek configuration: constants, defaults, protocol strings.

All tunables live here so the controller and fetcher stay free of magic
values. Override at runtime via environment variables or CLI flags.
"""

from __future__ import annotations

import os

# ---------------------------------------------------------------------------
# Paging defaults
# ---------------------------------------------------------------------------

DEFAULT_LIMIT: int = int(os.getenv("KUBEPEEK_DEFAULT_LIMIT", "10"))

# ---------------------------------------------------------------------------
# Content negotiation
# ---------------------------------------------------------------------------

# Ask for server-side printing first, fall back to the plain list.
TABLE_ACCEPT: str = "application/json;as=Table;v=v1;g=meta.k8s.io,application/json"
JSON_ACCEPT: str = "application/json"

# ---------------------------------------------------------------------------
# Connection defaults
# ---------------------------------------------------------------------------

DEFAULT_NAMESPACE: str = "default"
INCLUSTER_NAMESPACE_FILE: str = os.getenv(
    "KUBEPEEK_NAMESPACE_FILE",
    "/var/run/secrets/kubernetes.io/serviceaccount/namespace",
)

# ---------------------------------------------------------------------------
# Interactive prompt & messages
# ---------------------------------------------------------------------------

NEXT_KEY: str = "n"
PROMPT: str = "\n--- [n] next page, [q] quit: "
END_OF_LIST: str = "\n--- End of list ---"
NO_RESOURCES: str = "No resources found."
CONTINUE_LABEL: str = "Continue Token:"
