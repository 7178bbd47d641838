"""Shared Pydantic models for kubectl-peek.

The resolver, fetcher, renderers and controller all import from here so
the identifier, request and response shapes stay in one place.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Mode(str, Enum):
    """How the controller advances between pages."""
    interactive = "interactive"
    single_pass = "single_pass"


class OutputFormat(str, Enum):
    """Output formats accepted by ``-o``."""
    table = ""
    wide = "wide"
    json = "json"
    yaml = "yaml"
    name = "name"

    @property
    def is_tabular(self) -> bool:
        return self in (OutputFormat.table, OutputFormat.wide)


# ---------------------------------------------------------------------------
# Resource identity
# ---------------------------------------------------------------------------

class ResourceIdentifier(BaseModel):
    """Canonical (group, version, resource) triple chosen by discovery."""
    model_config = ConfigDict(frozen=True)

    group: str = Field(default="", description="Empty for the core API group")
    version: str
    resource: str = Field(..., description="Plural resource name, e.g. 'pods'")
    kind: str = ""
    namespaced: bool = True

    @property
    def group_version(self) -> str:
        return f"{self.group}/{self.version}" if self.group else self.version

    @property
    def api_path(self) -> str:
        if self.group:
            return f"/apis/{self.group}/{self.version}"
        return f"/api/{self.version}"

    def __str__(self) -> str:
        return f"{self.resource}.{self.group}" if self.group else self.resource


# ---------------------------------------------------------------------------
# One page: request and response
# ---------------------------------------------------------------------------

class PageRequest(BaseModel):
    """Parameters of a single bounded list call."""
    model_config = ConfigDict(frozen=True)

    limit: int = Field(..., gt=0)
    continue_token: Optional[str] = Field(default=None, description="Opaque; passed back unmodified")
    label_selector: Optional[str] = None
    namespace: Optional[str] = Field(default=None, description="None means all namespaces")


class PageResponse(BaseModel):
    """One page of results in server order."""
    model_config = ConfigDict(frozen=True)

    kind: str
    api_version: str = ""
    items: list[dict[str, Any]] = Field(default_factory=list)
    columns: list[dict[str, Any]] = Field(default_factory=list)
    continue_token: Optional[str] = None

    @property
    def is_table(self) -> bool:
        return self.kind == "Table"


# ---------------------------------------------------------------------------
# Caller options
# ---------------------------------------------------------------------------

class PeekOptions(BaseModel):
    """Everything the user asked for on the command line."""
    model_config = ConfigDict(frozen=True)

    resource: str
    limit: int
    continue_token: Optional[str] = None
    interactive: bool = False
    selector: Optional[str] = None
    all_namespaces: bool = False
    output: OutputFormat = OutputFormat.table

    @property
    def mode(self) -> Mode:
        return Mode.interactive if self.interactive else Mode.single_pass
