"""Renderers: turn one page into terminal output.

A renderer is picked per page by ``select_renderer``:

* ``TableRenderer`` when the server negotiated a ``meta.k8s.io/v1 Table``,
* ``ObjectListRenderer`` when it only sent the plain ``<Kind>List``,
* ``StructuredRenderer`` for ``-o json|yaml|name``.

Renderers hold no paging state; they only format what they are given.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Any, Iterable, Optional

import yaml
from rich.cells import cell_len
from rich.console import Console
from rich.segment import Segments
from rich.table import Table
from rich.text import Text

from kubepeek.models import OutputFormat, PageResponse, ResourceIdentifier
from kubepeek.utils import age

_COLUMN_GAP = 3


class Renderer(ABC):
    """Writes one page of items to a console."""

    @abstractmethod
    def render(self, page: PageResponse, console: Console) -> None:
        ...


# ---------------------------------------------------------------------------
# Tabular output
# ---------------------------------------------------------------------------

def _cell(value: Any) -> str:
    if value is None:
        return "<none>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value) or "<none>"
    return str(value)


def _print_table(console: Console, headers: list[str], rows: Iterable[list[str]]) -> None:
    """kubectl look: no borders, upper-case headers, three spaces between columns.

    Rows are never fitted to the terminal; long lines run past the edge.
    """
    rows = list(rows)
    table = Table(box=None, show_edge=False, pad_edge=False, padding=(0, _COLUMN_GAP, 0, 0),
                  header_style="bold", expand=False)
    for header in headers:
        table.add_column(Text(header.upper()), no_wrap=True, overflow="ignore")
    for row in rows:
        table.add_row(*(Text(cell) for cell in row))

    widths = [cell_len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row[: len(widths)]):
            widths[i] = max(widths[i], cell_len(cell))
    natural = sum(widths) + _COLUMN_GAP * max(len(widths) - 1, 0)
    # console.print clamps width to the terminal, so render at full width first.
    options = console.options.update_width(max(natural, console.width))
    console.print(Segments(console.render(table, options)), crop=False)


def _namespace_of(obj: Optional[dict[str, Any]]) -> str:
    return ((obj or {}).get("metadata") or {}).get("namespace") or "<none>"


class TableRenderer(Renderer):
    """Server-side printed columns; ``wide`` shows the priority > 0 ones too."""

    def __init__(self, wide: bool = False, with_namespace: bool = False) -> None:
        self.wide = wide
        self.with_namespace = with_namespace

    def render(self, page: PageResponse, console: Console) -> None:
        visible = [
            i for i, col in enumerate(page.columns)
            if self.wide or int(col.get("priority", 0) or 0) == 0
        ]
        headers = [page.columns[i].get("name", "") for i in visible]
        if self.with_namespace:
            headers.insert(0, "Namespace")

        rows = []
        for row in page.items:
            cells = row.get("cells") or []
            out = [_cell(cells[i]) if i < len(cells) else "" for i in visible]
            if self.with_namespace:
                out.insert(0, _namespace_of(row.get("object")))
            rows.append(out)
        _print_table(console, headers, rows)


class ObjectListRenderer(Renderer):
    """Fallback for servers that did not return a Table: NAME and AGE."""

    def __init__(self, wide: bool = False, with_namespace: bool = False) -> None:
        self.wide = wide
        self.with_namespace = with_namespace

    def render(self, page: PageResponse, console: Console) -> None:
        headers = ["Name", "Age"]
        if self.with_namespace:
            headers.insert(0, "Namespace")
        if self.wide:
            headers.append("Labels")

        rows = []
        for obj in page.items:
            meta = obj.get("metadata") or {}
            out = [meta.get("name") or "<none>", age(meta.get("creationTimestamp") or "")]
            if self.with_namespace:
                out.insert(0, _namespace_of(obj))
            if self.wide:
                labels = meta.get("labels") or {}
                out.append(",".join(f"{k}={v}" for k, v in sorted(labels.items())) or "<none>")
            rows.append(out)
        _print_table(console, headers, rows)


# ---------------------------------------------------------------------------
# Structured output
# ---------------------------------------------------------------------------

class StructuredRenderer(Renderer):
    """``json`` / ``yaml`` as a ``v1 List`` document, or ``name`` per line."""

    def __init__(self, output: OutputFormat, identifier: ResourceIdentifier) -> None:
        self.output = output
        self.identifier = identifier

    def render(self, page: PageResponse, console: Console) -> None:
        items = [self._with_type_meta(page, item) for item in page.items]
        if self.output is OutputFormat.name:
            for item in items:
                console.out(self._qualified_name(item), highlight=False)
            return

        doc = {
            "apiVersion": "v1",
            "items": items,
            "kind": "List",
            "metadata": {"resourceVersion": ""},
        }
        if self.output is OutputFormat.json:
            console.out(json.dumps(doc, indent=4), highlight=False)
        else:
            console.out(yaml.safe_dump(doc, default_flow_style=False).rstrip("\n"), highlight=False)

    @staticmethod
    def _with_type_meta(page: PageResponse, item: dict[str, Any]) -> dict[str, Any]:
        # List responses omit apiVersion/kind on each item; restore them.
        kind = page.kind[: -len("List")] if page.kind.endswith("List") else ""
        restored: dict[str, Any] = {}
        if "apiVersion" not in item and page.api_version:
            restored["apiVersion"] = page.api_version
        if "kind" not in item and kind:
            restored["kind"] = kind
        return {**restored, **item}

    def _qualified_name(self, item: dict[str, Any]) -> str:
        kind = (item.get("kind") or self.identifier.kind or self.identifier.resource).lower()
        if self.identifier.group:
            kind = f"{kind}.{self.identifier.group}"
        name = (item.get("metadata") or {}).get("name", "")
        return f"{kind}/{name}"


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------

def select_renderer(
    page: PageResponse,
    output: OutputFormat,
    identifier: ResourceIdentifier,
    with_namespace: bool = False,
) -> Renderer:
    """Pick the renderer variant for *page* given the negotiated response kind."""
    if not output.is_tabular:
        return StructuredRenderer(output, identifier)
    wide = output is OutputFormat.wide
    if page.is_table:
        return TableRenderer(wide=wide, with_namespace=with_namespace)
    return ObjectListRenderer(wide=wide, with_namespace=with_namespace)
