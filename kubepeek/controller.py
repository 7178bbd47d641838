"""Pagination Controller: fetch a page, render it, decide what happens next.

States::

    Fetching -> Rendering -> Deciding -> (Fetching | Terminated)

Single-pass mode always stops after one page and prints the continue
token for the caller to pass back later. Interactive mode waits for one
keystroke between pages; only ``n`` fetches the next page.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, TextIO

import click
from rich.console import Console

from kubepeek import config
from kubepeek.errors import ConfigurationError, InputError
from kubepeek.fetcher import PageFetcher
from kubepeek.models import Mode, PageRequest, PageResponse, PeekOptions, ResourceIdentifier
from kubepeek.rendering import select_renderer

logger = logging.getLogger(__name__)

KeyReader = Callable[[], str]


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def validate_options(options: PeekOptions) -> None:
    """Reject flag combinations before any configuration is loaded.

    Raises:
        ConfigurationError: on a non-positive limit, ``--interactive`` with
            ``--continue``, or interactive mode with non-table output.
    """
    if options.limit <= 0:
        raise ConfigurationError("--limit must be a positive number")
    if options.interactive and options.continue_token:
        raise ConfigurationError("cannot use --interactive and --continue flags together")
    if options.interactive and not options.output.is_tabular:
        raise ConfigurationError("interactive mode is only supported for standard and wide table output")


# ---------------------------------------------------------------------------
# Keystroke input
# ---------------------------------------------------------------------------

def read_key(stream: Optional[TextIO] = None) -> str:
    """Block until one key is available; raw single key on a terminal."""
    stream = stream or sys.stdin
    try:
        if stream.isatty():
            return click.getchar()
        return stream.read(1)
    except (EOFError, OSError, ValueError) as exc:
        raise InputError(f"could not read keystroke: {exc}") from exc


# ---------------------------------------------------------------------------
# Session state
# ---------------------------------------------------------------------------

class Outcome(str, Enum):
    """Why the loop terminated."""
    empty = "empty"
    exhausted = "exhausted"
    token_emitted = "token_emitted"
    stopped = "stopped"


@dataclass
class SessionState:
    """Loop-owned state; lives for one ``run`` call only."""
    mode: Mode
    current_token: Optional[str] = None
    is_first_page: bool = True
    pages: int = 0
    outcome: Optional[Outcome] = None


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------

class PaginationController:
    """Drives sequential page fetches for one resolved resource type."""

    def __init__(
        self,
        fetcher: PageFetcher,
        identifier: ResourceIdentifier,
        options: PeekOptions,
        namespace: str,
        console: Console,
        err_console: Optional[Console] = None,
        key_reader: KeyReader = read_key,
    ) -> None:
        validate_options(options)
        self.fetcher = fetcher
        self.identifier = identifier
        self.options = options
        self.scope = None if options.all_namespaces else namespace
        self.console = console
        self.err_console = err_console or console
        self.key_reader = key_reader

    def run(self) -> SessionState:
        """Run until the list is exhausted, a token is handed off, or the user stops.

        Errors from the fetcher propagate unchanged; pages already
        rendered stay on screen.
        """
        state = SessionState(mode=self.options.mode, current_token=self.options.continue_token)

        while state.outcome is None:
            page = self._fetch(state)

            if state.is_first_page and not page.items:
                self.console.out(config.NO_RESOURCES, highlight=False)
                state.outcome = Outcome.empty
                break

            self._render(page)
            state.is_first_page = False
            state.current_token = page.continue_token
            self._decide(state)

        logger.debug("Stopped after %d page(s): %s", state.pages, state.outcome.value)
        return state

    # -- states ------------------------------------------------------------

    def _fetch(self, state: SessionState) -> PageResponse:
        request = PageRequest(
            limit=self.options.limit,
            continue_token=state.current_token,
            label_selector=self.options.selector or None,
            namespace=self.scope,
        )
        page = self.fetcher.fetch(self.identifier, request, as_table=self.options.output.is_tabular)
        state.pages += 1
        return page

    def _render(self, page: PageResponse) -> None:
        renderer = select_renderer(
            page,
            self.options.output,
            self.identifier,
            with_namespace=self.options.all_namespaces and self.identifier.namespaced,
        )
        renderer.render(page, self.console)

    def _decide(self, state: SessionState) -> None:
        token = state.current_token
        if not token:
            if state.mode is Mode.interactive:
                self.console.out(config.END_OF_LIST, highlight=False)
            state.outcome = Outcome.exhausted
            return

        if state.mode is Mode.single_pass:
            # Keep stdout parseable for structured formats.
            target = self.console if self.options.output.is_tabular else self.err_console
            target.out(f"\n{config.CONTINUE_LABEL} {token}", highlight=False)
            state.outcome = Outcome.token_emitted
            return

        self.console.out(config.PROMPT, end="", highlight=False)
        try:
            key = self.key_reader()
        except InputError as exc:
            logger.debug("Treating unreadable input as quit: %s", exc)
            key = ""
        self.console.out("", highlight=False)

        if key != config.NEXT_KEY:
            logger.debug("Key %r: quitting", key)
            state.outcome = Outcome.stopped
