"""kubectl-peek CLI - main entry point.

Typer-based kubectl plugin. Install the ``kubectl-peek`` console script on
``$PATH`` and run it as ``kubectl peek``.

Usage::

    kubectl peek pods
    kubectl peek deployments --limit 5 -o wide
    kubectl peek services --limit 20 -i
    kubectl peek pods --limit 10 --continue "eyJhbGciOi..."
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import typer
from rich.console import Console

from kubepeek import __version__, config
from kubepeek.context import build_context
from kubepeek.controller import PaginationController, validate_options
from kubepeek.errors import ConfigurationError, PeekError
from kubepeek.fetcher import PageFetcher
from kubepeek.models import OutputFormat, PeekOptions
from kubepeek.resolver import resolve

logger = logging.getLogger("kubepeek")

# ---------------------------------------------------------------------------
# Typer application
# ---------------------------------------------------------------------------

app = typer.Typer(
    name="kubectl-peek",
    help="Efficiently peek at the first N resources from the API server",
    add_completion=False,
)

# Rendered pages go to stdout, diagnostics to stderr
console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)

EPILOG = """\
Examples:

  kubectl peek pods                              # first 10 pods in the current namespace

  kubectl peek deployments --limit 5 -o wide     # first 5 deployments, wide columns

  kubectl peek services --limit 20 -i            # step through services, 20 at a time

  kubectl peek pods --continue "eyJhbGciOi..."   # next page from an earlier run
"""


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"kubectl-peek version [cyan]{__version__}[/cyan]")
        raise typer.Exit()


def _parse_output(value: str) -> OutputFormat:
    try:
        return OutputFormat(value)
    except ValueError:
        choices = ", ".join(f.value for f in OutputFormat if f.value)
        raise ConfigurationError(
            f"unable to match a printer suitable for the output format {value!r}, "
            f"allowed formats are: {choices}"
        ) from None


# ---------------------------------------------------------------------------
# peek — the only command
# ---------------------------------------------------------------------------

@app.command(epilog=EPILOG)
def peek(
    resource: str = typer.Argument(
        ...,
        metavar="TYPE",
        help="Resource type, e.g. pods, deploy, deployments.apps.",
    ),
    limit: int = typer.Option(
        config.DEFAULT_LIMIT,
        "--limit",
        help="Number of items to return per page.",
    ),
    continue_token: Optional[str] = typer.Option(
        None,
        "--continue",
        help="A token used to retrieve the next page of results. If not provided, the first page is returned.",
    ),
    interactive: bool = typer.Option(
        False,
        "--interactive", "-i",
        help="Enable interactive mode to page through results.",
    ),
    selector: Optional[str] = typer.Option(
        None,
        "--selector", "-l",
        help="Selector (label query) to filter on, e.g. -l key1=value1,key2=value2.",
    ),
    all_namespaces: bool = typer.Option(
        False,
        "--all-namespaces", "-A",
        help="List the requested object(s) across all namespaces, ignoring --namespace.",
    ),
    output: str = typer.Option(
        "",
        "--output", "-o",
        help="Output format: wide, json, yaml or name. Default is a table.",
    ),
    namespace: Optional[str] = typer.Option(
        None,
        "--namespace", "-n",
        help="Namespace to list from (default: the current context's namespace).",
    ),
    kubeconfig: Optional[str] = typer.Option(
        None,
        "--kubeconfig",
        help="Path to the kubeconfig file (default: $KUBECONFIG or ~/.kube/config).",
    ),
    context: Optional[str] = typer.Option(
        None,
        "--context",
        help="Name of the kubeconfig context to use.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Enable verbose logging (DEBUG level).",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version information and exit.",
    ),
) -> None:
    """
    Retrieve just the first N items of a resource list.

    Avoids the memory and network cost of "kubectl get" on clusters with
    many resources. Page further with --interactive, or by passing the
    printed continue token back with --continue.
    """
    _setup_logging(verbose)

    try:
        options = PeekOptions(
            resource=resource,
            limit=limit,
            continue_token=continue_token or None,
            interactive=interactive,
            selector=selector or None,
            all_namespaces=all_namespaces,
            output=_parse_output(output),
        )
        validate_options(options)

        ctx = build_context(kubeconfig=kubeconfig, context=context, namespace=namespace)
        identifier = resolve(options.resource, ctx.mapper)

        controller = PaginationController(
            PageFetcher(ctx.api_client),
            identifier,
            options,
            ctx.namespace,
            console,
            err_console=err_console,
        )
        controller.run()

    except PeekError as e:
        err_console.out(f"error: {e}")
        logger.debug("Command failed", exc_info=True)
        sys.exit(e.exit_code)
    except KeyboardInterrupt:
        err_console.out("")
        sys.exit(130)
    except Exception as e:
        err_console.out(f"error: unexpected failure: {e}")
        logger.error(f"Unexpected error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    app()
