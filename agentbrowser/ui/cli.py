"""Main CLI entry point - tokens in, one daemon round trip, rendered result out."""

import logging
from typing import List, NoReturn, Optional

import typer

from agentbrowser.commands import translate
from agentbrowser.core.configs import SessionConfig, get_client_settings
from agentbrowser.daemon.client import DaemonClient
from agentbrowser.daemon.supervisor import DaemonSupervisor
from agentbrowser.errors import DaemonError, TransportError
from agentbrowser.ui.output import (
    RenderedOutput,
    get_styled_text,
    render_failure,
    render_response,
)

logger = logging.getLogger(__name__)

HELP_FLAGS = ("--help", "-h")
WITH_DEPS_FLAGS = ("--with-deps", "-d")

HELP_TEXT = """
agent-browser - fast browser automation CLI

Usage: agent-browser <command> [args] [--json]

Commands:
  open <url>              Navigate to URL
  click <sel>             Click element (@ref from snapshot)
  fill <sel> <text>       Fill input
  type <sel> <text>       Type text
  hover <sel>             Hover element
  snapshot [opts]         Get accessibility tree with refs
  screenshot [path]       Take screenshot
  get text <sel>          Get text content
  get url                 Get current URL
  get title               Get page title
  press <key>             Press keyboard key
  wait <ms|sel>           Wait for time or element
  back | forward | reload Navigate history / reload page
  eval <js>               Evaluate JavaScript
  close                   Close browser

Setup:
  install                 Install browser binaries
  install --with-deps     Also install system dependencies (Linux)

Snapshot Options:
  -i, --interactive       Only interactive elements
  -c, --compact           Remove empty structural elements
  -d, --depth <n>         Limit tree depth
  -s, --selector <sel>    Scope to CSS selector

Options:
  --json                  Output JSON

Environment:
  AGENT_BROWSER_SESSION   Session name (default: "default")

Examples:
  agent-browser open example.com
  agent-browser snapshot -i
  agent-browser click @e2
"""

# Command arguments such as "-i" or "--depth" are ours to interpret, not click's.
CONTEXT_SETTINGS = {
    "allow_extra_args": True,
    "ignore_unknown_options": True,
    "help_option_names": [],
}

app = typer.Typer(
    add_completion=False,
    help="agent-browser - fast browser automation CLI.",
)


def _configure_logging(level_name: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _emit(rendered: RenderedOutput) -> NoReturn:
    if rendered.stdout:
        typer.echo(rendered.stdout)
    if rendered.stderr:
        typer.echo(rendered.stderr, err=True)
    raise typer.Exit(rendered.exit_code)


@app.command(context_settings=CONTEXT_SETTINGS)
def main(
    tokens: Optional[List[str]] = typer.Argument(
        None, metavar="COMMAND [ARGS]...", help="Command and its arguments"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output JSON"),
) -> None:
    """
    Run one browser command against the session's daemon.

    Flow: translate tokens -> ensure daemon -> send request -> render.
    Every failure exits with status 1 and nothing is retried.
    """
    tokens = tokens or []

    if not tokens or any(token in HELP_FLAGS for token in tokens):
        typer.echo(HELP_TEXT)
        raise typer.Exit(0)

    # install never needs the daemon
    if tokens[0] == "install":
        from agentbrowser.ui.install_commands import handle_install
        with_deps = any(token in WITH_DEPS_FLAGS for token in tokens[1:])
        raise typer.Exit(handle_install(with_deps=with_deps))

    request = translate(tokens)
    if request is None:
        typer.echo(f"{get_styled_text('Unknown command:', 'red')} {tokens[0]}", err=True)
        raise typer.Exit(1)

    try:
        settings = get_client_settings()
    except ValueError as e:
        _emit(render_failure(f"Error loading configuration: {e}", json_output))

    _configure_logging(settings.log_level)
    session = SessionConfig.from_env()
    logger.debug("Session '%s', request %s", session.name, request)

    try:
        DaemonSupervisor(session, settings).ensure()
        response = DaemonClient(session, settings).send(request)
    except (DaemonError, TransportError) as e:
        logger.debug("Request %s failed", request["id"], exc_info=True)
        _emit(render_failure(str(e), json_output))

    _emit(render_response(response, json_output))


def run() -> None:
    """Entry point for console script mapping."""
    app()


if __name__ == "__main__":
    run()
