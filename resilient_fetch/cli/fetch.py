"""CLI commands for the resilient fetch layer."""

import json
import logging
import sys
from pathlib import Path

import click

from resilient_fetch import __version__
from resilient_fetch.errors import ConnectionFailure, RetryExhausted
from resilient_fetch.features.fetch.config import (
    ConfigValidationError,
    FetchConfig,
    load_fetch_config,
)
from resilient_fetch.features.fetch.connector import HttpConnector
from resilient_fetch.features.fetch.models import FetchContext, HttpResponse
from resilient_fetch.features.observability.logging import (
    bind_fetch_context,
    clear_fetch_context,
    configure_logging,
    get_logger,
)
from resilient_fetch.settings import get_settings


def _parse_query(values: tuple[str, ...]) -> dict[str, str]:
    """Parse ``name=value`` pairs given with -q."""
    params: dict[str, str] = {}
    for item in values:
        name, sep, value = item.partition("=")
        if not sep or not name:
            msg = f"Expected name=value, got {item!r}"
            raise click.BadParameter(msg, param_hint="-q/--query")
        params[name] = value
    return params


def _resolve_config(
    config_path: Path | None,
    attempts: int | None,
    timeout: float | None,
) -> FetchConfig:
    """Build the effective FetchConfig.

    A YAML file replaces the environment settings; command line flags
    override either.
    """
    if config_path is not None:
        try:
            config = load_fetch_config(config_path)
        except ConfigValidationError as e:
            click.echo(f"Configuration validation failed: {config_path}", err=True)
            for error in e.errors:
                click.echo(f"  - {error['loc']}: {error['msg']}", err=True)
            sys.exit(2)
    else:
        config = get_settings().to_fetch_config()

    overrides: dict[str, object] = {}
    if attempts is not None:
        overrides["max_fetch_attempts"] = attempts
    if timeout is not None:
        overrides["timeout_seconds"] = timeout
    if overrides:
        config = FetchConfig.model_validate(config.model_dump() | overrides)
    return config


def _echo_chain(response: HttpResponse) -> None:
    """Print redirect hops oldest first."""
    hops = list(response.iter_chain())[1:]
    for hop in reversed(hops):
        click.echo(f"{hop.status_line} -> {hop.get_header('location')}")


@click.group()
@click.version_option(version=__version__)
def cli() -> None:
    """Resilient HTTP fetch CLI."""


@cli.command()
@click.argument("url")
@click.option(
    "--header",
    "-H",
    "headers",
    multiple=True,
    help="Header line 'Name: value' (repeatable).",
)
@click.option(
    "--query",
    "-q",
    "query",
    multiple=True,
    help="Query parameter name=value (repeatable).",
)
@click.option(
    "--ca-file",
    "ca_file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="PEM bundle of trusted certificate authorities.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to fetch configuration YAML file.",
)
@click.option("--attempts", type=int, default=None, help="Maximum fetch attempts.")
@click.option("--timeout", type=float, default=None, help="Timeout in seconds.")
@click.option(
    "--show-chain",
    is_flag=True,
    help="Print redirect hops before the final response.",
)
@click.option(
    "--json-logs/--no-json-logs",
    default=None,
    help="Use JSON format for logs (default: LOG_JSON or true).",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging.")
def get(  # noqa: PLR0913
    url: str,
    headers: tuple[str, ...],
    query: tuple[str, ...],
    ca_file: str | None,
    config_path: Path | None,
    attempts: int | None,
    timeout: float | None,
    show_chain: bool,
    json_logs: bool | None,
    verbose: bool,
) -> None:
    """Fetch URL with GET, following redirects and retrying failures."""
    settings = get_settings()
    configure_logging(
        level=logging.DEBUG if verbose else settings.logging_level(),
        json_format=settings.log_json if json_logs is None else json_logs,
    )

    config = _resolve_config(config_path, attempts, timeout)
    options = settings.to_request_options().with_query_parameters(_parse_query(query))
    try:
        for line in headers:
            options = options.add_header(line)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="-H/--header") from e
    if ca_file:
        options = options.with_certificate_authority_file_path(ca_file)

    context = FetchContext()
    bind_fetch_context(context.correlation_id)
    connector = HttpConnector(options=options, config=config)

    try:
        response = connector.fetch(context, url)
    except RetryExhausted as e:
        failure = e.failure
        get_logger(__name__).warning(
            "fetch_command_failed",
            failure_kind=failure.kind.value,
            attempts=e.attempts,
        )
        click.echo(
            f"Error: {failure.kind.value} after {e.attempts} attempt(s)", err=True
        )
        if isinstance(failure, ConnectionFailure):
            click.echo(f"  {failure.reason.value}: {failure.cause}", err=True)
        else:
            click.echo(str(failure), err=True)
        sys.exit(1)
    finally:
        clear_fetch_context()

    if show_chain:
        _echo_chain(response)
    click.echo(response.status_line)
    click.echo(response.body, nl=False)


@cli.command("show-config")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to fetch configuration YAML file.",
)
def show_config(config_path: Path | None) -> None:
    """Print the effective fetch configuration as JSON."""
    configure_logging(json_format=False, level=logging.WARNING)
    config = _resolve_config(config_path, attempts=None, timeout=None)
    click.echo(json.dumps(config.model_dump(mode="json"), indent=2, sort_keys=True))


if __name__ == "__main__":
    cli()
