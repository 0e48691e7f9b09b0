"""Command line entry point for running the json_api processor over NDJSON."""

import json
import sys
from pathlib import Path
from typing import Any

import typer

from ingest_jsonapi._version import __version__
from ingest_jsonapi.config.settings import ConfigurationError, Settings
from ingest_jsonapi.core.document import IngestDocument
from ingest_jsonapi.core.errors import JsonApiError
from ingest_jsonapi.core.logging import get_logger, setup_logging
from ingest_jsonapi.plugin import IngestJsonApiPlugin
from ingest_jsonapi.processor import TYPE


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    pretty_exceptions_enable=False,
)

logger = get_logger(__name__)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"ingest-jsonapi {__version__}")
        raise typer.Exit()


@app.callback()
def app_main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Enrich NDJSON documents with values fetched from a JSON API."""


@app.command()
def run(
    input_file: typer.FileText = typer.Argument(
        "-", help="NDJSON input file, '-' for stdin"
    ),
    field: str = typer.Option(..., "--field", "-f", help="Source field to read"),
    url_prefix: str = typer.Option(
        ..., "--url-prefix", "-u", help="URL template with one {} placeholder"
    ),
    target_field: str = typer.Option("out", "--target-field", "-t"),
    extra_header: str = typer.Option(
        "", "--extra-header", "-H", help="One extra 'Name: Value' request header"
    ),
    ignore_missing: bool = typer.Option(False, "--ignore-missing"),
    json_path: str = typer.Option("$..*", "--json-path", "-p"),
    multi_value: bool = typer.Option(False, "--multi-value"),
    continue_on_error: bool = typer.Option(
        False,
        "--continue-on-error",
        help="Pass failing documents through unchanged instead of stopping",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to a TOML configuration file",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
) -> None:
    """Apply one json_api step to every document read from INPUT_FILE."""
    try:
        settings = Settings.from_config(config_path=config)
    except ConfigurationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(2) from e

    log_format = settings.logging.format
    json_logs = log_format == "json" or (log_format == "auto" and not sys.stderr.isatty())
    setup_logging(json_logs=json_logs, log_level_name=settings.logging.level)

    plugin = IngestJsonApiPlugin(settings)
    factories = plugin.get_processors()
    options: dict[str, Any] = {
        "field": field,
        "url_prefix": url_prefix,
        "target_field": target_field,
        "extra_header": extra_header,
        "ignore_missing": ignore_missing,
        "json_path": json_path,
        "multi_value": multi_value,
    }

    try:
        processor = factories[TYPE].create(factories, "cli", options)
    except JsonApiError as e:
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(2) from e

    failures = 0
    for line_number, line in enumerate(input_file, start=1):
        line = line.strip()
        if not line:
            continue

        try:
            source = json.loads(line)
        except json.JSONDecodeError as e:
            typer.echo(f"line {line_number}: invalid JSON: {e}", err=True)
            failures += 1
            if not continue_on_error:
                break
            continue

        if not isinstance(source, dict):
            typer.echo(f"line {line_number}: document must be a JSON object", err=True)
            failures += 1
            if not continue_on_error:
                break
            continue

        try:
            processor.execute(IngestDocument(source))
        except JsonApiError as e:
            typer.echo(f"line {line_number}: {e.message}", err=True)
            failures += 1
            if not continue_on_error:
                break

        typer.echo(json.dumps(source, ensure_ascii=False))

    logger.info("json_api_run_completed", failures=failures, **plugin.cache.stats())
    plugin.close()

    if failures and not continue_on_error:
        raise typer.Exit(1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
