#!/usr/bin/env python3
"""flatbridge CLI.

Runs the HTTP API, or a one-shot transfer described by a YAML job file.
"""

import os
from dataclasses import replace
from typing import Any, Dict, Optional

import typer
import yaml
from rich.console import Console

from flatbridge.cli.display import display_error, display_preview, display_transfer_result
from flatbridge.config import Settings, load_settings
from flatbridge.core.session import TransferSession
from flatbridge.core.storage import UploadStorage
from flatbridge.exceptions import FlatBridgeError
from flatbridge.logging import configure_logging, get_logger, suppress_third_party_loggers

logger = get_logger(__name__)
console = Console()

app = typer.Typer(
    name="flatbridge",
    help="flatbridge - move data between ClickHouse and delimited files",
    add_completion=False,
)

JOB_KEYS = {"source", "target", "source_config", "target_config", "table", "columns"}


def _load_settings_or_exit(
    ctx: typer.Context, config: Optional[str], **overrides: Any
) -> Settings:
    try:
        settings = load_settings(config)
    except ValueError as e:
        display_error(e, "configuration")
        raise typer.Exit(1)
    overrides = {key: value for key, value in overrides.items() if value is not None}
    settings = replace(settings, **overrides)

    # -v and -q on the command line win over the configured level
    flags = ctx.obj or {}
    if not flags.get("verbose") and not flags.get("quiet"):
        configure_logging(level=settings.log_level)
        suppress_third_party_loggers()
    return settings


def _load_job(job_file: str) -> Dict[str, Any]:
    if not os.path.exists(job_file):
        raise FlatBridgeError(f"Job file not found: {job_file}")
    with open(job_file, "r") as f:
        job = yaml.safe_load(f) or {}
    if not isinstance(job, dict):
        raise FlatBridgeError(f"Job file {job_file} must contain a mapping")
    unknown = sorted(set(job) - JOB_KEYS)
    if unknown:
        raise FlatBridgeError(f"Unknown keys in {job_file}: {', '.join(unknown)}")
    return job


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", help="Show version and exit"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only show warnings and errors"),
) -> None:
    """flatbridge - move data between ClickHouse and delimited files.

    Examples:
        flatbridge serve --port 3001
        flatbridge transfer jobs/export_events.yml
    """
    if version:
        from flatbridge import __version__

        console.print(f"flatbridge v{__version__}")
        raise typer.Exit()

    ctx.obj = {"verbose": verbose, "quiet": quiet}
    configure_logging(verbose=verbose, quiet=quiet)
    suppress_third_party_loggers()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command()
def serve(
    ctx: typer.Context,
    host: Optional[str] = typer.Option(None, "--host", help="Interface to bind"),
    port: Optional[int] = typer.Option(None, "--port", help="Port to listen on"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Settings YAML file"),
) -> None:
    """Run the HTTP API."""
    import uvicorn

    from flatbridge.api.app import create_app

    settings = _load_settings_or_exit(ctx, config, host=host, port=port)
    logger.info(f"Serving flatbridge API on {settings.host}:{settings.port}")
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


@app.command()
def transfer(
    ctx: typer.Context,
    job_file: str = typer.Argument(..., help="YAML file describing the transfer"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Settings YAML file"),
    storage_root: Optional[str] = typer.Option(
        None, "--storage-root", help="Directory holding source and exported files"
    ),
    preview: bool = typer.Option(True, "--preview/--no-preview", help="Show sample rows first"),
) -> None:
    """Run a one-shot transfer described by JOB_FILE.

    The job file names the source and target kinds, their configs, the
    source table (for ClickHouse sources) and optionally the columns; all
    columns are transferred when none are listed.
    """
    settings = _load_settings_or_exit(ctx, config, storage_root=storage_root)

    try:
        job = _load_job(job_file)
        session = TransferSession(
            UploadStorage(settings.ensure_storage_root()),
            source_kind=job.get("source"),
            source_config=job.get("source_config") or {},
            destination_kind=job.get("target"),
            destination_config=job.get("target_config") or {},
            preview_limit=settings.preview_limit,
            batch_size=settings.batch_size,
        )
        session.connect()
        session.load_schema(job.get("table"))
        if job.get("columns"):
            session.select(list(job["columns"]))
        else:
            session.select_all()

        if preview:
            display_preview(session.selected_columns, session.preview())

        result = session.ingest()
    except FlatBridgeError as e:
        display_error(e, "transfer")
        raise typer.Exit(1)

    display_transfer_result(result)


if __name__ == "__main__":
    app()
