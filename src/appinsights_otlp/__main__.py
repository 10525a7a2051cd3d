"""Main CLI entry point for appinsights-otlp.

This module provides a command-line interface using Typer. The `convert`
command:
1.  Loads configuration (`config.py`).
2.  Reads an Application Insights export document from a file or stdin.
3.  Converts it into an OTLP ExportTraceServiceRequest (`converter.py`).
4.  Writes OTLP/JSON or protobuf (dry run) or sends it to an OTLP/HTTP
    endpoint (`shipper.py`).
"""
from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError

from .config import Settings, get_settings
from .converter import TelemetryBatchConverter
from .errors import ConversionError
from .shipper import export_request, request_to_otlp_json

app = typer.Typer(help="Application Insights to OpenTelemetry (OTLP) trace converter")

STDIN_MARKER = "-"
OUTPUT_FORMATS = ("json", "protobuf")


@app.callback()
def main() -> None:
    """Convert Application Insights telemetry exports to OTLP traces."""


def _read_input(input_path: str) -> bytes:
    if input_path == STDIN_MARKER:
        return sys.stdin.buffer.read()
    path = Path(input_path)
    if not path.is_file():
        raise typer.BadParameter(f"input file not found: {input_path}", param_hint="INPUT")
    return path.read_bytes()


@app.command()
def convert(
    input_path: str = typer.Argument(
        ..., metavar="INPUT", help="Application Insights export JSON file ('-' for stdin)"
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write the converted request here (default: stdout)"
    ),
    output_format: str = typer.Option(
        "json", "--format", "-f", help="Output encoding: json (OTLP/JSON) or protobuf"
    ),
    dry_run: Optional[bool] = typer.Option(
        None,
        "--dry-run/--no-dry-run",
        help=(
            "Only write the converted request; --no-dry-run sends it to the OTLP "
            "endpoint. If not specified, uses DRY_RUN from config/env."
        ),
    ),
    endpoint: Optional[str] = typer.Option(
        None, help="Override OTEL_EXPORTER_OTLP_ENDPOINT (base or full traces URL)"
    ),
    pretty: bool = typer.Option(True, "--pretty/--compact", help="Indent JSON output"),
) -> None:
    """Convert one export document into one OTLP trace export request."""
    settings = Settings(OTEL_EXPORTER_OTLP_ENDPOINT=endpoint) if endpoint else get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL)
    logger = logging.getLogger(__name__)
    if output_format not in OUTPUT_FORMATS:
        raise typer.BadParameter(
            f"expected one of {', '.join(OUTPUT_FORMATS)}", param_hint="--format"
        )
    effective_dry_run = settings.DRY_RUN if dry_run is None else dry_run
    # Binary output is never written to stdout
    if output_format == "protobuf" and output is None and effective_dry_run:
        raise typer.BadParameter("protobuf output requires --output", param_hint="--format")

    raw = _read_input(input_path)
    try:
        ctx = TelemetryBatchConverter().run(raw)
    except (ConversionError, ValidationError) as e:
        typer.echo(f"Conversion failed: {e}", err=True)
        raise typer.Exit(code=1)
    logger.debug("Conversion finished for %s", input_path)

    if effective_dry_run or output is not None:
        if output_format == "protobuf":
            output.write_bytes(ctx.request.SerializeToString())  # type: ignore[union-attr]
        else:
            text = json.dumps(request_to_otlp_json(ctx.request), indent=2 if pretty else None)
            if output is None:
                typer.echo(text)
            else:
                output.write_text(text + "\n", encoding="utf-8")
    if not effective_dry_run:
        try:
            export_request(ctx.request, settings)
        except ConversionError as e:
            typer.echo(f"Export failed: {e}", err=True)
            raise typer.Exit(code=2)

    typer.echo(
        f"Converted {ctx.converted} span(s) (skipped={ctx.skipped} partial={ctx.partial}) "
        f"dry_run={effective_dry_run}",
        err=True,
    )


if __name__ == "__main__":  # pragma: no cover
    app()
