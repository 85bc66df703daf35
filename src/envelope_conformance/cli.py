"""Command-line interface for envelope-conformance."""

import json
from pathlib import Path
from typing import List, Optional

import typer
from typing_extensions import Annotated

from envelope_conformance.collection.loader import load_collection
from envelope_conformance.config import CheckerSettings, load_settings
from envelope_conformance.errors import ConformanceError, UnknownStatusCode
from envelope_conformance.execution.prober import probe
from envelope_conformance.execution.runner import check_samples
from envelope_conformance.models.enums import OutputFormat
from envelope_conformance.models.sample import ResponseSample
from envelope_conformance.observability.jsonl_logger import JsonlFindingLogger
from envelope_conformance.observability.logging import get_logger, setup_logging
from envelope_conformance.report.emitter import ReportEmitter
from envelope_conformance.rules.status_table import StatusRuleTable, category_for
from envelope_conformance.validation.validator import EnvelopeValidator

EXIT_USAGE = 2

logger = get_logger(__name__)

app = typer.Typer(help="Check API responses against the REST envelope conventions")


@app.callback()
def main(
    log_level: Annotated[
        Optional[str],
        typer.Option(help="Log level (defaults to LOG_LEVEL or WARNING)"),
    ] = None,
):
    """Check API responses against the REST envelope conventions."""
    setup_logging(log_level)


def _settings(
    config: Optional[Path], allow_bare: Optional[bool], workers: Optional[int]
) -> CheckerSettings:
    try:
        return load_settings(
            config, allow_bare_envelope=allow_bare, workers=workers
        )
    except ConformanceError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=EXIT_USAGE)


def _load(collection: Path) -> list[ResponseSample]:
    try:
        return load_collection(collection)
    except ConformanceError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=EXIT_USAGE)


def _emit(
    emitter: ReportEmitter,
    output_format: OutputFormat,
    output: Optional[Path],
    findings_jsonl: Optional[Path],
) -> None:
    if output_format == OutputFormat.JSON:
        rendered = emitter.render_json()
    elif output_format == OutputFormat.MARKDOWN:
        rendered = emitter.render_markdown()
    else:
        rendered = emitter.render_text()

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(rendered + "\n", encoding="utf-8")
        typer.echo(f"Report written to {output}")
    else:
        typer.echo(rendered)

    if findings_jsonl:
        count = JsonlFindingLogger(str(findings_jsonl)).log_results(emitter.results)
        logger.info(f"Wrote {count} findings to {findings_jsonl}")

    raise typer.Exit(code=emitter.exit_code())


ConfigOption = Annotated[
    Optional[Path], typer.Option("--config", help="Settings YAML file")
]
FormatOption = Annotated[
    OutputFormat, typer.Option("--format", help="Report format")
]
OutputOption = Annotated[
    Optional[Path], typer.Option(help="Write the report to a file instead of stdout")
]
JsonlOption = Annotated[
    Optional[Path], typer.Option(help="Append one JSON line per finding to this file")
]
WorkersOption = Annotated[
    Optional[int], typer.Option(min=1, help="Samples checked in parallel")
]
AllowBareOption = Annotated[
    Optional[bool],
    typer.Option(
        "--allow-bare/--no-allow-bare",
        help=(
            "Accept the bare {data, metadata} envelope variant (no success/code). "
            "Off by default: such bodies fail with a missing success discriminator"
        ),
    ),
]


@app.command("check")
def check(
    collection: Annotated[
        Path, typer.Argument(help="Collection file (native YAML/JSON or Postman v2.1)")
    ],
    config: ConfigOption = None,
    output_format: FormatOption = OutputFormat.TEXT,
    output: OutputOption = None,
    findings_jsonl: JsonlOption = None,
    workers: WorkersOption = None,
    allow_bare: AllowBareOption = None,
):
    """Checks the documented response examples of a collection.

    Bare {data, metadata} envelopes are only accepted with --allow-bare.
    """
    settings = _settings(config, allow_bare, workers)
    samples = _load(collection)

    validator = EnvelopeValidator.from_settings(settings)
    emitter = ReportEmitter()
    emitter.extend(check_samples(samples, validator, settings))
    _emit(emitter, output_format, output, findings_jsonl)


@app.command("probe")
def probe_command(
    collection: Annotated[
        Path, typer.Argument(help="Collection whose requests are replayed")
    ],
    base_url: Annotated[str, typer.Option(help="Root URL of the running API")],
    header: Annotated[
        Optional[List[str]],
        typer.Option(help="Extra request header as 'Name: value' (repeatable)"),
    ] = None,
    path_param: Annotated[
        Optional[List[str]],
        typer.Option(help="Value for a templated path segment as 'name=value' (repeatable)"),
    ] = None,
    timeout: Annotated[
        Optional[float], typer.Option(help="Per-request timeout in seconds")
    ] = None,
    config: ConfigOption = None,
    output_format: FormatOption = OutputFormat.TEXT,
    output: OutputOption = None,
    findings_jsonl: JsonlOption = None,
    workers: WorkersOption = None,
    allow_bare: AllowBareOption = None,
):
    """Replays a collection's requests against a live API and checks the responses."""
    settings = _settings(config, allow_bare, workers)
    samples = _load(collection)

    headers: dict[str, str] = {}
    for raw in header or []:
        name, sep, value = raw.partition(":")
        if not sep or not name.strip():
            typer.echo(f"Error: Invalid header {raw!r}, expected 'Name: value'", err=True)
            raise typer.Exit(code=EXIT_USAGE)
        headers[name.strip()] = value.strip()

    path_params: dict[str, str] = {}
    for raw in path_param or []:
        name, sep, value = raw.partition("=")
        if not sep or not name.strip():
            typer.echo(f"Error: Invalid path parameter {raw!r}, expected 'name=value'", err=True)
            raise typer.Exit(code=EXIT_USAGE)
        path_params[name.strip()] = value.strip()

    live = probe(
        base_url,
        samples,
        timeout=timeout or settings.timeout_seconds,
        headers=headers,
        path_params=path_params,
    )

    validator = EnvelopeValidator.from_settings(settings)
    emitter = ReportEmitter()
    emitter.extend(check_samples(live, validator, settings))
    _emit(emitter, output_format, output, findings_jsonl)


@app.command("validate-body")
def validate_body(
    body_file: Annotated[Path, typer.Argument(help="JSON file holding one response body")],
    status: Annotated[int, typer.Option(help="HTTP status the body was served with")],
    config: ConfigOption = None,
    allow_bare: AllowBareOption = None,
):
    """Validates a single response body."""
    settings = _settings(config, allow_bare, None)
    if not body_file.exists():
        typer.echo(f"Error: File not found: {body_file}", err=True)
        raise typer.Exit(code=EXIT_USAGE)

    try:
        body = json.loads(body_file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        typer.echo(f"Error parsing JSON: {e}", err=True)
        raise typer.Exit(code=EXIT_USAGE)
    except (UnicodeDecodeError, OSError) as e:
        typer.echo(f"Error reading {body_file}: {e}", err=True)
        raise typer.Exit(code=EXIT_USAGE)

    validator = EnvelopeValidator.from_settings(settings)
    shape, findings = validator.inspect(status, body)
    if not findings:
        typer.echo(f"Body conforms ({shape.value} envelope).")
        return

    for finding in findings:
        typer.echo(finding.render())
    if any(f.is_error for f in findings):
        raise typer.Exit(code=1)


@app.command("status")
def status(
    code: Annotated[int, typer.Argument(help="HTTP status code")],
):
    """Shows the documented alias and category of a status code.

    Undocumented codes are reported as a warning and do not fail.
    """
    table = StatusRuleTable.default()
    try:
        rule = table.lookup(code)
    except UnknownStatusCode as e:
        typer.echo(
            f"Warning: {e}; {category_for(code).value} by status class", err=True
        )
        return
    typer.echo(f"{rule.code} {rule.alias} ({rule.category.value})")


@app.command("statuses")
def statuses():
    """Lists every documented status code."""
    for rule in StatusRuleTable.default():
        typer.echo(f"{rule.code} {rule.alias} ({rule.category.value})")


if __name__ == "__main__":
    app()
