"""Command line for the ORF fluency engine."""

from pathlib import Path

import orjson
import typer

from orf_fluency.config import load_config
from orf_fluency.core.processor import analyze_reading
from orf_fluency.models import RangeMatch
from orf_fluency.rules.aggregation import aggregate_error_patterns, generate_macro_insights
from orf_fluency.utils.payloads import parse_analysis_request
from orf_fluency.utils.records import dump_record, read_record, write_record
from orf_pyutils.errors import OrfError, PayloadValidationError
from orf_pyutils.jsonable import dump_json, load_json
from orf_pyutils.logging import configure_logging, get_logger

logger = get_logger(__name__)

app: typer.Typer = typer.Typer(
    help="Score oral reading fluency from OCR passage words and recognized speech",
    no_args_is_help=True,
)


def _selected_range(first: int | None, last: int | None, ocr_count: int) -> RangeMatch | None:
    if first is None and last is None:
        return None
    if first is None or last is None:
        raise typer.BadParameter("--first and --last must be given together")
    if not 0 <= first <= last < ocr_count:
        raise typer.BadParameter(
            f"range {first}..{last} is outside the {ocr_count} OCR words of the passage"
        )
    return RangeMatch(first_index=first, last_index=last, matched_count=0)


def _load_input(input_path: Path) -> object:
    try:
        return load_json(input_path.read_bytes())
    except orjson.JSONDecodeError as e:
        raise PayloadValidationError(exception=e, source=str(input_path)) from e


@app.command()
def analyze(
    input_path: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        help="JSON document with 'ocr', 'speech' and 'recordingDurationSeconds'",
    ),
    first: int | None = typer.Option(
        None, "--first", help="First OCR index of a hand-selected range", show_default=False
    ),
    last: int | None = typer.Option(
        None, "--last", help="Last OCR index of a hand-selected range", show_default=False
    ),
    config_path: Path | None = typer.Option(
        None, "--config", help="Path to configuration YAML file", show_default=False
    ),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Write the assessment record here instead of stdout"
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output logs in JSON format instead of human-readable format",
    ),
) -> None:
    """Analyze one reading and emit its assessment record."""
    try:
        config = load_config(config_path=config_path)
        configure_logging(
            level=config.effective_log_level, json_logs=json_logs or config.json_logs
        )

        ocr_words, spoken_words, request = parse_analysis_request(_load_input(input_path))
        analysis = analyze_reading(
            ocr_words,
            spoken_words,
            recording_duration_seconds=request.recordingDurationSeconds,
            selected_range=_selected_range(first, last, len(ocr_words)),
            config=config,
            assessment_id=request.assessmentId,
        )
        record = analysis.to_record(assessment_id=request.assessmentId)
    except OrfError as e:
        logger.error(f"Analysis of {input_path} failed: {e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e

    if analysis.word_count_only:
        typer.echo(
            "Could not match the speech to the passage; "
            f"{len(record.expected_words)} words selected",
            err=True,
        )

    if output is None:
        typer.echo(dump_record(record, indent=True).decode())
    else:
        write_record(output, record)
        typer.echo(f"Record written to {output}")


@app.command()
def insights(
    records: list[Path] = typer.Argument(
        ..., exists=True, dir_okay=False, help="Assessment records of one reader"
    ),
    as_json: bool = typer.Option(
        False, "--json", help="Print the aggregate and insights as JSON"
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output logs in JSON format instead of human-readable format",
    ),
) -> None:
    """Summarize recurring error patterns across a reader's assessments."""
    configure_logging(json_logs=json_logs)
    try:
        loaded = [read_record(path) for path in records]
    except OrfError as e:
        logger.error(f"Reading assessment records failed: {e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e

    aggregate = aggregate_error_patterns([record.error_patterns for record in loaded])
    macro_insights = generate_macro_insights(aggregate)

    if as_json:
        payload = {"aggregate": aggregate.to_json(), "insights": macro_insights}
        typer.echo(dump_json(payload, indent=True).decode())
        return

    typer.echo(
        f"Pattern analysis across {aggregate.assessments_with_patterns} "
        f"of {aggregate.total_assessments} assessments"
    )
    for insight in macro_insights:
        typer.echo(f"- {insight}")


if __name__ == "__main__":
    app()
