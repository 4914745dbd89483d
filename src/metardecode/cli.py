from pathlib import Path
from typing import cast

import orjson
import typer
from rich.console import Console
from rich.table import Table

from metardecode.data.generator import ReportSynthConfig, generate_reports
from metardecode.data.loader import load_reports
from metardecode.decoder import DECODE_MODES, decode_line, decode_lines
from metardecode.errors import MetarError
from metardecode.eval.harness import EvalSummary, evaluate_lines, evaluate_synthetic
from metardecode.eval.report import append_csv, append_jsonl, summary_to_row
from metardecode.eval.summarize import summarize_log
from metardecode.lexer import tokenize, tokenize_keywords
from metardecode.manifest import load_manifest, sample_manifest, validate_manifest
from metardecode.outputs import result_to_dict, results_to_arrow, results_to_jsonl

app = typer.Typer(help="Decode METAR/SPECI reports into structured outputs.")
dataset_app = typer.Typer(help="Dataset helpers (synthetic report corpora).")
eval_app = typer.Typer(help="Evaluation harness comparing the grammar and the scanner.")
manifest_app = typer.Typer(help="Batch manifest helpers.")
console = Console()
SUPPORTED_FORMATS = {"json", "jsonl", "arrow"}

app.add_typer(dataset_app, name="dataset")
app.add_typer(eval_app, name="eval")
app.add_typer(manifest_app, name="manifest")


def _check_mode(mode: str) -> str:
    mode = mode.lower()
    if mode not in DECODE_MODES:
        raise typer.BadParameter(f"Unsupported mode '{mode}'. Choose from {DECODE_MODES}.")
    return mode


def _read_reports(path: Path) -> list[str]:
    if not path.is_file():
        raise typer.BadParameter(f"Input file not found: {path}")
    return load_reports(path)


def _serialize(obj: object) -> object:
    # dataclasses from EvalSummary are not JSON-native; convert via __dict__.
    if hasattr(obj, "__dict__"):
        return obj.__dict__
    raise TypeError


@app.command()
def decode(
    report: str = typer.Argument(..., help="Raw report text, e.g. 'METAR KLAX 150324Z 25015KT'."),
    mode: str = typer.Option("grammar", "--mode", "-m", help="Decode mode: grammar | scan."),
    no_validate: bool = typer.Option(
        False, "--no-validate", help="Skip range validation on the grammar path."
    ),
) -> None:
    """Decode a single report and print it as JSON."""
    result = decode_line(report, mode=_check_mode(mode), validate=not no_validate)
    console.print(orjson.dumps(result_to_dict(result), option=orjson.OPT_INDENT_2).decode())
    if not result.ok:
        raise typer.Exit(code=1)


@app.command("tokenize")
def tokenize_cmd(
    report: str = typer.Argument(..., help="Raw report text."),
    keywords: bool = typer.Option(
        False, "--keywords", "-k", help="Use the typed keyword tokenizer."
    ),
) -> None:
    """Show the token stream for a report."""
    try:
        tokens = tokenize_keywords(report) if keywords else tokenize(report)
    except MetarError as exc:
        console.print(f"[bold red]{exc.kind} error:[/] {exc.message}")
        raise typer.Exit(code=1) from exc

    table = Table(title="Tokens")
    table.add_column("Offset", justify="right")
    table.add_column("Kind")
    table.add_column("Text")
    for token in tokens:
        table.add_row(str(token.offset), token.kind, token.text)
    console.print(table)


@app.command()
def batch(
    input: Path = typer.Argument(..., help="Text file with one report per line (.gz accepted)."),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Optional path to write decoded results."
    ),
    format: str = typer.Option(
        "jsonl", "--format", "-f", help="Output format: json | jsonl | arrow."
    ),
    mode: str = typer.Option("grammar", "--mode", "-m", help="Decode mode: grammar | scan."),
    max_records: int | None = typer.Option(
        None, "--max-records", help="Limit number of reports processed."
    ),
) -> None:
    """Decode every report in a file; failures are recorded, not fatal."""
    fmt = format.lower()
    if fmt not in SUPPORTED_FORMATS:
        raise typer.BadParameter(f"Unsupported format '{format}'. Choose from {SUPPORTED_FORMATS}.")

    lines = _read_reports(input)
    console.print(f"[bold green]Read[/] {len(lines)} reports from {input}")
    results = decode_lines(lines, mode=_check_mode(mode), max_records=max_records)
    failed = sum(1 for r in results if not r.ok)
    if failed:
        console.print(f"[yellow]{failed} of {len(results)} reports did not decode[/]")

    if output is None:
        payload = [result_to_dict(r) for r in results]
        console.print(orjson.dumps(payload, option=orjson.OPT_INDENT_2).decode())
        return
    if fmt == "arrow":
        results_to_arrow(results, output)
    elif fmt == "jsonl":
        results_to_jsonl(results, output, gzip_output=output.suffix == ".gz")
    else:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_bytes(orjson.dumps([result_to_dict(r) for r in results]))
    console.print(f"[bold green]Wrote decoded output[/] to {output}")


@dataset_app.command("synthetic")
def dataset_synthetic(
    output: Path = typer.Argument(..., help="Path to write the synthetic corpus (.txt)."),
    metadata: Path | None = typer.Option(
        None, "--metadata", "-m", help="Optional path to write JSON metadata about reports."
    ),
    count: int = typer.Option(8, "--count", "-c", help="Number of reports to emit."),
    seed: int = typer.Option(1234, "--seed", help="Seed for reproducible generation."),
    trailing: bool = typer.Option(
        False, "--trailing", help="Append visibility/pressure groups the grammar ignores."
    ),
) -> None:
    """Generate well-formed METAR/SPECI lines covering every implemented group."""
    lines, meta = generate_reports(
        count=count, config=ReportSynthConfig(seed=seed, trailing_groups=trailing)
    )
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text("\n".join(lines) + "\n")
    console.print(f"[bold green]Wrote[/] {count} reports to {output}")

    if metadata:
        metadata.write_bytes(orjson.dumps(meta, option=orjson.OPT_INDENT_2))
        console.print(f"[bold green]Wrote metadata[/] to {metadata}")


@eval_app.command("corpus")
def eval_corpus(
    input: Path | None = typer.Option(
        None,
        "--input",
        "-i",
        help="Corpus to evaluate. If omitted, a synthetic set is generated.",
    ),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Optional path to write evaluation JSON."
    ),
    log_csv: Path | None = typer.Option(
        None, "--log-csv", help="Append summary as a CSV row for trend tracking."
    ),
    log_jsonl: Path | None = typer.Option(
        None, "--log-jsonl", help="Append full payload as JSONL for trend tracking."
    ),
    tag: str | None = typer.Option(None, "--tag", help="Optional tag to mark this run."),
    count: int = typer.Option(8, "--count", "-c", help="Reports to generate for synthetic eval."),
    seed: int = typer.Option(1234, "--seed", help="Seed for synthetic generation."),
) -> None:
    """Run the grammar and the scanner over a corpus and summarize both."""
    if input:
        summary = evaluate_lines(_read_reports(input))
        payload: dict[str, object] = {"source": str(input), "evaluation": summary, "tag": tag}
    else:
        payload = evaluate_synthetic(count=count, seed=seed)
        payload["tag"] = tag
        summary = cast(EvalSummary, payload["evaluation"])

    if log_csv:
        append_csv(log_csv, summary_to_row(summary, source=str(input or "synthetic"), tag=tag))
        console.print(f"[bold green]Appended CSV log[/] to {log_csv}")

    if log_jsonl:
        append_jsonl(log_jsonl, payload)
        console.print(f"[bold green]Appended JSONL log[/] to {log_jsonl}")

    if output:
        output.write_bytes(orjson.dumps(payload, default=_serialize))
        console.print(f"[bold green]Wrote evaluation report[/] to {output}")
    else:
        console.print(
            orjson.dumps(payload, option=orjson.OPT_INDENT_2, default=_serialize).decode()
        )


@eval_app.command("summarize")
def eval_summarize(
    log: Path = typer.Argument(..., help="CSV or JSONL log file produced by eval."),
) -> None:
    """Summarize log(s) produced by eval logging."""
    summary = summarize_log(log)
    console.print(orjson.dumps(summary, option=orjson.OPT_INDENT_2).decode())


@manifest_app.command("validate")
def manifest_validate(
    manifest: Path = typer.Argument(..., help="Manifest file (json/yaml)."),
) -> None:
    """Check a corpus described by a manifest: existence, hash, decode ratio."""
    result = validate_manifest(load_manifest(manifest))
    console.print(orjson.dumps(result, option=orjson.OPT_INDENT_2).decode())
    if result["warnings"]:
        console.print(f"[yellow]Warnings:[/] {', '.join(result['warnings'])}")
        raise typer.Exit(code=1)


@manifest_app.command("sample")
def manifest_sample() -> None:
    """Print a manifest template."""
    console.print(orjson.dumps(sample_manifest(), option=orjson.OPT_INDENT_2).decode())


if __name__ == "__main__":
    app()
