#!/usr/bin/env python
"""
Compute student and variant similarity, flag suspicious pairs and display
results.
"""

import json
from datetime import datetime
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from exam_analysis.analysis import (
    NoResponsesError,
    analyze_by_variant,
    analyze_exam,
)
from exam_analysis.analysis.plotting import plot_similarity_heatmap
from exam_analysis.core.data import load_responses_csv, load_variants_json
from exam_analysis.detection import (
    FlaggedPair,
    FlaggingConfig,
    RiskLevel,
    analyze_integrity,
    flag_submission_pairs,
    flagging_summary,
)

SCRIPTS_DIR = Path(__file__).parent.absolute()
DEFAULT_OUTPUT_DIR = SCRIPTS_DIR.parent / "reports" / "integrity"
DEFAULT_MAX_ROWS = 20

RISK_STYLES = {
    RiskLevel.HIGH: "red",
    RiskLevel.MEDIUM: "yellow",
    RiskLevel.LOW: "cyan",
    RiskLevel.NONE: "dim",
}

console = Console(force_terminal=True, legacy_windows=True)
app = typer.Typer()


def print_pairs_table(pairs: list[FlaggedPair], max_rows: int) -> None:
    """Pretty-print flagged pairs as a rich Table."""
    table = Table(title="Flagged Pairs")
    table.add_column("Student 1", style="bold")
    table.add_column("Student 2", style="bold")
    table.add_column("Variants")
    table.add_column("Answer sim.", justify="right")
    table.add_column("Variant sim.", justify="right")
    table.add_column("Probability", justify="right")
    table.add_column("Risk")

    for pair in pairs[:max_rows]:
        style = RISK_STYLES[pair.risk_level]
        table.add_row(
            pair.student1,
            pair.student2,
            f"{pair.student1_variant} / {pair.student2_variant}",
            f"{pair.response_similarity:.2f}",
            f"{pair.variant_similarity:.2f}",
            f"{pair.probability:.3f}",
            f"[{style}]{pair.risk_level.value}[/{style}]",
        )

    console.print(table)


def save_report(output_dir: Path, data: dict[str, object]) -> Path:
    """Save the integrity report as JSON to output_dir."""
    output_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    path = output_dir / f"{timestamp}_integrity.json"
    with open(path, "w") as f:
        json.dump(data, f, indent=2, default=str)
    return path


@app.command()
def main(
    responses_path: Path = typer.Argument(
        ...,
        help="Path to long-format CSV with graded responses",
    ),
    variants_path: Path = typer.Argument(
        ...,
        help="Path to JSON list of exam variant definitions",
    ),
    invert_variant_similarity: bool = typer.Option(
        False,
        help="Weigh agreement on dissimilar variants more heavily",
    ),
    max_rows: int = typer.Option(
        DEFAULT_MAX_ROWS,
        help="Maximum number of pairs to display",
    ),
    plot: bool = typer.Option(
        False,
        help="Save similarity heatmap PNGs next to the report",
    ),
    output_dir: Path = typer.Option(
        DEFAULT_OUTPUT_DIR,
        "-o",
        "--output-dir",
        help="Directory for JSON report output",
    ),
) -> None:
    """Check an exam for answer copying and weak variant randomization."""

    # 1. Validate input
    for path in (responses_path, variants_path):
        if not path.exists():
            console.print(f"[red]File not found: {path}[/red]")
            raise typer.Exit(1)

    # 2. Load data
    console.print("[dim]Loading data...[/dim]")
    try:
        responses = load_responses_csv(responses_path)
        variants = load_variants_json(variants_path)
    except (ValueError, ValidationError) as e:
        console.print(f"[red]Error loading input: {e}[/red]")
        raise typer.Exit(1) from e

    console.print(
        Panel(
            f"[bold]Integrity Check[/bold]\n\n"
            f"Responses: [cyan]{len(responses)}[/cyan]\n"
            f"Variants: [cyan]{len(variants)}[/cyan]\n"
            f"Invert variant similarity: "
            f"[cyan]{invert_variant_similarity}[/cyan]",
            title="Configuration",
        )
    )

    # 3. Similarity matrices
    report = analyze_integrity(variants, responses)

    # 4. Flag pairs
    try:
        analysis = analyze_exam(variants, responses)
    except NoResponsesError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from e
    variant_results = analyze_by_variant(variants, responses)

    config = FlaggingConfig(invert_variant_similarity=invert_variant_similarity)
    pairs = flag_submission_pairs(
        analysis, variant_results, variants, report, config
    )
    summary = flagging_summary(pairs, config)

    flagged = [p for p in pairs if p.risk_level != RiskLevel.NONE]
    if flagged:
        print_pairs_table(flagged, max_rows)
    else:
        console.print("[green]No pairs flagged.[/green]")

    console.print(
        Panel(
            f"Flagged pairs: [cyan]{summary.total_flagged}[/cyan] "
            f"(high [red]{summary.high_risk}[/red], "
            f"medium [yellow]{summary.medium_risk}[/yellow], "
            f"low [cyan]{summary.low_risk}[/cyan])\n"
            f"Students involved: "
            f"[cyan]{summary.unique_students_involved}[/cyan]\n"
            f"Average probability: "
            f"[cyan]{summary.average_probability:.3f}[/cyan]\n"
            f"Average answer similarity: "
            f"[cyan]{summary.average_similarity:.3f}[/cyan]",
            title="Summary",
        )
    )

    # 5. Save report
    report_path = save_report(
        output_dir,
        {
            "similarity": report.model_dump(mode="json"),
            "pairs": [p.model_dump(mode="json") for p in pairs],
            "summary": summary.model_dump(mode="json"),
        },
    )
    console.print(f"Report saved: [cyan]{report_path}[/cyan]")

    if plot:
        for name, matrix in (
            ("students", report.student_similarity),
            ("variants", report.variant_similarity),
        ):
            fig = plot_similarity_heatmap(
                matrix, f"{name.capitalize()} similarity"
            )
            plot_path = report_path.with_name(
                f"{report_path.stem}_{name}.png"
            )
            fig.savefig(plot_path, dpi=150)
            console.print(f"Heatmap saved: [cyan]{plot_path}[/cyan]")


if __name__ == "__main__":
    app()
