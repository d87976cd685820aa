#!/usr/bin/env python
"""
Run item and exam analysis on graded responses and display results.
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
    AnalysisConfig,
    AnalysisResult,
    NoResponsesError,
    analyze_by_variant,
    analyze_exam,
    load_analysis_config,
)
from exam_analysis.analysis.plotting import plot_item_map
from exam_analysis.core.data import load_responses_csv, load_variants_json

SCRIPTS_DIR = Path(__file__).parent.absolute()
DEFAULT_OUTPUT_DIR = SCRIPTS_DIR.parent / "reports" / "analysis"

console = Console(force_terminal=True, legacy_windows=True)
app = typer.Typer()


def _fmt(value: float | None, decimals: int = 3) -> str:
    return f"{value:.{decimals}f}" if value is not None else "-"


def print_questions_table(result: AnalysisResult) -> None:
    """Pretty-print per-question statistics as a rich Table."""
    table = Table(title=f"Questions: {result.exam_title}")
    table.add_column("Question", style="bold")
    table.add_column("Type")
    table.add_column("N", justify="right")
    table.add_column("Difficulty", justify="right")
    table.add_column("Discrimination", justify="right")
    table.add_column("Point-biserial", justify="right")
    table.add_column("Notes")

    for q in result.question_results:
        notes = []
        distractors = q.distractor_analysis
        if distractors is not None:
            if distractors.possible_miskey:
                notes.append("[red]possible miskey[/red]")
            if distractors.ineffective_distractors:
                notes.append(
                    f"{len(distractors.ineffective_distractors)} unused "
                    "distractor(s)"
                )
        table.add_row(
            q.question_id,
            q.question_type.value,
            str(q.total_responses),
            _fmt(q.difficulty_index),
            _fmt(q.discrimination_index),
            _fmt(q.point_biserial_correlation),
            ", ".join(notes),
        )

    console.print(table)


def print_summary(result: AnalysisResult) -> None:
    summary = result.summary
    dist = summary.score_distribution
    reliability = summary.reliability_metrics
    reliability_str = (
        f"{reliability.cronbachs_alpha:.3f} "
        f"[{reliability.confidence_interval.lower:.3f}, "
        f"{reliability.confidence_interval.upper:.3f}]"
        if reliability is not None
        else "not computed"
    )
    sample_str = (
        f"[cyan]{result.metadata.sample_size}[/cyan]"
        if result.metadata.meets_min_sample_size
        else f"[yellow]{result.metadata.sample_size} (below minimum)[/yellow]"
    )
    console.print(
        Panel(
            f"Students: [cyan]{result.metadata.total_students}[/cyan]\n"
            f"Sample size: {sample_str}\n"
            f"Excluded: [cyan]{result.metadata.excluded_students}[/cyan]\n"
            f"Average difficulty: [cyan]{_fmt(summary.average_difficulty)}"
            f"[/cyan]\n"
            f"Average discrimination: "
            f"[cyan]{_fmt(summary.average_discrimination)}[/cyan]\n"
            f"Average point-biserial: "
            f"[cyan]{_fmt(summary.average_point_biserial)}[/cyan]\n"
            f"Cronbach's alpha: [cyan]{reliability_str}[/cyan]\n"
            f"Score mean / median / SD: [cyan]{dist.mean:.3f} / "
            f"{dist.median:.3f} / {dist.standard_deviation:.3f}[/cyan]\n"
            f"Skewness / kurtosis: [cyan]{_fmt(dist.skewness)} / "
            f"{_fmt(dist.kurtosis)}[/cyan]",
            title=f"Summary: {result.exam_title}",
        )
    )


def save_report(
    output_dir: Path,
    result: AnalysisResult,
    variant_results: list[AnalysisResult],
) -> Path:
    """Save the analysis as JSON to output_dir."""
    output_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    path = output_dir / f"{timestamp}_{result.exam_id}.json"
    data = {
        "exam": result.model_dump(mode="json"),
        "variants": [r.model_dump(mode="json") for r in variant_results],
    }
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
    config_path: Path | None = typer.Option(
        None,
        "-c",
        "--config",
        help="YAML file with analysis options",
    ),
    by_variant: bool = typer.Option(
        False,
        help="Also analyze each variant separately",
    ),
    plot: bool = typer.Option(
        False,
        help="Save an item map PNG next to the report",
    ),
    output_dir: Path = typer.Option(
        DEFAULT_OUTPUT_DIR,
        "-o",
        "--output-dir",
        help="Directory for JSON report output",
    ),
) -> None:
    """Analyze graded exam responses and save a JSON report."""

    # 1. Validate input
    for path in (responses_path, variants_path):
        if not path.exists():
            console.print(f"[red]File not found: {path}[/red]")
            raise typer.Exit(1)
    if responses_path.suffix != ".csv":
        console.print("[red]Only .csv response files are supported[/red]")
        raise typer.Exit(1)

    # 2. Load data
    console.print("[dim]Loading data...[/dim]")
    try:
        responses = load_responses_csv(responses_path)
        variants = load_variants_json(variants_path)
        config = (
            load_analysis_config(config_path)
            if config_path is not None
            else AnalysisConfig()
        )
    except (ValueError, ValidationError, FileNotFoundError) as e:
        console.print(f"[red]Error loading input: {e}[/red]")
        raise typer.Exit(1) from e

    console.print(
        Panel(
            f"[bold]Exam Analysis[/bold]\n\n"
            f"Responses: [cyan]{responses_path}[/cyan] "
            f"([cyan]{len(responses)}[/cyan])\n"
            f"Variants: [cyan]{variants_path}[/cyan] "
            f"([cyan]{len(variants)}[/cyan])\n"
            f"Min sample size: [cyan]{config.min_sample_size}[/cyan]\n"
            f"Confidence level: [cyan]{config.confidence_level}[/cyan]",
            title="Configuration",
        )
    )

    # 3. Analyze
    try:
        result = analyze_exam(variants, responses, config)
    except NoResponsesError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from e

    print_summary(result)
    print_questions_table(result)

    variant_results = (
        analyze_by_variant(variants, responses, config) if by_variant else []
    )
    for variant_result in variant_results:
        print_summary(variant_result)

    # 4. Save report
    report_path = save_report(output_dir, result, variant_results)
    console.print(f"Report saved: [cyan]{report_path}[/cyan]")

    if plot:
        fig = plot_item_map(result)
        plot_path = report_path.with_suffix(".png")
        fig.savefig(plot_path, dpi=150)
        console.print(f"Item map saved: [cyan]{plot_path}[/cyan]")


if __name__ == "__main__":
    app()
