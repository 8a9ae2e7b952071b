"""Command-line interface: search for compatible indexes for an experiment.

Examples:
    checkmyindex --i7 inputIndexesExample.txt -C 4 -n 12 -m 3 -u lane
    checkmyindex --i7 index24-i7.txt --i5 index24-i5.txt -C 2 -n 24 -m 12
"""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from . import __version__
from .data.chemistries import get_chemistry
from .exceptions import InvalidInputError, NoSolutionFoundError
from .models.design import Design
from .models.index import IndexType
from .models.request import DesignRequest
from .models.search import UniquenessConstraint
from .services.color_balance import ColorBalanceAnalyzer
from .services.design_exporter import DesignExporter
from .services.design_search import DesignSearch
from .services.index_parser import IndexTableParser
from .services.request_validator import RequestValidator

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help=(
        "Search for a set of compatible indexes for your sequencing experiment.\n\n"
        "Testing every combination of indexes may take very long, so by default a "
        "partial solution is searched with fewer samples per pool/lane and each "
        "pool/lane is then completed with some of the remaining indexes. Adding "
        "indexes to compatible indexes keeps them compatible. If no solution is "
        "found this way, use --complete to search directly at the desired "
        "multiplexing rate."
    ),
)
console = Console()


def _configure_logging(verbose: int) -> None:
    level = (
        logging.WARNING
        if verbose == 0
        else (logging.INFO if verbose == 1 else logging.DEBUG)
    )
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"checkmyindex version: {__version__}")
        raise typer.Exit()


@app.command()
def main(
    input_i7: Path = typer.Option(
        ...,
        "--i7",
        "--inputFile7",
        help="Two-column tab-delimited file without header with the available index 1 (i7) ids and sequences.",
    ),
    input_i5: Optional[Path] = typer.Option(
        None,
        "--i5",
        "--inputFile5",
        help="Optional two-column file with the available index 2 (i5) ids and sequences (dual-indexing).",
    ),
    nb_samples: int = typer.Option(
        ..., "--nb-samples", "-n", help="Total number of samples in the experiment."
    ),
    chemistry: int = typer.Option(
        ...,
        "--chemistry",
        "-C",
        help="Illumina chemistry: 1 (iSeq 100), 2 (NovaSeq, NextSeq & MiniSeq) or 4 (HiSeq & MiSeq) channels.",
    ),
    multiplexing_rate: int = typer.Option(
        ...,
        "--multiplexing-rate",
        "-m",
        help="Number of samples per pool/lane (must divide the number of samples).",
    ),
    unicity_constraint: str = typer.Option(
        "none",
        "--unicity-constraint",
        "-u",
        help="(single-indexing only) 'lane' to use each combination once, 'index' to use each index once.",
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="File to save the proposed design (tab-delimited)."
    ),
    complete: bool = typer.Option(
        False,
        "--complete",
        "-c",
        help="(single-indexing only) Search directly at the desired multiplexing rate.",
    ),
    select_comp_indexes: bool = typer.Option(
        False,
        "--select-comp-indexes",
        "-s",
        help="(single-indexing only) Precompute compatible index pairs before searching.",
    ),
    nb_max_trials: int = typer.Option(
        10, "--nb-max-trials", "-b", help="Maximum number of trials to find a solution."
    ),
    workers: int = typer.Option(1, "--workers", help="Number of processes running trials."),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for a reproducible search."),
    verbose: int = typer.Option(0, "--verbose", count=True, help="More logs (repeatable)."),
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=_version_callback,
        is_eager=True,
        help="Show the checkmyindex version and exit.",
    ),
):
    """Search for a set of compatible indexes for your sequencing experiment."""
    _configure_logging(verbose)

    try:
        pool_i7 = IndexTableParser.parse(input_i7, IndexType.I7)
        pool_i5 = IndexTableParser.parse(input_i5, IndexType.I5) if input_i5 else None
        request = DesignRequest(
            pool_i7=pool_i7,
            pool_i5=pool_i5,
            nb_samples=nb_samples,
            multiplexing_rate=multiplexing_rate,
            chemistry=chemistry,
            constraint=unicity_constraint,
            complete_lane=complete,
            select_comp_indexes=select_comp_indexes,
            max_trials=nb_max_trials,
            workers=workers,
            seed=seed,
        )
        result = RequestValidator.validate(request)
        if not result.is_valid:
            raise InvalidInputError(result.errors)
        _print_parameters(request, input_i7, input_i5, output)
        design = DesignSearch().find_solution(request)
    except InvalidInputError as e:
        for error in e.errors:
            console.print(f"[red]Error:[/red] {error}")
        raise typer.Exit(code=1)
    except NoSolutionFoundError as e:
        console.print(f"[red]{e}[/red]")
        console.print(
            "Try again with --complete, a higher --nb-max-trials or a less "
            "restrictive --unicity-constraint."
        )
        raise typer.Exit(code=1)

    console.print(_design_table(design))
    _print_color_balance(design)

    if output:
        DesignExporter.write(design, output)
        console.print(f"\nThe proposed sequencing design has been exported into {output}")
    console.print("\nRun the program again to obtain another solution!")


def _print_parameters(
    request: DesignRequest,
    input_i7: Path,
    input_i5: Optional[Path],
    output: Optional[Path],
) -> None:
    constraint = UniquenessConstraint.parse(request.constraint)
    table = Table(title="Parameters", show_header=False)
    table.add_column("Parameter", style="bold")
    table.add_column("Value")
    table.add_row("Input file i7 (indexes 1)", f"{input_i7} ({len(request.pool_i7)} indexes)")
    if input_i5:
        table.add_row("Input file i5 (indexes 2)", f"{input_i5} ({len(request.pool_i5)} indexes)")
    table.add_row("Multiplexing rate", str(request.multiplexing_rate))
    table.add_row("Number of samples", str(request.nb_samples))
    table.add_row("Chemistry", get_chemistry(request.chemistry).description)
    table.add_row("Number of pools/lanes", str(request.nb_lanes))
    table.add_row("Constraint", constraint.description)
    table.add_row("Directly look for complete pools/lanes", str(request.complete_lane))
    table.add_row("Select compatible indexes first", str(request.select_comp_indexes))
    table.add_row("Maximum number of trials", str(request.max_trials))
    table.add_row("Output file", str(output) if output else "none")
    console.print(table)


def _design_table(design: Design) -> Table:
    table = Table(
        title=f"{design.nb_lanes} pool(s) of {design.multiplexing_rate} samples"
    )
    for column in DesignExporter.columns(design):
        table.add_column(column)
    for values in DesignExporter.to_rows(design):
        table.add_row(*values)
    return table


def _print_color_balance(design: Design) -> None:
    for balance in ColorBalanceAnalyzer.analyze(design):
        for index_balance in (balance.i7_balance, balance.i5_balance):
            if index_balance is None:
                continue
            counts = " ".join(
                "/".join(str(n) for n in p.color_counts.values())
                for p in index_balance.positions
            )
            status = "[red]issues[/red]" if index_balance.has_issues else "[green]ok[/green]"
            console.print(
                f"Pool {balance.lane} {index_balance.index_type} colors "
                f"({'/'.join(index_balance.positions[0].color_counts)}): {counts} {status}"
            )


if __name__ == "__main__":
    app()
