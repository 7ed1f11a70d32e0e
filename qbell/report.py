# qbell/report.py
from __future__ import annotations

from typing import Dict, Optional, Tuple

from rich.console import Console
from rich.table import Table

from qbell.experiments import CATALOG, ExperimentName
from qbell.trials import InitialLabel, TrialResult

console = Console()

Results = Dict[Tuple[ExperimentName, InitialLabel], TrialResult]


def format_line(label: InitialLabel, result: TrialResult) -> str:
    """`Init:<label> 0s=<n0> 1s=<n1> agree=<na>`, every field left-aligned to width 4."""
    return (
        f"Init:{label.value:<4} 0s={result.zeros:<4} "
        f"1s={result.ones:<4} agree={result.agree:<4}"
    )


def _experiments(results: Results) -> list[ExperimentName]:
    seen: list[ExperimentName] = []
    for name, _ in results:
        if name not in seen:
            seen.append(name)
    return seen


def render_plain(results: Results, out: Optional[Console] = None) -> None:
    """One header per experiment, then one report line per initial label."""
    out = out or console
    for name in _experiments(results):
        out.print(f"[bold cyan]{name.value}[/bold cyan]")
        for (n, label), res in results.items():
            if n == name:
                out.print(format_line(label, res), markup=False, highlight=False)


def render_table(results: Results, out: Optional[Console] = None) -> None:
    """Same data as `render_plain`, as a rich table."""
    out = out or console
    table = Table(show_header=True, header_style="bold cyan", box=None, padding=(0, 1))
    table.add_column("Experiment")
    table.add_column("Init")
    table.add_column("0s", justify="right")
    table.add_column("1s", justify="right")
    table.add_column("agree", justify="right")
    for (name, label), res in results.items():
        table.add_row(name.value, label.value, str(res.zeros), str(res.ones), str(res.agree))
    out.print(table)


def render_catalog(out: Optional[Console] = None) -> None:
    out = out or console
    for name, circuit in CATALOG.items():
        gates = " ".join(str(g) for g in circuit.gates)
        out.print(f"[bold]{name.value:<11}[/bold] {gates:<22} {circuit.description}")
