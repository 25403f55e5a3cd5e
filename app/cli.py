from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console

from adapters.filesystem.workspace_repository import FileSystemWorkspaceRepository
from app.config import load_settings
from app.session_wiring import build_workspace_session
from domain.models import CycleStatus, Severity, ViewMode, WorkspaceDocument
from domain.services.collision import find_overlaps, rects_from_nodes
from domain.services.cycles import detect_cycle
from domain.services.ring_hierarchy import check_ring_hierarchy

app = typer.Typer(no_args_is_help=True)
console = Console()


def _load_document(input_path: Path) -> WorkspaceDocument:
    if not input_path.exists():
        console.print(f"[red]File not found:[/] {input_path}")
        raise typer.Exit(code=1)
    try:
        return FileSystemWorkspaceRepository().load_by_path(input_path)
    except (ValidationError, ValueError) as exc:
        console.print(f"[red]Invalid workspace file:[/] {exc}")
        raise typer.Exit(code=1) from exc


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging.")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command("layout")
def layout(
    input_path: Path = typer.Argument(..., help="Workspace JSON file."),
    output_path: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Where to write the laid out workspace (defaults to input)."
    ),
    view_mode: Optional[ViewMode] = typer.Option(None, help="Layout mode override."),
    padding: Optional[float] = typer.Option(None, help="Minimum clearance between nodes."),
    max_passes: Optional[int] = typer.Option(None, help="Collision relaxation pass budget."),
    config_path: Optional[Path] = typer.Option(None, "--config", help="YAML settings file."),
) -> None:
    settings = load_settings(config_path)
    document = _load_document(input_path)

    options = replace(settings.layout.to_layout_options(), center_node_id=document.center_node_id)
    if view_mode is not None:
        options = replace(options, view_mode=view_mode)
    if padding is not None:
        options = replace(options, padding=padding)

    session = build_workspace_session(document, settings)
    result = session.relayout(options, max_passes=max_passes or settings.layout.max_passes)
    laid_out = session.to_document()

    target_path = output_path or input_path
    FileSystemWorkspaceRepository().save(laid_out, target_path)
    if result.pending_measurement:
        console.print("[yellow]Node sizes missing, collision pass skipped.[/]")
    elif result.remaining_overlaps:
        console.print(
            f"[yellow]{len(result.remaining_overlaps)} overlaps remain after "
            f"{result.passes} passes.[/]"
        )
    console.print(
        f"[green]Wrote[/] {target_path} ({len(laid_out.nodes)} nodes, {result.moved_count} moved)"
    )


@app.command("check-cycles")
def check_cycles(input_path: Path = typer.Argument(..., help="Workspace JSON file.")) -> None:
    document = _load_document(input_path)
    check = detect_cycle(document.nodes, document.edges)
    if check.status is CycleStatus.INVALID_REFERENCE:
        console.print(
            "[red]Edges reference unknown nodes:[/] " + ", ".join(check.invalid_references)
        )
        raise typer.Exit(code=1)
    if check.status is CycleStatus.CYCLE:
        console.print("[red]Cycle detected:[/] " + " -> ".join(check.cycle or []))
        raise typer.Exit(code=1)
    console.print(f"[green]Acyclic:[/] {input_path}")


@app.command("check-rings")
def check_rings(input_path: Path = typer.Argument(..., help="Workspace JSON file.")) -> None:
    document = _load_document(input_path)
    check = check_ring_hierarchy(document.nodes, document.edges, document.center_node_id)
    for violation in check.violations:
        color = "red" if violation.severity is Severity.ERROR else "yellow"
        expected = f"expected R{violation.expected_ring}"
        related = f" via {violation.related_id}" if violation.related_id else ""
        console.print(
            f"[{color}]{violation.severity.value}[/] {violation.node_id}: "
            f"{violation.issue.value} ({expected}{related})"
        )
    if not check.is_valid:
        raise typer.Exit(code=1)
    console.print(f"[green]Ring hierarchy OK:[/] {input_path}")


@app.command("overlaps")
def overlaps(
    input_path: Path = typer.Argument(..., help="Workspace JSON file."),
    padding: float = typer.Option(12.0, help="Minimum clearance between nodes."),
) -> None:
    document = _load_document(input_path)
    pairs = find_overlaps(
        rects_from_nodes(document.nodes, center_node_id=document.center_node_id), padding
    )
    if pairs:
        for first, second in pairs:
            console.print(f"[red]Overlap:[/] {first} <-> {second}")
        raise typer.Exit(code=1)
    console.print(f"[green]No overlaps[/] at padding {padding:g}")


if __name__ == "__main__":
    app()
