"""Export logged workouts to external formats."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from wm_cli.commands.common import build_controller, get_state, print_json_payload
from wm_cli.core.config import resolve_output_dir
from wm_cli.exporters.json_export import workouts_payload, write_json
from wm_cli.exporters.markdown import generate_index, write_workout_markdown


def export_command(
    ctx: typer.Context,
    export_format: str = typer.Option("both", "--format", help="Export format: json|markdown|both"),
    output_dir: Optional[Path] = typer.Option(None, help="Output directory"),
    rewrite: bool = typer.Option(False, help="Rewrite existing markdown files"),
) -> None:
    """Export workouts as a JSON document and/or markdown files with an index."""
    state = get_state(ctx)

    if export_format not in {"json", "markdown", "both"}:
        raise typer.BadParameter("--format must be one of: json, markdown, both")

    controller = build_controller(state, silent=True)
    controller.start()
    workouts = controller.workouts

    out_dir = resolve_output_dir(state.config, explicit=output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    json_path: Optional[Path] = None
    markdown_written = 0

    if export_format in {"json", "both"}:
        json_path = write_json(out_dir / "workouts.json", workouts_payload(workouts))

    if export_format in {"markdown", "both"}:
        for workout in workouts:
            path = write_workout_markdown(out_dir, workout, rewrite=rewrite)
            if path.exists():
                markdown_written += 1
        generate_index(out_dir, workouts)

    payload = {
        "output_dir": str(out_dir),
        "json_file": str(json_path) if json_path else None,
        "markdown_files": markdown_written,
        "total": len(workouts),
    }

    if state.json_output:
        print_json_payload(state, payload)
        return

    if state.plain_output:
        for key, value in payload.items():
            typer.echo(f"{key}\t{value if value is not None else '-'}")
        return

    state.console.print(f"Exported {len(workouts)} workout(s) to: {out_dir}")
