import difflib
from pathlib import Path
from typing import List, Optional

import typer

from typemover.common import bus
from typemover.common.transaction import OverlayFileSystem
from typemover.config import SettingsError
from typemover.needle import L, needle
from typemover.refactor.errors import RefactorError
from typemover.refactor.models import ImportChange, MovePlan
from typemover.refactor.operations import MoveTypeOperation
from ..factories import (
    get_project_root,
    make_config,
    make_context,
    resolve_selection,
    resolve_source,
)


def _relative(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return str(path)


def _describe_change(change: ImportChange, root: Path) -> str:
    target = _relative(change.file_path, root)
    if change.declares_type:
        return f"[IMPORT] {target}: drop import from '{change.old_specifier}'"
    if not change.old_specifier:
        return f"[IMPORT] {target}: add import from '{change.new_specifier}'"
    return f"[IMPORT] {target}: '{change.old_specifier}' -> '{change.new_specifier}'"


def _report_plan(plan: MovePlan, root: Path) -> None:
    info = plan.type_info
    bus.info(
        L.move.run.located,
        kind=info.kind.name.lower().replace("_", " "),
        name=info.name,
        path=_relative(plan.source_path, root),
    )
    if info.dependencies:
        bus.warning(
            L.move.run.dependencies,
            name=info.name,
            names=", ".join(info.dependencies),
        )
    for location in plan.skipped_references:
        bus.warning(L.move.run.skipped_reference, location=location.describe())

    bus.warning(
        L.move.run.preview_header,
        name=info.name,
        destination=_relative(plan.destination_path, root),
        count=len(plan.referencing_files),
    )
    typer.echo(
        f"  [MOVE] {_relative(plan.source_path, root)} -> "
        f"{_relative(plan.destination_path, root)}"
    )
    for change in plan.change_set.import_changes:
        typer.echo(f"  {_describe_change(change, root)}")


def _overlay_diffs(overlay: OverlayFileSystem, root: Path) -> List[str]:
    diffs = []
    for path in sorted(overlay.files):
        before = overlay.original_text(path) or ""
        after = overlay.files[path]
        name = _relative(path, root)
        diffs.append(
            "".join(
                difflib.unified_diff(
                    before.splitlines(keepends=True),
                    after.splitlines(keepends=True),
                    fromfile=f"a/{name}",
                    tofile=f"b/{name}",
                )
            )
        )
    return diffs


def move_command(
    source: Path = typer.Argument(
        ..., help=needle.get(L.cli.argument.source.help)
    ),
    destination: str = typer.Argument(
        ..., help=needle.get(L.cli.argument.destination.help)
    ),
    name: Optional[str] = typer.Option(
        None, "--name", "-n", help=needle.get(L.cli.option.name.help)
    ),
    line: Optional[int] = typer.Option(
        None, "--line", min=1, help=needle.get(L.cli.option.line.help)
    ),
    column: Optional[int] = typer.Option(
        None, "--column", min=1, help=needle.get(L.cli.option.column.help)
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help=needle.get(L.cli.option.dry_run.help)
    ),
    yes: bool = typer.Option(
        False, "-y", "--yes", help=needle.get(L.cli.option.yes.help)
    ),
    tsconfig: Optional[str] = typer.Option(
        None, "--tsconfig", help=needle.get(L.cli.option.tsconfig.help)
    ),
    import_style: Optional[str] = typer.Option(
        None, "--import-style", help=needle.get(L.cli.option.import_style.help)
    ),
):
    root_path = get_project_root()

    try:
        # 1. Bootstrap
        config = make_config(root_path, tsconfig=tsconfig, import_style=import_style)
        bus.debug(L.debug.log.workspace_root, path=root_path)
        source_path = resolve_source(source)
        type_name, offset = resolve_selection(source_path, name, line, column)
        destination_path = (
            resolve_source(Path(destination)) if destination.strip() else destination
        )

        overlay = OverlayFileSystem() if dry_run else None
        ctx = make_context(root_path, config, fs=overlay)
        operation = MoveTypeOperation(
            source_path, destination_path, type_name=type_name, offset=offset
        )

        # 2. Analyze and preview
        bus.info(L.move.run.analyzing)
        plan = operation.analyze(ctx)
        _report_plan(plan, root_path)

        if overlay is not None:
            operation.apply(ctx, plan)
            for diff in _overlay_diffs(overlay, root_path):
                typer.echo(diff)
            bus.info(L.move.run.dry_run)
            return

        # 3. Confirm and execute
        confirmed = yes or typer.confirm(needle.get(L.move.run.confirm), default=False)
        if not confirmed:
            bus.error(L.move.run.aborted)
            raise typer.Exit(code=1)

        bus.info(L.move.run.applying)
        rewritten = operation.apply(ctx, plan)
        bus.success(
            L.move.run.success,
            name=plan.type_info.name,
            destination=_relative(plan.destination_path, root_path),
            count=len(rewritten),
        )

    except SettingsError as e:
        bus.error(L.error.settings, error=str(e))
        raise typer.Exit(code=1)
    except RefactorError as e:
        bus.error(L.error.generic, error=str(e))
        raise typer.Exit(code=1)
