from pathlib import Path
from typing import Optional

import typer

from typemover.common import bus
from typemover.config import SettingsError
from typemover.needle import L, needle
from typemover.refactor.errors import RefactorError
from typemover.refactor.operations import PreviewReferencesOperation
from ..factories import (
    get_project_root,
    make_config,
    make_context,
    resolve_selection,
    resolve_source,
)


def refs_command(
    source: Path = typer.Argument(
        ..., help=needle.get(L.cli.argument.source.help)
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
    tsconfig: Optional[str] = typer.Option(
        None, "--tsconfig", help=needle.get(L.cli.option.tsconfig.help)
    ),
):
    root_path = get_project_root()

    try:
        config = make_config(root_path, tsconfig=tsconfig)
        source_path = resolve_source(source)
        type_name, offset = resolve_selection(source_path, name, line, column)
        ctx = make_context(root_path, config)

        preview = PreviewReferencesOperation(
            source_path, type_name=type_name, offset=offset
        ).analyze(ctx)
    except SettingsError as e:
        bus.error(L.error.settings, error=str(e))
        raise typer.Exit(code=1)
    except RefactorError as e:
        bus.error(L.error.generic, error=str(e))
        raise typer.Exit(code=1)

    if not preview.references:
        bus.info(L.refs.run.none, name=preview.type_info.name)
        return

    bus.info(
        L.refs.run.header,
        name=preview.type_info.name,
        count=len(preview.references),
    )
    for location in preview.references:
        path = ctx.workspace.relative(location.path).as_posix()
        typer.echo(f"  {path}:{location.line + 1}:{location.character + 1}")
    for path, sites in preview.import_sites.items():
        bus.debug(
            L.refs.run.import_sites,
            path=ctx.workspace.relative(path).as_posix(),
            count=len(sites),
        )
