from pathlib import Path

import typer

from typemover.common import bus
from typemover.needle import L, needle
from .rendering import CliRenderer

from .commands.move import move_command
from .commands.refs import refs_command

app = typer.Typer(
    name="typemover",
    help=needle.get(L.cli.app.description),
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help=needle.get(L.cli.option.verbose.help)
    ),
):
    # The CLI is the composition root: it picks the renderer and lets the
    # project override message templates from .typemover/needle/.
    bus.set_renderer(CliRenderer(verbose=verbose))
    needle.add_root(Path.cwd())


app.command(name="move", help=needle.get(L.cli.command.move.help))(move_command)
app.command(name="refs", help=needle.get(L.cli.command.refs.help))(refs_command)


if __name__ == "__main__":
    app()
