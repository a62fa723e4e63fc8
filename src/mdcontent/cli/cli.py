"""CLI entrypoint: Typer app definition and command registration"""

import logging
from typing import Annotated

import typer

from mdcontent.cli.commands import (
    build_cmd, check_cmd, commit_cmd, export_cmd, history_cmd, init_cmd, list_cmd, tags_cmd,
)


app = typer.Typer(name="mdcontent", no_args_is_help=True, help="Frontmatter markdown content collection tools")


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable verbose logging")] = False,
    ):
    """Check, index, track, and export a frontmatter markdown collection."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


app.command(name="init")(init_cmd)
app.command(name="check")(check_cmd)
app.command(name="commit")(commit_cmd)
app.command(name="export")(export_cmd)
app.command(name="build")(build_cmd)
app.command(name="list")(list_cmd)
app.command(name="tags")(tags_cmd)
app.command(name="history")(history_cmd)
