# Copyright (c) Syntropy Systems
"""Main CLI entry point for gradewatch."""

import logging

import typer

from gradewatch.cli.init_cmd import init
from gradewatch.cli.query import query
from gradewatch.cli.serve import serve
from gradewatch.cli.stats_cmd import stats
from gradewatch.cli.watch import watch

app = typer.Typer(
    name="gradewatch",
    help=(
        "Transcript grade-point statistics. Find the results table, "
        "average the grades, keep up as the page changes."
    ),
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# Register commands
_ = app.command()(init)
_ = app.command()(stats)
_ = app.command()(watch)
_ = app.command()(serve)
_ = app.command()(query)


if __name__ == "__main__":
    app()
