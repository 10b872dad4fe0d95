"""CLI entrypoint: Typer app definition and command registration"""

import typer

from mdpublish.cli.commands import status_cmd, sync_cmd


app = typer.Typer(name="md-publish", no_args_is_help=True, help="Publish a markdown tree to Notion, incrementally")

app.command(name="sync")(sync_cmd)
app.command(name="status")(status_cmd)
