"""CLI entrypoint: Typer app definition and command registration"""

import typer

from helpparse.cli.commands import detect_cmd, formats_cmd, main_callback, parse_cmd


app = typer.Typer(name="helpparse", no_args_is_help=True, help="Help content parsing and format detection")

app.callback()(main_callback)
app.command(name="parse")(parse_cmd)
app.command(name="detect")(detect_cmd)
app.command(name="formats")(formats_cmd)
