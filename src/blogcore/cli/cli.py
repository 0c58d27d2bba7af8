"""CLI entrypoint: Typer app definition and command registration"""

import typer

from blogcore.cli.commands import category_add_cmd, decode_cmd, init_cmd, list_cmd, main_callback, serve_cmd


app = typer.Typer(name="blogcore", no_args_is_help=True, help="Blog content backend: form decoding, listings, and the HTTP API")

app.callback()(main_callback)
app.command(name="init")(init_cmd)
app.command(name="decode")(decode_cmd)
app.command(name="list")(list_cmd)
app.command(name="category-add")(category_add_cmd)
app.command(name="serve")(serve_cmd)
