import sys

import typer
from rich.console import Console


def _abort(code: int = 1):
    Console().show_cursor()
    sys.exit(code)


def run_app_cli():
    from rootmerge.cli import app as app_cli

    app_cli()


def app():
    try:
        run_app_cli()
    except KeyboardInterrupt:
        _abort(130)
    except typer.Abort:
        _abort()
    finally:
        Console().show_cursor()
