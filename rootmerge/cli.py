import functools
import logging
import pathlib
from typing import Annotated, Optional

import typer
from rich.logging import RichHandler

from rootmerge import config, console, listing, pipeline, utils
from rootmerge.exception import RootMergeException

app = typer.Typer(no_args_is_help=True)
config_app = typer.Typer(no_args_is_help=True)
app.add_typer(
    config_app,
    name='config',
    help='Inspect and create merge configuration files (sub-command).',
    rich_help_panel='Configuration',
)

ConfigPathOption = Annotated[
    Optional[pathlib.Path],
    typer.Option(
        '--config',
        '-c',
        help='YAML file with merge options. Command line options take precedence.',
    ),
]


def setup_logging(verbose: bool):
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format='%(name)s: %(message)s',
        handlers=[RichHandler(console=console.stderr_console, show_path=False)],
        force=True,
    )
    logging.getLogger('rootmerge').setLevel(logging.DEBUG)


def exit_on_error(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except RootMergeException as e:
            console.stderr_console.print(str(e), end='', markup=False, soft_wrap=True)
            raise typer.Exit(e.exitcode) from e

    return wrapper


def version_callback(value: bool) -> None:
    if value:
        console.console.print(f'rootmerge version {utils.get_version()}')
        raise typer.Exit()


@app.callback()
def main(
    verbose: bool = typer.Option(
        False, '--verbose', '-v', help='Log every pipeline step.'
    ),
    version: Annotated[
        bool,
        typer.Option(
            '--version',
            callback=version_callback,
            is_eager=True,
            help='Show the version and exit.',
        ),
    ] = False,
):
    setup_logging(verbose)


@app.command('merge', help='Write the list of matching files and merge them.')
@exit_on_error
def merge(
    config_path: ConfigPathOption = None,
    directory: Annotated[
        Optional[str],
        typer.Option('--directory', '-d', help='Directory scanned for inputs.'),
    ] = None,
    prefix: Annotated[
        Optional[str],
        typer.Option('--prefix', '-p', help='Filename prefix of the inputs.'),
    ] = None,
    suffix: Annotated[
        Optional[str],
        typer.Option('--suffix', '-s', help='Filename suffix of the inputs.'),
    ] = None,
    list_file: Annotated[
        Optional[str],
        typer.Option('--list', '-l', help='Path of the list file to write.'),
    ] = None,
    output_file: Annotated[
        Optional[str],
        typer.Option('--output', '-o', help='Path of the merged output.'),
    ] = None,
    tool: Annotated[
        Optional[str],
        typer.Option('--tool', help='Executable that runs the merge macro.'),
    ] = None,
    macro: Annotated[
        Optional[str],
        typer.Option('--macro', help='Merge macro to call.'),
    ] = None,
    timeout: Annotated[
        Optional[float],
        typer.Option('--timeout', help='Seconds to wait for the merge tool.'),
    ] = None,
    skip_empty: Annotated[
        Optional[bool],
        typer.Option(
            '--skip-empty/--no-skip-empty',
            help='Do not call the merge tool when nothing matches.',
            show_default=False,
        ),
    ] = None,
    sort: Annotated[
        Optional[bool],
        typer.Option(
            '--sort/--no-sort',
            help='Sort inputs instead of keeping filesystem order.',
            show_default=False,
        ),
    ] = None,
    replace_process: Annotated[
        Optional[bool],
        typer.Option(
            '--exec/--no-exec',
            help='Replace this process with the merge tool.',
            show_default=False,
        ),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option(
            '--dry-run', help='Write the list file and print the command only.'
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option('--quiet', '-q', help='Do not echo matched files.'),
    ] = False,
):
    cfg = config.resolve_config(
        config_path,
        directory=directory,
        prefix=prefix,
        suffix=suffix,
        list_file=list_file,
        output_file=output_file,
        tool=tool,
        macro=macro,
        timeout=timeout,
        skip_empty=skip_empty,
        sort=sort,
        replace_process=replace_process,
    )

    result = pipeline.run_pipeline(cfg, dry_run=dry_run, echo=not quiet)
    list_path = utils.escape_markup(cfg.list_file)

    if result.stage == pipeline.Stage.SKIPPED:
        console.console.print(
            f'[warning]No files match [item]{utils.escape_markup(result.pattern)}[/item], '
            'skipping merge.[/warning]'
        )
        return
    if dry_run:
        entries = listing.read_list_file(cfg.list_file)
        console.console.print(
            f'Wrote {len(entries)} file(s) to [item]{list_path}[/item].'
        )
        console.console.print(
            utils.escape_markup(result.invocation.command_line()),
            style='default',
            soft_wrap=True,
        )
        return
    console.console.print(
        f'[success]Merged {result.count} file(s) into '
        f'[item]{utils.escape_markup(cfg.output_file)}[/item].[/success]'
    )


@config_app.command('show', help='Print the effective configuration as JSON.')
@exit_on_error
def show(config_path: ConfigPathOption = None):
    cfg = config.resolve_config(config_path)
    console.console.print_json(utils.model_json(cfg))


@config_app.command('init', help='Write the default configuration to a file.')
@exit_on_error
def init(
    path: Annotated[
        pathlib.Path, typer.Argument(help='Where to write the configuration.')
    ] = pathlib.Path('rootmerge.yml'),
    force: Annotated[
        bool, typer.Option('--force', '-f', help='Overwrite an existing file.')
    ] = False,
):
    if path.exists() and not force:
        console.console.print(
            f'[error]File [item]{path}[/item] already exists. '
            'Use --force to overwrite it.[/error]'
        )
        raise typer.Exit(1)
    config.write_default_config(path)
    console.console.print(
        f'[success]Wrote configuration to [item]{path}[/item].[/success]'
    )
