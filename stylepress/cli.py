"""Command line interface for Stylepress."""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from . import __version__
from .api import StylepressClient
from .cache import cache_dir_context, list_cache_entries
from .errors import StylepressError
from .services.config_service import apply_config_updates, get_config_snapshot
from .services.request_service import parse_boolean
from .text import Messages, Styles

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    help=Messages.APP_HELP,
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"Stylepress v{__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    )
) -> None:
    """Global Typer callback for shared options."""
    return None


@app.command()
def build(
    files: list[Path] = typer.Argument(..., help=Messages.HELP_BUILD_FILES),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help=Messages.HELP_BUILD_OUTPUT,
    ),
    webroot: Path | None = typer.Option(None, "--webroot", help=Messages.HELP_WEBROOT),
    sub_folder: str | None = typer.Option(
        None,
        "--sub-folder",
        help=Messages.HELP_SUB_FOLDER,
    ),
    lessify: bool | None = typer.Option(
        None,
        "--lessify/--no-lessify",
        help=Messages.HELP_LESSIFY,
    ),
    scssify: bool | None = typer.Option(
        None,
        "--scssify/--no-scssify",
        help=Messages.HELP_SCSSIFY,
    ),
    verbose: bool = typer.Option(False, "--verbose", help=Messages.HELP_VERBOSE),
) -> None:
    """Compile stylesheets into one body, reusing cached builds."""
    _configure_logging(verbose)
    client = StylepressClient()
    try:
        response = client.compile(
            files,
            webroot=webroot,
            sub_folder=sub_folder,
            lessify_all_css=lessify,
            scssify_all_css=scssify,
        )
    except (StylepressError, OSError) as exc:
        err_console.print(_styled(str(exc), Styles.ERROR))
        raise typer.Exit(code=1)

    for entry in response.entries:
        status = "cached" if entry.cache_hit else "compiled"
        err_console.print(
            _styled(
                Messages.INFO_BUILD_ENTRY.format(
                    status=status,
                    path=entry.path,
                    dialect=entry.dialect,
                ),
                Styles.INFO,
            )
        )
    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(response.body, encoding="utf-8")
        err_console.print(
            _styled(Messages.INFO_BUILD_WRITTEN.format(path=output), Styles.SUCCESS)
        )
        return
    typer.echo(response.body)


@app.command()
def check(
    file: Path = typer.Argument(..., help=Messages.HELP_CHECK_FILE),
    webroot: Path | None = typer.Option(None, "--webroot", help=Messages.HELP_WEBROOT),
    sub_folder: str | None = typer.Option(
        None,
        "--sub-folder",
        help=Messages.HELP_SUB_FOLDER,
    ),
    lessify: bool | None = typer.Option(
        None,
        "--lessify/--no-lessify",
        help=Messages.HELP_LESSIFY,
    ),
    scssify: bool | None = typer.Option(
        None,
        "--scssify/--no-scssify",
        help=Messages.HELP_SCSSIFY,
    ),
) -> None:
    """Report whether the cached build of a stylesheet is still valid."""
    if not file.is_file():
        console.print(_styled(Messages.ERROR_FILE_NOT_FOUND.format(path=file), Styles.ERROR))
        raise typer.Exit(code=1)
    client = StylepressClient()
    try:
        fresh = client.is_cache_fresh(
            file,
            webroot=webroot,
            sub_folder=sub_folder,
            lessify_all_css=lessify,
            scssify_all_css=scssify,
        )
    except OSError as exc:
        console.print(_styled(str(exc), Styles.ERROR))
        raise typer.Exit(code=1)
    if fresh:
        console.print(_styled(Messages.INFO_CACHE_FRESH.format(path=file), Styles.SUCCESS))
        return
    console.print(_styled(Messages.INFO_CACHE_STALE.format(path=file), Styles.WARNING))
    raise typer.Exit(code=1)


@app.command()
def cache(
    clear: bool = typer.Option(False, "--clear", help=Messages.HELP_CACHE_CLEAR),
) -> None:
    """List or clear cached stylesheet builds."""
    client = StylepressClient()
    if clear:
        removed = client.clear_cache()
        plural = "" if removed == 1 else "s"
        console.print(
            _styled(
                Messages.INFO_CACHE_CLEARED.format(count=removed, plural=plural),
                Styles.SUCCESS,
            )
        )
        return

    config = get_config_snapshot()
    with cache_dir_context(config.cache_dir):
        entries = list_cache_entries()
    if not entries:
        console.print(_styled(Messages.INFO_CACHE_EMPTY, Styles.INFO))
        return
    table = Table(
        title=Messages.TABLE_CACHE_TITLE,
        show_header=True,
        header_style=Styles.TABLE_HEADER,
    )
    table.add_column(Messages.TABLE_HEADER_CACHE_FILE, overflow="fold")
    table.add_column(Messages.TABLE_HEADER_KIND, no_wrap=True)
    table.add_column(Messages.TABLE_HEADER_DEPENDENCIES, overflow="fold")
    table.add_column(Messages.TABLE_HEADER_SIZE, justify="right")
    for entry in entries:
        dependencies = entry["dependencies"] or []
        table.add_row(
            Path(entry["cache_file"]).name,
            str(entry["kind"]),
            "\n".join(dependencies) or "-",
            str(entry["size"]),
        )
    console.print(table)


@app.command()
def config(
    show: bool = typer.Option(False, "--show", help=Messages.HELP_SHOW_CONFIG),
    set_webroot: str | None = typer.Option(
        None,
        "--set-webroot",
        help=Messages.HELP_SET_WEBROOT,
    ),
    set_sub_folder: str | None = typer.Option(
        None,
        "--set-sub-folder",
        help=Messages.HELP_SET_SUB_FOLDER,
    ),
    set_cache_dir: str | None = typer.Option(
        None,
        "--set-cache-dir",
        help=Messages.HELP_SET_CACHE_DIR,
    ),
    set_lessify_option: str | None = typer.Option(
        None,
        "--set-lessify",
        help=Messages.HELP_SET_LESSIFY,
    ),
    set_scssify_option: str | None = typer.Option(
        None,
        "--set-scssify",
        help=Messages.HELP_SET_SCSSIFY,
    ),
    set_max_import_depth: int | None = typer.Option(
        None,
        "--set-max-import-depth",
        help=Messages.HELP_SET_MAX_IMPORT_DEPTH,
    ),
) -> None:
    """Manage Stylepress configuration."""
    try:
        lessify = _optional_boolean(set_lessify_option)
        scssify = _optional_boolean(set_scssify_option)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    try:
        updates = apply_config_updates(
            webroot=set_webroot,
            sub_folder=set_sub_folder,
            cache_dir=set_cache_dir,
            lessify_all_css=lessify,
            scssify_all_css=scssify,
            max_import_depth=set_max_import_depth,
        )
    except ValueError as exc:
        console.print(_styled(str(exc), Styles.ERROR))
        raise typer.Exit(code=1)

    if updates.changed:
        console.print(_styled(Messages.INFO_CONFIG_UPDATED, Styles.SUCCESS))
    if show or not updates.changed:
        cfg = get_config_snapshot()
        console.print(
            _styled(
                Messages.INFO_CONFIG_SUMMARY.format(
                    webroot=cfg.webroot or "(current directory)",
                    sub_folder=cfg.sub_folder or "(none)",
                    cache_dir=cfg.cache_dir or "(default)",
                    lessify="yes" if cfg.lessify_all_css else "no",
                    scssify="yes" if cfg.scssify_all_css else "no",
                    depth=cfg.max_import_depth,
                ),
                Styles.INFO,
            )
        )


def _optional_boolean(value: str | None) -> bool | None:
    if value is None:
        return None
    return parse_boolean(value)


def _styled(text: str, style: str) -> str:
    return f"[{style}]{text}[/{style}]"


def run(argv: list[str] | None = None) -> None:
    """Entry point wrapper allowing optional argument override."""
    if argv is None:
        app()
    else:
        app(args=list(argv))
