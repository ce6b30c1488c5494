from __future__ import annotations

from functools import partial
from pathlib import Path
from typing import NoReturn

import anyio
import typer

from .. import __version__
from ..config import ConfigError, load_config
from ..errors import SpecslidesError
from ..extract import build_prompt_extract
from ..logging import setup_logging
from ..upload import upload_story

OUTPUT_FORMATS = ("json", "markdown")


def _print_version_and_exit() -> None:
    typer.echo(__version__)
    raise typer.Exit()


def _version_callback(value: bool) -> None:
    if value:
        _print_version_and_exit()


def _exit_error(exc: Exception) -> NoReturn:
    typer.echo(f"error: {exc}", err=True)
    raise typer.Exit(code=1) from exc


def generate(
    input_path: str = typer.Option(
        "",
        "--input",
        "-i",
        help="Path to Codex session JSONL file or directory.",
    ),
    server: str | None = typer.Option(
        None,
        "--server",
        help="Specslides server URL (default: http://localhost:3000).",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Extract prompts and print payload without uploading.",
    ),
    output_format: str = typer.Option(
        "json",
        "--format",
        help="Dry-run output: json (prompt extract) or markdown (story body).",
    ),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        help="Path to a specslides.toml config file.",
    ),
    debug: bool = typer.Option(
        False,
        "--debug/--no-debug",
        help="Log resolution, parsing, and upload details to stderr.",
    ),
) -> None:
    """Extract prompts from a Codex session and upload a story."""
    setup_logging(debug=debug)

    if not input_path.strip():
        _exit_error(ConfigError("missing required --input path"))
    if output_format not in OUTPUT_FORMATS:
        _exit_error(
            ConfigError(
                f"Invalid `--format` {output_format!r}; expected one of: "
                + ", ".join(OUTPUT_FORMATS)
            )
        )

    try:
        result = build_prompt_extract(Path(input_path).expanduser().absolute())
    except SpecslidesError as e:
        _exit_error(e)

    if dry_run:
        if output_format == "markdown":
            typer.echo(result.markdown)
        else:
            typer.echo(result.json)
        return

    try:
        config = load_config(config_path, server_url=server)
    except ConfigError as e:
        _exit_error(e)

    session = result.extract.session
    typer.echo(f"Session: {session.id}\nPrompts: {len(result.extract.prompts)}")

    try:
        url = anyio.run(
            partial(
                upload_story,
                config.server_url,
                result,
                timeout_s=config.upload_timeout_s,
            )
        )
    except SpecslidesError as e:
        _exit_error(e)

    typer.echo(url)


def app_main(
    version: bool = typer.Option(
        False,
        "--version",
        help="Show the version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """Specslides CLI."""


def create_app() -> typer.Typer:
    app = typer.Typer(
        add_completion=False,
        no_args_is_help=True,
        help="Generate shareable build stories from Codex sessions.",
    )
    app.callback()(app_main)
    app.command(name="generate")(generate)
    return app


def main() -> None:
    app = create_app()
    app()


if __name__ == "__main__":
    main()
