# ABOUTME: Main CLI application entry point using asyncclick
# ABOUTME: Provides commands for building the dictionary and inspecting single entries

from pathlib import Path

import anyio
import asyncclick as click
from rich.console import Console
from rich.panel import Panel

from pokedict.config import Config, get_config
from pokedict.core.models import DexId, UnknownEntryError, UnknownGenerationError
from pokedict.utils.logging import (
    LoggingMode,
    configure_logging,
    create_batch_progress,
    get_logging_status,
    with_entry_context,
)
from pokedict.utils.rich_tables import (
    create_build_summary_table,
    create_entry_table,
    create_failures_table,
    create_logging_status_table,
    print_rich_table,
)

console = Console()


def _build_config(
    hq_pokemon_images: bool,
    hq_body_images: bool,
    hq: bool,
    max_body_sections: int | None,
    keep_going: bool,
    workers: int | None,
    output: Path | None,
) -> Config:
    """Apply command line overrides on top of the environment configuration."""
    updates: dict = {}
    if hq or hq_pokemon_images:
        updates["hq_pokemon_images"] = True
    if hq or hq_body_images:
        updates["hq_body_images"] = True
    if max_body_sections is not None:
        updates["max_body_sections"] = max_body_sections
    if keep_going:
        updates["keep_going"] = True
    if workers is not None:
        updates["max_workers"] = workers
    if output is not None:
        updates["output_path"] = output
    return get_config().model_copy(update=updates)


@click.command()
@click.option("--hq-pokemon-images", is_flag=True, help="Load full-resolution gallery images")
@click.option("--hq-body-images", is_flag=True, help="Load full-resolution info box and article images")
@click.option("--hq", is_flag=True, help="Shorthand for both --hq-pokemon-images and --hq-body-images")
@click.option("--max-body-sections", type=click.IntRange(min=0), help="Article sections to keep per entry")
@click.option("--generation", "generations", type=click.IntRange(min=1), multiple=True, help="Only this generation (repeatable)")
@click.option("--keep-going", is_flag=True, help="Continue after a page fails and report failures at the end")
@click.option("--workers", type=click.IntRange(min=1), help="Worker threads for page extraction")
@click.option("--output", "-o", type=click.Path(path_type=Path, dir_okay=False), help="Output XML path")
@click.pass_context
async def build(
    ctx,
    hq_pokemon_images: bool,
    hq_body_images: bool,
    hq: bool,
    max_body_sections: int | None,
    generations: tuple[int, ...],
    keep_going: bool,
    workers: int | None,
    output: Path | None,
):
    """
    📚 Build Dictionary.xml from Bulbapedia.

    Reads the National Pokédex list, extracts every selected Pokémon page, and
    writes the dictionary source for the Dictionary Development Kit.
    """
    json_output = ctx.obj["json_output"]
    config = _build_config(hq_pokemon_images, hq_body_images, hq, max_body_sections, keep_going, workers, output)

    from pokedict.core.service import BuildError, DictionaryBuildService
    from pokedict.extraction.base import ExtractionError
    from pokedict.services.fetcher import FetchError

    service = DictionaryBuildService(config)
    try:
        if json_output:
            summary = await anyio.to_thread.run_sync(service.build, list(generations))
        else:
            console.print(
                Panel.fit(
                    "📚 [bold cyan]Pokédex Dictionary Build[/bold cyan] 📚\n"
                    f"Generations: {', '.join(map(str, generations)) or 'all'}",
                    border_style="magenta",
                )
            )
            progress, _task_id, tracker = create_batch_progress(console, total=0)
            with progress:
                summary = await anyio.to_thread.run_sync(service.build, list(generations), tracker)
    except (BuildError, ExtractionError, FetchError) as exc:
        if not json_output:
            console.print(f"[red]❌ {exc}[/red]")
        ctx.exit(1)
    except UnknownGenerationError as exc:
        raise click.BadParameter(str(exc), param_hint="--generation") from exc
    finally:
        service.close()

    if not json_output:
        print_rich_table(console, create_build_summary_table(summary))
        if summary.failures:
            print_rich_table(console, create_failures_table(summary.failures))

    if summary.failures:
        ctx.exit(1)


def _parse_dex_id(ctx, param, value: str) -> DexId:
    try:
        return DexId.parse(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc


@click.command(name="show-entry")
@click.argument("dex_id", callback=_parse_dex_id)
@click.option("--hq", is_flag=True, help="Load full-resolution images")
@click.pass_context
async def show_entry(ctx, dex_id: DexId, hq: bool):
    """
    🔎 Extract one Pokémon page and show what was found.

    DEX_ID is a National Pokédex number such as 25 or #0025.
    """
    json_output = ctx.obj["json_output"]
    config = _build_config(hq, hq, False, None, False, None, None)

    from pokedict.core.service import DictionaryBuildService
    from pokedict.extraction.base import ExtractionError
    from pokedict.services.fetcher import FetchError

    service = DictionaryBuildService(config)
    try:
        with with_entry_context(dex_id) as logger:
            entry = await anyio.to_thread.run_sync(service.extract_entry, dex_id)
            logger.info("Extraction complete", name=entry.name)
    except (ExtractionError, FetchError) as exc:
        if not json_output:
            console.print(f"[red]❌ {exc}[/red]")
        ctx.exit(1)
    except UnknownEntryError as exc:
        raise click.BadParameter(str(exc), param_hint="DEX_ID") from exc
    finally:
        service.close()

    if json_output:
        click.echo(entry.model_dump_json(indent=2))
    else:
        print_rich_table(console, create_entry_table(entry))


def _initialize_logging(json_output: bool, log_level: str | None = None, log_file: str | None = None) -> None:
    """Initialize logging configuration."""
    try:
        config = get_config()
        mode = LoggingMode.PRODUCTION if json_output else LoggingMode.INTERACTIVE

        # Use config defaults when CLI parameters are not provided
        final_log_level = log_level or config.log_level
        final_log_file = log_file or (str(config.log_file) if config.log_file else None)

        configure_logging(mode=mode, log_level=final_log_level, log_file=final_log_file)
    except (FileNotFoundError, PermissionError, OSError):
        # logs/ may be unwritable; fall back to the default sinks
        mode = LoggingMode.PRODUCTION if json_output else LoggingMode.INTERACTIVE
        final_log_level = log_level or "INFO"
        configure_logging(mode=mode, log_level=final_log_level, log_file=log_file)


@click.command(name="logging-status")
def logging_status():
    """
    📊 Show current logging configuration and status.
    """
    status = get_logging_status()
    logging_table = create_logging_status_table(status)
    print_rich_table(console, logging_table)


@click.group(invoke_without_command=True)
@click.option("--json", is_flag=True, help="Output structured JSON logs instead of rich interface")
@click.option("--log-level", default=None, help="Logging level (DEBUG, INFO, WARNING, ERROR)")
@click.option("--log-file", help="Custom log file path")
@click.pass_context
def app(ctx, json: bool, log_level: str | None, log_file: str | None):
    """
    📖 Pokédict - a Pokédex for the macOS Dictionary app

    Turns Bulbapedia Pokémon articles into a Dictionary Services XML source,
    with cross-linked entries and locally cached images.
    """
    # Store global options in context for commands to access
    ctx.ensure_object(dict)
    ctx.obj["json_output"] = json

    # Initialize logging once here instead of in each command
    _initialize_logging(json, log_level, log_file)

    # Show help if no command provided
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# Add commands to the main group
app.add_command(build)
app.add_command(show_entry)
app.add_command(logging_status)


if __name__ == "__main__":
    app()
