# cli.py
from __future__ import annotations

import sys
from pathlib import Path

import click

from gamesite import __version__
from gamesite.builder import Builder, clean as clean_output
from gamesite.config import BuildSettings
from gamesite.errors import ConfigError, InfrastructureError
from gamesite.ui.console import Console, get_console, set_console


def _fail(ctx: click.Context, title: str, exc: Exception, suggestion: str | None = None) -> None:
    console = get_console()
    console.print_error(title, str(exc), suggestion=suggestion)
    if ctx.obj.get("debug", False):
        console.print_exception(exc)
    sys.exit(1)


@click.group()
@click.version_option(__version__, prog_name="gamesite")
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.pass_context
def cli(ctx, debug):
    """gamesite: build a static website out of independent game repositories."""
    console = Console(debug=debug)
    set_console(console)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@cli.command()
@click.option("-c", "--concurrency", default=None, type=click.IntRange(min=1), help="Number of parallel builds (defaults to CPU count)")
@click.option("-o", "--output", default=".", type=click.Path(file_okay=False, path_type=Path), help="Output directory")
@click.option("--games", "games_file", default=None, type=click.Path(dir_okay=False, path_type=Path), help="games.json to use instead of _build/custom/games.json")
@click.option("--skip-existing", is_flag=True, default=False, help="Skip games whose output directory already exists")
@click.option("--step-timeout", default=None, type=float, help="Seconds before a build step is killed")
@click.option("--dry-run", is_flag=True, default=False, help="Show what would be built without building")
@click.pass_context
def build(ctx, concurrency, output, games_file, skip_existing, step_timeout, dry_run):
    """Build the games website."""
    console = get_console()
    settings = BuildSettings.from_cwd(
        output,
        concurrency=concurrency,
        skip_existing=skip_existing,
        step_timeout=step_timeout,
        games_file=games_file,
    )
    builder = Builder(settings)

    try:
        if dry_run:
            console.print_info("Dry run mode - no actual builds will be performed")
            console.print_header("Games that would be built")
            for spec in builder.list_games():
                console.print_game(spec)
            return

        report = builder.build_all()
    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(130)
    except ConfigError as e:
        _fail(ctx, "Invalid games configuration", e)
    except InfrastructureError as e:
        _fail(ctx, "Build could not start", e, suggestion="Check the output directory and games configuration.")

    console.print_report(report)
    if report.success:
        console.print_info(f"\nBuild completed successfully: {report.success_count} built, {report.skipped_count} skipped")
    else:
        console.print_info(f"\nBuild completed with errors: {report.failed_count} failed")
        sys.exit(1)


@cli.command(name="list")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Show detailed game information")
@click.option("--games", "games_file", default=None, type=click.Path(dir_okay=False, path_type=Path), help="games.json to read")
@click.pass_context
def list_games(ctx, verbose, games_file):
    """List all configured games."""
    console = get_console()
    settings = BuildSettings.from_cwd(games_file=games_file)

    try:
        games = Builder(settings).list_games()
    except InfrastructureError as e:
        _fail(ctx, "Failed to list games", e)

    console.print_info(f"\nFound {len(games)} games:\n")
    for spec in games:
        console.print_game(spec, verbose=verbose)


@cli.command()
@click.option("-o", "--output", default=".", type=click.Path(file_okay=False, path_type=Path), help="Output directory to clean")
@click.option("--force", is_flag=True, default=False, help="Actually remove the game directories")
@click.pass_context
def clean(ctx, output, force):
    """Remove built game directories from the output directory."""
    console = get_console()
    output = output.resolve()

    if not force:
        console.print_info(f"This will remove all built games from: {output}")
        console.print_info("Use --force to skip this confirmation")
        return

    try:
        removed = clean_output(output)
    except OSError as e:
        _fail(ctx, "Clean failed", e)

    console.print_info(f"Cleaned {len(removed)} game directories")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
