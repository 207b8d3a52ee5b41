"""
Version CLI Commands

Command-line interface for the version ledger: bump the project version,
record or check the manifest version, and inspect the version history.
"""

import asyncio
import click
import sys
from pathlib import Path
from typing import Optional

try:
    from .utils import load_config, setup_logging, build_ledger, DEFAULT_CONFIG_FILENAME
except ImportError:
    from utils import load_config, setup_logging, build_ledger, DEFAULT_CONFIG_FILENAME

from system_tools.versioning import BumpLevel, VersioningError

LEVEL_CHOICES = [level.value for level in BumpLevel]


def fail(message: str, error: Exception) -> None:
    """Print an error and exit with a non-zero status."""
    click.echo(f"❌ {message}: {error}", err=True)
    sys.exit(1)


@click.group()
@click.option('--project-root', '-r',
              type=click.Path(exists=True, file_okay=False),
              default='.',
              help='Project directory containing the manifest and reference files')
@click.option('--config', '-c',
              type=click.Path(exists=True),
              help='Configuration file path')
@click.option('--verbose', '-v',
              is_flag=True,
              help='Enable verbose logging')
@click.pass_context
def cli(ctx, project_root: str, config: Optional[str], verbose: bool):
    """Semantic version ledger and version reference synchronizer."""
    config_path = config or str(Path(project_root) / DEFAULT_CONFIG_FILENAME)
    app_config = load_config(config_path)
    if verbose:
        app_config['logging']['level'] = 'DEBUG'
    setup_logging(app_config['logging'])

    ctx.ensure_object(dict)
    ctx.obj['config'] = app_config
    ctx.obj['ledger'] = build_ledger(project_root, app_config)


@cli.group()
def version():
    """Version history and bump commands."""
    pass


@version.command()
@click.argument('level', type=click.Choice(LEVEL_CHOICES, case_sensitive=False))
@click.option('--notes', '-n',
              default='Bumped version via CLI command',
              help='Notes stored with the new history entry')
@click.pass_context
def bump(ctx, level: str, notes: str):
    """Bump the project version (major, minor, patch)."""
    ledger = ctx.obj['ledger']
    try:
        new_version = asyncio.run(ledger.increment_version(level, notes))
    except (VersioningError, OSError) as e:
        fail("Error during version bump", e)
    click.echo(f"✅ Version successfully updated to {new_version} and recorded in the log.")


@version.command()
@click.pass_context
def current(ctx):
    """Show the version in the project manifest."""
    try:
        click.echo(str(asyncio.run(ctx.obj['ledger'].get_current_version())))
    except (VersioningError, OSError) as e:
        fail("Error reading current version", e)


@version.command()
@click.pass_context
def check(ctx):
    """Reconcile the manifest version with the version log."""
    try:
        entry = asyncio.run(ctx.obj['ledger'].ensure_current_version_valid())
    except (VersioningError, OSError) as e:
        fail("Version check failed", e)
    if entry:
        click.echo(f"📝 Recorded version {entry.version} ({entry.notes})")
    else:
        click.echo("✅ Version log is up to date.")


@version.command()
@click.option('--notes', '-n', help='Notes stored with the new history entry')
@click.pass_context
def record(ctx, notes: Optional[str]):
    """Record the current manifest version in the log."""
    try:
        entry = asyncio.run(ctx.obj['ledger'].add_current_version(notes))
    except (VersioningError, OSError) as e:
        fail("Could not record version", e)
    click.echo(f"📝 Recorded version {entry.version}")


@version.command()
@click.pass_context
def history(ctx):
    """List the recorded version history."""
    try:
        entries = asyncio.run(ctx.obj['ledger'].list_history())
    except (VersioningError, OSError) as e:
        fail("Invalid version history", e)
    
    if not entries:
        click.echo("No versions recorded yet.")
        return
    
    for entry in entries:
        line = f"{str(entry.version):<12} {entry.timestamp}"
        if entry.notes:
            line += f"  {entry.notes}"
        click.echo(line)


@version.command()
@click.argument('level', type=click.Choice(LEVEL_CHOICES, case_sensitive=False))
@click.pass_context
def recommend(ctx, level: str):
    """Show the next version for a bump level without changing anything."""
    try:
        click.echo(str(asyncio.run(ctx.obj['ledger'].recommend_next_version(level))))
    except (VersioningError, OSError) as e:
        fail("Could not recommend a version", e)


def main():
    cli(obj={})


if __name__ == '__main__':
    main()
