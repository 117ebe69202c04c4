"""Corm CLI - vendor package sources into the project."""
import logging
import sys
from pathlib import Path
from typing import Optional

import click

from corm.core.config import CormConfig, ProjectLayout, load_config
from corm.core.errors import (
    CommandFailed,
    ConfigError,
    CormError,
    EnvironmentIsolationFailed,
    NoReferences,
    StagingRootMissing,
    TraversalError,
)
from corm.fetch import install as install_packages
from corm.fetch import run_tool, run_with_environment
from corm.vendor import export_vendor

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(name)s: %(message)s",
)
logger = logging.getLogger("corm")


class CormGroup(click.Group):
    """Command group that prints help and exits 1 for an unknown command."""

    def resolve_command(self, ctx, args):
        if args and self.get_command(ctx, args[0]) is None:
            click.echo(ctx.get_help())
            ctx.exit(1)
        return super().resolve_command(ctx, args)


class CliState:
    def __init__(self, project_dir: Optional[Path], config_path: Optional[Path]):
        self.project_dir = project_dir
        self.config_path = config_path

    def load(self):
        """Return (config, layout) or exit 1 with a diagnostic."""
        try:
            config = load_config(self.config_path) if self.config_path else CormConfig()
            layout = ProjectLayout.resolve(self.project_dir, config)
        except (ConfigError, EnvironmentIsolationFailed) as e:
            logger.error(str(e))
            sys.exit(1)
        return config, layout


@click.group(cls=CormGroup, invoke_without_command=True)
@click.option(
    "--project-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    envvar="CORM_PROJECT_DIR",
    help="Project root (default: current directory)",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    envvar="CORM_CONFIG",
    help="JSON configuration file",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx, project_dir: Optional[Path], config_path: Optional[Path], verbose: bool):
    """Corm - fetch packages listed in the Cormfile and export them to vendor/."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit(1)

    ctx.obj = CliState(project_dir, config_path)


@main.command()
@click.pass_obj
def install(obj: CliState):
    """Install packages from the Cormfile into the staging root.

    Individual fetch failures are logged and do not change the exit code.

    Exit codes:
        0: Success (even if some packages failed to fetch)
        1: Missing manifest, no references, or isolation failure
    """
    config, layout = obj.load()
    try:
        outcomes = install_packages(layout, config)
    except NoReferences as e:
        logger.error(str(e))
        sys.exit(1)
    except CormError as e:
        logger.error(f"Install failed: {e}")
        sys.exit(1)

    failed = [o for o in outcomes if not o.ok]
    click.echo(f"[OK] {len(outcomes) - len(failed)} fetched, {len(failed)} failed")
    for outcome in failed:
        click.echo(f"  FAILED: {outcome.reference.path}")
    sys.exit(0)


@main.command()
@click.pass_obj
def export(obj: CliState):
    """Export packages to the vendor directory.

    Exit codes:
        0: Success
        1: Staging root missing or export error
    """
    config, layout = obj.load()
    try:
        stats = export_vendor(layout, config)
    except StagingRootMissing as e:
        logger.error(str(e))
        sys.exit(1)
    except TraversalError as e:
        logger.error(f"export error: {e}")
        sys.exit(1)

    click.echo(f"[OK] Exported to {layout.vendor_root}")
    click.echo(f"  Linked: {stats.linked}")
    click.echo(f"  Skipped: {stats.skipped}")
    click.echo(f"  Pruned: {stats.pruned}")
    sys.exit(0)


@main.command(
    "exec",
    context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False},
)
@click.argument("command", nargs=-1, type=click.UNPROCESSED)
@click.pass_obj
def exec_(obj: CliState, command):
    """Exec a command with the isolated package root."""
    if not command:
        logger.error("no exec target command")
        sys.exit(1)

    config, layout = obj.load()
    try:
        run_with_environment(command, layout, config)
    except CommandFailed as e:
        logger.error(f"exec error: {e}")
        sys.exit(1)
    sys.exit(0)


def _tool_command(name: str, help_text: str):
    @main.command(
        name,
        help=help_text,
        context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False},
    )
    @click.argument("args", nargs=-1, type=click.UNPROCESSED)
    @click.pass_obj
    def command(obj: CliState, args):
        config, layout = obj.load()
        try:
            run_tool(name, args, layout, config)
        except CommandFailed as e:
            logger.error(f"{name} error: {e}")
            sys.exit(1)
        sys.exit(0)

    return command


build = _tool_command("build", "Build with vendored libraries.")
test = _tool_command("test", "Test with vendored libraries.")


if __name__ == "__main__":
    main()
