"""Fetch driver: run the fetch tool once per reference in the isolated environment."""
import logging
import subprocess
from typing import Callable, List, Mapping, Optional, Sequence

from pydantic import BaseModel, Field

from corm.core.config import CormConfig, ProjectLayout
from corm.core.errors import CommandFailed, EnvironmentIsolationFailed, FetchFailed, NoReferences
from corm.fetch.environment import isolate
from corm.fetch.manifest import PackageReference, read_manifest

logger = logging.getLogger(__name__)


class FetchOutcome(BaseModel):
    """Result of fetching one reference."""

    reference: PackageReference
    ok: bool
    error: Optional[str] = Field(default=None, description="Failure message when ok is False")


def fetch_reference(
    ref: PackageReference,
    env: Mapping[str, str],
    command: Sequence[str] = ("go", "get"),
) -> None:
    """Run ``command <path>`` for a single reference.

    The subprocess inherits stdout and stderr so its progress is visible.

    Raises:
        FetchFailed: If the tool cannot be started or exits non-zero
    """
    argv = [*command, ref.path]
    logger.info(" ".join(argv))

    if ref.has_pin:
        # TODO: check out ref.pin once pin resolution semantics are agreed on
        logger.info(f"Pin {ref.pin} for {ref.path} is recorded but not applied")

    try:
        subprocess.run(argv, env=dict(env), check=True)
    except subprocess.CalledProcessError as e:
        raise FetchFailed(ref.path, e)
    except OSError as e:
        raise FetchFailed(ref.path, e)


def fetch_all(
    refs: Sequence[PackageReference],
    env: Mapping[str, str],
    command: Sequence[str] = ("go", "get"),
    runner: Callable[..., None] = fetch_reference,
) -> List[FetchOutcome]:
    """Fetch every reference, continuing past individual failures.

    Args:
        refs: References in manifest order
        env: Isolated environment for the fetch tool
        command: Fetch tool argv prefix
        runner: Callable performing one fetch (injectable for tests)

    Returns:
        One outcome per reference, in order

    Raises:
        NoReferences: If refs is empty; nothing is attempted
    """
    if not refs:
        raise NoReferences("no references in manifest")

    outcomes = []
    for ref in refs:
        try:
            runner(ref, env, command)
        except FetchFailed as e:
            logger.error(f"cannot fetch {ref.path}: {e.cause}")
            outcomes.append(FetchOutcome(reference=ref, ok=False, error=str(e.cause)))
        else:
            outcomes.append(FetchOutcome(reference=ref, ok=True))

    failed = sum(1 for o in outcomes if not o.ok)
    logger.info(f"Fetched {len(outcomes) - failed}/{len(outcomes)} references")
    return outcomes


def isolated_env(layout: ProjectLayout, config: CormConfig) -> dict:
    """Build the fetch tool environment for a project."""
    return isolate(
        layout.staging_root,
        policy=config.env_policy,
        env_var=config.env_var,
    )


def install(
    layout: ProjectLayout,
    config: Optional[CormConfig] = None,
    runner: Callable[..., None] = fetch_reference,
) -> List[FetchOutcome]:
    """Read the manifest and fetch every reference into the staging root.

    Raises:
        ManifestNotFound / ManifestUnreadable: If the manifest cannot be read
        NoReferences: If the manifest has no valid references
        EnvironmentIsolationFailed: If the environment cannot be built
    """
    config = config or CormConfig()

    refs = read_manifest(layout.manifest_path)
    if not refs:
        raise NoReferences(f"no references in {layout.manifest_path.name}")

    env = isolated_env(layout, config)
    try:
        layout.staging_root.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise EnvironmentIsolationFailed(f"cannot create staging root {layout.staging_root}: {e}")

    logger.info(f"Fetching {len(refs)} references into {layout.staging_root}")
    return fetch_all(refs, env, config.fetch_command, runner=runner)


def run_with_environment(
    argv: Sequence[str],
    layout: ProjectLayout,
    config: Optional[CormConfig] = None,
) -> None:
    """Run an arbitrary command with the isolated environment applied.

    stdin, stdout and stderr are inherited.

    Raises:
        CommandFailed: If the command cannot be started or exits non-zero
    """
    if not argv:
        raise CommandFailed([], None, "no exec target command")

    config = config or CormConfig()
    env = isolated_env(layout, config)

    logger.debug(f"exec {' '.join(argv)}")
    try:
        result = subprocess.run(list(argv), env=env)
    except OSError as e:
        raise CommandFailed(argv, None, str(e))

    if result.returncode != 0:
        raise CommandFailed(argv, result.returncode)


def run_tool(
    subcommand: str,
    args: Sequence[str],
    layout: ProjectLayout,
    config: Optional[CormConfig] = None,
) -> None:
    """Run ``<tool> <subcommand> ARGS`` (e.g. ``go build``) in the isolated environment."""
    config = config or CormConfig()
    run_with_environment([config.tool, subcommand, *args], layout, config)
