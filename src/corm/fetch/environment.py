"""Isolated fetch environment.

The fetch tool resolves its package root from an environment variable
(``GOPATH`` by default). ``isolate`` builds a fresh mapping pointing that
variable at the staging root; it is handed to a single subprocess call and
``os.environ`` is left untouched.
"""
import logging
import os
from pathlib import Path
from typing import Dict, Mapping, Optional

from corm.core.config import EnvPolicy
from corm.core.errors import EnvironmentIsolationFailed

logger = logging.getLogger(__name__)


def isolate(
    staging_root: Path,
    base_env: Optional[Mapping[str, str]] = None,
    policy: EnvPolicy = EnvPolicy.EXCLUSIVE,
    env_var: str = "GOPATH",
) -> Dict[str, str]:
    """Return a copy of ``base_env`` with ``env_var`` redirected to ``staging_root``.

    Under ``EXCLUSIVE`` any prior value is discarded, so packages already in
    the caller's global root are fetched again into the staging root. Under
    ``PREPEND`` the prior value follows the staging root after
    ``os.pathsep``; the fetch tool writes to the first entry.

    Args:
        staging_root: Private root for the fetch tool
        base_env: Environment to start from (default: ``os.environ``)
        policy: Exclusive or prepend override
        env_var: Variable to override

    Returns:
        New environment mapping

    Raises:
        EnvironmentIsolationFailed: If staging_root is not an absolute path
    """
    staging_root = Path(staging_root)
    if not staging_root.is_absolute():
        raise EnvironmentIsolationFailed(
            f"staging root must be absolute; got '{staging_root}'"
        )

    env = dict(os.environ if base_env is None else base_env)
    value = str(staging_root)

    if EnvPolicy(policy) is EnvPolicy.PREPEND:
        prior = env.get(env_var, "")
        if prior:
            value = f"{value}{os.pathsep}{prior}"

    env[env_var] = value
    logger.debug(f"{env_var}={value}")
    return env
