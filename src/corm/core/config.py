"""Configuration model and on-disk project layout."""
import json
import logging
from enum import Enum
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from corm.core.errors import ConfigError, EnvironmentIsolationFailed

logger = logging.getLogger(__name__)

DEFAULT_MANIFEST_NAME = "Cormfile"
DEFAULT_STAGING_DIR = "_corm"
DEFAULT_VENDOR_DIR = "vendor"


class EnvPolicy(str, Enum):
    """How the staging root is combined with an existing package root."""

    EXCLUSIVE = "exclusive"
    PREPEND = "prepend"


class CormConfig(BaseModel):
    """Tool configuration.

    Defaults reproduce the classic layout: a ``Cormfile`` in the project
    root, the fetch tool's private root at ``_corm`` and the clean export
    at ``vendor``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    manifest_name: str = Field(default=DEFAULT_MANIFEST_NAME, description="Manifest file name")
    staging_dir: str = Field(default=DEFAULT_STAGING_DIR, description="Staging root directory name")
    vendor_dir: str = Field(default=DEFAULT_VENDOR_DIR, description="Vendor directory name")
    env_var: str = Field(default="GOPATH", description="Variable the fetch tool resolves its root from")
    env_policy: EnvPolicy = Field(default=EnvPolicy.EXCLUSIVE)
    fetch_command: List[str] = Field(default_factory=lambda: ["go", "get"])
    tool: str = Field(default="go", description="Tool wrapped by build and test")
    vcs_dirs: List[str] = Field(default_factory=lambda: [".git", ".hg", ".svn"])

    @field_validator("manifest_name", "staging_dir", "vendor_dir")
    @classmethod
    def validate_segment(cls, v: str) -> str:
        """Ensure layout names are single, non-empty path segments."""
        if not v or v in (".", "..") or "/" in v or "\\" in v:
            raise ValueError(f"must be a single path segment; got '{v}'")
        return v

    @field_validator("env_var", "tool")
    @classmethod
    def validate_nonempty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be empty")
        return v

    @field_validator("fetch_command")
    @classmethod
    def validate_fetch_command(cls, v: List[str]) -> List[str]:
        if not v or not v[0]:
            raise ValueError("fetch_command must name an executable")
        return v


def load_config(path: Path) -> CormConfig:
    """Load a JSON configuration file.

    Raises:
        ConfigError: If the file is missing, not JSON, or fails validation
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise ConfigError(f"Config file not found: {path}")
    except (OSError, ValueError) as e:
        raise ConfigError(f"Invalid config file {path}: {e}")

    if not isinstance(data, dict):
        raise ConfigError(f"Invalid config file {path}: expected a JSON object")

    try:
        config = CormConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config file {path}: {e}")

    logger.debug(f"Loaded config from {path}")
    return config


class ProjectLayout(BaseModel):
    """Absolute paths shared by the fetch and export phases."""

    model_config = ConfigDict(frozen=True)

    project_dir: Path
    manifest_path: Path
    staging_root: Path
    vendor_root: Path

    @property
    def staging_src(self) -> Path:
        """Source subtree the fetch tool populates inside the staging root."""
        return self.staging_root / "src"

    @classmethod
    def resolve(
        cls,
        project_dir: Optional[Path] = None,
        config: Optional[CormConfig] = None,
    ) -> "ProjectLayout":
        """Compute the layout for ``project_dir`` (default: working directory).

        Raises:
            EnvironmentIsolationFailed: If the working directory is unavailable
        """
        config = config or CormConfig()
        if project_dir is None:
            try:
                project_dir = Path.cwd()
            except OSError as e:
                raise EnvironmentIsolationFailed(f"cannot get current directory: {e}")

        project_dir = Path(project_dir).absolute()
        return cls(
            project_dir=project_dir,
            manifest_path=project_dir / config.manifest_name,
            staging_root=project_dir / config.staging_dir,
            vendor_root=project_dir / config.vendor_dir,
        )
