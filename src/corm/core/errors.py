"""Core exception types for corm."""
from pathlib import Path
from typing import Optional


class CormError(Exception):
    """Base exception for all corm errors."""
    pass


class ConfigError(CormError):
    """Raised when a configuration file is missing or invalid."""
    pass


class ManifestNotFound(CormError):
    """Raised when the manifest file cannot be opened."""
    pass


class ManifestUnreadable(CormError):
    """Raised when the manifest was opened but could not be read."""
    pass


class ManifestLineUnparsable(CormError):
    """Raised when a single manifest line has the wrong number of fields."""

    def __init__(self, line: str):
        super().__init__(f"cannot parse line: {line}")
        self.line = line


class NoReferences(CormError):
    """Raised when there are no package references to process."""
    pass


class FetchFailed(CormError):
    """Raised when the fetch tool fails for one reference."""

    def __init__(self, path: str, cause: Exception):
        super().__init__(f"cannot fetch {path}: {cause}")
        self.path = path
        self.cause = cause


class StagingRootMissing(CormError):
    """Raised when export is requested before anything was fetched."""
    pass


class TraversalError(CormError):
    """Raised when the export walk hits a filesystem error."""

    def __init__(self, path: Path, cause: OSError):
        super().__init__(f"{path}: {cause.strerror or cause}")
        self.path = Path(path)
        self.cause = cause


class EnvironmentIsolationFailed(CormError):
    """Raised when the isolated fetch environment cannot be built."""
    pass


class CommandFailed(CormError):
    """Raised when a command run inside the isolated environment fails."""

    def __init__(self, argv, returncode: Optional[int], reason: str = ""):
        detail = reason or f"exit status {returncode}"
        super().__init__(f"{' '.join(argv)}: {detail}")
        self.argv = list(argv)
        self.returncode = returncode
