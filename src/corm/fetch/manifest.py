"""Manifest model: package references read from the Cormfile."""
import logging
from pathlib import Path
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from corm.core.errors import ManifestLineUnparsable, ManifestNotFound, ManifestUnreadable

logger = logging.getLogger(__name__)


class PackageReference(BaseModel):
    """One manifest entry: a package path plus an optional revision pin.

    The pin is recorded but not yet applied when fetching.
    """

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "path": "github.com/user/project",
                "pin": "v1.2.3",
            }
        },
    )

    path: str = Field(..., description="Package path handed to the fetch tool")
    pin: str = Field(default="", description="Revision or commit, empty when unpinned")

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Ensure path is a single non-empty token."""
        if not v or len(v.split()) != 1:
            raise ValueError(f"path must be a single non-empty token; got '{v}'")
        return v

    @field_validator("pin")
    @classmethod
    def validate_pin(cls, v: str) -> str:
        if v and len(v.split()) != 1:
            raise ValueError(f"pin must not contain whitespace; got '{v}'")
        return v

    @property
    def has_pin(self) -> bool:
        return bool(self.pin)

    @classmethod
    def parse_line(cls, line: str) -> "PackageReference":
        """Parse ``<path>`` or ``<path> <pin>``.

        Raises:
            ManifestLineUnparsable: If the line does not have 1 or 2 fields
        """
        fields = line.split()
        if len(fields) == 1:
            return cls(path=fields[0])
        if len(fields) == 2:
            return cls(path=fields[0], pin=fields[1])
        raise ManifestLineUnparsable(line)


def read_manifest(path: Path) -> List[PackageReference]:
    """Read package references from a manifest file.

    Empty lines are ignored. Any other line with the wrong number of fields
    (including a whitespace-only line) is reported and skipped; it does not invalidate the rest of the file.

    Args:
        path: Manifest file

    Returns:
        References in manifest order (possibly empty)

    Raises:
        ManifestNotFound: If the file cannot be opened
        ManifestUnreadable: If reading fails part way
    """
    path = Path(path)
    try:
        f = open(path, encoding="utf-8")
    except OSError as e:
        raise ManifestNotFound(f"cannot open {path.name}: {e}")

    refs = []
    with f:
        try:
            for line in f:
                line = line.rstrip("\r\n")
                if line == "":
                    continue
                try:
                    refs.append(PackageReference.parse_line(line))
                except ManifestLineUnparsable as e:
                    logger.warning(f"SKIPPED: {e}")
        except (OSError, UnicodeDecodeError) as e:
            raise ManifestUnreadable(f"cannot read {path.name}: {e}")

    logger.debug(f"Read {len(refs)} references from {path}")
    return refs
