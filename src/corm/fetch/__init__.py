"""Fetch phase: manifest reading, environment isolation and the fetch driver."""
from corm.core.errors import FetchFailed, NoReferences
from corm.fetch.environment import isolate
from corm.fetch.fetcher import (
    FetchOutcome,
    fetch_all,
    fetch_reference,
    install,
    run_tool,
    run_with_environment,
)
from corm.fetch.manifest import PackageReference, read_manifest

__all__ = [
    "FetchFailed",
    "FetchOutcome",
    "NoReferences",
    "PackageReference",
    "fetch_all",
    "fetch_reference",
    "install",
    "isolate",
    "read_manifest",
    "run_tool",
    "run_with_environment",
]
