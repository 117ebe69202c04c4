"""Pytest fixtures for corm tests."""
import sys
from pathlib import Path
from typing import Dict

import pytest

FAKE_FETCH_TOOL = '''\
import os
import sys
from pathlib import Path

root = os.environ["GOPATH"].split(os.pathsep)[0]
pkg = sys.argv[1]

with open(os.environ["FAKE_FETCH_LOG"], "a", encoding="utf-8") as log:
    log.write(pkg + "\\n")

if pkg.startswith("fail/"):
    sys.stderr.write("fetch failed: " + pkg + "\\n")
    sys.exit(1)

pkg_dir = Path(root) / "src" / pkg
(pkg_dir / ".git").mkdir(parents=True, exist_ok=True)
(pkg_dir / ".git" / "HEAD").write_text("ref: refs/heads/main\\n")
(pkg_dir / "main.txt").write_text("package " + pkg + "\\n")
'''


@pytest.fixture
def fake_fetch_tool(tmp_path: Path, monkeypatch) -> Dict[str, any]:
    """Create a stand-in for ``go get``.

    The tool writes ``<GOPATH>/src/<pkg>/main.txt`` plus a ``.git`` directory,
    appends every requested package to a log, and fails for packages whose
    path starts with ``fail/``.

    Returns dict with:
        - command: argv prefix to pass as fetch_command
        - log: Path to the call log
    """
    script = tmp_path / "fake_get.py"
    script.write_text(FAKE_FETCH_TOOL)
    log = tmp_path / "fetch_calls.log"
    log.touch()
    monkeypatch.setenv("FAKE_FETCH_LOG", str(log))

    return {
        "command": [sys.executable, str(script)],
        "log": log,
    }


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Empty project root."""
    path = tmp_path / "project"
    path.mkdir()
    return path


@pytest.fixture
def staging_tree(project_dir: Path) -> Dict[str, any]:
    """Populate ``_corm/src`` the way the fetch tool would.

    Layout:
        _corm/src/pkg/main.txt
        _corm/src/pkg/.git/HEAD
        _corm/src/pkg/.git/objects/ab/cdef
        _corm/src/pkg/sub/util.txt
        _corm/src/other/.hg/store
        _corm/src/other/lib/.svn/entries
        _corm/src/other/lib/code.txt
    """
    src = project_dir / "_corm" / "src"
    files = {
        "pkg/main.txt": "main\n",
        "pkg/.git/HEAD": "ref: refs/heads/main\n",
        "pkg/.git/objects/ab/cdef": "blob\n",
        "pkg/sub/util.txt": "util\n",
        "other/.hg/store": "store\n",
        "other/lib/.svn/entries": "entries\n",
        "other/lib/code.txt": "code\n",
    }
    for rel, content in files.items():
        path = src / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)

    return {
        "src": src,
        "vendor": project_dir / "vendor",
        "files": files,
    }
