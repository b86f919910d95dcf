"""
Shared fixtures: build small file trees under tmp_path.
"""

from pathlib import Path
from typing import Dict, Union

import pytest


def write_tree(root: Path, files: Dict[str, Union[str, bytes]]) -> Path:
    """Create *files* (relative POSIX path -> content) under *root*."""
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def make_tree(tmp_path):
    def _make(files: Dict[str, Union[str, bytes]], name: str = "project") -> Path:
        root = tmp_path / name
        root.mkdir(exist_ok=True)
        return write_tree(root, files)

    return _make


@pytest.fixture
def sample_tree(make_tree):
    return make_tree(
        {
            "a.js": "const a = 1;\n",
            "test/b.js": "const b = 2;\n",
            "c.ts": "let c: number = 3;\n",
            "Makefile": "all:\n\techo hi\n",
            "src/lib/util.js": "export const util = () => 42;\n",
        }
    )
