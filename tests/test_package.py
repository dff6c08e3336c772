"""Tests that each public module imports cleanly on its own."""

import os
import subprocess
import sys
from pathlib import Path

import pytest


SRC_DIR = Path(__file__).resolve().parents[1] / "src"


@pytest.mark.parametrize(
    "module",
    [
        "table_sync.connectors",
        "table_sync.connectors.base",
        "table_sync.connectors.sqlite",
        "table_sync.connectors.mysql",
        "table_sync.connectors.oracle",
        "table_sync.core",
        "table_sync.core.engine",
        "table_sync.utils.display",
        "table_sync.cli",
    ],
)
def test_module_imports_first(module: str) -> None:
    """A module loaded first in a fresh interpreter imports without a cycle."""
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(
        p for p in (str(SRC_DIR), env.get("PYTHONPATH", "")) if p
    )

    result = subprocess.run(
        [sys.executable, "-c", f"import {module}"],
        env=env,
        capture_output=True,
        text=True,
    )

    assert result.returncode == 0, result.stderr
