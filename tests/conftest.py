"""Shared fixtures for sync_profile tests."""

from __future__ import annotations

import argparse
import importlib.util
import sys
from pathlib import Path
from typing import Any, Optional

import pytest

# ---------------------------------------------------------------------------
# Load the script as a module (not in a package).
# Register in sys.modules so all test files share the SAME instance.
# ---------------------------------------------------------------------------

_SCRIPT = Path(__file__).parent.parent / "scripts" / "sync_profile.py"

if "sync_profile" not in sys.modules:
    _spec = importlib.util.spec_from_file_location("sync_profile", _SCRIPT)
    _mod = importlib.util.module_from_spec(_spec)
    sys.modules["sync_profile"] = _mod
    _spec.loader.exec_module(_mod)

mod = sys.modules["sync_profile"]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def profiles_root(tmp_path, monkeypatch):
    """Point PROFILES_DIR at an empty temp directory."""
    root = tmp_path / "profiles"
    root.mkdir()
    monkeypatch.setattr(mod, "PROFILES_DIR", root)
    return root


@pytest.fixture
def target(tmp_path):
    project = tmp_path / "project"
    project.mkdir()
    return project


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def make_profile(
    root: Path,
    name: str = "base",
    commands: Optional[dict[str, str]] = None,
    rules: Optional[dict[str, str]] = None,
    agents_md: Optional[str] = None,
) -> Path:
    """Create a profile directory. Keys may contain '/' for nested files."""
    profile = root / name
    profile.mkdir(parents=True, exist_ok=True)
    for sub, files in (("commands", commands), ("rules", rules)):
        if files is None:
            continue
        (profile / sub).mkdir(exist_ok=True)
        for rel, content in files.items():
            path = profile / sub / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
    if agents_md is not None:
        (profile / "AGENTS.md").write_text(agents_md)
    return profile


def seed_cursor(
    project: Path,
    commands: Optional[dict[str, str]] = None,
    rules: Optional[dict[str, str]] = None,
    agents_md: Optional[str] = None,
) -> Path:
    """Create a pre-existing .cursor directory (and AGENTS.md) in a target."""
    cursor = project / ".cursor"
    cursor.mkdir(exist_ok=True)
    for sub, files in (("commands", commands), ("rules", rules)):
        if files is None:
            continue
        (cursor / sub).mkdir(exist_ok=True)
        for rel, content in files.items():
            path = cursor / sub / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
    if agents_md is not None:
        (project / "AGENTS.md").write_text(agents_md)
    return cursor


def snapshot_tree(root: Path) -> dict[str, str]:
    """Map of relative path -> content for every file under root."""
    if not root.exists():
        return {}
    return {
        str(p.relative_to(root)): p.read_text()
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }


def backups(project: Path) -> list[Path]:
    return sorted(project.glob(".cursor-backup-*"))


def make_options(**overrides: Any):
    return mod.SyncOptions(**overrides)


def make_args(**overrides: Any) -> argparse.Namespace:
    """Create an argparse.Namespace with the CLI's defaults."""
    defaults: dict[str, Any] = {
        "positionals": [],
        "dry_run": False,
        "commands_only": False,
        "rules_only": False,
        "no_backup": False,
        "force": False,
        "help": False,
    }
    defaults.update(overrides)
    return argparse.Namespace(**defaults)


def answer(reply: bool):
    """Confirmation provider that records each question it was asked."""
    asked: list[str] = []

    def _prompt(question: str) -> bool:
        asked.append(question)
        return reply

    _prompt.asked = asked
    return _prompt
