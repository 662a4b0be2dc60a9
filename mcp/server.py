#!/usr/bin/env python3
"""MCP server exposing cursor profile sync as structured tools."""

from __future__ import annotations

import io
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Any

SCRIPT_DIR = Path(__file__).resolve().parent.parent / "scripts"
sys.path.insert(0, str(SCRIPT_DIR))

import sync_profile as sync  # noqa: E402
from mcp.server.fastmcp import FastMCP  # noqa: E402

mcp = FastMCP(
    "cursor-profile-sync",
    instructions="Apply Cursor command and rule profiles (plus AGENTS.md) to project directories.",
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


@contextmanager
def _capture_output():
    old_out, old_err = sys.stdout, sys.stderr
    sys.stdout = buf_out = io.StringIO()
    sys.stderr = buf_err = io.StringIO()
    try:
        yield buf_out, buf_err
    finally:
        sys.stdout, sys.stderr = old_out, old_err


def _decline(_question: str) -> bool:
    # No stdin over stdio transport; callers pass force=True instead.
    return False


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------


@mcp.tool()
def list_profiles() -> dict[str, Any]:
    """List the profiles available in the profiles directory."""
    return {
        "profiles": sync.available_profiles(),
        "profiles_dir": str(sync.PROFILES_DIR),
    }


@mcp.tool()
def sync_profile(
    profile: str,
    target: str,
    dry_run: bool = False,
    commands_only: bool = False,
    rules_only: bool = False,
    backup: bool = True,
    force: bool = False,
) -> dict[str, Any]:
    """Copy a profile's commands, rules, and AGENTS.md into a target project.

    If the target already has a .cursor directory the sync is aborted unless
    force is set (or dry_run, which never writes).

    Args:
        profile: Profile name (see list_profiles).
        target: Path to the target project directory.
        dry_run: Report what would be copied without writing anything.
        commands_only: Only sync .cursor/commands.
        rules_only: Only sync .cursor/rules.
        backup: Snapshot existing files into .cursor-backup-<timestamp> first.
        force: Overwrite an existing .cursor directory without confirmation.
    """
    options = sync.SyncOptions(
        dry_run=dry_run,
        commands_only=commands_only,
        rules_only=rules_only,
        backup=backup,
        force=force,
    )
    with _capture_output() as (out, _err):
        try:
            result = sync.sync_profile(profile, target, options, prompt=_decline)
        except sync.ProfileNotFound as e:
            return {
                "success": False,
                "error": str(e),
                "available_profiles": e.available,
            }
        except (sync.SyncError, OSError) as e:
            return {
                "success": False,
                "error": str(e),
                "output": out.getvalue().strip(),
            }
    return {
        "success": True,
        "aborted": result.aborted,
        "dry_run": result.dry_run,
        "backup_dir": str(result.backup_dir) if result.backup_dir else None,
        "output": out.getvalue().strip(),
    }


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    mcp.run(transport="stdio")
