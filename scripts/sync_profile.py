#!/usr/bin/env python3
"""Sync a profile's Cursor commands, rules, and AGENTS.md into a target project."""

from __future__ import annotations

import argparse
import os
import shutil
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, NoReturn, Optional, Union

# ---------------------------------------------------------------------------
# Terminal colors (respects NO_COLOR and non-TTY)
# ---------------------------------------------------------------------------

_USE_COLOR = (
    sys.stdout.isatty()
    and os.environ.get("NO_COLOR") is None
    and os.environ.get("TERM") != "dumb"
)


def _ansi(code: str) -> str:
    return f"\033[{code}m" if _USE_COLOR else ""


class C:
    """ANSI escape sequences, empty strings when color is disabled."""
    RESET = _ansi("0")
    RED = _ansi("31")
    GREEN = _ansi("32")
    YELLOW = _ansi("33")
    BLUE = _ansi("34")


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

SCRIPT_DIR = Path(__file__).resolve().parent
REPO_DIR = SCRIPT_DIR.parent
PROFILES_DIR = Path(
    os.environ.get("CURSOR_PROFILES_DIR") or REPO_DIR / "profiles"
).expanduser()

CURSOR_DIR = ".cursor"
BACKUP_PREFIX = ".cursor-backup-"
AGENTS_MD = "AGENTS.md"
CONFIRM_PROMPT = "Continue and potentially overwrite? [y/N] "

FLAGS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("--dry-run",), "Show what would be done without making changes"),
    (("--commands-only",), "Only sync commands directory"),
    (("--rules-only",), "Only sync rules directory"),
    (("--no-backup",), "Don't create backup of existing files"),
    (("--force",), "Overwrite without prompting"),
    (("-h", "--help"), "Show this help message"),
)

EXAMPLES = (
    "  sync_profile.py nextjs-supabase ~/projects/my-app\n"
    "  sync_profile.py nextjs-supabase ~/projects/my-app --dry-run\n"
    "  sync_profile.py base ~/projects/my-app --commands-only"
)

# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class SyncError(Exception):
    """A user-input problem that stops the sync before anything is written."""


class ProfileNotFound(SyncError):
    def __init__(self, name: str, available: list[str]) -> None:
        super().__init__(f"Profile not found: {name}")
        self.name = name
        self.available = available


class TargetNotFound(SyncError):
    def __init__(self, path: Path) -> None:
        super().__init__(f"Target directory not found: {path}")
        self.path = path


class InvalidArgument(SyncError):
    pass


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


def log_info(msg: str) -> None:
    print(f"{C.BLUE}[INFO]{C.RESET} {msg}")


def log_success(msg: str) -> None:
    print(f"{C.GREEN}[SUCCESS]{C.RESET} {msg}")


def log_warning(msg: str) -> None:
    print(f"{C.YELLOW}[WARNING]{C.RESET} {msg}")


def log_error(msg: str) -> None:
    print(f"{C.RED}[ERROR]{C.RESET} {msg}")


def log_dry_run(msg: str) -> None:
    print(f"{C.YELLOW}[DRY-RUN]{C.RESET} Would: {msg}")


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SyncOptions:
    dry_run: bool = False
    commands_only: bool = False
    rules_only: bool = False
    backup: bool = True
    force: bool = False

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> SyncOptions:
        return cls(
            dry_run=args.dry_run,
            commands_only=args.commands_only,
            rules_only=args.rules_only,
            backup=not args.no_backup,
            force=args.force,
        )


@dataclass
class SyncResult:
    dry_run: bool
    aborted: bool = False
    backup_dir: Optional[Path] = None


class BackupSnapshot:
    """Timestamped backup directory under the target, created on first use."""

    def __init__(self, target: Path, timestamp: str) -> None:
        self.path = target / f"{BACKUP_PREFIX}{timestamp}"
        self.created = False

    def ensure(self) -> Path:
        if not self.created:
            self.path.mkdir(parents=True, exist_ok=True)
            self.created = True
        return self.path


def backup_timestamp(now: Optional[datetime] = None) -> str:
    """UTC ISO-8601 time to the second, with ':' swapped for '-'."""
    if now is None:
        now = datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S")


# ---------------------------------------------------------------------------
# Filesystem helpers
# ---------------------------------------------------------------------------


def list_entries(directory: Path) -> list[str]:
    """Sorted names of non-hidden entries; empty if the directory is unreadable."""
    try:
        return sorted(e.name for e in directory.iterdir() if not e.name.startswith("."))
    except OSError:
        return []


def has_entries(directory: Path) -> bool:
    return directory.exists() and bool(list_entries(directory))


def copy_tree(source: Path, dest: Path) -> None:
    """Merge ``source`` into ``dest``; files only present in dest are left alone.

    Directories that already exist keep their own mode and mtime.
    """
    dest.mkdir(parents=True, exist_ok=True)
    for entry in sorted(source.iterdir()):
        if entry.is_dir():
            copy_tree(entry, dest / entry.name)
        else:
            shutil.copy2(entry, dest / entry.name)


# ---------------------------------------------------------------------------
# Input resolution
# ---------------------------------------------------------------------------


def available_profiles() -> list[str]:
    if not PROFILES_DIR.is_dir():
        return []
    return sorted(
        d.name for d in PROFILES_DIR.iterdir()
        if d.is_dir() and not d.name.startswith(".")
    )


def resolve_profile(name: str) -> Path:
    path = PROFILES_DIR / name
    if not name or not path.is_dir():
        raise ProfileNotFound(name, available_profiles())
    return path


def resolve_target(raw: Union[str, Path]) -> Path:
    path = Path(os.path.expanduser(str(raw))).resolve()
    if not path.exists():
        raise TargetNotFound(path)
    return path


def confirm(prompt: str) -> bool:
    """Block on stdin; only a bare 'y' or 'Y' counts as yes."""
    try:
        answer = input(prompt)
    except EOFError:
        return False
    return answer.lower() == "y"


# ---------------------------------------------------------------------------
# Backup stage
# ---------------------------------------------------------------------------


def backup_directory(source: Path, snapshot: BackupSnapshot, name: str,
                     options: SyncOptions) -> None:
    if not has_entries(source):
        return
    dest = snapshot.path / name
    if options.dry_run:
        log_dry_run(f"Backup {source} to {dest}")
        return
    snapshot.ensure()
    copy_tree(source, dest)
    log_info(f"Backed up {source} to {dest}")


def backup_agents_md(target: Path, snapshot: BackupSnapshot, options: SyncOptions) -> None:
    agents_md = target / AGENTS_MD
    if not agents_md.is_file():
        return
    if options.dry_run:
        log_dry_run(f"Backup {AGENTS_MD} to {snapshot.path}/")
        return
    shutil.copy2(agents_md, snapshot.ensure() / AGENTS_MD)
    log_info(f"Backed up {AGENTS_MD}")


def run_backup(target: Path, snapshot: BackupSnapshot, options: SyncOptions) -> None:
    cursor_dir = target / CURSOR_DIR
    log_info("Creating backup...")
    if not options.commands_only:
        backup_directory(cursor_dir / "rules", snapshot, "rules", options)
    if not options.rules_only:
        backup_directory(cursor_dir / "commands", snapshot, "commands", options)
    backup_agents_md(target, snapshot, options)


# ---------------------------------------------------------------------------
# Sync stage
# ---------------------------------------------------------------------------


def sync_directory(source: Path, dest: Path, name: str, options: SyncOptions) -> None:
    if not source.exists():
        log_warning(f"Source {name} directory not found: {source}")
        return
    entries = list_entries(source)
    if not entries:
        log_warning(f"Source {name} directory is empty: {source}")
        return
    if options.dry_run:
        log_dry_run(f"Copy {source}/* to {dest}/")
        log_info("Files that would be copied:")
        for entry in entries:
            print(f"  - {entry}")
        return
    copy_tree(source, dest)
    log_success(f"Copied {name} to {dest}")


def sync_file(source: Path, dest: Path, name: str, options: SyncOptions) -> None:
    if options.dry_run:
        log_dry_run(f"Copy {source} to {dest}")
        return
    shutil.copy2(source, dest)
    log_success(f"Copied {name} to {dest}")


def print_banner(profile: str, target: Path, options: SyncOptions) -> None:
    print()
    log_info("Cursor Config Sync")
    log_info("==================")
    log_info(f"Profile: {profile}")
    log_info(f"Target:  {target}")
    if options.dry_run:
        log_warning("DRY RUN MODE - No changes will be made")
    print()


def sync_profile(
    profile: str,
    target: Union[str, Path],
    options: SyncOptions,
    prompt: Callable[[str], bool] = confirm,
    now: Optional[datetime] = None,
) -> SyncResult:
    """Apply ``profile`` to ``target``.

    Order of side effects: backup rules, backup commands, backup AGENTS.md,
    then sync commands, rules, AGENTS.md. Nothing is rolled back if a copy
    fails partway; the error propagates to the caller.

    Raises ProfileNotFound / TargetNotFound before anything is touched.
    """
    profile_path = resolve_profile(profile)
    target_path = resolve_target(target)
    snapshot = BackupSnapshot(target_path, backup_timestamp(now))
    cursor_dir = target_path / CURSOR_DIR
    result = SyncResult(dry_run=options.dry_run)

    print_banner(profile, target_path, options)

    if cursor_dir.exists() and not options.force and not options.dry_run:
        log_warning(f"Target already has a {CURSOR_DIR} directory")
        if not prompt(CONFIRM_PROMPT):
            log_info("Aborted by user")
            result.aborted = True
            return result

    if options.backup and cursor_dir.exists():
        run_backup(target_path, snapshot, options)

    if not options.rules_only:
        log_info("Syncing commands...")
        sync_directory(profile_path / "commands", cursor_dir / "commands", "commands", options)

    if not options.commands_only:
        log_info("Syncing rules...")
        sync_directory(profile_path / "rules", cursor_dir / "rules", "rules", options)

    if not options.commands_only and not options.rules_only:
        agents_md = profile_path / AGENTS_MD
        if agents_md.exists():
            log_info(f"Syncing {AGENTS_MD}...")
            sync_file(agents_md, target_path / AGENTS_MD, AGENTS_MD, options)

    print()
    if options.dry_run:
        log_info("Dry run complete. No changes were made.")
    else:
        log_success("Sync complete!")
        if snapshot.created:
            result.backup_dir = snapshot.path
            log_info(f"Backup saved to: {snapshot.path}")
    return result


# ---------------------------------------------------------------------------
# CLI setup
# ---------------------------------------------------------------------------


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        raise InvalidArgument(message)


def _profiles_epilog() -> str:
    names = available_profiles()
    listing = "\n".join(f"  - {n}" for n in names) if names else "  (none found)"
    return f"Available profiles:\n{listing}\n\nExamples:\n{EXAMPLES}"


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="sync_profile.py",
        usage="%(prog)s <profile> <target-project-path> [options]",
        description=(
            "Sync a profile's commands, rules, and AGENTS.md to a target project.\n\n"
            "Arguments:\n"
            "  profile              Name of the profile to sync (e.g., nextjs-supabase, base)\n"
            "  target-project-path  Path to the target project"
        ),
        epilog=_profiles_epilog(),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
        allow_abbrev=False,
    )
    parser.add_argument("positionals", nargs="*", help=argparse.SUPPRESS)
    for flags, help_text in FLAGS:
        parser.add_argument(*flags, action="store_true", help=help_text)
    return parser


def parse_args(parser: argparse.ArgumentParser,
               argv: Optional[list[str]] = None) -> argparse.Namespace:
    if argv is None:
        argv = sys.argv[1:]
    # Scan before argparse sees "--" or "--flag=value" and handles them itself.
    known = {flag for flags, _ in FLAGS for flag in flags}
    for arg in argv:
        if arg.startswith("-") and arg not in known:
            raise InvalidArgument(f"Unknown option: {arg}")
    return parser.parse_intermixed_args(argv)


def usage(parser: argparse.ArgumentParser) -> NoReturn:
    print()
    parser.print_help(sys.stdout)
    print()
    sys.exit(1)


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------


def main(argv: Optional[list[str]] = None) -> None:
    parser = build_parser()
    try:
        args = parse_args(parser, argv)
    except InvalidArgument as e:
        log_error(str(e))
        usage(parser)

    if args.help or len(args.positionals) < 2:
        usage(parser)

    profile, target = args.positionals[:2]
    options = SyncOptions.from_args(args)

    try:
        sync_profile(profile, target, options)
    except ProfileNotFound as e:
        log_error(str(e))
        print("\nAvailable profiles:")
        for name in e.available:
            print(f"  - {name}")
        sys.exit(1)
    except Exception as e:
        log_error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
