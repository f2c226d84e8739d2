#!/usr/bin/env python3
"""Snapshot Backup Utility.

Lists and rotates the JSON registry snapshots written by the API.

Usage:
    python scripts/backup.py [--list] [--keep N] [--name NAME]

Options:
    --list        List available snapshots
    --keep N      Keep only N most recent snapshots per registry (default: 10)
    --name NAME   Only touch one registry (chains, assets, baskets, mints, ...)
    --dir DIR     Backup directory (default: BACKUP_DIR or ~/.basket-enhanced)
"""

import argparse
import os
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv

from bskt.backup import list_snapshots, rotate_snapshots

load_dotenv()

REGISTRIES = [
    "chains",
    "assets",
    "baskets",
    "mints",
    "multichain-assets",
    "multichain-baskets",
    "multichain-mints",
]


def show_snapshots(backup_dir: Path, name: str | None = None):
    """List snapshots, newest first."""
    snapshots = list_snapshots(backup_dir, name)

    if not snapshots:
        print("No snapshots found.")
        return

    print(f"Available snapshots ({len(snapshots)} total):")
    print("-" * 72)

    for snapshot in snapshots:
        size = snapshot.stat().st_size / 1024  # KB
        mtime = datetime.fromtimestamp(snapshot.stat().st_mtime)
        print(f"  {snapshot.name}  {size:.1f} KB  {mtime.strftime('%Y-%m-%d %H:%M:%S')}")


def rotate(backup_dir: Path, keep: int, name: str | None = None) -> int:
    """Keep the `keep` newest snapshots of each registry."""
    removed = 0
    for registry in [name] if name else REGISTRIES:
        for old in rotate_snapshots(backup_dir, registry, keep):
            print(f"Removing old snapshot: {old.name}")
            removed += 1
    return removed


def main():
    parser = argparse.ArgumentParser(description="Snapshot Backup Utility")
    parser.add_argument("--keep", type=int, default=10,
                        help="Keep only N most recent snapshots per registry")
    parser.add_argument("--list", action="store_true",
                        help="List available snapshots")
    parser.add_argument("--name", type=str, choices=REGISTRIES,
                        help="Only this registry")
    parser.add_argument("--dir", type=Path,
                        default=Path(os.getenv("BACKUP_DIR", str(Path.home() / ".basket-enhanced"))),
                        help="Backup directory")

    args = parser.parse_args()
    backup_dir = args.dir.expanduser()

    if args.list:
        show_snapshots(backup_dir, args.name)
    else:
        removed = rotate(backup_dir, args.keep, args.name)
        print(f"Removed {removed} snapshots, keeping {args.keep} most recent per registry")


if __name__ == "__main__":
    main()
