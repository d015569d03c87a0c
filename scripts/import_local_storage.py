"""
Import review state exported from the browser build's localStorage.

The browser kept every card state in one JSON blob ('gilead_sm2_states')
and the per-week counters in another ('gilead_review_progress'). This
script splits the blob into one store entry per card and adds the
imported counters onto whatever progress is already stored.

Export format (values may be JSON strings, as localStorage holds them,
or already-parsed objects):

    {
        "gilead_sm2_states": {"<card_id>": {"repetition": 2, ...}, ...},
        "gilead_review_progress": {"1": 14, "2": 3}
    }

Usage:
    python -m scripts.import_local_storage export.json [--backend sql] [--dry-run]
"""

from __future__ import annotations

import argparse
import json
from dataclasses import dataclass
from pathlib import Path

from gilead.sm2.card_state import from_dict
from gilead.sm2.constants import LEGACY_PROGRESS_KEY, LEGACY_STATES_KEY
from gilead.sm2.progress import ReviewProgress
from gilead.sm2.state_store import CardStateStore, ProgressStore
from gilead.sm2.storage import KeyValueStore, get_store


@dataclass
class ImportSummary:
    imported: int = 0
    skipped: int = 0
    failed: int = 0
    weeks: int = 0


def _unwrap(value):
    """localStorage values are strings; exports may already be parsed."""
    if isinstance(value, str):
        return json.loads(value)
    return value


def import_export(export: dict, store: KeyValueStore, dry_run: bool = False) -> ImportSummary:
    """
    Write an exported localStorage snapshot into the state store.

    Args:
        export: Parsed export file
        store: Destination storage backend
        dry_run: If True, validate only and write nothing

    Returns:
        ImportSummary with per-card counts
    """
    summary = ImportSummary()
    card_states = CardStateStore(store)

    states = _unwrap(export.get(LEGACY_STATES_KEY)) or {}
    for card_id, raw in states.items():
        try:
            state = from_dict(raw)
        except (KeyError, TypeError, ValueError, OverflowError) as e:
            summary.skipped += 1
            print(f"  ⚠ Skipping {card_id}: {e}")
            continue

        if dry_run or card_states.put(card_id, state):
            summary.imported += 1
        else:
            summary.failed += 1
            print(f"  ✗ Could not save {card_id}")

    raw_progress = export.get(LEGACY_PROGRESS_KEY)
    if raw_progress is not None:
        if not isinstance(raw_progress, str):
            raw_progress = json.dumps(raw_progress)
        imported = ReviewProgress.from_json(raw_progress)
        if imported is None:
            print("  ⚠ Skipping malformed review progress")
        else:
            summary.weeks = len(imported.counts)
            if not dry_run and not ProgressStore(store).add(imported.counts):
                print("  ✗ Could not save review progress")

    return summary


def main():
    parser = argparse.ArgumentParser(description="Import browser review state into the state store")
    parser.add_argument("export_file", type=Path, help="JSON export of localStorage")
    parser.add_argument(
        "--backend",
        choices=["sql", "mongo"],
        help="Storage backend (default: REVIEW_STORE_BACKEND or sql)"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate the export without writing anything"
    )

    args = parser.parse_args()

    export = json.loads(args.export_file.read_text(encoding="utf-8"))
    summary = import_export(export, get_store(args.backend), dry_run=args.dry_run)

    print(f"\n{'='*60}")
    print("Import complete!")
    print(f"{'='*60}")
    print(f"Card states imported:  {summary.imported}")
    print(f"Malformed, skipped:    {summary.skipped}")
    print(f"Write failures:        {summary.failed}")
    print(f"Progress weeks:        {summary.weeks}")

    if args.dry_run:
        print("\n⚠ DRY RUN MODE - Nothing was written")


if __name__ == "__main__":
    main()
