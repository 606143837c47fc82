#!/usr/bin/env python3
"""
Export the campaign to a JSON backup, or restore one. Usage (from repo root):
  python -m kdm_tracker.scripts.backup_campaign export <backup.json> [--db]
  python -m kdm_tracker.scripts.backup_campaign import <backup.json> [--db]
Without --db the local campaign file (KDM_CAMPAIGN_FILE) is used; with --db the API database.
An import is validated first and leaves the campaign untouched when anything is wrong.
"""
import sys
from pathlib import Path

from kdm_tracker.config import CAMPAIGN_VERSION, DEFAULT_CAMPAIGN_FILE
from kdm_tracker.engine.definitions import load_monster_definitions
from kdm_tracker.engine.pipeline import CommitPipeline
from kdm_tracker.engine.store import JsonFileCampaignStore

USAGE = "Usage: python -m kdm_tracker.scripts.backup_campaign <export|import> <backup.json> [--db]"


def _store(use_db: bool):
    if use_db:
        from kdm_tracker.api.database import get_db_file_path, init_db
        from kdm_tracker.api.store import SqlCampaignStore

        init_db()
        print(f"Using database: {get_db_file_path() or 'DATABASE_URL'}")
        return SqlCampaignStore(version=CAMPAIGN_VERSION)
    print(f"Using campaign file: {DEFAULT_CAMPAIGN_FILE}")
    return JsonFileCampaignStore(DEFAULT_CAMPAIGN_FILE, version=CAMPAIGN_VERSION)


def main() -> None:
    args = [a for a in sys.argv[1:] if a != "--db"]
    use_db = "--db" in sys.argv[1:]
    if len(args) < 2 or args[0] not in ("export", "import"):
        print(USAGE, file=sys.stderr)
        sys.exit(1)
    command, backup_path = args[0], Path(args[1])

    pipeline = CommitPipeline(_store(use_db), load_monster_definitions())

    if command == "export":
        pipeline.export_campaign(backup_path)
        campaign = pipeline.read()
        print(f"Exported {len(campaign.settlements)} settlement(s) and "
              f"{len(campaign.survivors)} survivor(s) to {backup_path}")
        return

    if not backup_path.exists():
        print(f"Error: no such file: {backup_path}", file=sys.stderr)
        sys.exit(1)
    result = pipeline.import_campaign(backup_path.read_text())
    if not result.ok:
        print(f"Error: {result.message}", file=sys.stderr)
        sys.exit(2)
    print(result.message or f"Imported {backup_path}")


if __name__ == "__main__":
    main()
