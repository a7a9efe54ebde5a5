"""Re-derive every player's cached total from its score entries.

Usage: uv run python bin/recompute-totals.py [--dry-run]

Totals that disagree with the ledger are overwritten unless --dry-run is
given, in which case they are only reported.
"""

import asyncio
import sys
from pathlib import Path

# Add backend to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "backend"))

from ledger.service import LedgerService
from shared.db import Database
from shared.logging import setup_logging
from tracker.server.settings import TrackerServerSettings


async def main() -> None:
    args = sys.argv[1:]
    if args not in ([], ["--dry-run"]):
        print(f"Usage: {sys.argv[0]} [--dry-run]")
        sys.exit(1)
    repair = not args

    setup_logging()
    db = Database(TrackerServerSettings().database_path)
    db.connect()

    try:
        service = LedgerService.for_database(db)
        checked = drifted = 0
        for game in await service.list_games():
            standings = await service.standings(game.game_id)
            for row in standings.rows:
                checked += 1
                total = await service.recompute(row.player.player_id, repair=repair)
                if total != row.player.total_score:
                    drifted += 1
                    print(f"{game.name} / {row.player.name}: cached {row.player.total_score}, ledger {total}")

        action = "repaired" if repair else "found"
        print(f"Checked {checked} players, {action} {drifted} drifted totals.")
    finally:
        db.close()


if __name__ == "__main__":
    asyncio.run(main())
