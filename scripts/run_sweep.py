"""Resolve every deletion request whose voting window has closed."""

import argparse
import asyncio
import logging

from mediavote.config import get_settings
from mediavote.database import Database
from mediavote.jobs.sweeper import ExpiredVoteSweeper
from mediavote.services.deletion import DeletionService


async def main(auto_delete: bool) -> None:
    """Run one sweep against the configured database."""
    settings = get_settings()
    if auto_delete:
        settings = settings.model_copy(update={"deletion_auto_delete_on_approval": True})

    await Database.connect()
    try:
        lifecycle = DeletionService(Database.get_db(), settings.deletion())
        result = await ExpiredVoteSweeper(lifecycle).run_once()
    finally:
        await Database.disconnect()

    if result.disabled:
        print("Deletion feature is disabled; nothing to do")
        return

    print(f"Expired requests: {result.total}")
    print(f"Resolved: {len(result.resolved)}")
    for failure in result.failed:
        print(f"Failed: {failure.request_id} ({failure.title}): {failure.error}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--auto-delete",
        action="store_true",
        help="Delete media of approved requests during this sweep",
    )
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    asyncio.run(main(args.auto_delete))
