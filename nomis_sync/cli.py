"""
Operator command line for the sync engine.

Wires the Cosmos remote store and the SQLite entity store from the
environment and runs one operation.

Usage:
    export NOMIS_COSMOS_ENDPOINT="https://your-account.documents.azure.com:443/"
    export NOMIS_SQLITE_PATH="$HOME/.nomis/nomis.sqlite"

    nomis-sync full
    nomis-sync incremental
    nomis-sync delete SarnelForm 3f1c...
    nomis-sync status
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from .exceptions import NomisSyncError
from .logging_utils import configure_structured_logging
from .models import SYNC_ORDER, EntityKind
from .remote import RemoteStoreClient
from .remote.cosmos import CosmosConfig, CosmosDatabase
from .settings import SyncSettings
from .store.sqlite import SQLiteConfig, SQLiteEntityStore
from .sync import SyncConfig, SyncOrchestrator, SyncResult

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nomis-sync",
        description="Synchronize the local Nomis database with the shared remote store",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Push everything and pull everything
    nomis-sync full

    # Push everything, pull only what changed since the last sync
    nomis-sync incremental --sqlite ./nomis.sqlite

    # Remove one record from the remote store
    nomis-sync delete KilitToplamaForm 6a0c2f7e-...
        """,
    )
    parser.add_argument("--sqlite", type=Path, help="SQLite database file (default: env)")
    parser.add_argument("--settings", type=Path, help="Settings file (default: env or home)")
    parser.add_argument(
        "--read-only", action="store_true", help="Pull only; never write to the remote store"
    )
    parser.add_argument("--json-logs", action="store_true", help="Structured JSON log output")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("full", help="Full sync")
    commands.add_parser("incremental", help="Incremental sync")
    delete = commands.add_parser("delete", help="Delete one remote record")
    delete.add_argument("kind", choices=[kind.value for kind in EntityKind])
    delete.add_argument("record_id")
    commands.add_parser("status", help="Show last sync time and local record counts")
    return parser


def print_result(result: SyncResult) -> None:
    print(f"Mode: {result.mode.value if result.mode else '-'}")
    print(f"Success: {result.success}")
    print(f"Pushed: {result.pushed}  Pulled: {result.pulled}")
    print(f"Inserted: {result.inserted}  Updated: {result.updated}")
    print(f"Duration: {result.duration_ms} ms")
    for error in result.errors:
        print(f"Error: {error}")


async def run(args: argparse.Namespace) -> int:
    settings = SyncSettings(args.settings)
    sqlite_config = SQLiteConfig(db_path=args.sqlite) if args.sqlite else SQLiteConfig.from_env()
    store: SQLiteEntityStore | None = None

    try:
        store = await SQLiteEntityStore.create(sqlite_config)

        if args.command == "status":
            await settings.load()
            last = settings.last_sync.isoformat() if settings.last_sync else "never"
            print(f"Last sync: {last}")
            for kind in SYNC_ORDER:
                print(f"{kind.value}: {len(store.fetch_all(kind))}")
            return 0

        sync_config = SyncConfig.from_env()
        database = await CosmosDatabase.create(CosmosConfig.from_env())
        client = RemoteStoreClient(
            database,
            max_batch_size=sync_config.max_batch_size,
            page_size=sync_config.page_size,
        )
        orchestrator = SyncOrchestrator(
            store,
            client,
            settings=settings,
            config=sync_config,
            can_write=lambda: not args.read_only,
        )

        try:
            await orchestrator.load_state()
            if args.command == "delete":
                await orchestrator.delete_remote(args.record_id, EntityKind(args.kind))
                print(f"Deleted {args.kind}/{args.record_id}")
                return 0

            if args.command == "full":
                result = await orchestrator.perform_full_sync()
            else:
                result = await orchestrator.perform_incremental_sync()
            print_result(result)
            return 0 if result.success else 1
        finally:
            await orchestrator.close()
            await client.close()

    except NomisSyncError as e:
        logger.error(e.message, extra={"details": e.details})
        print(f"Hata: {e.message}", file=sys.stderr)
        return 1
    finally:
        if store is not None:
            await store.close()


def main() -> None:
    args = build_parser().parse_args()
    level = logging.DEBUG if args.verbose else logging.INFO
    if args.json_logs:
        configure_structured_logging(level=level)
    else:
        logging.basicConfig(
            level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
