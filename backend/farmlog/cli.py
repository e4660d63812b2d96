"""Management CLI for data export/import.

Usage:
    python -m farmlog.cli init-db                          # Create missing tables
    python -m farmlog.cli export-json USER [PATH]          # Snapshot to file/stdout
    python -m farmlog.cli export-csv USER [PATH]           # Crop table to file/stdout
    python -m farmlog.cli import-json USER PATH [--replace]
    python -m farmlog.cli stats USER                       # Dashboard figures
"""

import asyncio
import json
import sys
from pathlib import Path

from farmlog.services.scheduler import build_backend
from farmlog.services.statistics import compute_statistics
from farmlog.services.transfer import dump_snapshot, export_tabular, import_snapshot
from farmlog.store.kinds import EntityKind
from farmlog.store.service import FarmStore
from farmlog.usercontext import validate_user_id

USAGE = "Usage: python -m farmlog.cli [init-db|export-json|export-csv|import-json|stats] ..."


async def open_store(user_id: str) -> FarmStore:
    store = FarmStore(await build_backend(), validate_user_id(user_id))
    await store.initialize()
    return store


async def close_store(store: FarmStore) -> None:
    await store.dispose()
    await store.backend.close()


def _write(text: str, path: str | None, encoding: str = "utf-8") -> None:
    if path:
        Path(path).write_text(text, encoding=encoding)
        print(f"  Wrote {path}")
    else:
        sys.stdout.write(text)


async def init_db():
    from farmlog.database import init_models

    await init_models()
    print("  Tables ready")


async def export_json(user_id: str, path: str | None = None):
    store = await open_store(user_id)
    try:
        _write(dump_snapshot(store.snapshot()), path)
    finally:
        await close_store(store)


async def export_csv(user_id: str, path: str | None = None):
    store = await open_store(user_id)
    try:
        _write(export_tabular(store.query(EntityKind.CROP)), path)
    finally:
        await close_store(store)


async def import_json(user_id: str, path: str, replace: bool = False):
    snapshot = import_snapshot(Path(path).read_bytes())
    store = await open_store(user_id)
    try:
        summary = await store.import_data(snapshot, replace=replace)
    finally:
        await close_store(store)
    print(
        f"  Imported {summary.crops} crops, {summary.growth_records} growth records, "
        f"{summary.tasks} tasks, {summary.farm_areas} farm areas"
    )


async def stats(user_id: str):
    store = await open_store(user_id)
    try:
        figures = compute_statistics(store.crops, store.tasks)
    finally:
        await close_store(store)
    print(json.dumps(figures.model_dump(by_alias=True), indent=2))


def main(argv: list[str]) -> int:
    cmd = argv[0] if argv else ""
    args = [a for a in argv[1:] if not a.startswith("--")]
    flags = {a for a in argv[1:] if a.startswith("--")}

    if cmd == "init-db":
        asyncio.run(init_db())
    elif cmd == "export-json" and args:
        asyncio.run(export_json(*args[:2]))
    elif cmd == "export-csv" and args:
        asyncio.run(export_csv(*args[:2]))
    elif cmd == "import-json" and len(args) >= 2:
        asyncio.run(import_json(args[0], args[1], replace="--replace" in flags))
    elif cmd == "stats" and args:
        asyncio.run(stats(args[0]))
    else:
        print(USAGE)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
