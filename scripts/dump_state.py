#!/usr/bin/env python3
"""Dump the cached and remote AppState documents.

Prints a per-collection summary of the local cache snapshot and of the
shared Firestore document, the top-level fields where the two differ,
and the display identifiers the repair pass would rewrite.  Personal
data is redacted.  Nothing is written unless ``--repair`` is given.

Usage
-----
Configure through the usual environment variables and run::

    export PROPSYNC_PROJECT_ID="my-project"
    export PROPSYNC_CACHE_PATH="~/.propsync/cache.json"
    python scripts/dump_state.py

Options::

    --local-only        Skip the Firestore document
    --full              Print the whole (redacted) documents
    --json              Output as machine-readable JSON
    --repair            Persist the repair pass instead of a dry run
    -v, --verbose       DEBUG logging
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from propsync import LocalCache, PropSyncClient, PropSyncConfig, PropSyncError, repair_display_ids  # noqa: E402
from propsync._redact import redact_for_log, summarize_state  # noqa: E402
from propsync.models import AppState  # noqa: E402

# ── helpers ──────────────────────────────────────────────────


def _section(title: str) -> str:
    line = "=" * 60
    return f"\n{line}\n  {title}\n{line}"


def _changed_fields(local: dict[str, Any], remote: dict[str, Any]) -> list[str]:
    keys = set(local) | set(remote)
    return sorted(key for key in keys if local.get(key) != remote.get(key))


def _repair_report(state: AppState) -> list[dict[str, Any]]:
    return [
        {
            "collection": repair.collection,
            "id": repair.record_id,
            "old": repair.old_display_id,
            "new": repair.new_display_id,
        }
        for repair in repair_display_ids(state).repairs
    ]


async def _collect(config: PropSyncConfig, *, local_only: bool, repair: bool) -> dict[str, Any]:
    cache = LocalCache(config.cache_path, key=config.cache_key)
    local = cache.read()
    result: dict[str, Any] = {
        "cache_path": str(config.cache_path),
        "local": local.to_document(),
        "repairs": _repair_report(local),
    }
    if local_only:
        return result

    async with PropSyncClient(config, cache=cache) as client:
        remote = await client.synchronizer.remote.fetch()
        result["remote"] = remote.to_document() if remote is not None else None
        if repair:
            repaired = await client.repair()
            result["repair_write"] = repaired.write.remote if repaired.write is not None else None
    return result


def _print_text(result: dict[str, Any], *, full: bool) -> None:
    print(_section(f"Local cache ({result['cache_path']})"))
    print(json.dumps(summarize_state(result["local"]), indent=2))
    if full:
        print(json.dumps(redact_for_log(result["local"]), indent=2, ensure_ascii=False))

    if "remote" in result:
        print(_section("Remote document"))
        remote = result["remote"]
        if remote is None:
            print("  (document does not exist)")
        else:
            print(json.dumps(summarize_state(remote), indent=2))
            if full:
                print(json.dumps(redact_for_log(remote), indent=2, ensure_ascii=False))
            changed = _changed_fields(result["local"], remote)
            print(f"\n  Fields differing from cache: {', '.join(changed) or 'none'}")

    print(_section("Display id repair"))
    if not result["repairs"]:
        print("  Nothing to repair")
    for entry in result["repairs"]:
        print(f"  {entry['collection']:<13} {entry['id']:<38} {entry['old']!r} -> {entry['new']}")
    if "repair_write" in result:
        print(f"\n  Remote phase of repair write: {result['repair_write']}")


def main() -> int:
    parser = argparse.ArgumentParser(description="Dump cached and remote propsync state")
    parser.add_argument("--local-only", action="store_true", help="Skip the Firestore document")
    parser.add_argument("--full", action="store_true", help="Print whole redacted documents")
    parser.add_argument("--json", action="store_true", help="Output as JSON")
    parser.add_argument("--repair", action="store_true", help="Persist the repair pass")
    parser.add_argument("-v", "--verbose", action="store_true", help="DEBUG logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )

    try:
        config = PropSyncConfig.from_env()
        result = asyncio.run(_collect(config, local_only=args.local_only, repair=args.repair))
    except PropSyncError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(redact_for_log(result), indent=2, ensure_ascii=False))
    else:
        _print_text(result, full=args.full)
    return 0


if __name__ == "__main__":
    sys.exit(main())
