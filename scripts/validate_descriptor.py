"""Validate the published report contract (manifest + strategy descriptors).

Lightweight gate for the publishing job: the page silently shows empty views
when a descriptor loses its paths, so check them before upload.

Usage
-----
  python scripts/validate_descriptor.py
  python scripts/validate_descriptor.py --data-root docs --manifest data/manifest.json

Options
-------
  --data-root  Folder (or http(s) URL) the manifest paths are relative to (default: docs)
  --manifest   Manifest path below data-root (default: data/manifest.json)
  --strict     Treat descriptor warnings as errors

Exit codes
----------
0 = OK
1 = FAIL
2 = Not configured (manifest missing)
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from tradeboard.data.io.fetch import SourceFetcher
from tradeboard.data.schema.contract import ContractResult, validate_descriptor, validate_manifest
from tradeboard.errors import FetchFailure, TradeboardError


async def _check(data_root: str, manifest: str) -> tuple[ContractResult, dict[str, ContractResult]]:
    async with SourceFetcher(data_root) as fetcher:
        data = await fetcher.fetch_json(manifest)
        man = validate_manifest(data)
        results: dict[str, ContractResult] = {}
        if not man.ok:
            return man, results
        for s in data["strategies"]:
            path = s["path"].strip()
            try:
                results[path] = validate_descriptor(await fetcher.fetch_json(path))
            except TradeboardError as e:
                results[path] = ContractResult(ok=False, errors=[str(e)], warnings=[])
        return man, results


def main() -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--data-root", default="docs")
    ap.add_argument("--manifest", default="data/manifest.json")
    ap.add_argument("--strict", action="store_true")
    args = ap.parse_args()

    try:
        man, results = asyncio.run(_check(args.data_root, args.manifest))
    except FetchFailure as e:
        print("❌ Not configured")
        print(" -", e)
        return 2
    except TradeboardError as e:
        print(f"❌ Manifest FAIL: {e}")
        return 1

    if not man.ok:
        print(f"❌ Manifest FAIL: {args.manifest} ({man.summary()})")
        for e in man.errors:
            print(" -", e)
        return 1
    for w in man.warnings:
        print("⚠️", w)

    failed = 0
    for path, res in results.items():
        ok = res.ok and not (args.strict and res.warnings)
        if ok:
            print(f"✅ Descriptor OK: {path} ({res.summary()})")
        else:
            failed += 1
            print(f"❌ Descriptor FAIL: {path} ({res.summary()})")
        for e in res.errors:
            print(" -", e)
        for w in res.warnings:
            print("⚠️", w)

    return 1 if failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
