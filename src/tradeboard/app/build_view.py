"""Build one display-ready view of a strategy report.

Loads manifest -> descriptor -> view sources -> rankings, runs the pipeline
(enrich, band, gate, filter, sort) and writes the result for the page.

Usage
-----
  python run.py --strategy swing_v2 --view active
  python -m tradeboard.app.build_view --view trade_plan --gate standard --query dax

Output
------
  artifacts/views/<strategy>_<view>.csv
  artifacts/views/<strategy>_<view>.json   (rows + meta + diagnostics)

Exit codes
----------
0 = OK
1 = FAIL (descriptor missing / invalid)
2 = Not configured (manifest missing or unknown strategy)
"""

from __future__ import annotations

import argparse
import asyncio
import functools
import json
import logging
from pathlib import Path
from typing import Any, Optional, Sequence

from tradeboard._version import __build__, __version__
from tradeboard.app.load import LoadedStrategy, load_manifest, load_strategy
from tradeboard.app.pipeline import ViewResult, build_view
from tradeboard.app.session import Session
from tradeboard.common.logging_setup import setup_logging
from tradeboard.config import Settings
from tradeboard.data.io.fetch import SourceFetcher
from tradeboard.data.io.paths import views_dir
from tradeboard.data.io.safe_csv import to_csv_safely
from tradeboard.domain.classify.gates import resolve_preset
from tradeboard.errors import FetchFailure, TradeboardError
from tradeboard.presets.load import load_presets
from tradeboard.ui.views import (
    VIEWS,
    build_table,
    descriptor_links,
    get_view,
    hint_line,
    meta_line,
    rows_to_frame,
    table_title,
    to_json_records,
)

logger = logging.getLogger(__name__)


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Strategy report -> gefilterte, sortierte Ansicht")
    ap.add_argument("--data-root", default=settings.data_root, help="Ordner oder http(s)-URL der Report-Seite")
    ap.add_argument("--manifest", default=settings.manifest_path)
    ap.add_argument("--strategy", default=None, help="Strategie-ID (default: erste im Manifest)")
    ap.add_argument("--view", default="active", choices=sorted(VIEWS))
    ap.add_argument("--gate", default=settings.gate, help="Gate-Preset aus presets.json (off/loose/standard/strict)")
    ap.add_argument("--query", default="", help="Suche in Symbol/Universe")
    ap.add_argument("--sort", default=None, help="z.B. score:desc")
    ap.add_argument("--tie", action="append", default=None, help="Tie-Break, mehrfach möglich (z.B. --tie trades:desc)")
    ap.add_argument("--min-trades", type=int, default=settings.min_trades)
    ap.add_argument("--show-gated", action="store_true", help="Gate-Verlierer anzeigen statt ausblenden")
    ap.add_argument("--limit", type=int, default=20, help="Zeilen in der Konsolen-Vorschau")
    ap.add_argument("--out-dir", default=None, help="default: artifacts/views")
    return ap


async def _load(args: argparse.Namespace, settings: Settings) -> LoadedStrategy | None:
    async with SourceFetcher(args.data_root, timeout=settings.fetch_timeout, max_concurrency=settings.max_concurrency) as fetcher:
        try:
            entries = await load_manifest(fetcher, args.manifest)
        except FetchFailure as e:
            raise LookupError(f"Manifest fehlt: {e}") from e
        entry = entries[0]
        if args.strategy:
            entry = next((e for e in entries if e.id == args.strategy), None)
            if entry is None:
                known = ", ".join(e.id for e in entries)
                raise LookupError(f"Strategie {args.strategy!r} nicht im Manifest (bekannt: {known})")

        session = Session()
        loader = functools.partial(load_strategy, fetcher, stats_template=settings.stats_template)
        return await session.load(entry, loader)


def write_outputs(loaded: LoadedStrategy, result: ViewResult, out_dir: Path) -> tuple[Path, Path]:
    schema = get_view(result.view)
    df = rows_to_frame(result.rows, schema)
    stem = f"{loaded.entry.id}_{result.view}"
    csv_path = out_dir / f"{stem}.csv"
    json_path = out_dir / f"{stem}.json"

    to_csv_safely(df, csv_path)

    payload: dict[str, Any] = {
        "version": __version__,
        "meta": meta_line(loaded.descriptor),
        "title": table_title(loaded.entry.name, schema),
        "hint": hint_line(result.shown, result.total),
        "links": [{"label": label, "href": href} for label, href in descriptor_links(loaded.descriptor)],
        "view": result.view,
        "gate": result.preset,
        "gated_out": result.gated_out,
        "sort": [list(result.sort)] + [list(t) for t in result.tie_breaks],
        "columns": [{"key": c.key, "label": c.label, "numeric": c.is_numeric} for c in schema.columns],
        "rows": to_json_records(df),
        "diagnostics": loaded.diagnostics.to_dict(),
    }
    json_path.parent.mkdir(parents=True, exist_ok=True)
    json_path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
    logger.info(f"View {stem}: {len(df)} Zeilen -> {csv_path.as_posix()}")
    return csv_path, json_path


def main(argv: Optional[Sequence[str]] = None) -> int:
    settings = Settings.from_env()
    args = build_parser(settings).parse_args(argv)
    setup_logging(settings.log_path, settings.log_level)

    print(f"tradeboard {__version__} (build {__build__})")

    try:
        loaded = asyncio.run(_load(args, settings))
    except LookupError as e:
        print("❌ Not configured")
        print(" -", e)
        return 2
    except TradeboardError as e:
        print(f"❌ Report nicht ladbar: {e}")
        return 1
    if loaded is None:
        print("⚠️ Load wurde von einer neueren Auswahl überholt")
        return 1

    presets = load_presets()
    sort_cfg = presets.get("sort", {})
    preset = resolve_preset(args.gate, presets.get("gates", {}))
    schema = get_view(args.view)

    result = build_view(
        loaded.records_for(schema.name),
        schema,
        index=loaded.index,
        preset=preset,
        query=args.query,
        sort=args.sort or sort_cfg.get("default"),
        tie_breaks=args.tie if args.tie is not None else sort_cfg.get("tie_breaks"),
        min_trades=args.min_trades,
        hide_gated=not args.show_gated,
    )

    print(meta_line(loaded.descriptor))
    print(table_title(loaded.entry.name, schema))
    print(hint_line(result.shown, result.total) + (f" | Gate {preset.name}: {result.gated_out} ausgeblendet" if result.gated_out else ""))

    header = [c.label for c in schema.columns]
    print(" | ".join(header))
    for cells in build_table(result.rows[: max(0, args.limit)], schema):
        print(" | ".join(cells))

    diag = loaded.diagnostics
    for line in diag.fetch_failures:
        print("⚠️", line)

    out_dir = Path(args.out_dir) if args.out_dir else views_dir()
    csv_path, json_path = write_outputs(loaded, result, out_dir)
    print(f"✅ View geschrieben: {csv_path.as_posix()} / {json_path.name}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
