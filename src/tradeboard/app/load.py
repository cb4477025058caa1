from __future__ import annotations

"""tradeboard.app.load

Async loading of one strategy report:

  manifest.json -> descriptor (latest.json) -> view CSVs / archive snapshot
                -> per-universe ranking files -> RankingIndex

Only the manifest and the descriptor are hard requirements (they tell us what
to fetch). Every view source and every ranking file is optional: a failure
becomes a diagnostic line and the view stays empty / without stats.
"""

import asyncio
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Mapping, Optional

from tradeboard.config import DEFAULT_STATS_TEMPLATE
from tradeboard.data.enrich.rankings import Diagnostics, RankingIndex, candidate_universes, load_rankings
from tradeboard.data.io.tabular import parse_table
from tradeboard.data.schema.canonical import IDENTITY_COLUMNS, normalize_rows
from tradeboard.data.schema.contract import require, validate_descriptor, validate_manifest
from tradeboard.data.schema.records import CandidateRecord
from tradeboard.errors import TradeboardError
from tradeboard.ui.views import VIEWS, ViewSchema

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StrategyEntry:
    id: str
    name: str
    path: str


@dataclass(frozen=True)
class LoadedStrategy:
    entry: StrategyEntry
    descriptor: dict[str, Any]
    records: dict[str, list[CandidateRecord]] = field(default_factory=dict)
    index: RankingIndex = field(default_factory=RankingIndex)
    diagnostics: Diagnostics = field(default_factory=Diagnostics)

    def records_for(self, view: str) -> list[CandidateRecord]:
        return list(self.records.get(view, []))


async def load_manifest(fetcher: Any, path: str) -> list[StrategyEntry]:
    data = await fetcher.fetch_json(path)
    require(validate_manifest(data), f"manifest {path}", data)
    return [
        StrategyEntry(id=s["id"].strip(), name=str(s.get("name") or s["id"]).strip(), path=s["path"].strip())
        for s in data["strategies"]
    ]


def _dig(data: Any, keys: tuple[str, ...]) -> Any:
    for k in keys:
        if not isinstance(data, Mapping):
            return None
        data = data.get(k)
    return data


def archive_rows(archive: Any, schema: ViewSchema) -> Optional[list[dict[str, Any]]]:
    """Raw rows of one view from the archive snapshot (first matching key path)."""
    for keys in schema.archive_keys:
        rows = _dig(archive, keys)
        if isinstance(rows, list):
            return [r for r in rows if isinstance(r, Mapping)]
    return None


async def _fetch_csv(fetcher: Any, location: str) -> list[dict[str, Any]]:
    return parse_table(await fetcher.fetch_text(location), text_columns=IDENTITY_COLUMNS)


async def load_views(fetcher: Any, descriptor: Mapping[str, Any]) -> tuple[dict[str, list[dict[str, Any]]], list[str]]:
    """Fetch all view sources concurrently. Returns (raw rows per view, failures)."""
    paths = descriptor.get("paths") or {}
    csv_paths = paths.get("csv") or {}
    archive_path = paths.get("archive")

    jobs: dict[str, Any] = {}
    for schema in VIEWS.values():
        loc = csv_paths.get(schema.csv_key)
        if loc:
            jobs[schema.name] = _fetch_csv(fetcher, loc)
    if archive_path:
        jobs["__archive__"] = fetcher.fetch_json(archive_path)

    names = list(jobs)
    results = await asyncio.gather(*jobs.values(), return_exceptions=True)

    failures: list[str] = []
    loaded: dict[str, Any] = {}
    for name, result in zip(names, results):
        if isinstance(result, BaseException):
            if not isinstance(result, TradeboardError):
                raise result
            label = "archive" if name == "__archive__" else name
            failures.append(f"{label}: {result}")
            logger.warning(f"⚠️ Quelle nicht ladbar ({label}): {result}")
            continue
        loaded[name] = result

    archive = loaded.pop("__archive__", None)
    views: dict[str, list[dict[str, Any]]] = {}
    for schema in VIEWS.values():
        if schema.name in loaded:
            views[schema.name] = loaded[schema.name]
            continue
        rows = archive_rows(archive, schema) if archive is not None else None
        views[schema.name] = rows or []
    return views, failures


async def load_strategy(
    fetcher: Any,
    entry: StrategyEntry,
    *,
    stats_template: str = DEFAULT_STATS_TEMPLATE,
) -> LoadedStrategy:
    """Load descriptor, views and rankings for one strategy.

    Raises FetchFailure / ParseFailure only for the descriptor itself.
    """
    descriptor = await fetcher.fetch_json(entry.path)
    result = validate_descriptor(descriptor)
    require(result, f"descriptor {entry.path}", descriptor)
    for w in result.warnings:
        logger.info(f"descriptor {entry.path}: {w}")

    raw_views, failures = await load_views(fetcher, descriptor)
    records = {name: normalize_rows(rows) for name, rows in raw_views.items()}

    enrichable = [r for name, recs in records.items() if VIEWS[name].enrichable for r in recs]
    index = await load_rankings(fetcher, descriptor, candidate_universes(enrichable), stats_template)

    diag = index.diagnostics()
    diag = replace(
        diag,
        fetch_failures=failures + diag.fetch_failures,
        view_counts={name: len(recs) for name, recs in records.items()},
    )
    logger.info(
        f"Strategie {entry.id} geladen: "
        + ", ".join(f"{k}={v}" for k, v in diag.view_counts.items())
        + (f" | fehlende Rankings: {diag.missing_sources}" if diag.missing_sources else "")
    )
    return LoadedStrategy(entry=entry, descriptor=descriptor, records=records, index=index, diagnostics=diag)
