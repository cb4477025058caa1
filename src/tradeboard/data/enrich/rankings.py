from __future__ import annotations

"""Ranking stats join (universe, symbol) -> RankingStats.

The rankings job writes one stats file per universe. They are fetched
independently and any of them can be missing (new universe, failed upload).
A missing file never blocks the others: it is recorded in
``missing_sources`` and those candidates simply stay without stats.

Duplicated symbols inside one file: last row wins (logged, counted).
"""

import asyncio
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Mapping, Sequence, Union

from tradeboard.config import DEFAULT_STATS_TEMPLATE
from tradeboard.data.io.tabular import parse_table
from tradeboard.data.schema.canonical import IDENTITY_COLUMNS, stats_from_mapping
from tradeboard.data.schema.records import CandidateRecord, JoinKey, RankingStats
from tradeboard.errors import TradeboardError

logger = logging.getLogger(__name__)

StatsSource = Union[Sequence[Mapping[str, Any]], BaseException]

SYMBOL_COLUMNS = ("symbol", "ticker")


@dataclass(frozen=True)
class Diagnostics:
    missing_sources: list[str] = field(default_factory=list)
    loaded_counts: dict[str, int] = field(default_factory=dict)
    duplicates: dict[str, int] = field(default_factory=dict)
    fetch_failures: list[str] = field(default_factory=list)
    view_counts: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "missing_sources": list(self.missing_sources),
            "loaded_counts": dict(self.loaded_counts),
            "duplicates": dict(self.duplicates),
            "fetch_failures": list(self.fetch_failures),
            "view_counts": dict(self.view_counts),
        }


class RankingIndex:
    """Lookup of ranking stats by JoinKey. Built once per load, read-only afterwards."""

    def __init__(self) -> None:
        self._entries: dict[JoinKey, RankingStats] = {}
        self.missing_sources: list[str] = []
        self.loaded_counts: dict[str, int] = {}
        self.duplicates: dict[str, int] = {}
        self.failure_reasons: dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def lookup(self, key: JoinKey) -> RankingStats | None:
        return self._entries.get(key)

    def diagnostics(self) -> Diagnostics:
        return Diagnostics(
            missing_sources=list(self.missing_sources),
            loaded_counts=dict(self.loaded_counts),
            duplicates=dict(self.duplicates),
            fetch_failures=[f"{u}: {r}" for u, r in self.failure_reasons.items()],
        )

    def _add_universe(self, universe: str, rows: Iterable[Mapping[str, Any]]) -> None:
        count = 0
        dupes = 0
        seen: set[JoinKey] = set()
        for row in rows:
            symbol = next((row[c] for c in SYMBOL_COLUMNS if c in row), None)
            key = JoinKey.of(universe, symbol)
            if not key.symbol:
                continue
            stats = stats_from_mapping(row) or RankingStats()
            if key in seen:
                dupes += 1
            else:
                seen.add(key)
                count += 1
            self._entries[key] = stats
        self.loaded_counts[universe] = count
        if dupes:
            self.duplicates[universe] = dupes
            logger.warning(f"⚠️ Ranking {universe}: {dupes} doppelte Symbole, letzte Zeile gewinnt")


def build_index(sources: Mapping[str, StatsSource]) -> RankingIndex:
    """Build the index from universe -> stats rows (or the exception that loading raised)."""
    index = RankingIndex()
    for universe in sorted(sources, key=str):
        src = sources[universe]
        name = str(universe).strip()
        if isinstance(src, BaseException):
            index.missing_sources.append(name)
            index.failure_reasons[name] = str(src)
            logger.warning(f"⚠️ Ranking-Quelle fehlt: {name} ({src})")
            continue
        index._add_universe(name, src)
    return index


def enrich(records: Iterable[CandidateRecord], index: RankingIndex) -> list[CandidateRecord]:
    """Return new records with ``stats`` from the index (None on miss). Input is untouched."""
    return [replace(r, stats=index.lookup(r.key)) for r in records]


def candidate_universes(records: Iterable[CandidateRecord]) -> list[str]:
    return sorted({r.key.universe for r in records if r.key.universe})


def stats_location(descriptor: Mapping[str, Any], universe: str, template: str = DEFAULT_STATS_TEMPLATE) -> str | None:
    paths = descriptor.get("paths") or {}
    rankings_dir = paths.get("rankings_dir") if isinstance(paths, Mapping) else None
    if not rankings_dir:
        return None
    suffix = descriptor.get("trend_suffix") or ""
    return template.format(rankings_dir=str(rankings_dir).rstrip("/"), universe=universe, trend_suffix=suffix)


async def _load_one(fetcher: Any, location: str) -> list[dict[str, Any]]:
    text = await fetcher.fetch_text(location)
    return parse_table(text, text_columns=IDENTITY_COLUMNS)


async def load_rankings(
    fetcher: Any,
    descriptor: Mapping[str, Any],
    universes: Sequence[str],
    template: str = DEFAULT_STATS_TEMPLATE,
) -> RankingIndex:
    """Fetch all per-universe stats files concurrently and build the index.

    Collect-errors: one failing universe ends up in ``missing_sources``,
    the others are still indexed.
    """
    if not universes:
        return RankingIndex()

    locations = {u: stats_location(descriptor, u, template) for u in universes}
    wanted = [u for u in universes if locations[u]]
    results = await asyncio.gather(
        *(_load_one(fetcher, locations[u]) for u in wanted),
        return_exceptions=True,
    )

    sources: dict[str, StatsSource] = {}
    for universe, result in zip(wanted, results):
        if isinstance(result, BaseException) and not isinstance(result, TradeboardError):
            raise result
        sources[universe] = result

    index = build_index(sources)
    for u in universes:
        if not locations[u]:
            index.missing_sources.append(u)
            index.failure_reasons[u] = "no rankings_dir in descriptor"
    logger.info(
        f"Rankings geladen: {len(index.loaded_counts)}/{len(universes)} Universen, {len(index)} Symbole"
    )
    return index
