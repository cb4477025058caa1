from __future__ import annotations

import asyncio
import json

import pytest

from tradeboard.app.load import LoadedStrategy, StrategyEntry, load_manifest, load_strategy
from tradeboard.app.session import Session
from tradeboard.data.io.fetch import SourceFetcher
from tradeboard.data.schema.records import JoinKey, RankingStats
from tradeboard.errors import FetchFailure, ParseFailure
from tradeboard.presets.apply import filter_rows

ENTRY = StrategyEntry(id="swing", name="Swing v2", path="data/swing/latest.json")


@pytest.mark.asyncio
async def test_load_strategy_from_report_dir(report_dir) -> None:
    async with SourceFetcher(report_dir) as fetcher:
        [entry] = await load_manifest(fetcher, "data/manifest.json")
        loaded = await load_strategy(fetcher, entry)

    assert entry == ENTRY
    assert [r.symbol for r in loaded.records_for("active")] == ["ABC", "XYZ", "NEW"]
    assert loaded.records_for("edge") == []
    assert loaded.records_for("position_plan") == []

    [plan] = loaded.records_for("trade_plan")
    assert plan.hold == "3-10d"
    assert plan.shares == 10
    assert plan.stats == RankingStats(trades=30, score=2.1, mean_r=0.12, pf=1.4)

    assert loaded.index.lookup(JoinKey("dax", "XYZ")).trades == 40
    diag = loaded.diagnostics
    assert diag.missing_sources == ["sp500"]
    assert diag.loaded_counts == {"dax": 2}
    assert diag.view_counts == {"active": 3, "edge": 0, "trade_plan": 1, "position_plan": 0}
    assert len(diag.fetch_failures) == 1
    assert diag.fetch_failures[0].startswith("sp500: ")


@pytest.mark.asyncio
async def test_csv_wins_over_archive_and_broken_archive_is_diagnostic(fake_fetcher) -> None:
    descriptor = {
        "strategy": "swing",
        "paths": {"csv": {"candidates_active": "a.csv"}, "archive": "archive.json"},
    }
    fetcher = fake_fetcher(
        {
            "latest.json": json.dumps(descriptor),
            "a.csv": "universe,symbol\ndax,ABC\n",
            "archive.json": "{broken",
        }
    )
    loaded = await load_strategy(fetcher, StrategyEntry("swing", "Swing", "latest.json"))

    assert [r.symbol for r in loaded.records_for("active")] == ["ABC"]
    assert loaded.records_for("trade_plan") == []
    assert any(f.startswith("archive: ") for f in loaded.diagnostics.fetch_failures)
    # no rankings_dir: the universe counts as missing
    assert loaded.diagnostics.missing_sources == ["dax"]


@pytest.mark.asyncio
async def test_archive_fills_views_without_csv(fake_fetcher) -> None:
    descriptor = {"strategy": "swing", "paths": {"archive": "archive.json"}}
    archive = {"candidates": {"active": [{"universe": "dax", "symbol": "ABC"}, "junk"]}, "edge": [{"symbol": "E"}]}
    fetcher = fake_fetcher({"latest.json": json.dumps(descriptor), "archive.json": json.dumps(archive)})

    loaded = await load_strategy(fetcher, StrategyEntry("swing", "Swing", "latest.json"))

    assert [r.symbol for r in loaded.records_for("active")] == ["ABC"]
    assert [r.symbol for r in loaded.records_for("edge")] == ["E"]


@pytest.mark.asyncio
async def test_leading_zero_symbols_survive_load(fake_fetcher) -> None:
    descriptor = {
        "strategy": "swing",
        "paths": {"csv": {"candidates_active": "a.csv"}, "rankings_dir": "rankings"},
    }
    fetcher = fake_fetcher(
        {
            "latest.json": json.dumps(descriptor),
            "a.csv": "universe,symbol,buy\nkospi,005930,71000\n",
            "rankings/kospi.csv": "symbol,trades,score\n005930,25,1.5\n",
        }
    )
    loaded = await load_strategy(fetcher, StrategyEntry("swing", "Swing", "latest.json"))

    [rec] = loaded.records_for("active")
    assert rec.symbol == "005930"
    assert filter_rows([rec], "0059") == [rec]
    assert loaded.index.lookup(rec.key).trades == 25


@pytest.mark.asyncio
async def test_invalid_descriptor_raises(fake_fetcher) -> None:
    fetcher = fake_fetcher({"latest.json": json.dumps({"asof": "2026-10-16"})})
    with pytest.raises(ParseFailure):
        await load_strategy(fetcher, StrategyEntry("swing", "Swing", "latest.json"))


@pytest.mark.asyncio
async def test_missing_descriptor_raises(fake_fetcher) -> None:
    with pytest.raises(FetchFailure):
        await load_strategy(fake_fetcher({}), ENTRY)


@pytest.mark.asyncio
async def test_manifest_contract_enforced(fake_fetcher) -> None:
    fetcher = fake_fetcher({"m.json": json.dumps({"strategies": [{"id": "x"}]})})
    with pytest.raises(ParseFailure, match="missing required field: path"):
        await load_manifest(fetcher, "m.json")


def test_session_apply_discards_stale() -> None:
    session = Session()
    first = session.select(StrategyEntry("a", "A", "a.json"))
    second = session.select(StrategyEntry("b", "B", "b.json"))

    assert second.generation > first.generation
    assert not session.apply(first, LoadedStrategy(entry=StrategyEntry("a", "A", "a.json"), descriptor={}))
    assert session.loaded is None

    loaded_b = LoadedStrategy(entry=StrategyEntry("b", "B", "b.json"), descriptor={})
    assert session.apply(second, loaded_b)
    assert session.loaded is loaded_b


@pytest.mark.asyncio
async def test_session_late_result_is_dropped() -> None:
    session = Session()
    release = asyncio.Event()
    entry_a = StrategyEntry("a", "A", "a.json")
    entry_b = StrategyEntry("b", "B", "b.json")

    async def slow(entry):
        await release.wait()
        return LoadedStrategy(entry=entry, descriptor={})

    async def fast(entry):
        return LoadedStrategy(entry=entry, descriptor={})

    task_a = asyncio.create_task(session.load(entry_a, slow))
    await asyncio.sleep(0)

    result_b = await session.load(entry_b, fast)
    release.set()
    result_a = await task_a

    assert result_a is None
    assert result_b is not None
    assert session.loaded is result_b
    assert session.current.strategy_id == "b"


@pytest.mark.asyncio
async def test_session_errors() -> None:
    session = Session()
    release = asyncio.Event()

    async def failing_late(entry):
        await release.wait()
        raise FetchFailure(entry.path, "HTTP 500")

    async def failing(entry):
        raise FetchFailure(entry.path, "HTTP 404")

    async def fast(entry):
        return LoadedStrategy(entry=entry, descriptor={})

    task = asyncio.create_task(session.load(StrategyEntry("a", "A", "a.json"), failing_late))
    await asyncio.sleep(0)
    await session.load(StrategyEntry("b", "B", "b.json"), fast)
    release.set()
    # superseded: the error is as stale as a result would be
    assert await task is None

    with pytest.raises(FetchFailure):
        await session.load(StrategyEntry("c", "C", "c.json"), failing)
