from __future__ import annotations

import pytest

from tradeboard.data.schema.contract import parse_json, require, validate_descriptor, validate_manifest
from tradeboard.errors import EXCERPT_LIMIT, FetchFailure, ParseFailure


def test_manifest_ok() -> None:
    res = validate_manifest({"strategies": [{"id": "swing", "name": "Swing", "path": "data/swing/latest.json"}]})
    assert res.ok
    assert res.summary() == "OK"


def test_manifest_errors_and_warnings() -> None:
    res = validate_manifest(
        {"strategies": [{"id": "a", "path": "a.json"}, {"id": "a", "path": "b.json", "name": "B"}, {"name": "x"}]}
    )
    assert not res.ok
    assert res.errors == ["strategies[2]: missing required field: id", "strategies[2]: missing required field: path"]
    assert "strategies[0]: no name, id is shown instead" in res.warnings
    assert "strategies[1]: duplicate id 'a'" in res.warnings


def test_manifest_without_strategies() -> None:
    assert not validate_manifest({}).ok
    assert not validate_manifest([]).ok
    assert validate_manifest({"strategies": []}).errors == ["strategies: empty list"]


def test_descriptor_ok_with_warnings() -> None:
    res = validate_descriptor({"strategy_id": "swing", "paths": {"csv": {"candidates_active": "a.csv", "extra": "x"}}})
    assert res.ok
    assert "paths.csv: unknown keys ignored ['extra']" in res.warnings
    assert "paths.rankings_dir not set: candidates stay without stats" in res.warnings
    assert "missing optional field: asof" in res.warnings
    assert "missing optional field: generated" in res.warnings


def test_descriptor_required_fields() -> None:
    res = validate_descriptor({"asof": "2026-10-16"})
    assert not res.ok
    assert res.errors == ["missing required field: strategy (or strategy_id)", "missing required field: paths (object)"]

    res = validate_descriptor({"strategy": "s", "paths": {"csv": ["a.csv"]}})
    assert res.errors == ["paths.csv must be an object, got list"]


def test_descriptor_without_sources_warns() -> None:
    res = validate_descriptor({"strategy": "s", "paths": {}})
    assert res.ok
    assert "neither paths.csv nor paths.archive set: all views will be empty" in res.warnings


def test_parse_json_strips_bom() -> None:
    assert parse_json('\ufeff{"a": 1}', "x") == {"a": 1}


def test_parse_json_excerpt_is_bounded() -> None:
    text = "{" + "x" * 1000
    with pytest.raises(ParseFailure) as exc:
        parse_json(text, "data/swing/latest.json")
    assert len(exc.value.excerpt) == EXCERPT_LIMIT
    assert exc.value.excerpt.endswith("…")
    assert "data/swing/latest.json: invalid JSON" in str(exc.value)


def test_require_raises_with_document_excerpt() -> None:
    data = {"paths": {}}
    with pytest.raises(ParseFailure) as exc:
        require(validate_descriptor(data), "descriptor latest.json", data)
    assert exc.value.message.startswith("descriptor latest.json: missing required field: strategy")
    assert exc.value.excerpt == '{"paths": {}}'


def test_fetch_failure_text() -> None:
    err = FetchFailure("data/rankings/sp500.csv", "HTTP 404")
    assert str(err) == "data/rankings/sp500.csv: HTTP 404"
    assert err.location == "data/rankings/sp500.csv"
