from __future__ import annotations

"""Structural contract for manifest.json and the per-strategy descriptor.

The tabular parser is lenient; these two JSON documents are not.
A missing ``paths`` object or strategy id means the loader cannot even decide
what to fetch, so those are errors. Cosmetic fields (asof, generated) are
warnings only.
"""

import json
from dataclasses import dataclass, field
from typing import Any

from tradeboard.errors import ParseFailure

CSV_KEYS = ("candidates_active", "candidates_edge", "trade_plan", "position_plan")


@dataclass
class ContractResult:
    ok: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def summary(self) -> str:
        if self.ok:
            w = f" (warnings={len(self.warnings)})" if self.warnings else ""
            return f"OK{w}"
        return f"FAIL (errors={len(self.errors)}, warnings={len(self.warnings)})"


def parse_json(text: str, what: str) -> Any:
    """json.loads with a bounded excerpt of the offending text on failure."""
    if text.startswith("\ufeff"):
        text = text[1:]
    try:
        return json.loads(text)
    except ValueError as e:
        raise ParseFailure(f"{what}: invalid JSON ({e})", text) from e


def _is_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def validate_manifest(data: Any) -> ContractResult:
    errors: list[str] = []
    warnings: list[str] = []

    if not isinstance(data, dict):
        return ContractResult(False, [f"manifest must be an object, got {type(data).__name__}"], [])

    strategies = data.get("strategies")
    if not isinstance(strategies, list):
        errors.append("missing required field: strategies (list)")
        return ContractResult(False, errors, warnings)
    if not strategies:
        errors.append("strategies: empty list")

    seen: set[str] = set()
    for i, s in enumerate(strategies):
        if not isinstance(s, dict):
            errors.append(f"strategies[{i}]: must be an object, got {type(s).__name__}")
            continue
        if not _is_str(s.get("id")):
            errors.append(f"strategies[{i}]: missing required field: id")
        elif s["id"] in seen:
            warnings.append(f"strategies[{i}]: duplicate id {s['id']!r}")
        else:
            seen.add(s["id"])
        if not _is_str(s.get("path")):
            errors.append(f"strategies[{i}]: missing required field: path")
        if not _is_str(s.get("name")):
            warnings.append(f"strategies[{i}]: no name, id is shown instead")

    return ContractResult(not errors, errors, warnings)


def strategy_id(descriptor: dict[str, Any]) -> str | None:
    for key in ("strategy", "strategy_id"):
        v = descriptor.get(key)
        if _is_str(v):
            return v.strip()
    return None


def validate_descriptor(data: Any) -> ContractResult:
    errors: list[str] = []
    warnings: list[str] = []

    if not isinstance(data, dict):
        return ContractResult(False, [f"descriptor must be an object, got {type(data).__name__}"], [])

    if strategy_id(data) is None:
        errors.append("missing required field: strategy (or strategy_id)")

    paths = data.get("paths")
    if not isinstance(paths, dict):
        errors.append("missing required field: paths (object)")
    else:
        csv = paths.get("csv")
        if csv is not None and not isinstance(csv, dict):
            errors.append(f"paths.csv must be an object, got {type(csv).__name__}")
        elif not csv and not _is_str(paths.get("archive")):
            warnings.append("neither paths.csv nor paths.archive set: all views will be empty")
        elif isinstance(csv, dict):
            unknown = sorted(set(csv) - set(CSV_KEYS))
            if unknown:
                warnings.append(f"paths.csv: unknown keys ignored {unknown}")
        if not _is_str(paths.get("rankings_dir")):
            warnings.append("paths.rankings_dir not set: candidates stay without stats")

    if not _is_str(data.get("asof")):
        warnings.append("missing optional field: asof")
    if not any(_is_str(data.get(k)) for k in ("generated", "generated_utc")):
        warnings.append("missing optional field: generated")

    return ContractResult(not errors, errors, warnings)


def require(result: ContractResult, what: str, source: Any) -> None:
    """Raise ParseFailure (with an excerpt of the document) if the contract failed."""
    if result.ok:
        return
    try:
        text = json.dumps(source, ensure_ascii=False)
    except (TypeError, ValueError):
        text = repr(source)
    raise ParseFailure(f"{what}: " + "; ".join(result.errors), text)
