from __future__ import annotations

"""Admission gates (Mindestqualität vor der Anzeige).

A preset is a set of per-metric minimums. Metrics are checked in a fixed
order (trades, score, pf, meanR) so tooltips and diagnostics read the same on
every run. ``off`` passes everything.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from tradeboard.data.schema.records import CandidateRecord
from tradeboard.errors import InvalidGatePreset

logger = logging.getLogger(__name__)

OFF_NAME = "off"

# (metric label, preset attribute, stats attribute, json key)
GATE_METRICS = (
    ("trades", "trades_min", "trades", "tradesMin"),
    ("score", "score_min", "score", "scoreMin"),
    ("pf", "pf_min", "pf", "pfMin"),
    ("meanR", "mean_r_min", "mean_r", "meanRMin"),
)


@dataclass(frozen=True)
class GatePreset:
    name: str
    trades_min: Optional[float] = None
    score_min: Optional[float] = None
    pf_min: Optional[float] = None
    mean_r_min: Optional[float] = None

    @property
    def is_off(self) -> bool:
        return self.name == OFF_NAME or all(getattr(self, attr) is None for _, attr, _, _ in GATE_METRICS)

    @classmethod
    def from_mapping(cls, name: str, data: Any) -> "GatePreset":
        """Parse one presets.json entry, e.g. {"tradesMin": 20, "scoreMin": 1.0}."""
        if data is None:
            data = {}
        if not isinstance(data, Mapping):
            raise InvalidGatePreset(f"Gate-Preset {name!r} muss ein Objekt sein, got {type(data).__name__}")
        known = {json_key for _, _, _, json_key in GATE_METRICS} | {"label", "description"}
        unknown = sorted(set(data) - known)
        if unknown:
            raise InvalidGatePreset(f"Gate-Preset {name!r}: unbekannte Schlüssel {unknown}")

        values: dict[str, Optional[float]] = {}
        for _, attr, _, json_key in GATE_METRICS:
            raw = data.get(json_key)
            if raw is None:
                values[attr] = None
                continue
            if isinstance(raw, bool) or not isinstance(raw, (int, float)) or math.isnan(raw):
                raise InvalidGatePreset(f"Gate-Preset {name!r}: {json_key} muss eine Zahl sein, got {raw!r}")
            values[attr] = raw
        return cls(name=name, **values)


OFF = GatePreset(name=OFF_NAME)


@dataclass(frozen=True)
class GateResult:
    passed: bool
    reasons: tuple[str, ...] = ()

    @property
    def tooltip(self) -> str:
        return "; ".join(self.reasons)


PASS = GateResult(True, ())


def _fmt_threshold(v: float) -> str:
    if isinstance(v, float) and v.is_integer():
        return str(int(v))
    return repr(v) if isinstance(v, float) else str(v)


def evaluate_gate(record: CandidateRecord, preset: Optional[GatePreset]) -> GateResult:
    if preset is None or preset.is_off:
        return PASS

    stats = record.stats
    reasons: list[str] = []
    for label, attr, stats_attr, _ in GATE_METRICS:
        threshold = getattr(preset, attr)
        if threshold is None:
            continue
        value = getattr(stats, stats_attr) if stats is not None else None
        if value is None or (isinstance(value, float) and math.isnan(value)):
            reasons.append(f"no {label}")
        elif value < threshold:
            reasons.append(f"{label} < {_fmt_threshold(threshold)}")
    return GateResult(not reasons, tuple(reasons))


def resolve_preset(name: Optional[str], presets: Mapping[str, Any]) -> GatePreset:
    """Look up a preset by name. Unknown or broken presets fail open to OFF."""
    key = (name or "").strip()
    if not key or key.lower() == OFF_NAME:
        return OFF
    if key not in presets:
        logger.warning(f"⚠️ Gate-Preset unbekannt: {key!r} -> off")
        return OFF
    try:
        return GatePreset.from_mapping(key, presets[key])
    except InvalidGatePreset as e:
        logger.warning(f"⚠️ {e} -> off")
        return OFF
