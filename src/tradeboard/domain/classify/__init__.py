"""
Klassifikation von Kandidaten

Enthält:
- Quality Band (NA/RED/YELLOW/GREEN/STRONG) aus Score + Trades
- Admission Gates (Mindestwerte pro Metrik, Presets aus presets.json)
"""

from .quality import QualityBand, quality_band
from .gates import OFF, GatePreset, GateResult, evaluate_gate, resolve_preset

__all__ = [
    'QualityBand',
    'quality_band',
    'OFF',
    'GatePreset',
    'GateResult',
    'evaluate_gate',
    'resolve_preset',
]
