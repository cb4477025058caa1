from __future__ import annotations
from pathlib import Path

def project_root() -> Path:
    """
    Findet den Projektroot robust, indem nach einem Marker gesucht wird.
    Marker: run.py + src/
    Funktioniert unabhängig vom Working Directory.
    Ohne Marker (installiertes Paket) ist das aktuelle Verzeichnis der Root.
    """
    here = Path(__file__).resolve()
    for p in [here] + list(here.parents):
        if (p / "run.py").exists() and (p / "src").is_dir():
            return p
    return Path.cwd()

def artifacts_dir() -> Path:
    p = project_root() / "artifacts"
    p.mkdir(parents=True, exist_ok=True)
    return p

def views_dir() -> Path:
    p = artifacts_dir() / "views"
    p.mkdir(parents=True, exist_ok=True)
    return p
