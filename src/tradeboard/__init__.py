"""tradeboard: strategy report viewer.

Loads the published strategy artifacts (manifest, descriptor, candidate and
plan CSVs, per-universe ranking stats), joins the stats onto the candidates
and produces filtered, gated, sorted views for the page.
"""

from ._version import __version__

__all__ = ["__version__"]
