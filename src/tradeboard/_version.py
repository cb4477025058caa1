"""tradeboard._version

Single place for runtime versioning / build identification.

Printed by the CLI so it is obvious which project copy is executed
(editable installs, copied report folders, ...).
"""

from __future__ import annotations

__version__ = "0.3.0"
__build__ = "2026-10-18"
