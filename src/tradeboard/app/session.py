from __future__ import annotations

"""Current selection + stale-load guard.

A user (or a caller looping over strategies) can pick a new strategy while
the previous load is still in flight. Every selection gets a fresh generation
token; a finished load is only applied if its token is still the current one.
Stale results are dropped, in-flight work is not cancelled.
"""

import itertools
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from tradeboard.app.load import LoadedStrategy, StrategyEntry
from tradeboard.errors import TradeboardError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Selection:
    strategy_id: str
    path: str
    generation: int


class Session:
    def __init__(self) -> None:
        self._tokens = itertools.count(1)
        self.current: Optional[Selection] = None
        self.loaded: Optional[LoadedStrategy] = None

    def select(self, entry: StrategyEntry) -> Selection:
        """Start a new selection; whatever was loaded before is discarded."""
        selection = Selection(strategy_id=entry.id, path=entry.path, generation=next(self._tokens))
        self.current = selection
        self.loaded = None
        return selection

    def is_current(self, selection: Selection) -> bool:
        return self.current is not None and self.current.generation == selection.generation

    def apply(self, selection: Selection, loaded: LoadedStrategy) -> bool:
        if not self.is_current(selection):
            logger.debug(
                f"verwerfe veralteten Load {selection.strategy_id} (gen {selection.generation}, "
                f"aktuell {self.current.generation if self.current else None})"
            )
            return False
        self.loaded = loaded
        return True

    async def load(
        self,
        entry: StrategyEntry,
        loader: Callable[[StrategyEntry], Awaitable[LoadedStrategy]],
    ) -> Optional[LoadedStrategy]:
        """Select ``entry``, await the loader and apply the result if still current."""
        selection = self.select(entry)
        try:
            loaded = await loader(entry)
        except TradeboardError:
            # errors of a superseded load are as stale as its results
            if not self.is_current(selection):
                return None
            raise
        return loaded if self.apply(selection, loaded) else None

