# game_session.py
"""
Single-player game session: the entry point a presentation layer calls when
the human colors a region.
"""

from __future__ import annotations

import logging
import numbers
from typing import Any, Dict, List, Optional

from bot_strategy import BotMoveResult, BotStrategy
from region_graph import RegionGraph

# Configure module logger
logger = logging.getLogger(__name__)


class LockedRegionError(ValueError):
    """Raised when a move targets a clue region."""


class GameSession:
    def __init__(self, graph: RegionGraph, bot: Optional[BotStrategy] = None):
        self.graph = graph
        self.bot = bot or BotStrategy(graph)
        self.history: List[BotMoveResult] = []

    def play(self, region_id: int, color: int) -> Optional[BotMoveResult]:
        """
        Apply a human move and let the bot react.

        Args:
            region_id: Region the human colors
            color: Palette index

        Returns:
            The bot's reaction, or None when the move itself solved the puzzle

        Raises:
            KeyError: Unknown region id
            LockedRegionError: The region is a clue
            ValueError: Color outside the palette
        """
        region = self.graph.region(region_id)
        if region.locked:
            raise LockedRegionError(f"Region {region_id} is locked")
        valid = isinstance(color, numbers.Integral) and not isinstance(color, bool)
        if not valid or color < 0 or color >= self.graph.num_colors:
            raise ValueError(f"Color {color} outside 0..{self.graph.num_colors - 1}")

        region.color = int(color)
        if self.is_solved():
            logger.info(f"Puzzle solved by move on region {region_id}")
            return None

        result = self.bot.react_to_human_move(region_id)
        self.history.append(result)
        if self.is_solved():
            logger.info("Puzzle solved")
        return result

    def is_solved(self) -> bool:
        return self.bot.is_puzzle_solved()

    def stats(self) -> Dict[str, int]:
        return self.graph.stats()

    def region_states(self) -> List[Dict[str, Any]]:
        return self.graph.region_states()
