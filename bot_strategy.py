# bot_strategy.py
"""
Reactive bot for the region-coloring puzzle.

After every human move the bot validates the move, repairs it when it
conflicts with a neighbor or makes the puzzle unsolvable, and otherwise
advances the game by coloring the most constrained free region itself.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Optional

from coloring_config import get_color_name
from region_graph import RegionGraph
from solve_coloring import BestColorResult, DivideAndConquerSolver, SolveResult

# Configure module logger
logger = logging.getLogger(__name__)


class MoveOutcome(Enum):
    ACCEPTED = "accepted"
    DIRECT_CONFLICT_REPAIRED = "direct_conflict_repaired"
    DIRECT_CONFLICT_UNRESOLVED = "direct_conflict_unresolved"
    FUTURE_BLOCK_REPAIRED = "future_block_repaired"
    FUTURE_BLOCK_UNRESOLVED = "future_block_unresolved"


REPAIRED_OUTCOMES = frozenset({
    MoveOutcome.DIRECT_CONFLICT_REPAIRED,
    MoveOutcome.FUTURE_BLOCK_REPAIRED,
})


@dataclass(frozen=True)
class BotMoveResult:
    """
    Immutable record of one bot reaction.

    Attributes:
        outcome: What the bot decided
        human_region: Region the human colored
        original_color: Color the human chose
        final_color: Color the region holds after the reaction
        bot_region: Region the bot colored on its own (accepted moves only)
        bot_color: Color the bot gave bot_region
        partition_a: Left half of the last top-level bisection (diagnostic)
        partition_b: Right half of the last top-level bisection (diagnostic)
        seam: Regions touched by the last top-level seam repair (diagnostic)
        used_local_fallback: True when the repair color came from the local fallback
    """
    outcome: MoveOutcome
    human_region: int
    original_color: Optional[int]
    final_color: Optional[int]
    bot_region: Optional[int] = None
    bot_color: Optional[int] = None
    partition_a: FrozenSet[int] = frozenset()
    partition_b: FrozenSet[int] = frozenset()
    seam: FrozenSet[int] = frozenset()
    used_local_fallback: bool = False

    def __post_init__(self):
        if (self.bot_region is None) != (self.bot_color is None):
            raise ValueError("bot_region and bot_color must be set together")
        if self.bot_region is not None and self.outcome is not MoveOutcome.ACCEPTED:
            raise ValueError(f"Bot move is only allowed on accepted moves, got {self.outcome.value}")
        if self.outcome not in REPAIRED_OUTCOMES:
            if self.final_color != self.original_color:
                raise ValueError(f"{self.outcome.value} must keep the original color")
            if self.used_local_fallback:
                raise ValueError(f"{self.outcome.value} cannot use a local fallback")
        elif self.final_color is None:
            raise ValueError(f"{self.outcome.value} requires a final color")

    @property
    def corrected(self) -> bool:
        return self.outcome in REPAIRED_OUTCOMES


class BotStrategy:
    """Validates, repairs and extends human moves on a RegionGraph."""

    def __init__(self, graph: RegionGraph, solver: Optional[DivideAndConquerSolver] = None):
        self.graph = graph
        self.solver = solver or DivideAndConquerSolver(graph)

    def react_to_human_move(self, region_id: int) -> BotMoveResult:
        """
        React to a human move on region_id, which the caller already colored.

        Returns:
            BotMoveResult describing the reaction
        """
        region = self.graph.region(region_id)
        human_color = region.color
        logger.info(f"Bot is checking move on region {region_id} ({get_color_name(human_color)})")

        if self.graph.in_conflict(region_id):
            logger.info(f"Conflict detected on region {region_id}, attempting to fix")
            return self._repair(
                region_id,
                human_color,
                MoveOutcome.DIRECT_CONFLICT_REPAIRED,
                MoveOutcome.DIRECT_CONFLICT_UNRESOLVED,
            )

        solution = self.solver.solve()
        if solution.solved:
            logger.info(f"Move on region {region_id} accepted")
            bot_region = self.pick_most_constrained()
            bot_color = None
            if bot_region is not None:
                bot_color = solution.assignment[bot_region]
                self.graph.region(bot_region).color = bot_color
                logger.info(f"Bot colored region {bot_region} {get_color_name(bot_color)}")
            return self._result(
                MoveOutcome.ACCEPTED, region_id, human_color, human_color, solution,
                bot_region=bot_region, bot_color=bot_color,
            )

        logger.info(f"Move on region {region_id} leads to a dead end, correcting")
        return self._repair(
            region_id,
            human_color,
            MoveOutcome.FUTURE_BLOCK_REPAIRED,
            MoveOutcome.FUTURE_BLOCK_UNRESOLVED,
            last_solve=solution,
        )

    def pick_most_constrained(self) -> Optional[int]:
        """Unlocked, uncolored region with the fewest available colors."""
        best = None
        min_avail = None
        for region in self.graph.regions:
            if region.locked or region.color is not None:
                continue
            avail = len(self.graph.available_colors(region.id))
            if min_avail is None or avail < min_avail:
                best, min_avail = region.id, avail
        return best

    def is_puzzle_solved(self) -> bool:
        for region in self.graph.regions:
            if region.color is None or self.graph.in_conflict(region.id):
                return False
        return True

    # ---------------- repair ----------------

    def _repair(
        self,
        region_id: int,
        human_color: Optional[int],
        repaired: MoveOutcome,
        unresolved: MoveOutcome,
        last_solve: Optional[SolveResult] = None,
    ) -> BotMoveResult:
        region = self.graph.region(region_id)
        region.color = None

        best: BestColorResult = self.solver.best_color_for_region(region_id)
        if best.candidates_tried or last_solve is None:
            last_solve = best.last_solve

        color = best.color
        used_fallback = False
        if color is None:
            color = self.solver.local_fallback_color(region_id)
            used_fallback = color is not None
            if used_fallback:
                logger.info(f"Used local fix for region {region_id}")

        if color is None:
            region.color = human_color
            logger.warning(f"No replacement color for region {region_id}, move left unresolved")
            return self._result(unresolved, region_id, human_color, human_color, last_solve)

        region.color = color
        logger.info(f"Corrected region {region_id} to {get_color_name(color)}")
        return self._result(
            repaired, region_id, human_color, color, last_solve,
            used_local_fallback=used_fallback,
        )

    @staticmethod
    def _result(
        outcome: MoveOutcome,
        region_id: int,
        original_color: Optional[int],
        final_color: Optional[int],
        solve: SolveResult,
        **kwargs,
    ) -> BotMoveResult:
        return BotMoveResult(
            outcome=outcome,
            human_region=region_id,
            original_color=original_color,
            final_color=final_color,
            partition_a=solve.partition_a,
            partition_b=solve.partition_b,
            seam=solve.seam,
            **kwargs,
        )
