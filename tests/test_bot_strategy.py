"""
Unit tests for the bot_strategy module.

Tests for the reactive bot:
- BotMoveResult: field combination checks
- react_to_human_move: accepted, direct-conflict and future-blocking moves
- pick_most_constrained / is_puzzle_solved
"""

import pytest
import sys
import os

# Add parent directory to path to import bot_strategy module
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from bot_strategy import BotMoveResult, BotStrategy, MoveOutcome
from region_graph import RegionGraph

A, B, C, D, E = 0, 1, 2, 3, 4


# ============================================================================
# Fixtures
# ============================================================================

def lock(graph, region_id, color):
    graph.region(region_id).color = color
    graph.region(region_id).locked = True


@pytest.fixture
def path_abc():
    """4 colors, path A-B-C."""
    return RegionGraph.from_region_map("ABC", num_colors=4)


TRIANGLE_MAP = """
AAB
ACB
CCB
"""


# ============================================================================
# Tests for BotMoveResult
# ============================================================================

class TestBotMoveResult:
    """Tests for the BotMoveResult record."""

    def test_accepted_with_bot_move(self):
        """Test a valid accepted record."""
        result = BotMoveResult(MoveOutcome.ACCEPTED, 1, 2, 2, bot_region=3, bot_color=0)
        assert not result.corrected

    def test_repaired_is_corrected(self):
        """Test both repaired outcomes count as corrected."""
        for outcome in (MoveOutcome.DIRECT_CONFLICT_REPAIRED, MoveOutcome.FUTURE_BLOCK_REPAIRED):
            assert BotMoveResult(outcome, 1, 0, 2).corrected

    def test_bot_fields_go_together(self):
        """Test bot_region without bot_color is rejected."""
        with pytest.raises(ValueError, match="together"):
            BotMoveResult(MoveOutcome.ACCEPTED, 1, 2, 2, bot_region=3)

    def test_bot_move_only_when_accepted(self):
        """Test a repaired move cannot carry a bot move."""
        with pytest.raises(ValueError, match="accepted"):
            BotMoveResult(MoveOutcome.DIRECT_CONFLICT_REPAIRED, 1, 0, 2, bot_region=3, bot_color=1)

    def test_unresolved_keeps_color(self):
        """Test unresolved moves must restore the human color."""
        with pytest.raises(ValueError, match="original color"):
            BotMoveResult(MoveOutcome.FUTURE_BLOCK_UNRESOLVED, 1, 0, 2)

    def test_repaired_needs_final_color(self):
        """Test repaired moves must end colored."""
        with pytest.raises(ValueError, match="final color"):
            BotMoveResult(MoveOutcome.DIRECT_CONFLICT_REPAIRED, 1, 0, None)

    def test_is_immutable(self):
        """Test the record is frozen."""
        result = BotMoveResult(MoveOutcome.ACCEPTED, 1, 2, 2)
        with pytest.raises(AttributeError):
            result.final_color = 3


# ============================================================================
# Tests for react_to_human_move
# ============================================================================

class TestDirectConflict:
    """Human moves that collide with a neighbor."""

    def test_conflict_with_clue_is_repaired(self, path_abc):
        """Test B=0 next to clue A=0 is corrected away from 0."""
        lock(path_abc, A, 0)
        path_abc.region(B).color = 0
        result = BotStrategy(path_abc).react_to_human_move(B)

        assert result.outcome is MoveOutcome.DIRECT_CONFLICT_REPAIRED
        assert result.corrected
        assert result.human_region == B
        assert result.original_color == 0
        assert result.final_color == 1
        assert path_abc.region(B).color == 1
        assert result.bot_region is None
        assert not result.used_local_fallback

    def test_repair_avoids_colored_neighbors(self, path_abc):
        """Test the replacement differs from both neighbors."""
        lock(path_abc, A, 0)
        path_abc.region(C).color = 1
        path_abc.region(B).color = 0
        result = BotStrategy(path_abc).react_to_human_move(B)

        assert result.outcome is MoveOutcome.DIRECT_CONFLICT_REPAIRED
        assert result.final_color not in (0, 1)
        assert not path_abc.conflicting_regions()

    def test_unresolved_restores_color(self):
        """Test a one-color palette leaves the move unresolved."""
        graph = RegionGraph.from_region_map("AB", num_colors=1)
        graph.region(A).color = 0
        graph.region(B).color = 0
        result = BotStrategy(graph).react_to_human_move(B)

        assert result.outcome is MoveOutcome.DIRECT_CONFLICT_UNRESOLVED
        assert not result.corrected
        assert result.final_color == result.original_color == 0
        assert graph.region(B).color == 0

    def test_local_fallback_when_no_global_fix(self):
        """Test the local fallback is used when no color completes the puzzle."""
        graph = RegionGraph.from_region_map(TRIANGLE_MAP, num_colors=2)
        graph.region(B).color = 0
        graph.region(A).color = 0
        result = BotStrategy(graph).react_to_human_move(A)

        assert result.outcome is MoveOutcome.DIRECT_CONFLICT_REPAIRED
        assert result.used_local_fallback
        assert result.final_color == 1
        assert not graph.in_conflict(A)


class TestAcceptedMove:
    """Human moves that keep the puzzle solvable."""

    def test_completing_move_is_accepted(self, path_abc):
        """Test A=0, C=1 clues with B=2 is accepted and solved."""
        lock(path_abc, A, 0)
        lock(path_abc, C, 1)
        path_abc.region(B).color = 2
        bot = BotStrategy(path_abc)
        result = bot.react_to_human_move(B)

        assert result.outcome is MoveOutcome.ACCEPTED
        assert not result.corrected
        assert result.final_color == 2
        assert result.bot_region is None
        assert result.bot_color is None
        assert bot.is_puzzle_solved()

    def test_bot_colors_most_constrained_region(self):
        """Test the bot colors the free region with fewest options."""
        graph = RegionGraph.from_region_map("ABCD", num_colors=4)
        lock(graph, A, 0)
        graph.region(B).color = 1
        result = BotStrategy(graph).react_to_human_move(B)

        assert result.outcome is MoveOutcome.ACCEPTED
        assert result.bot_region == C
        assert result.bot_color == 0
        assert graph.region(C).color == 0
        assert graph.region(D).color is None
        assert not graph.conflicting_regions()

    def test_diagnostics_from_solver(self):
        """Test the top-level bisection is reported on the result."""
        graph = RegionGraph.from_region_map("ABCDEFGHI", num_colors=4)
        graph.region(A).color = 0
        result = BotStrategy(graph).react_to_human_move(A)

        assert result.outcome is MoveOutcome.ACCEPTED
        assert result.partition_a | result.partition_b == frozenset(range(1, 9))
        assert not result.partition_a & result.partition_b


class TestFutureBlockingMove:
    """Locally legal human moves that make the puzzle unsolvable."""

    def test_blocking_move_is_repaired(self):
        """Test C=0 between clues A=1 and E=1 is corrected to 1."""
        graph = RegionGraph.from_region_map("ABCDE", num_colors=2)
        lock(graph, A, 1)
        lock(graph, E, 1)
        graph.region(C).color = 0
        result = BotStrategy(graph).react_to_human_move(C)

        assert result.outcome is MoveOutcome.FUTURE_BLOCK_REPAIRED
        assert result.corrected
        assert result.original_color == 0
        assert result.final_color == 1
        assert graph.region(C).color == 1
        assert not result.used_local_fallback

    def test_fallback_on_unsolvable_puzzle(self):
        """Test an unsolvable puzzle still gets a locally legal color."""
        graph = RegionGraph.from_region_map(TRIANGLE_MAP, num_colors=2)
        graph.region(A).color = 1
        result = BotStrategy(graph).react_to_human_move(A)

        assert result.outcome is MoveOutcome.FUTURE_BLOCK_REPAIRED
        assert result.used_local_fallback
        assert result.final_color == 0


# ============================================================================
# Tests for helpers
# ============================================================================

class TestHelpers:
    """Tests for pick_most_constrained and is_puzzle_solved."""

    def test_pick_none_when_all_colored(self, path_abc):
        """Test the bot has no move on a full board."""
        for rid, color in ((A, 0), (B, 1), (C, 0)):
            path_abc.region(rid).color = color
        assert BotStrategy(path_abc).pick_most_constrained() is None

    def test_pick_skips_locked(self, path_abc):
        """Test locked regions are never picked."""
        path_abc.region(A).locked = True
        path_abc.region(B).color = 2
        assert BotStrategy(path_abc).pick_most_constrained() == C

    def test_pick_ties_in_region_order(self, path_abc):
        """Test ties resolve to the first region."""
        assert BotStrategy(path_abc).pick_most_constrained() == A

    def test_solved_requires_all_colored(self, path_abc):
        """Test an incomplete board is not solved."""
        path_abc.region(A).color = 0
        assert not BotStrategy(path_abc).is_puzzle_solved()

    def test_solved_requires_no_conflict(self, path_abc):
        """Test a full but conflicting board is not solved."""
        for rid, color in ((A, 0), (B, 0), (C, 1)):
            path_abc.region(rid).color = color
        assert not BotStrategy(path_abc).is_puzzle_solved()
