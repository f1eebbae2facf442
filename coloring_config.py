"""
Centralized Coloring Configuration Module

This module defines the solver constants, the color palette and the clue
locking ratios shared by the region-coloring solver, the bot and the puzzle
setup code.

Palette meanings:
- Colors are referred to by palette index everywhere in the solver
- Names are only used for logging and CLI output
- ``None`` is the uncolored state
"""

from typing import List, Optional

# Divide-and-conquer stops bisecting when a subproblem has at most this many
# regions and hands it to the backtracking solver
BASE_CASE_SIZE = 6

# Number of colors used when a puzzle does not say otherwise
DEFAULT_NUM_COLORS = 4

# Palette names, indexed by color index
PALETTE: List[str] = [
    "Red",
    "Green",
    "Blue",
    "Orange",
    "Purple",
    "Yellow",
]

# Random clue locking locks max(num_colors, len(regions) // CLUE_DIVISOR) regions
CLUE_DIVISOR = 5

# Shared format for CLI logging output
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def validate_num_colors(num_colors: int) -> int:
    """
    Check that a color count fits the palette.

    Args:
        num_colors: Requested number of colors

    Returns:
        The color count, unchanged

    Raises:
        ValueError: If num_colors is outside 1..len(PALETTE)
    """
    if not isinstance(num_colors, int) or num_colors < 1 or num_colors > len(PALETTE):
        raise ValueError(
            f"Invalid color count: {num_colors}. "
            f"Must be between 1 and {len(PALETTE)}"
        )
    return num_colors


def get_color_name(color: Optional[int]) -> str:
    """
    Get the display name for a color index.

    Args:
        color: Palette index, or None for uncolored

    Returns:
        Palette name, or "uncolored"

    Raises:
        ValueError: If color is not a palette index
    """
    if color is None:
        return "uncolored"
    if color < 0 or color >= len(PALETTE):
        raise ValueError(
            f"Unknown color index: {color}. "
            f"Valid indices: 0..{len(PALETTE) - 1}"
        )
    return PALETTE[color]


def get_palette(num_colors: int) -> List[str]:
    """Get the palette names used by a puzzle with num_colors colors."""
    validate_num_colors(num_colors)
    return PALETTE[:num_colors]
