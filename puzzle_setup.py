"""
Puzzle Setup Module

Loads region-coloring puzzles from YAML and locks clue regions.

A puzzle file names the color count, the ASCII region map, optional explicit
clues (region label -> color index) and optional random clue locking:

    colors: 4
    board:
      regions: |
        AABB
        ACCB
    clues:
      A: 0
    random_clues:
      seed: 7
"""

import logging
import os
import random
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, Field, field_validator

from coloring_config import CLUE_DIVISOR, DEFAULT_NUM_COLORS, PALETTE, validate_num_colors
from region_graph import RegionGraph, parse_region_map, regions_from_grid
from solve_coloring import DivideAndConquerSolver

# Configure module logger
logger = logging.getLogger(__name__)


# =============================================================================
# Pydantic Models for Puzzle Specification
# =============================================================================

class BoardConfig(BaseModel):
    """Configuration for the puzzle board layout."""
    regions: str = Field(description="ASCII region map, one label per cell; '#' or '.' is empty")


class RandomClues(BaseModel):
    """Random clue locking applied after explicit clues."""
    seed: Optional[int] = Field(default=None, description="Seed for reproducible clue selection")


class PuzzleSpec(BaseModel):
    """Complete puzzle specification."""
    colors: int = Field(default=DEFAULT_NUM_COLORS, ge=1, le=len(PALETTE), description="Palette size")
    board: BoardConfig
    clues: Dict[str, int] = Field(default_factory=dict, description="Region label -> locked color index")
    random_clues: Optional[RandomClues] = None

    @field_validator('clues', mode='before')
    @classmethod
    def coerce_clue_labels(cls, v: Any) -> Any:
        # YAML loads unquoted digit keys as ints
        if isinstance(v, dict):
            return {str(label): color for label, color in v.items()}
        return v

    @field_validator('clues')
    @classmethod
    def validate_clue_labels(cls, v: Dict[str, int]) -> Dict[str, int]:
        for label in v:
            if len(label) != 1:
                raise ValueError(f"Clue label must be a single character, got {label!r}")
        return v


# =============================================================================
# Loading
# =============================================================================

def parse_puzzle_spec(source: Union[str, Path]) -> PuzzleSpec:
    """
    Parse a puzzle from a YAML file path or YAML text.

    Raises:
        FileNotFoundError: If a path-like source does not exist
        ValueError: If the YAML does not describe a puzzle
    """
    if isinstance(source, Path):
        text = source.read_text(encoding="utf-8")
    elif "\n" not in source and (os.path.isfile(source) or source.lower().endswith((".yaml", ".yml"))):
        text = Path(source).read_text(encoding="utf-8")
    else:
        text = source

    data = yaml.safe_load(text)
    if not isinstance(data, dict):
        raise ValueError("Puzzle YAML must be a mapping")
    return PuzzleSpec(**data)


def build_puzzle(spec: PuzzleSpec) -> RegionGraph:
    """Build the region graph for a validated spec and lock its clues."""
    grid, labels = parse_region_map(spec.board.regions)
    graph = RegionGraph(regions_from_grid(grid, labels), grid, spec.colors)

    apply_clues(graph, spec.clues)
    if spec.random_clues is not None:
        lock_initial_regions(graph, random.Random(spec.random_clues.seed))

    logger.info(
        f"Loaded puzzle: {len(graph.regions)} regions, {graph.num_colors} colors, "
        f"{graph.stats()['locked']} clues"
    )
    return graph


def load_puzzle(source: Union[str, Path]) -> RegionGraph:
    """Load a puzzle from a YAML file path or YAML text."""
    return build_puzzle(parse_puzzle_spec(source))


# =============================================================================
# Clue locking
# =============================================================================

def apply_clues(graph: RegionGraph, clues: Dict[str, int]) -> List[int]:
    """
    Lock regions named by label with the given colors.

    Raises:
        KeyError: If a label is not on the map
        ValueError: If a color is out of range or two clues collide
    """
    locked = []
    for label, color in clues.items():
        region = graph.region_by_label(label)
        if color < 0 or color >= graph.num_colors:
            raise ValueError(f"Clue {label!r} has color {color} outside 0..{graph.num_colors - 1}")
        region.color = color
        region.locked = True
        locked.append(region.id)

    for rid in locked:
        if graph.in_conflict(rid):
            raise ValueError(f"Clue {graph.region(rid).label!r} conflicts with a neighboring clue")
    return locked


def lock_initial_regions(graph: RegionGraph, rng: Optional[random.Random] = None) -> List[int]:
    """
    Randomly lock clue regions with colors legal against their neighbors.

    First tries to place one clue of each color, then keeps locking random
    regions until max(num_colors, len(regions) // CLUE_DIVISOR) are locked.
    Regions that are already colored or locked are skipped.

    Args:
        graph: Puzzle graph, modified in place
        rng: Random source (seed it for reproducible puzzles)

    Returns:
        Ids of the newly locked regions, in locking order
    """
    rng = rng or random.Random()
    num_colors = validate_num_colors(graph.num_colors)
    target = max(num_colors, len(graph.regions) // CLUE_DIVISOR)

    avail = [r.id for r in graph.regions if not r.locked and r.color is None]
    rng.shuffle(avail)

    def locked_count() -> int:
        return sum(1 for r in graph.regions if r.locked)

    newly_locked = []
    for color in range(num_colors):
        if not avail:
            break
        rid = avail.pop(0)
        if color in graph.available_colors(rid):
            region = graph.region(rid)
            region.color = color
            region.locked = True
            newly_locked.append(rid)

    while avail and locked_count() < target:
        rid = avail.pop(0)
        ok = sorted(graph.available_colors(rid))
        if ok:
            region = graph.region(rid)
            region.color = rng.choice(ok)
            region.locked = True
            newly_locked.append(rid)

    logger.debug(f"Locked {len(newly_locked)} random clue regions (target {target})")

    if not DivideAndConquerSolver(graph).solve().solved:
        logger.warning("Random clues leave the puzzle without a complete coloring")
    return newly_locked
