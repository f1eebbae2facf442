# region_graph.py
"""
Region/graph model for the region-coloring puzzle.

Holds the regions of a partitioned grid, their colors and clue (locked) state,
and the region adjacency relation derived from 4-directional grid contiguity.
The model answers read queries only; callers write ``Region.color`` directly
and are responsible for respecting the locked flag.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional, Sequence, Set, Tuple

import numpy as np

from coloring_config import DEFAULT_NUM_COLORS, validate_num_colors

# Configure module logger
logger = logging.getLogger(__name__)

Coord = Tuple[int, int]  # (row, col)
Assignment = Dict[int, Optional[int]]

# Map characters that mark grid positions with no cell
HOLE_CHARS = ("#", ".")


@dataclass
class Region:
    """
    A colorable group of grid cells.

    Attributes:
        id: Stable region identifier
        color: Palette index, or None when uncolored
        locked: True for pre-colored clue regions
        cells: Grid cells owned by the region (display only)
        label: Character used for the region in an ASCII map, if any

    The id never changes once set. The locked flag is written only while a
    puzzle is being set up.
    """
    id: int
    color: Optional[int] = None
    locked: bool = False
    cells: FrozenSet[Coord] = field(default_factory=frozenset)
    label: Optional[str] = None

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "id" and "id" in self.__dict__:
            raise AttributeError("Region id is immutable")
        super().__setattr__(name, value)

    @property
    def is_colored(self) -> bool:
        return self.color is not None

    def centroid(self) -> Tuple[float, float]:
        """Mean (row, col) of the region's cells, (0.0, 0.0) when it has none."""
        if not self.cells:
            return (0.0, 0.0)
        coords = np.array(sorted(self.cells), dtype=np.float64)
        row, col = coords.mean(axis=0)
        return (float(row), float(col))


def parse_region_map(text: str) -> Tuple[np.ndarray, List[str]]:
    """
    Parse an ASCII region map into a grid of region ids.

    One character per cell. '#' and '.' mark holes; every other character is
    a region label. Ids are assigned in order of first appearance, row-major.

    Args:
        text: Multi-line ASCII map

    Returns:
        (grid, labels) where grid holds region ids (-1 for holes) and
        labels[id] is the character of region id
    """
    lines = [line.rstrip() for line in text.splitlines() if line.strip() != ""]
    if not lines:
        raise ValueError("Region map is empty")

    width = len(lines[0])
    label_ids: Dict[str, int] = {}
    grid = np.full((len(lines), width), -1, dtype=np.int64)

    for r, line in enumerate(lines):
        if len(line) != width:
            raise ValueError(
                f"Line length mismatch at row {r}: expected {width}, got {len(line)}"
            )
        for c, ch in enumerate(line):
            if ch in HOLE_CHARS:
                continue
            if ch.isspace():
                raise ValueError(f"Region label missing at ({r},{c})")
            if ch not in label_ids:
                label_ids[ch] = len(label_ids)
            grid[r, c] = label_ids[ch]

    labels = list(label_ids.keys())
    return grid, labels


def build_region_adjacency(grid: Any) -> Dict[int, Set[int]]:
    """
    Build the region adjacency relation from a grid of region ids.

    Two regions are neighbors iff some pair of their cells is edge-adjacent.
    Comparing each cell with its right and lower neighbor covers all four
    directions once the relation is made symmetric. Negative ids are holes.

    Args:
        grid: 2-D array-like of region ids

    Returns:
        Dictionary mapping every region id in the grid to its neighbor ids
    """
    grid = np.asarray(grid, dtype=np.int64)
    if grid.ndim != 2:
        raise ValueError(f"Grid must be 2-D, got shape {grid.shape}")

    adj: Dict[int, Set[int]] = {int(rid): set() for rid in np.unique(grid) if rid >= 0}

    pairs = []
    for a, b in ((grid[:, :-1], grid[:, 1:]), (grid[:-1, :], grid[1:, :])):
        mask = (a != b) & (a >= 0) & (b >= 0)
        pairs.append(np.stack([a[mask], b[mask]], axis=1))

    edges = np.concatenate(pairs)
    if len(edges):
        edges = np.unique(edges, axis=0)

    for a, b in edges.tolist():
        adj[a].add(b)
        adj[b].add(a)
    return adj


def regions_from_grid(grid: Any, labels: Optional[Sequence[str]] = None) -> List[Region]:
    """
    Group grid cells into regions, ordered by region id.

    Args:
        grid: 2-D array-like of region ids (negative ids are holes)
        labels: Optional label for each region id

    Returns:
        List of uncolored, unlocked regions
    """
    grid = np.asarray(grid, dtype=np.int64)
    cells: Dict[int, List[Coord]] = {}
    for r, c in np.argwhere(grid >= 0).tolist():
        cells.setdefault(int(grid[r, c]), []).append((r, c))

    regions = []
    for rid in sorted(cells):
        label = labels[rid] if labels is not None and rid < len(labels) else None
        regions.append(Region(id=rid, cells=frozenset(cells[rid]), label=label))
    return regions


class RegionGraph:
    """
    Regions of one puzzle plus their immutable adjacency relation.

    The live coloring is the ``color`` field of each region.
    """

    def __init__(
        self,
        regions: Sequence[Region],
        grid: Any,
        num_colors: int = DEFAULT_NUM_COLORS,
    ):
        self.num_colors = validate_num_colors(num_colors)
        self.grid = np.asarray(grid, dtype=np.int64)

        self._regions: Dict[int, Region] = {}
        for region in regions:
            if region.id in self._regions:
                raise ValueError(f"Duplicate region id: {region.id}")
            self._regions[region.id] = region

        adjacency = build_region_adjacency(self.grid)
        unknown = sorted(set(adjacency) - set(self._regions))
        if unknown:
            raise ValueError(f"Grid references unknown region ids: {unknown}")

        self._adj: Dict[int, FrozenSet[int]] = {
            rid: frozenset(adjacency.get(rid, ())) for rid in self._regions
        }

        n_edges = sum(len(n) for n in self._adj.values()) // 2
        logger.debug(f"Built region graph: {len(self._regions)} regions, {n_edges} borders, {self.num_colors} colors")

    @classmethod
    def from_region_map(cls, text: str, num_colors: int = DEFAULT_NUM_COLORS) -> "RegionGraph":
        """Build an uncolored graph from an ASCII region map."""
        grid, labels = parse_region_map(text)
        return cls(regions_from_grid(grid, labels), grid, num_colors)

    # ---------------- structure ----------------

    @property
    def regions(self) -> List[Region]:
        return list(self._regions.values())

    @property
    def region_ids(self) -> List[int]:
        return list(self._regions.keys())

    @property
    def adjacency(self) -> Dict[int, FrozenSet[int]]:
        return dict(self._adj)

    def region(self, region_id: int) -> Region:
        if region_id not in self._regions:
            raise KeyError(f"Unknown region id: {region_id}")
        return self._regions[region_id]

    def region_by_label(self, label: str) -> Region:
        for region in self._regions.values():
            if region.label == label:
                return region
        raise KeyError(f"Unknown region label: {label!r}")

    def neighbors(self, region_id: int) -> FrozenSet[int]:
        if region_id not in self._adj:
            raise KeyError(f"Unknown region id: {region_id}")
        return self._adj[region_id]

    # ---------------- coloring queries ----------------

    def assignment(self) -> Assignment:
        """Snapshot of the live coloring."""
        return {rid: r.color for rid, r in self._regions.items()}

    def available_colors(self, region_id: int) -> Set[int]:
        """All colors not currently used by any neighbor of region_id."""
        avail = set(range(self.num_colors))
        for n in self.neighbors(region_id):
            avail.discard(self._regions[n].color)
        return avail

    def in_conflict(self, region_id: int) -> bool:
        """True iff the region is colored and some neighbor shares its color."""
        color = self.region(region_id).color
        if color is None:
            return False
        return any(self._regions[n].color == color for n in self._adj[region_id])

    def conflicting_regions(self) -> List[int]:
        return [rid for rid in self._regions if self.in_conflict(rid)]

    def free_regions(self) -> List[int]:
        """Unlocked, uncolored region ids in region order."""
        return [rid for rid, r in self._regions.items() if not r.locked and r.color is None]

    # ---------------- presentation ----------------

    def stats(self) -> Dict[str, int]:
        colored = sum(1 for r in self._regions.values() if r.color is not None)
        return {
            "total": len(self._regions),
            "colored": colored,
            "locked": sum(1 for r in self._regions.values() if r.locked),
            "conflicts": len(self.conflicting_regions()),
        }

    def region_states(self) -> List[Dict[str, Any]]:
        """Live per-region state for a presentation layer."""
        return [
            {
                "id": r.id,
                "label": r.label,
                "color": r.color,
                "locked": r.locked,
                "conflict": self.in_conflict(r.id),
                "centroid": r.centroid(),
            }
            for r in self._regions.values()
        ]
