# backtracking.py
"""
MRV backtracking solver for small region-coloring subproblems.

Used as the divide-and-conquer base case and for seam repair. The working
assignment is mutated in place; every failed branch undoes its own
assignment before returning.
"""

from __future__ import annotations

from typing import Dict, FrozenSet, List, Mapping, Optional, Sequence

Assignment = Dict[int, Optional[int]]
Neighbors = Mapping[int, FrozenSet[int]]


def legal_colors(
    region_id: int,
    assignment: Assignment,
    neighbors: Neighbors,
    num_colors: int,
) -> List[int]:
    """Colors (ascending) not used by any colored neighbor in assignment."""
    used = set()
    for n in neighbors[region_id]:
        c = assignment.get(n)
        if c is not None:
            used.add(c)
    return [c for c in range(num_colors) if c not in used]


def pick_most_constrained(
    ids: Sequence[int],
    assignment: Assignment,
    neighbors: Neighbors,
    num_colors: int,
) -> int:
    """MRV: index in ids of the region with fewest legal colors, earliest on ties."""
    best_idx = 0
    best_count = None
    for i, rid in enumerate(ids):
        count = len(legal_colors(rid, assignment, neighbors, num_colors))
        if best_count is None or count < best_count:
            best_idx, best_count = i, count
            if count == 0:
                break
    return best_idx


def backtrack(
    ids: Sequence[int],
    assignment: Assignment,
    neighbors: Neighbors,
    num_colors: int,
) -> bool:
    """
    Color every region in ids consistently with all colored neighbors.

    Regions not listed are treated as fixed context. On success the
    assignment holds a color for each listed region; on failure every listed
    region is left uncolored.

    Args:
        ids: Uncolored region ids to assign
        assignment: Working assignment, mutated in place
        neighbors: Region adjacency
        num_colors: Palette size

    Returns:
        True if a consistent extension was found
    """
    if not ids:
        return True

    idx = pick_most_constrained(ids, assignment, neighbors, num_colors)
    rid = ids[idx]
    rest = list(ids[:idx]) + list(ids[idx + 1:])

    for color in legal_colors(rid, assignment, neighbors, num_colors):
        assignment[rid] = color
        if backtrack(rest, assignment, neighbors, num_colors):
            return True
        assignment[rid] = None  # undo

    assignment[rid] = None
    return False
