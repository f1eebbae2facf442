# solve_coloring.py
"""
Divide-and-conquer region-coloring solver.

The uncolored region set is bisected by graph distance, each half is solved
independently (down to a small base case handled by the backtracking
solver), and coloring collisions across the cut ("seam") are repaired by
re-solving just the colliding regions.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional, Sequence, Set, Tuple

from backtracking import Assignment, backtrack, legal_colors
from coloring_config import BASE_CASE_SIZE, LOG_FORMAT, get_color_name
from region_graph import RegionGraph

# Configure module logger
logger = logging.getLogger(__name__)

# Distance used for nodes a BFS did not reach
_UNREACHABLE = 1 << 30


@dataclass(frozen=True)
class SolveResult:
    """
    Outcome of a divide-and-conquer solve.

    Attributes:
        assignment: Complete conflict-free coloring, or None on failure
        partition_a: Left half of the top-level bisection
        partition_b: Right half of the top-level bisection
        seam: Regions recolored by the top-level seam repair
    """
    assignment: Optional[Dict[int, int]]
    partition_a: FrozenSet[int] = frozenset()
    partition_b: FrozenSet[int] = frozenset()
    seam: FrozenSet[int] = frozenset()

    @property
    def solved(self) -> bool:
        return self.assignment is not None


@dataclass(frozen=True)
class BestColorResult:
    """Result of searching a globally completable color for one region."""
    color: Optional[int]
    last_solve: SolveResult = field(default_factory=lambda: SolveResult(assignment=None))
    candidates_tried: int = 0


@dataclass
class _Trace:
    partition_a: Set[int] = field(default_factory=set)
    partition_b: Set[int] = field(default_factory=set)
    seam: Set[int] = field(default_factory=set)

    def result(self, assignment: Optional[Assignment]) -> SolveResult:
        return SolveResult(
            assignment=dict(assignment) if assignment is not None else None,
            partition_a=frozenset(self.partition_a),
            partition_b=frozenset(self.partition_b),
            seam=frozenset(self.seam),
        )


class DivideAndConquerSolver:
    """Solves the whole puzzle, or the puzzle around one chosen region."""

    def __init__(self, graph: RegionGraph, base_case_size: int = BASE_CASE_SIZE):
        if base_case_size < 1:
            raise ValueError(f"base_case_size must be >= 1, got {base_case_size}")
        self.graph = graph
        self.base_case_size = base_case_size
        self.num_colors = graph.num_colors
        self._neighbors = graph.adjacency

    # ---------------- entry points ----------------

    def solve(self) -> SolveResult:
        """
        Complete the live coloring without touching colored or locked regions.

        The live graph is not modified; the solution is returned on the result.
        Fails immediately if the colored regions already conflict.
        """
        assignment = self.graph.assignment()

        conflict = self._first_conflict(assignment)
        if conflict is not None:
            logger.warning(f"Constraint check failed: region {conflict[0]} conflicts with {conflict[1]}")
            return SolveResult(assignment=None)

        free = self.graph.free_regions()
        trace = _Trace()
        if free:
            logger.info(f"Starting solver on {len(free)} regions")
            if not self._dc_solve(free, assignment, 0, trace):
                logger.info("Solver failed: no complete coloring")
                return trace.result(None)

        if not self.is_fully_valid(assignment):
            return trace.result(None)
        return trace.result(assignment)

    def best_color_for_region(self, region_id: int) -> BestColorResult:
        """
        Find the lowest color for region_id that still lets the puzzle complete.

        The region is expected to be uncolored already. Each candidate color not
        used by its neighbors is tried with a full divide-and-conquer solve of
        the other free regions.
        """
        base = self.graph.assignment()
        base[region_id] = None

        conflict = self._first_conflict(base)
        if conflict is not None:
            logger.warning(f"Constraint check failed: region {conflict[0]} conflicts with {conflict[1]}")
            return BestColorResult(color=None, last_solve=SolveResult(assignment=None))

        candidates = legal_colors(region_id, base, self._neighbors, self.num_colors)
        free = [rid for rid in self.graph.free_regions() if rid != region_id]

        last = SolveResult(assignment=None)
        tried = 0
        for color in candidates:
            tried += 1
            trial = dict(base)
            trial[region_id] = color
            trace = _Trace()
            ok = self._dc_solve(free, trial, 0, trace) and self.is_fully_valid(trial)
            last = trace.result(trial if ok else None)
            if ok:
                logger.info(f"Solution found with color {color} for region {region_id}")
                return BestColorResult(color=color, last_solve=last, candidates_tried=tried)

        logger.info(f"No globally valid color for region {region_id} ({tried} candidates tried)")
        return BestColorResult(color=None, last_solve=last, candidates_tried=tried)

    def local_fallback_color(self, region_id: int) -> Optional[int]:
        """Lowest color unused by the live neighbors, ignoring global completability."""
        avail = self.graph.available_colors(region_id)
        return min(avail) if avail else None

    # ---------------- divide and conquer ----------------

    def _dc_solve(self, free: Sequence[int], assignment: Assignment, depth: int, trace: _Trace) -> bool:
        if len(free) <= self.base_case_size:
            return backtrack(free, assignment, self._neighbors, self.num_colors)

        left, right = self.graph_bisect(free)
        if not left or not right:
            mid = len(free) // 2
            left, right = list(free[:mid]), list(free[mid:])

        logger.debug(f"Depth {depth}: split {len(free)} regions into {len(left)} + {len(right)}")
        if depth == 0:
            trace.partition_a = set(left)
            trace.partition_b = set(right)

        if not self._dc_solve(left, assignment, depth + 1, trace):
            return False
        if not self._dc_solve(right, assignment, depth + 1, trace):
            return False

        ok, seam = self.repair_seam(left, right, assignment)
        if depth == 0:
            trace.seam = seam
        if seam:
            logger.debug(f"Depth {depth}: repaired seam of {len(seam)} regions (ok={ok})")
        return ok

    def repair_seam(
        self,
        left: Sequence[int],
        right: Sequence[int],
        assignment: Assignment,
    ) -> Tuple[bool, Set[int]]:
        """
        Recolor every region involved in a collision across the cut.

        Only seam regions are reset and re-solved; all other colors are kept.

        Returns:
            (success, seam region ids)
        """
        seam = self.find_seam_conflicts(left, right, assignment)
        if not seam:
            return True, seam

        seam_ids = sorted(seam)
        for rid in seam_ids:
            assignment[rid] = None
        return backtrack(seam_ids, assignment, self._neighbors, self.num_colors), seam

    def graph_bisect(self, free: Sequence[int]) -> Tuple[List[int], List[int]]:
        """
        Split free into two graph-distance-balanced halves.

        Two BFS sweeps (restricted to free) find a far-apart pair A, B; each
        region goes to A's side when it is at least as close to A as to B.
        """
        if not free:
            return [], []
        allowed = set(free)

        from_seed = self._bfs_distances(free[0], allowed)
        node_a = max(from_seed, key=from_seed.get)

        dist_a = self._bfs_distances(node_a, allowed)
        others = [n for n in dist_a if n != node_a]
        node_b = max(others, key=dist_a.get) if others else free[len(free) // 2]

        dist_b = self._bfs_distances(node_b, allowed)

        left, right = [], []
        for rid in free:
            if dist_a.get(rid, _UNREACHABLE) <= dist_b.get(rid, _UNREACHABLE):
                left.append(rid)
            else:
                right.append(rid)
        return left, right

    def find_seam_conflicts(
        self,
        left: Sequence[int],
        right: Sequence[int],
        assignment: Assignment,
    ) -> Set[int]:
        """Every region of a same-colored pair that straddles the cut."""
        right_set = set(right)
        seam: Set[int] = set()
        for rid in left:
            color = assignment.get(rid)
            if color is None:
                continue
            for n in self._neighbors[rid]:
                if n in right_set and assignment.get(n) == color:
                    seam.add(rid)
                    seam.add(n)
        return seam

    # ---------------- validity ----------------

    def is_fully_valid(self, assignment: Assignment) -> bool:
        """True iff every region is colored and no neighbors share a color."""
        for rid in self.graph.region_ids:
            color = assignment.get(rid)
            if color is None:
                return False
            if any(assignment.get(n) == color for n in self._neighbors[rid]):
                return False
        return True

    def _bfs_distances(self, source: int, allowed: Set[int]) -> Dict[int, int]:
        dist = {source: 0}
        q = deque([source])
        while q:
            cur = q.popleft()
            for nb in sorted(self._neighbors[cur]):
                if nb in allowed and nb not in dist:
                    dist[nb] = dist[cur] + 1
                    q.append(nb)
        return dist

    def _first_conflict(self, assignment: Assignment) -> Optional[Tuple[int, int]]:
        for rid in self.graph.region_ids:
            color = assignment.get(rid)
            if color is None:
                continue
            for n in sorted(self._neighbors[rid]):
                if assignment.get(n) == color:
                    return rid, n
        return None


def render_solution(graph: RegionGraph, assignment: Dict[int, Optional[int]]) -> str:
    out_lines = []
    for row in graph.grid.tolist():
        row_chars = []
        for rid in row:
            if rid < 0:
                row_chars.append("#")
            else:
                color = assignment.get(rid)
                row_chars.append(str(color) if color is not None else "?")
        out_lines.append(" ".join(row_chars))
    return "\n".join(out_lines)


def main():
    import argparse

    from puzzle_setup import load_puzzle

    ap = argparse.ArgumentParser()
    ap.add_argument("yaml_file", help="Path to a region-coloring puzzle YAML file")
    ap.add_argument("--base-size", type=int, default=BASE_CASE_SIZE,
                    help=f"Largest subproblem solved directly by backtracking (default: {BASE_CASE_SIZE})")
    ap.add_argument("--verbose", "-v", action="store_true",
                    help="Enable verbose logging output")
    args = ap.parse_args()

    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(level=log_level, format=LOG_FORMAT)

    graph = load_puzzle(args.yaml_file)
    solver = DivideAndConquerSolver(graph, base_case_size=args.base_size)
    result = solver.solve()

    if not result.solved:
        print("NO SOLUTION with the current clues.")
        print("Clue grid (unknowns as '?'):\n")
        print(render_solution(graph, graph.assignment()))
        raise SystemExit(1)

    print("SOLVED.\n")
    print("Color grid:\n")
    print(render_solution(graph, result.assignment))
    print()
    for color in range(graph.num_colors):
        print(f"  {color} = {get_color_name(color)}")


if __name__ == "__main__":
    main()
