"""
Pathfinding utilities: implements grid-based A* search with static and
dynamic obstacles.
"""

from __future__ import annotations
import logging
import math
from typing import Callable, List, Optional

from .binary_heap import BinaryHeap
from .config import PATHFINDING_CLOSEST, PATHFINDING_DIAGONAL
from .grid_node import GridNode

logger = logging.getLogger(__name__)

HeuristicFunction = Callable[[GridNode, GridNode], float]


def manhattan(pos0: GridNode, pos1: GridNode) -> float:
    """Manhattan distance heuristic for 4-connected grids."""
    return abs(pos1.x - pos0.x) + abs(pos1.y - pos0.y)


def diagonal(pos0: GridNode, pos1: GridNode) -> float:
    """Octile distance heuristic for 8-connected grids."""
    d = 1
    d2 = math.sqrt(2)
    dx = abs(pos1.x - pos0.x)
    dy = abs(pos1.y - pos0.y)
    return d * (dx + dy) + (d2 - 2 * d) * min(dx, dy)


HEURISTICS = {
    "manhattan": manhattan,
    "diagonal": diagonal,
}


class PathFinding:
    """
    A* solver over a columns x rows grid of GridNode.

    Nodes keep their search scratch fields between searches. Every node
    whose scratch fields are written during a search is recorded in the
    dirty list, and only those nodes are cleaned before the next search:
    a node that is not in the dirty list always has clean scratch fields.
    """

    def __init__(
        self,
        columns: int,
        rows: int,
        diagonal: bool = PATHFINDING_DIAGONAL,
        closest: bool = PATHFINDING_CLOSEST,
    ) -> None:
        self.columns = columns
        self.rows = rows
        self.diagonal = bool(diagonal)
        self.closest = bool(closest)
        self.heuristic: HeuristicFunction = (
            HEURISTICS["diagonal"] if self.diagonal else HEURISTICS["manhattan"]
        )
        # grid[c][r]
        self.grid: List[List[GridNode]] = [
            [GridNode(c, r, 1) for r in range(rows)] for c in range(columns)
        ]
        self.nodes: List[GridNode] = [node for col in self.grid for node in col]
        self.dirty_nodes: List[GridNode] = []

    def reset(self) -> None:
        """Clean every node, not only the dirty ones."""
        for node in self.nodes:
            node.reset()
        self.dirty_nodes = []

    def clean_dirty(self) -> None:
        """Clean the nodes touched by the previous search."""
        for node in self.dirty_nodes:
            node.reset()
        self.dirty_nodes = []

    def mark_dirty(self, node: GridNode) -> None:
        self.dirty_nodes.append(node)

    def is_inside(self, c: int, r: int) -> bool:
        return 0 <= c < self.columns and 0 <= r < self.rows

    def neighbors(self, node: GridNode) -> List[GridNode]:
        """Return the in-bounds neighbors of a node, walls included."""
        x, y = node.x, node.y
        # West, East, South, North
        offsets = [(-1, 0), (1, 0), (0, -1), (0, 1)]
        if self.diagonal:
            # Southwest, Southeast, Northwest, Northeast
            offsets += [(-1, -1), (1, -1), (-1, 1), (1, 1)]
        ret = []
        for dx, dy in offsets:
            nx, ny = x + dx, y + dy
            if self.is_inside(nx, ny):
                ret.append(self.grid[nx][ny])
        return ret

    def __str__(self) -> str:
        return "\n".join(
            " ".join(str(node.weight) for node in col) for col in self.grid
        )

    def solve(
        self, origin_c: int, origin_r: int, dest_c: int, dest_r: int
    ) -> Optional[List[GridNode]]:
        """
        Find a path from (origin_c, origin_r) to (dest_c, dest_r).
        Returns the list of nodes from the destination (index 0) back to the
        first step (last index); the origin itself is not included.
        Returns [] if origin equals destination and None if the destination
        cannot be reached (unless closest mode is on, in which case the path
        to the closest reachable node is returned).
        """
        if not (
            self.is_inside(origin_c, origin_r) and self.is_inside(dest_c, dest_r)
        ):
            logger.debug(
                "Search out of bounds: (%s, %s) -> (%s, %s)",
                origin_c, origin_r, dest_c, dest_r,
            )
            return None
        start = self.grid[origin_c][origin_r]
        end = self.grid[dest_c][dest_r]
        if start is end:
            return []
        result = self.search(start, end, self.heuristic, self.closest)
        if result is None:
            logger.debug(
                "No path from %s to %s", start.map_pos, end.map_pos
            )
        return result

    def get_adjacent_open_cells(
        self, cell_c: int, cell_r: int, size_c: int, size_r: int
    ) -> List[GridNode]:
        """
        Return the neighbors of every cell in the area that starts at
        (cell_c, cell_r) and spans size_c columns to the right and size_r
        rows upward. Duplicates are kept; callers filter as needed.
        """
        cells: List[GridNode] = []
        for r in range(cell_r, cell_r - size_r, -1):
            for c in range(cell_c, cell_c + size_c):
                if self.is_inside(c, r):
                    cells.extend(self.neighbors(self.grid[c][r]))
        return cells

    def path_to(self, node: GridNode) -> List[GridNode]:
        curr = node
        path = []
        while curr.parent is not None:
            path.append(curr)
            curr = curr.parent
        return path

    def search(
        self,
        start: GridNode,
        end: GridNode,
        heuristic: HeuristicFunction = manhattan,
        closest: bool = False,
    ) -> Optional[List[GridNode]]:
        """Perform an A* search between two nodes of this grid."""
        self.clean_dirty()

        open_heap = BinaryHeap(lambda node: node.f)
        # The start node is the closest one until a better one is found
        closest_node = start

        start.h = heuristic(start, end)
        self.mark_dirty(start)
        open_heap.push(start)

        while open_heap.size() > 0:
            # Grab the lowest f(x) to process next
            current = open_heap.pop()

            # End case: result has been found, return the traced path
            if current is end:
                return self.path_to(current)

            # Normal case: move current from open to closed, process neighbors
            current.closed = True

            for neighbor in self.neighbors(current):
                if neighbor.closed or neighbor.is_wall():
                    continue

                # g is the shortest distance from start to the neighbor so far
                g_score = current.g + neighbor.get_cost(current)
                been_visited = neighbor.visited

                if not been_visited or g_score < neighbor.g:
                    neighbor.visited = True
                    neighbor.parent = current
                    if not been_visited:
                        neighbor.h = heuristic(neighbor, end)
                        self.mark_dirty(neighbor)
                    neighbor.g = g_score
                    neighbor.f = neighbor.g + neighbor.h
                    if closest and (
                        neighbor.h < closest_node.h
                        or (
                            neighbor.h == closest_node.h
                            and neighbor.g < closest_node.g
                        )
                    ):
                        closest_node = neighbor

                    if not been_visited:
                        open_heap.push(neighbor)
                    else:
                        # Already queued, but re-scored: reorder it in the heap
                        open_heap.rescore_element(neighbor)

        if closest:
            logger.debug(
                "Target %s unreachable, using closest node %s",
                end.map_pos, closest_node.map_pos,
            )
            return self.path_to(closest_node)

        return None

    def is_cell_filled(self, c: int, r: int) -> bool:
        """Return True if the cell is not available to move onto."""
        if not self.is_inside(c, r):
            return True
        return self.grid[c][r].weight == 0

    def set_cell(self, c: int, r: int, movable: int) -> None:
        """Set the terrain passability of a cell (ground layer)."""
        node = self.grid[c][r]
        node.static_weight = node.weight = movable

    def set_dynamic_cell(self, c: int, r: int, movable: int) -> None:
        """Set the occupancy of a cell (objects layer); walls stay walls."""
        node = self.grid[c][r]
        if node.static_weight != 0:
            node.weight = movable
