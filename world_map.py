import random
from enum import Enum
from typing import Dict, Iterator, List, NamedTuple, Optional, Tuple


class Position(NamedTuple):
    x: int
    y: int

    def dist_sq(self, other: Tuple[int, int]) -> int:
        dx = self.x - other[0]
        dy = self.y - other[1]
        return dx * dx + dy * dy


class CellState(Enum):
    EMPTY = "empty"
    WALL = "wall"
    START = "start"
    GOAL = "goal"
    CALCULATING = "calculating"
    CALCULATED = "calculated"
    PATH = "path"


SOLID_CELL_STATES = frozenset({CellState.WALL})

# Cells holding one of these keep it until the map is cleared
PERMANENT_CELL_STATES = frozenset({CellState.START, CellState.GOAL, CellState.WALL})

ORTHOGONAL_OFFSETS = [(1, 0), (-1, 0), (0, 1), (0, -1)]
DIAGONAL_OFFSETS = [(1, 1), (-1, 1), (1, -1), (-1, -1)]


class GridWorld:
    """Sparse cell store; any position never written reads as EMPTY."""

    def __init__(self, width: int, height: int, has_boundary: bool = True,
                 origin: Tuple[int, int] = (0, 0), protect_permanent: bool = True):
        self.width = width
        self.height = height
        self.has_boundary = has_boundary
        self.origin = Position(*origin)
        self.protect_permanent = protect_permanent
        self._cells: Dict[Position, CellState] = {}

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    def in_bounds(self, pos: Tuple[int, int]) -> bool:
        x, y = pos
        return 0 <= x < self.width and 0 <= y < self.height

    def get_cell(self, pos: Tuple[int, int]) -> CellState:
        if self.has_boundary and not self.in_bounds(pos):
            return CellState.WALL
        return self._cells.get(Position(*pos), CellState.EMPTY)

    def put_cell(self, state: CellState, pos: Tuple[int, int]) -> CellState:
        """Store `state` at `pos` and return the state the cell ends up holding."""
        current = self.get_cell(pos)
        if self.protect_permanent and current in PERMANENT_CELL_STATES:
            return current
        if self.has_boundary and not self.in_bounds(pos):
            return current

        self._cells[Position(*pos)] = state
        return state

    def is_cell_type(self, state: CellState, pos: Tuple[int, int]) -> bool:
        return self.get_cell(pos) is state

    def is_solid(self, pos: Tuple[int, int]) -> bool:
        return self.get_cell(pos) in SOLID_CELL_STATES

    def get_neighbours(self, pos: Tuple[int, int], diagonals: bool = False) -> List[Position]:
        x, y = pos
        offsets = ORTHOGONAL_OFFSETS + DIAGONAL_OFFSETS if diagonals else ORTHOGONAL_OFFSETS

        neighbours = []
        for dx, dy in offsets:
            neighbour = Position(x + dx, y + dy)
            if not self.is_solid(neighbour):
                neighbours.append(neighbour)
        return neighbours

    def clear_map(self) -> None:
        self._cells = {}

    def pick_random_pos(self, rng: Optional[random.Random] = None) -> Position:
        rng = rng or random
        return Position(rng.randrange(self.width), rng.randrange(self.height))

    def hollow_rect(self, state: CellState, x: int, y: int, w: int, h: int) -> None:
        """Stamp the border of the w*h rectangle whose top-left corner is (x, y)."""
        for rel_x in range(w):
            if rel_x == 0 or rel_x == w - 1:
                for rel_y in range(h):
                    self.put_cell(state, (x + rel_x, y + rel_y))
            else:
                self.put_cell(state, (x + rel_x, y))
                self.put_cell(state, (x + rel_x, y + h - 1))

    def cells(self, ignore_empty: bool = True) -> Iterator[Tuple[Position, CellState]]:
        for pos, state in self._cells.items():
            if not ignore_empty or state is not CellState.EMPTY:
                yield pos, state

    def __repr__(self):
        return (f"GridWorld(width={self.width}, height={self.height}, "
                f"has_boundary={self.has_boundary}, stored={len(self._cells)})")
