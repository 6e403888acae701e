import heapq
import itertools
import math
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional, Tuple

import config
from logger import get_logger
from world_map import CellState, GridWorld, Position

log = get_logger(__name__)

Heuristic = Callable[[Position, Position], float]
EdgeCost = Callable[[Position, Position, Position, Position], float]


@dataclass(order=True)
class OpenEntry:
    f: float
    # Negated insertion sequence: among equal f the most recently inserted wins
    order: int
    pos: Position = field(compare=False)


@dataclass
class SearchState:
    open_heap: List[OpenEntry] = field(default_factory=list)
    open_order: Dict[Position, int] = field(default_factory=dict)
    came_from: Dict[Position, Position] = field(default_factory=dict)
    g_score: Dict[Position, float] = field(default_factory=dict)
    f_score: Dict[Position, float] = field(default_factory=dict)
    expanded: int = 0
    _sequence: Iterator[int] = field(default_factory=itertools.count, repr=False)

    def __len__(self):
        return len(self.open_order)

    def __contains__(self, pos: Position) -> bool:
        return pos in self.open_order

    def g(self, pos: Position) -> float:
        return self.g_score.get(pos, math.inf)

    def push(self, pos: Position, f: float) -> None:
        """Record f for pos and append pos to the open set unless it is already there."""
        self.f_score[pos] = f
        order = self.open_order.get(pos)
        if order is None:
            order = next(self._sequence)
            self.open_order[pos] = order
        heapq.heappush(self.open_heap, OpenEntry(f, -order, pos))

    def lowest(self) -> Position:
        """
        Open position with the lowest f score.

        Ties go to the position that entered the open set last, the same
        choice a front-to-back scan keeping every candidate <= the best so
        far would make.
        """
        while True:
            entry = self.open_heap[0]
            if (self.open_order.get(entry.pos) == -entry.order
                    and self.f_score[entry.pos] == entry.f):
                return entry.pos
            heapq.heappop(self.open_heap)

    def remove(self, pos: Position) -> None:
        # Heap entries for pos go stale and are skipped by lowest()
        del self.open_order[pos]


def heuristic(node: Position, goal: Position) -> float:
    return node.dist_sq(goal)


def edge_cost(current: Position, next_pos: Position, start: Position, goal: Position) -> float:
    dist_to_next = current.dist_sq(next_pos)
    if next_pos.dist_sq(goal) > current.dist_sq(goal):
        return dist_to_next * config.AWAY_FROM_GOAL_PENALTY
    return dist_to_next


def reconstruct_path(came_from: Dict[Position, Position], node: Position, world: GridWorld,
                     step_delay: float = 0, sleep: Optional[Callable[[float], None]] = None) -> List[Position]:
    sleep = sleep or time.sleep
    path = [node]
    world.put_cell(CellState.PATH, node)

    current = node
    while current in came_from:
        current = came_from[current]
        if step_delay:
            sleep(step_delay)
        world.put_cell(CellState.PATH, current)
        path.append(current)

    path.reverse()
    return path


def search(start: Tuple[int, int], goal: Tuple[int, int], world: GridWorld,
           step_delay: float = 0, h: Heuristic = heuristic, d: EdgeCost = edge_cost,
           sleep: Optional[Callable[[float], None]] = None,
           max_expansions: Optional[int] = None) -> List[Position]:
    """
    Best-first search from start to goal over world.

    step_delay is in seconds; every neighbour evaluation and every path cell
    waits that long when it is non-zero. Returns the path start..goal
    inclusive, or an empty list when goal cannot be reached.

    max_expansions caps the nodes taken off the open set. It defaults to
    unlimited in a bounded world and to a multiple of the world area in an
    unbounded one, where an unreachable goal would otherwise never end the search.
    """
    sleep = sleep or time.sleep
    if max_expansions is None and not world.has_boundary:
        max_expansions = config.UNBOUNDED_EXPANSIONS_PER_CELL * world.width * world.height
    start = Position(*start)
    goal = Position(*goal)

    world.put_cell(CellState.START, start)
    world.put_cell(CellState.GOAL, goal)

    if start == goal:
        return [start]

    state = SearchState()
    state.g_score[start] = 0
    state.push(start, h(start, goal))

    while state:
        current = state.lowest()

        if current == goal:
            path = reconstruct_path(state.came_from, current, world, step_delay, sleep)
            log.debug("Search %s -> %s: %d expansions, path of %d cells",
                      start, goal, state.expanded, len(path))
            return path

        if max_expansions is not None and state.expanded >= max_expansions:
            log.debug("Search %s -> %s: gave up after %d expansions", start, goal, state.expanded)
            return []

        state.remove(current)
        state.expanded += 1

        for neighbour in world.get_neighbours(current):
            world.put_cell(CellState.CALCULATING, neighbour)
            if step_delay:
                sleep(step_delay)
            world.put_cell(CellState.CALCULATED, neighbour)

            tentative_g = state.g(current) + d(current, neighbour, start, goal)
            if tentative_g < state.g(neighbour):
                state.came_from[neighbour] = current
                state.g_score[neighbour] = tentative_g
                state.push(neighbour, tentative_g + h(neighbour, goal))

    log.debug("Search %s -> %s: no path after %d expansions", start, goal, state.expanded)
    return []
