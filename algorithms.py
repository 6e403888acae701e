from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from pathfinding import search
from world_map import GridWorld, Position

SearchFn = Callable[[Tuple[int, int], Tuple[int, int], GridWorld, float], List[Position]]


@dataclass(frozen=True)
class Algorithm:
    short_name: str
    long_name: str
    search: SearchFn


def astar(start, goal, world: GridWorld, step_delay: float = 0) -> List[Position]:
    return search(start, goal, world, step_delay)


def dijkstra(start, goal, world: GridWorld, step_delay: float = 0) -> List[Position]:
    """Uniform expansion: no heuristic, plain squared step distance."""
    return search(start, goal, world, step_delay,
                  h=lambda node, goal: 0,
                  d=lambda current, next_pos, start, goal: current.dist_sq(next_pos))


AVAILABLE_ALGORITHMS: List[Algorithm] = [
    Algorithm("A*", "AStar", astar),
    Algorithm("Dijkstra", "Dijkstra", dijkstra),
]


def get_algorithm(index: int) -> Algorithm:
    if not 0 <= index < len(AVAILABLE_ALGORITHMS):
        raise IndexError(f"No algorithm at index {index}")
    return AVAILABLE_ALGORITHMS[index]


def find_algorithm(name: str) -> Optional[int]:
    """Index of the algorithm whose short or long name matches, ignoring case."""
    wanted = name.lower()
    for i, algorithm in enumerate(AVAILABLE_ALGORITHMS):
        if wanted in (algorithm.short_name.lower(), algorithm.long_name.lower()):
            return i
    return None
