import math
import random
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

import config
from algorithms import get_algorithm
from logger import get_logger
from messages import RunRequest
from update_channel import Publish, StreamingGridWorld, UpdateChannel
from world_map import CellState, Position

log = get_logger(__name__)


class RunState(Enum):
    IDLE = "idle"
    RUNNING = "running"


@dataclass
class RunResult:
    algorithm: str
    start: Position
    goal: Position
    path: List[Position] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return bool(self.path)


class PathGenerator:
    """
    Producer side: builds a random world and runs one search at a time.

    A request that arrives while a run is in flight is dropped without
    error. Runs happen on a background thread; every mutation of the world
    is streamed through `publish`.
    """

    def __init__(self, publish: Publish, rng: Optional[random.Random] = None):
        self.publish = publish
        self.rng = rng or random.Random()
        self._lock = threading.Lock()
        # Keeps one run's final batch and run_end ahead of the next run's run_start
        self._stream_lock = threading.RLock()
        self._state = RunState.IDLE
        self._thread: Optional[threading.Thread] = None
        self.last_result: Optional[RunResult] = None

    @property
    def state(self) -> RunState:
        with self._lock:
            return self._state

    @property
    def is_running(self) -> bool:
        return self.state is RunState.RUNNING

    def request_run(self, request: RunRequest) -> bool:
        """Start a run in the background; False when one is already running."""
        if not self._acquire():
            log.debug("Run request dropped, a run is already in progress")
            return False

        self._thread = threading.Thread(target=self._run, args=(request,),
                                        name="path-generator", daemon=True)
        self._thread.start()
        return True

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Join the current run thread; True once no run is in flight."""
        thread = self._thread
        if thread is not None:
            thread.join(timeout)
        return not self.is_running

    def generate_path(self, request: RunRequest) -> Optional[RunResult]:
        """Synchronous run on the calling thread; None if a run is already in flight."""
        if not self._acquire():
            log.debug("Run request dropped, a run is already in progress")
            return None
        return self._run(request)

    def _acquire(self) -> bool:
        with self._lock:
            if self._state is RunState.RUNNING:
                return False
            self._state = RunState.RUNNING
            return True

    def _release(self) -> None:
        with self._lock:
            self._state = RunState.IDLE

    def _run(self, request: RunRequest) -> RunResult:
        channel = None
        try:
            channel = UpdateChannel(self.publish, request.step_delay, request.max_batch_size)
            with self._stream_lock:
                channel.run_started()
            result = self._generate(request, channel)
            self.last_result = result
            return result
        except Exception:
            log.exception("Path generation failed for %s", request)
            raise
        finally:
            # Idle before run_end goes out, so a consumer may request the next run on receipt
            with self._stream_lock:
                self._release()
                if channel is not None:
                    channel.run_finished()

    def _generate(self, request: RunRequest, channel: UpdateChannel) -> RunResult:
        algorithm = get_algorithm(request.algorithm_index)
        rng = random.Random(request.seed) if request.seed is not None else self.rng
        world = StreamingGridWorld(channel, request.world_width, request.world_height,
                                   request.has_boundary)

        log.info("Generating %dx%d world, searching with %s",
                 world.width, world.height, algorithm.long_name)
        world.clear_map()

        start = world.pick_random_pos(rng)
        goal = world.pick_random_pos(rng)
        place_random_walls(world, start, goal, rng)

        path = algorithm.search(start, goal, world, request.step_delay)

        if path:
            log.info("%s found a path of %d cells from %s to %s",
                     algorithm.short_name, len(path), start, goal)
        else:
            log.info("%s found no path from %s to %s", algorithm.short_name, start, goal)
        return RunResult(algorithm.short_name, start, goal, path)


def place_random_walls(world, start: Position, goal: Position, rng: random.Random,
                       cells_per_attempt: int = config.WALL_CELLS_PER_ATTEMPT) -> int:
    """Drop walls on random cells, never on start or goal; returns the attempts made."""
    attempts = math.ceil(world.width * world.height / cells_per_attempt)
    for _ in range(attempts):
        pos = world.pick_random_pos(rng)
        if pos == start or pos == goal:
            continue
        world.put_cell(CellState.WALL, pos)
    return attempts
