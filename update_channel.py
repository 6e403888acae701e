from typing import Callable, List, Tuple

import config
import messages
from logger import get_logger
from messages import CellChange, Message
from world_map import CellState, GridWorld

log = get_logger(__name__)

Publish = Callable[[Message], None]


class UpdateChannel:
    """
    Streams world mutations to a consumer.

    With a non-zero step delay every change goes out as its own message the
    moment it happens. Without one, changes are queued and sent as a batch
    each time max_batch_size of them have piled up; finish the run with
    run_finished() so the remainder is flushed.
    """

    def __init__(self, publish: Publish, step_delay: float = 0,
                 max_batch_size: int = config.MAX_CELL_QUEUE):
        if max_batch_size < 1:
            raise ValueError(f"max_batch_size must be positive, got {max_batch_size}")
        self.publish = publish
        self.step_delay = step_delay
        self.max_batch_size = max_batch_size
        self._queue: List[CellChange] = []

    @property
    def animated(self) -> bool:
        return self.step_delay > 0

    @property
    def pending(self) -> Tuple[CellChange, ...]:
        return tuple(self._queue)

    def cell_changed(self, state: CellState, pos: Tuple[int, int]) -> None:
        change = CellChange(state, pos[0], pos[1])
        if self.animated:
            self.publish(messages.cell_update(change))
            return

        self._queue.append(change)
        if len(self._queue) >= self.max_batch_size:
            self.flush()

    def map_reset(self) -> None:
        if self._queue:
            log.debug("Map reset supersedes %d queued changes", len(self._queue))
        self._queue = []
        self.publish(messages.map_reset())

    def flush(self) -> None:
        if not self._queue:
            return
        batch, self._queue = self._queue, []
        self.publish(messages.cell_batch(batch))

    def run_started(self) -> None:
        self.publish(messages.run_start())

    def run_finished(self) -> None:
        self.flush()
        self.publish(messages.run_end())


class StreamingGridWorld(GridWorld):
    """GridWorld whose every put_cell/clear_map is reported to an UpdateChannel."""

    def __init__(self, channel: UpdateChannel, width: int, height: int, has_boundary: bool = True, **kwargs):
        super().__init__(width, height, has_boundary, **kwargs)
        self.channel = channel

    def put_cell(self, state: CellState, pos: Tuple[int, int]) -> CellState:
        result = super().put_cell(state, pos)
        self.channel.cell_changed(result, pos)
        return result

    def clear_map(self) -> None:
        super().clear_map()
        self.channel.map_reset()
