from typing import Iterable

from messages import Message, MessageError, MessageType
from world_map import GridWorld


class WorldMirror:
    """Consumer-side copy of the producer's world, rebuilt only from messages."""

    def __init__(self, width: int, height: int, has_boundary: bool = True):
        # The producer already enforced permanent cells; mirror whatever it reports
        self.world = GridWorld(width, height, has_boundary, protect_permanent=False)
        self.busy = False
        self.runs_completed = 0
        self.messages_applied = 0

    def resize(self, width: int, height: int, has_boundary: bool = True) -> None:
        self.world = GridWorld(width, height, has_boundary, protect_permanent=False)

    def apply(self, message: Message) -> None:
        kind = message.type
        if kind is MessageType.RUN_START:
            self.busy = True
        elif kind is MessageType.RUN_END:
            self.busy = False
            self.runs_completed += 1
        elif kind is MessageType.MAP_RESET:
            self.world.clear_map()
        elif kind in (MessageType.CELL_UPDATE, MessageType.CELL_BATCH):
            for change in message.cells:
                self.world.put_cell(change.state, (change.x, change.y))
        else:
            raise MessageError(f"Unknown message type {kind!r}")
        self.messages_applied += 1

    def apply_all(self, stream: Iterable[Message]) -> int:
        count = 0
        for message in stream:
            self.apply(message)
            count += 1
        return count
