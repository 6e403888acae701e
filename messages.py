import json
import math
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional, Sequence

import config
from world_map import CellState


class MessageError(ValueError):
    pass


class InvalidRequest(ValueError):
    pass


class MessageType(Enum):
    RUN_START = "run_start"
    RUN_END = "run_end"
    MAP_RESET = "map_reset"
    CELL_UPDATE = "cell_update"
    CELL_BATCH = "cell_batch"


class CellChange(NamedTuple):
    state: CellState
    x: int
    y: int


@dataclass
class Message:
    type: MessageType
    cells: List[CellChange] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": self.type.value}
        if self.type in (MessageType.CELL_UPDATE, MessageType.CELL_BATCH):
            data["cells"] = [[c.state.value, c.x, c.y] for c in self.cells]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Message":
        try:
            message_type = MessageType(data["type"])
            cells = [CellChange(CellState(state), int(x), int(y))
                     for state, x, y in data.get("cells", [])]
        except (KeyError, TypeError, ValueError) as e:
            raise MessageError(f"Malformed message {data!r}: {e}") from e

        if message_type is MessageType.CELL_UPDATE and len(cells) != 1:
            raise MessageError(f"cell_update carries exactly one cell, got {len(cells)}")
        return cls(message_type, cells)


def run_start() -> Message:
    return Message(MessageType.RUN_START)


def run_end() -> Message:
    return Message(MessageType.RUN_END)


def map_reset() -> Message:
    return Message(MessageType.MAP_RESET)


def cell_update(change: CellChange) -> Message:
    return Message(MessageType.CELL_UPDATE, [change])


def cell_batch(changes: Sequence[CellChange]) -> Message:
    return Message(MessageType.CELL_BATCH, list(changes))


@dataclass
class RunRequest:
    world_width: int = config.WORLD_WIDTH
    world_height: int = config.WORLD_HEIGHT
    has_boundary: bool = config.HAS_BOUNDARY
    step_delay_ms: float = config.STEP_DELAY_MS
    max_batch_size: int = config.MAX_CELL_QUEUE
    algorithm_index: int = 0
    seed: Optional[int] = None

    @property
    def step_delay(self) -> float:
        """Delay in seconds; non-positive values mean no animation."""
        return max(self.step_delay_ms, 0) / 1000

    def validate(self, algorithm_count: Optional[int] = None) -> "RunRequest":
        for name in ("world_width", "world_height"):
            value = getattr(self, name)
            if not isinstance(value, int) or not config.MIN_WORLD_SIZE <= value <= config.MAX_WORLD_SIZE:
                raise InvalidRequest(
                    f"{name} must be an integer in [{config.MIN_WORLD_SIZE}, {config.MAX_WORLD_SIZE}], got {value!r}")

        if math.isnan(self.step_delay_ms) or self.step_delay_ms > config.MAX_STEP_DELAY_MS:
            raise InvalidRequest(
                f"step_delay_ms must be at most {config.MAX_STEP_DELAY_MS}, got {self.step_delay_ms!r}")

        if not isinstance(self.max_batch_size, int) or self.max_batch_size < 1:
            raise InvalidRequest(f"max_batch_size must be a positive integer, got {self.max_batch_size!r}")

        if algorithm_count is not None and not 0 <= self.algorithm_index < algorithm_count:
            raise InvalidRequest(f"Unknown algorithm index {self.algorithm_index}")
        return self

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RunRequest":
        try:
            return cls(
                world_width=int(data["world_width"]),
                world_height=int(data["world_height"]),
                has_boundary=bool(data["has_boundary"]),
                step_delay_ms=float(data["step_delay_ms"]),
                max_batch_size=int(data["max_batch_size"]),
                algorithm_index=int(data["algorithm_index"]),
                seed=data.get("seed"),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise MessageError(f"Malformed run request {data!r}: {e}") from e


def encode(item) -> bytes:
    """Serialize a Message or RunRequest to a JSON payload."""
    return json.dumps(item.to_dict()).encode()


def decode_message(payload: bytes) -> Message:
    return Message.from_dict(_load(payload))


def decode_request(payload: bytes) -> RunRequest:
    return RunRequest.from_dict(_load(payload))


def _load(payload: bytes) -> Dict[str, Any]:
    try:
        data = json.loads(payload.decode())
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MessageError(f"Payload is not JSON: {e}") from e
    if not isinstance(data, dict):
        raise MessageError(f"Expected a JSON object, got {type(data).__name__}")
    return data
