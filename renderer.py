from dataclasses import replace
from typing import Callable, Optional, Tuple

import pygame

import config
from algorithms import AVAILABLE_ALGORITHMS
from logger import get_logger
from messages import InvalidRequest, RunRequest
from transport import QueueTransport
from world_map import CellState
from world_mirror import WorldMirror

log = get_logger(__name__)

RequestRun = Callable[[RunRequest], bool]


class PathfindingGUI:
    """pygame viewer: applies streamed updates to a WorldMirror and draws it."""

    def __init__(self, transport: QueueTransport, request_run: RequestRun,
                 request: Optional[RunRequest] = None):
        pygame.init()
        self.transport = transport
        self.request_run = request_run
        self.request = request or RunRequest()
        self.mirror = WorldMirror(self.request.world_width, self.request.world_height,
                                  self.request.has_boundary)

        self.screen = pygame.display.set_mode((config.WINDOW_WIDTH, config.WINDOW_HEIGHT),
                                              pygame.RESIZABLE)
        pygame.display.set_caption("Pathfinding Visualizer")
        self.clock = pygame.time.Clock()
        self.font = pygame.font.Font(None, 36)
        self.small_font = pygame.font.Font(None, 24)

        self.grid_enabled = True
        self.restart_message = True
        self.running = True

    @property
    def algorithm(self):
        return AVAILABLE_ALGORITHMS[self.request.algorithm_index]

    def layout(self) -> Tuple[int, int, int]:
        """Cell size and top-left pixel of cell (0, 0), leaving room for the boundary ring."""
        width, height = self.screen.get_size()
        world = self.mirror.world
        border = 1 if world.has_boundary else 0
        scale = max(1, min(width // (world.width + 2 * border),
                           height // (world.height + 2 * border)))
        origin_x = (width - world.width * scale) // 2
        origin_y = (height - world.height * scale) // 2
        return scale, origin_x, origin_y

    def generate_path(self):
        if self.mirror.busy:
            return
        try:
            self.request.validate(len(AVAILABLE_ALGORITHMS))
        except InvalidRequest as e:
            log.warning("Not sending run request: %s", e)
            return
        self.mirror.resize(self.request.world_width, self.request.world_height,
                           self.request.has_boundary)
        # The mirror locks on the producer's run_start, so a dropped request never wedges the viewer
        if not self.request_run(replace(self.request)):
            log.info("Run request not accepted, a run may already be in progress")

    def select_algorithm(self, index: int):
        if self.mirror.busy or not 0 <= index < len(AVAILABLE_ALGORITHMS):
            return
        self.request.algorithm_index = index
        log.info("Selected algorithm: %s", self.algorithm.long_name)

    def handle_key(self, event):
        key = pygame.key.name(event.key)
        if event.key == pygame.K_ESCAPE:
            self.running = False
        elif key == config.KEY_BINDINGS["restart"]:
            self.generate_path()
        elif key == config.KEY_BINDINGS["toggle_grid"]:
            self.grid_enabled = not self.grid_enabled
        elif key == config.KEY_BINDINGS["toggle_restart_message"]:
            self.restart_message = not self.restart_message
        elif key.isdigit():
            self.select_algorithm(int(key) - 1)

    def draw_cell(self, pos, state: CellState, scale: int, origin_x: int, origin_y: int):
        rect = pygame.Rect(origin_x + pos[0] * scale, origin_y + pos[1] * scale, scale, scale)
        pygame.draw.rect(self.screen, config.CELL_COLORS[state.value], rect)

    def draw_world(self):
        scale, origin_x, origin_y = self.layout()
        world = self.mirror.world

        if world.has_boundary:
            for x in range(-1, world.width + 1):
                for y in range(-1, world.height + 1):
                    state = world.get_cell((x, y))
                    if state is not CellState.EMPTY:
                        self.draw_cell((x, y), state, scale, origin_x, origin_y)
        else:
            for pos, state in world.cells():
                self.draw_cell(pos, state, scale, origin_x, origin_y)

    def draw_grid(self):
        scale, origin_x, origin_y = self.layout()
        width, height = self.screen.get_size()
        if scale < 2:
            return

        for x in range(origin_x % scale, width + 1, scale):
            pygame.draw.line(self.screen, config.GRID_COLOR, (x, 0), (x, height))
        for y in range(origin_y % scale, height + 1, scale):
            pygame.draw.line(self.screen, config.GRID_COLOR, (0, y), (width, y))

    def draw_info(self):
        width, height = self.screen.get_size()
        status = "Searching..." if self.mirror.busy else f"Runs: {self.mirror.runs_completed}"
        text = self.small_font.render(f"{self.algorithm.long_name} ({self.algorithm.short_name}) | {status}",
                                      True, config.WHITE)
        self.screen.blit(text, (10, 10))

        if not self.mirror.busy and self.restart_message:
            key = config.KEY_BINDINGS["restart"].upper()
            text = self.font.render(f"Press {key} to generate a new path", True, config.WHITE)
            text_rect = text.get_rect(center=(width // 2, height // 2))
            self.screen.blit(text, text_rect)

    def run(self):
        while self.running:
            self.clock.tick(config.FPS)

            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    self.running = False
                elif event.type == pygame.KEYDOWN:
                    self.handle_key(event)

            self.mirror.apply_all(self.transport.drain())

            self.screen.fill(config.BLACK)
            self.draw_world()
            if self.grid_enabled:
                self.draw_grid()
            self.draw_info()

            pygame.display.flip()

        pygame.quit()
