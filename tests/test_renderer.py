"""Viewer behaviour that does not need a real screen (SDL dummy video driver)."""

from types import SimpleNamespace

import pytest

pygame = pytest.importorskip("pygame")

import messages
from messages import RunRequest
from transport import QueueTransport
from world_map import CellState


@pytest.fixture
def gui(monkeypatch):
    monkeypatch.setenv("SDL_VIDEODRIVER", "dummy")
    from renderer import PathfindingGUI

    requests = []

    def request_run(request):
        requests.append(request)
        return True

    window = PathfindingGUI(QueueTransport(), request_run,
                            RunRequest(world_width=10, world_height=8, step_delay_ms=0))
    window.requests = requests
    yield window
    pygame.quit()


def press(gui, key):
    gui.handle_key(SimpleNamespace(key=key))


def test_restart_sends_request_and_locks_on_run_start(gui):
    press(gui, pygame.K_r)
    assert len(gui.requests) == 1
    assert not gui.mirror.busy

    gui.mirror.apply(messages.run_start())
    press(gui, pygame.K_r)
    assert len(gui.requests) == 1

    gui.mirror.apply(messages.run_end())
    press(gui, pygame.K_r)
    assert len(gui.requests) == 2


def test_unanswered_request_does_not_lock(gui):
    press(gui, pygame.K_r)
    press(gui, pygame.K_r)
    assert len(gui.requests) == 2
    assert not gui.mirror.busy


def test_rejected_request_does_not_lock(gui):
    gui.request_run = lambda request: False
    press(gui, pygame.K_r)
    assert not gui.mirror.busy


def test_sent_request_is_a_copy(gui):
    press(gui, pygame.K_r)
    assert gui.requests[0] == gui.request
    assert gui.requests[0] is not gui.request


def test_invalid_request_not_sent(gui):
    gui.request.world_width = 3
    press(gui, pygame.K_r)
    assert gui.requests == []
    assert not gui.mirror.busy


def test_select_algorithm_by_number(gui):
    press(gui, pygame.K_2)
    assert gui.request.algorithm_index == 1
    press(gui, pygame.K_9)
    assert gui.request.algorithm_index == 1


def test_toggles_and_quit(gui):
    press(gui, pygame.K_g)
    assert not gui.grid_enabled
    press(gui, pygame.K_u)
    assert not gui.restart_message
    press(gui, pygame.K_ESCAPE)
    assert not gui.running


def test_draw_after_updates(gui):
    gui.transport.publish(messages.run_start())
    gui.transport.publish(messages.cell_batch([messages.CellChange(CellState.WALL, 1, 1)]))
    gui.mirror.apply_all(gui.transport.drain())

    gui.draw_world()
    gui.draw_grid()
    gui.draw_info()
    assert gui.mirror.busy
