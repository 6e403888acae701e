"""Tests for the single-flight producer run controller."""

import math
import random
import threading

import pytest

from messages import MessageType, RunRequest
from path_generator import PathGenerator, RunState, place_random_walls
from world_map import CellState, GridWorld


def request(**kwargs):
    defaults = dict(world_width=12, world_height=10, step_delay_ms=0, max_batch_size=10,
                    algorithm_index=0, seed=7)
    defaults.update(kwargs)
    return RunRequest(**defaults)


class TestGeneratePath:
    def test_message_sequence(self):
        sent = []
        generator = PathGenerator(sent.append)
        result = generator.generate_path(request())

        types = [m.type for m in sent]
        assert types[0] is MessageType.RUN_START
        assert types[1] is MessageType.MAP_RESET
        assert types[-1] is MessageType.RUN_END
        assert set(types[2:-1]) == {MessageType.CELL_BATCH}
        assert generator.state is RunState.IDLE
        assert generator.last_result is result

    def test_batches_respect_size(self):
        sent = []
        PathGenerator(sent.append).generate_path(request(max_batch_size=6))
        batches = [m for m in sent if m.type is MessageType.CELL_BATCH]
        assert all(len(m.cells) == 6 for m in batches[:-1])
        assert 1 <= len(batches[-1].cells) <= 6

    def test_animated_run_sends_single_updates(self, monkeypatch):
        monkeypatch.setattr("pathfinding.time.sleep", lambda seconds: None)
        sent = []
        PathGenerator(sent.append).generate_path(request(step_delay_ms=5))
        assert set(m.type for m in sent[2:-1]) == {MessageType.CELL_UPDATE}

    def test_result_path_connects_start_and_goal(self):
        for seed in range(10):
            result = PathGenerator(lambda m: None).generate_path(request(seed=seed))
            assert result.start != result.goal or result.path == [result.start]
            if result.found:
                assert result.path[0] == result.start
                assert result.path[-1] == result.goal

    def test_same_seed_same_stream(self):
        first, second = [], []
        PathGenerator(first.append).generate_path(request(seed=11, algorithm_index=1))
        PathGenerator(second.append).generate_path(request(seed=11, algorithm_index=1))
        assert first == second

    def test_start_and_goal_marked_in_stream(self):
        sent = []
        result = PathGenerator(sent.append).generate_path(request(seed=3))
        cells = [c for m in sent for c in m.cells]
        assert (CellState.START, result.start.x, result.start.y) in cells
        if result.goal != result.start:
            assert (CellState.GOAL, result.goal.x, result.goal.y) in cells

    def test_failure_releases_lock(self):
        def broken_publish(message):
            if message.type is MessageType.MAP_RESET:
                raise RuntimeError("consumer gone")

        generator = PathGenerator(broken_publish)
        with pytest.raises(RuntimeError):
            generator.generate_path(request())
        assert generator.state is RunState.IDLE


class TestSingleFlight:
    def test_request_while_running_is_dropped(self):
        gate = threading.Event()
        sent = []

        def slow_publish(message):
            gate.wait(5)
            sent.append(message)

        generator = PathGenerator(slow_publish)
        assert generator.request_run(request())
        assert generator.is_running

        assert generator.request_run(request(seed=99)) is False
        assert generator.generate_path(request(seed=99)) is None

        gate.set()
        assert generator.wait(5)
        assert generator.state is RunState.IDLE
        assert [m.type for m in sent].count(MessageType.RUN_START) == 1

        assert generator.request_run(request())
        assert generator.wait(5)
        assert [m.type for m in sent].count(MessageType.RUN_END) == 2

    def test_wait_without_run(self):
        assert PathGenerator(lambda m: None).wait(0.1)


class TestRandomWalls:
    def test_never_walls_start_or_goal(self):
        for seed in range(20):
            world = GridWorld(9, 9)
            start, goal = (seed % 9, 0), (8, seed % 9)
            attempts = place_random_walls(world, start, goal, random.Random(seed))
            assert attempts == math.ceil(81 / 3)
            assert world.get_cell(start) is CellState.EMPTY
            assert world.get_cell(goal) is CellState.EMPTY

    def test_walls_placed(self):
        world = GridWorld(20, 20)
        place_random_walls(world, (0, 0), (19, 19), random.Random(1))
        walls = [pos for pos, state in world.cells() if state is CellState.WALL]
        assert 0 < len(walls) <= math.ceil(400 / 3)


class TestRunEndHandoff:
    def test_request_on_run_end_is_accepted(self):
        accepted = []

        def publish(message):
            if message.type is MessageType.RUN_END and not accepted:
                accepted.append(generator.request_run(request(seed=5)))

        generator = PathGenerator(publish)
        generator.generate_path(request())
        assert accepted == [True]
        assert generator.wait(5)

    def test_idle_when_run_end_is_seen(self):
        states = []

        def publish(message):
            if message.type is MessageType.RUN_END:
                states.append(generator.state)

        generator = PathGenerator(publish)
        generator.generate_path(request())
        assert states == [RunState.IDLE]

    def test_next_run_starts_after_previous_run_end(self):
        sent = []
        generator = PathGenerator(sent.append)

        def publish(message):
            sent.append(message)
            if message.type is MessageType.RUN_END:
                generator.publish = sent.append
                generator.request_run(request(seed=6))

        generator.publish = publish
        generator.generate_path(request(max_batch_size=3))
        assert generator.wait(5)

        types = [m.type for m in sent]
        assert types.count(MessageType.RUN_START) == 2
        first_end = types.index(MessageType.RUN_END)
        second_start = types.index(MessageType.RUN_START, 1)
        assert first_end < second_start
        assert types[-1] is MessageType.RUN_END

    def test_unbounded_world_runs_finish(self):
        for seed in range(5):
            sent = []
            PathGenerator(sent.append).generate_path(request(has_boundary=False, seed=seed))
            assert sent[-1].type is MessageType.RUN_END
