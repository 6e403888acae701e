import argparse
import signal
import threading

import config
from algorithms import AVAILABLE_ALGORITHMS, find_algorithm
from logger import configure_logging, get_logger
from messages import RunRequest
from path_generator import PathGenerator
from transport import MqttProducer, MqttViewerBridge, QueueTransport

log = get_logger(__name__)


def parse_args(argv=None):
    names = ", ".join(a.short_name for a in AVAILABLE_ALGORITHMS)
    parser = argparse.ArgumentParser(description="Grid pathfinding visualizer")
    parser.add_argument("mode", nargs="?", choices=["local", "producer", "viewer"], default="local",
                        help="local: search and viewer in one process; producer/viewer: talk over MQTT")
    parser.add_argument("--width", type=int, default=config.WORLD_WIDTH)
    parser.add_argument("--height", type=int, default=config.WORLD_HEIGHT)
    parser.add_argument("--no-boundary", action="store_true", help="let the world extend past its size")
    parser.add_argument("--delay", type=float, default=config.STEP_DELAY_MS,
                        help=f"step delay in ms, 0 disables animation (max {config.MAX_STEP_DELAY_MS})")
    parser.add_argument("--batch-size", type=int, default=config.MAX_CELL_QUEUE)
    parser.add_argument("--algorithm", default=AVAILABLE_ALGORITHMS[0].short_name, help=f"one of: {names}")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--broker", default=config.MQTT_BROKER)
    parser.add_argument("--port", type=int, default=config.MQTT_PORT)
    parser.add_argument("--log-level", default="INFO")
    parser.add_argument("--log-file", default=None, help="also append log records to this file")
    args = parser.parse_args(argv)

    algorithm_index = find_algorithm(args.algorithm)
    if algorithm_index is None:
        parser.error(f"unknown algorithm {args.algorithm!r}, expected one of: {names}")
    args.request = RunRequest(
        world_width=args.width,
        world_height=args.height,
        has_boundary=not args.no_boundary,
        step_delay_ms=args.delay,
        max_batch_size=args.batch_size,
        algorithm_index=algorithm_index,
        seed=args.seed,
    )
    return args


def run_producer(args):
    producer = MqttProducer(broker=args.broker, port=args.port)
    if not producer.connected:
        return 1

    stop = threading.Event()
    signal.signal(signal.SIGINT, lambda *_: stop.set())
    log.info("Waiting for run requests on %s", config.MQTT_TOPIC_RUN_REQUEST)
    stop.wait()
    producer.close()
    return 0


def run_viewer(args, request_run, transport):
    # Imported here so the producer can run headless without pygame
    from renderer import PathfindingGUI

    PathfindingGUI(transport, request_run, args.request).run()
    return 0


def main(argv=None):
    args = parse_args(argv)
    configure_logging(args.log_level, args.log_file)

    if args.mode == "producer":
        return run_producer(args)

    transport = QueueTransport()
    if args.mode == "viewer":
        bridge = MqttViewerBridge(transport, broker=args.broker, port=args.port)
        try:
            return run_viewer(args, bridge.send_run_request, transport)
        finally:
            bridge.close()

    generator = PathGenerator(transport.publish)
    return run_viewer(args, generator.request_run, transport)


if __name__ == "__main__":
    raise SystemExit(main())
