import queue
from typing import Iterator, Optional

import paho.mqtt.client as mqtt

import config
import messages
from logger import get_logger
from messages import Message, MessageError, RunRequest
from path_generator import PathGenerator

log = get_logger(__name__)


class QueueTransport:
    """In-process message stream between the producer thread and the viewer."""

    def __init__(self):
        self._queue: "queue.Queue[Message]" = queue.Queue()

    def publish(self, message: Message) -> None:
        self._queue.put(message)

    def drain(self, limit: Optional[int] = None) -> Iterator[Message]:
        """Yield queued messages in arrival order without blocking."""
        count = 0
        while limit is None or count < limit:
            try:
                message = self._queue.get_nowait()
            except queue.Empty:
                return
            count += 1
            yield message

    def __len__(self):
        return self._queue.qsize()


def _connect(client: mqtt.Client, name: str, broker: str, port: int) -> bool:
    try:
        client.connect(broker, port, config.MQTT_KEEPALIVE)
        client.loop_start()
        return True
    except OSError as e:
        log.warning("%s MQTT connection to %s:%d failed: %s", name, broker, port, e)
        return False


class MqttProducer:
    """Runs path generation for requests received over MQTT and publishes the updates."""

    def __init__(self, client_id: str = "PATH_GENERATOR",
                 broker: str = config.MQTT_BROKER, port: int = config.MQTT_PORT):
        self.client_id = client_id
        self.generator = PathGenerator(self.publish)

        self.mqtt_client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2, client_id=client_id)
        self.mqtt_client.on_connect = self.on_connect
        self.mqtt_client.on_message = self.on_message
        self.connected = _connect(self.mqtt_client, client_id, broker, port)

    def on_connect(self, client, userdata, flags, reason_code, properties):
        log.info("%s connected to MQTT broker (%s)", self.client_id, reason_code)
        client.subscribe(config.MQTT_TOPIC_RUN_REQUEST, qos=config.MQTT_QOS)

    def on_message(self, client, userdata, msg):
        if msg.topic != config.MQTT_TOPIC_RUN_REQUEST:
            return
        try:
            request = messages.decode_request(msg.payload)
        except MessageError as e:
            log.warning("%s ignoring run request: %s", self.client_id, e)
            return
        self.generator.request_run(request)

    def publish(self, message: Message) -> None:
        self.mqtt_client.publish(config.MQTT_TOPIC_UPDATES, messages.encode(message),
                                 qos=config.MQTT_QOS)

    def close(self) -> None:
        self.mqtt_client.loop_stop()
        self.mqtt_client.disconnect()


class MqttViewerBridge:
    """Feeds updates received over MQTT into a QueueTransport and sends run requests back."""

    def __init__(self, transport: QueueTransport, client_id: str = "PATH_VIEWER",
                 broker: str = config.MQTT_BROKER, port: int = config.MQTT_PORT):
        self.client_id = client_id
        self.transport = transport

        self.mqtt_client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2, client_id=client_id)
        self.mqtt_client.on_connect = self.on_connect
        self.mqtt_client.on_message = self.on_message
        self.connected = _connect(self.mqtt_client, client_id, broker, port)

    def on_connect(self, client, userdata, flags, reason_code, properties):
        log.info("%s connected to MQTT broker (%s)", self.client_id, reason_code)
        client.subscribe(config.MQTT_TOPIC_UPDATES, qos=config.MQTT_QOS)

    def on_message(self, client, userdata, msg):
        if msg.topic != config.MQTT_TOPIC_UPDATES:
            return
        try:
            message = messages.decode_message(msg.payload)
        except MessageError as e:
            log.warning("%s dropping update: %s", self.client_id, e)
            return
        self.transport.publish(message)

    def send_run_request(self, request: RunRequest) -> bool:
        """Publish a run request; False when it could not be handed to the broker."""
        if not self.connected:
            log.warning("%s not connected, run request not sent", self.client_id)
            return False
        info = self.mqtt_client.publish(config.MQTT_TOPIC_RUN_REQUEST, messages.encode(request),
                                        qos=config.MQTT_QOS)
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            log.warning("%s failed to send run request: %s", self.client_id, mqtt.error_string(info.rc))
            return False
        return True

    def close(self) -> None:
        self.mqtt_client.loop_stop()
        self.mqtt_client.disconnect()
