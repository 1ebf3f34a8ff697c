from typing import Callable, Dict, Optional, Tuple

import paho.mqtt.client as mqtt
from paho.mqtt.packettypes import PacketTypes
from paho.mqtt.properties import Properties

from .config import Settings
from .errors import PublishError
from .logs import log_error, log_info, log_warn
from .messages import Message, MessageResponse


InputHandler = Callable[[Message, object], MessageResponse]


def to_user_properties(properties: Dict[str, str]) -> Optional[Properties]:
    if not properties:
        return None
    props = Properties(PacketTypes.PUBLISH)
    props.UserProperty = [(str(k), str(v)) for k, v in properties.items()]
    return props


def from_mqtt_message(msg) -> Message:
    # MQTT v5 user properties arrive as a list of (key, value) pairs
    pairs = getattr(msg.properties, "UserProperty", None) or []

    properties = {}
    for k, v in pairs:
        if k in properties:
            log_warn("duplicate_property", topic=msg.topic, key=k, dropped=properties[k], kept=v)
        properties[k] = v
    return Message(payload=bytes(msg.payload), properties=properties)


class ModuleClient:
    """
    Thin module-style client over paho-mqtt.

    Named inputs/outputs map to topics under the module prefix:
    <prefix>/inputs/<name> and <prefix>/outputs/<name>.

    Message properties travel as MQTT v5 user properties. A repeated key on
    an inbound message keeps its last value.
    """

    def __init__(self, client: mqtt.Client, settings: Settings):
        self._client = client
        self._settings = settings
        self._inputs: Dict[str, Tuple[InputHandler, object]] = {}
        self._connected = False

        client.on_connect = self._on_connect
        client.on_disconnect = self._on_disconnect

    @classmethod
    def create_from_environment(cls, settings: Settings) -> "ModuleClient":
        client = mqtt.Client(
            mqtt.CallbackAPIVersion.VERSION2,
            client_id=settings.module_id,
            protocol=mqtt.MQTTv5,
            transport="tcp",
            manual_ack=True,
        )
        if settings.mqtt_username:
            client.username_pw_set(settings.mqtt_username, settings.mqtt_password)
        if settings.mqtt_tls:
            client.tls_set()
        return cls(client, settings)

    def input_topic(self, name: str) -> str:
        return f"{self._settings.topic_prefix}/inputs/{name}"

    def output_topic(self, name: str) -> str:
        return f"{self._settings.topic_prefix}/outputs/{name}"

    @property
    def is_connected(self) -> bool:
        return self._connected

    def open(self) -> None:
        self._client.connect(
            self._settings.mqtt_host,
            self._settings.mqtt_port,
            keepalive=self._settings.mqtt_keepalive,
        )
        log_info(
            "module_client_initialized",
            host=self._settings.mqtt_host,
            port=self._settings.mqtt_port,
            module_id=self._settings.module_id,
        )

    def run_forever(self) -> None:
        # Handler exceptions are re-raised out of here (suppress_exceptions is off)
        self._client.loop_forever()

    def close(self) -> None:
        self._client.disconnect()

    def send_event(self, output_name: str, message: Message, wait: bool = True) -> int:
        topic = self.output_topic(output_name)
        info = self._client.publish(
            topic,
            payload=message.payload,
            qos=1,
            properties=to_user_properties(message.properties),
        )
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            raise PublishError(f"publish to {topic} failed: {mqtt.error_string(info.rc)}")

        if wait:
            timeout = self._settings.publish_timeout_s
            try:
                info.wait_for_publish(timeout=timeout)
            except (RuntimeError, ValueError) as e:
                raise PublishError(f"publish to {topic} failed: {e}") from e
            if not info.is_published():
                raise PublishError(f"publish to {topic} not confirmed after {timeout}s")

        return info.mid

    def set_input_message_handler(self, input_name: str, handler: InputHandler, user_context: object) -> None:
        topic = self.input_topic(input_name)
        self._inputs[topic] = (handler, user_context)
        self._client.message_callback_add(topic, self._dispatch)
        if self._connected:
            self._client.subscribe(topic, qos=1)

    def _on_connect(self, client, userdata, flags, reason_code, properties=None):
        if reason_code.is_failure:
            log_error("mqtt_connect_refused", rc=str(reason_code))
            return

        self._connected = True
        log_info("mqtt_connected", rc=str(reason_code), inputs=list(self._inputs))
        for topic in self._inputs:
            client.subscribe(topic, qos=1)

    def _on_disconnect(self, client, userdata, flags, reason_code, properties=None):
        self._connected = False
        log_warn("mqtt_disconnected", rc=str(reason_code))

    def _dispatch(self, client, userdata, msg):
        handler, user_context = self._inputs[msg.topic]
        response = handler(from_mqtt_message(msg), user_context)

        if response is MessageResponse.COMPLETED:
            client.ack(msg.mid, msg.qos)
        else:
            log_warn("message_not_acknowledged", topic=msg.topic, response=getattr(response, "value", response))
