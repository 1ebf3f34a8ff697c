import json
import os
import time

import paho.mqtt.client as mqtt

from relay.config import load_settings
from relay.messages import INPUT_NAME
from relay.module_client import to_user_properties


DEVICE_ID = os.getenv("SIM_DEVICE_ID", "sim-001")
INTERVAL_S = float(os.getenv("SIM_INTERVAL_S", "2"))


def build_payload(seq: int) -> dict:
    return {
        "device_id": DEVICE_ID,
        "seq": seq,
        "ts": int(time.time()),
    }


def build_properties(seq: int) -> dict:
    return {"source": DEVICE_ID, "seq": str(seq)}


def main():
    settings = load_settings()
    topic = f"{settings.topic_prefix}/inputs/{INPUT_NAME}"

    client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2, protocol=mqtt.MQTTv5)
    client.connect(settings.mqtt_host, settings.mqtt_port, keepalive=30)
    client.loop_start()

    seq = 0
    try:
        while True:
            seq += 1
            payload = build_payload(seq)
            client.publish(topic, json.dumps(payload), qos=1, properties=to_user_properties(build_properties(seq)))
            print(f"[DEVICE] published topic={topic} payload={payload}", flush=True)
            time.sleep(INTERVAL_S)
    except KeyboardInterrupt:
        print("\n[DEVICE] stopping...", flush=True)
    finally:
        client.loop_stop()
        client.disconnect()


if __name__ == "__main__":
    main()
