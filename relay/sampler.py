import threading
from typing import Callable, Optional

from .logs import log_error, log_info
from .messages import OUTPUT_NAME, Message, TemperatureReading
from .sensor import read_thermal_zone_temp


def build_temp_message(message_number: int, read_temp: Callable[[], float]) -> TemperatureReading:
    return TemperatureReading(message_number=message_number, thermal_zone0_temp=read_temp())


def send_temp_messages(
    client,
    delay_ms: int,
    stop: threading.Event,
    read_temp: Callable[[], float] = read_thermal_zone_temp,
    wait: Optional[Callable[[float], object]] = None,
) -> int:
    """
    Samples the temperature and publishes it on output1 until `stop` is set.

    Every iteration consumes one message number, whether or not the read
    or the publish worked. Failures are logged and the loop keeps going.
    Returns the number of iterations run.
    """
    wait = wait or stop.wait
    delay_s = delay_ms / 1000

    log_info("sampler_start", delay_ms=delay_ms, output=OUTPUT_NAME)

    i = 0
    while not stop.is_set():
        try:
            reading = build_temp_message(i, read_temp)
            body = reading.to_json()
            log_info("sending_message", message_number=i, body=body)
            client.send_event(OUTPUT_NAME, Message(payload=body.encode("utf-8")))
        except Exception as e:
            log_error("send_failed", message_number=i, err=repr(e))

        i += 1
        wait(delay_s)

    return i
