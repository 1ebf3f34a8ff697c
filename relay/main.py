import signal
import threading
from functools import partial
from typing import Optional

from .config import Settings, load_settings
from .errors import ConfigurationError
from .logs import log_error, log_info
from .messages import INPUT_NAME
from .module_client import ModuleClient
from .pipe import pipe_message
from .sampler import send_temp_messages
from .sensor import read_thermal_zone_temp


def install_signal_handlers(stop: threading.Event, client: ModuleClient) -> None:
    def _handle(signum, frame):
        log_info("shutdown", signal=signal.Signals(signum).name)
        stop.set()
        client.close()

    signal.signal(signal.SIGINT, _handle)
    signal.signal(signal.SIGTERM, _handle)


def start_sampler(client: ModuleClient, settings: Settings, stop: threading.Event) -> threading.Thread:
    t = threading.Thread(
        target=send_temp_messages,
        name="sampler",
        args=(client, settings.delay_ms, stop),
        kwargs={"read_temp": partial(read_thermal_zone_temp, settings.thermal_zone_path)},
        daemon=True,
    )
    t.start()
    return t


def run(settings: Settings, client: Optional[ModuleClient] = None, stop: Optional[threading.Event] = None) -> None:
    stop = stop or threading.Event()
    client = client or ModuleClient.create_from_environment(settings)

    client.open()
    client.set_input_message_handler(INPUT_NAME, pipe_message, client)
    start_sampler(client, settings, stop)

    try:
        client.run_forever()
    except ConfigurationError as e:
        log_error("relay_stopped", err=str(e))
        raise
    finally:
        stop.set()


def main():
    settings = load_settings()
    log_info(
        "relay_start",
        mqtt_host=settings.mqtt_host,
        mqtt_port=settings.mqtt_port,
        module_id=settings.module_id,
        delay_ms=settings.delay_ms,
    )

    stop = threading.Event()
    client = ModuleClient.create_from_environment(settings)
    install_signal_handlers(stop, client)
    run(settings, client=client, stop=stop)


if __name__ == "__main__":
    main()
