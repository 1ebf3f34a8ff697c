import threading

from .errors import ConfigurationError
from .logs import log_error, log_info
from .messages import OUTPUT_NAME, Message, MessageResponse
from .module_client import ModuleClient


class AtomicCounter:
    def __init__(self, start: int = 0):
        self._value = start
        self._lock = threading.Lock()

    def increment(self) -> int:
        with self._lock:
            self._value += 1
            return self._value

    @property
    def value(self) -> int:
        return self._value


counter = AtomicCounter()


def pipe_message(message: Message, user_context: object) -> MessageResponse:
    """
    Forwards an input1 message to output1 unchanged.

    Called on the dispatcher thread, so the publish is fire-and-forget.
    The inbound message is always reported as completed.
    """
    counter_value = counter.increment()

    if not isinstance(user_context, ModuleClient):
        raise ConfigurationError("user context doesn't contain the expected module client")
    client = user_context

    body = message.body_text()
    log_info("message_received", counter=counter_value, body=body)

    if body:
        try:
            client.send_event(OUTPUT_NAME, message.copy(), wait=False)
            log_info("message_piped", counter=counter_value, properties=len(message.properties))
        except Exception as e:
            log_error("pipe_failed", counter=counter_value, err=repr(e))

    return MessageResponse.COMPLETED
