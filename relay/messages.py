import enum
import json
from dataclasses import dataclass, field
from typing import Any, Dict


INPUT_NAME = "input1"
OUTPUT_NAME = "output1"


class MessageResponse(enum.Enum):
    COMPLETED = "completed"
    ABANDONED = "abandoned"


@dataclass
class Message:
    payload: bytes
    properties: Dict[str, str] = field(default_factory=dict)

    def body_text(self) -> str:
        return self.payload.decode("utf-8", errors="replace")

    def copy(self) -> "Message":
        # new dict, so the outbound side can never touch the inbound properties
        return Message(payload=bytes(self.payload), properties=dict(self.properties))


@dataclass(frozen=True)
class TemperatureReading:
    message_number: int
    thermal_zone0_temp: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "MessageNumber": self.message_number,
            "ThermalZone0Temp": self.thermal_zone0_temp,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())
