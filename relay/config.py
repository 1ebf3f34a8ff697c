import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .errors import ConfigurationError


DEFAULT_CONFIG_PATH = "config/appsettings.json"
DEFAULT_DELAY_MS = 5000
DEFAULT_MODULE_ID = "rpicputemp"
THERMAL_ZONE0_PATH = "/sys/class/thermal/thermal_zone0/temp"


@dataclass(frozen=True)
class Settings:
    delay_ms: int
    mqtt_host: str
    mqtt_port: int
    mqtt_keepalive: int
    mqtt_username: Optional[str]
    mqtt_password: Optional[str]
    mqtt_tls: bool
    module_id: str
    topic_prefix: str
    publish_timeout_s: float
    thermal_zone_path: str


def read_json_file(path: str) -> Dict[str, Any]:
    """
    Loads the optional JSON settings file.

    A missing file is fine (empty config); a file that exists but is not a
    JSON object is a configuration error.
    """
    p = Path(path)
    if not p.exists():
        return {}

    try:
        with open(p, "r", encoding="utf-8") as f:
            obj = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"{path}: invalid JSON ({e})") from e

    if not isinstance(obj, dict):
        raise ConfigurationError(f"{path}: expected a JSON object")
    return obj


class _Layered:
    # environment first, then the JSON file; keys compared case-insensitively on both sides

    def __init__(self, env: Mapping[str, str], file_values: Dict[str, Any]):
        self._env = {k.upper(): v for k, v in env.items()}
        self._file = {k.upper(): v for k, v in file_values.items()}

    def get(self, key: str, default: Any = None) -> Any:
        if key in self._env:
            return self._env[key]
        return self._file.get(key, default)


def _as_int(name: str, raw: Any) -> int:
    if isinstance(raw, bool):
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")
    try:
        return int(raw)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e


def _as_float(name: str, raw: Any) -> float:
    try:
        return float(raw)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e


def _as_bool(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    return str(raw).strip().lower() in ("1", "true", "yes", "on")


def load_settings(
    environ: Optional[Mapping[str, str]] = None,
    config_path: Optional[str] = None,
) -> Settings:
    env = os.environ if environ is None else environ
    path = config_path or env.get("RELAY_CONFIG", DEFAULT_CONFIG_PATH)
    cfg = _Layered(env, read_json_file(path))

    delay_ms = _as_int("DELAY", cfg.get("DELAY", DEFAULT_DELAY_MS))
    if delay_ms < 0:
        raise ConfigurationError(f"DELAY must be >= 0, got {delay_ms}")

    mqtt_port = _as_int("MQTT_PORT", cfg.get("MQTT_PORT", 1883))
    if not 0 < mqtt_port < 65536:
        raise ConfigurationError(f"MQTT_PORT out of range: {mqtt_port}")

    module_id = str(cfg.get("MODULE_ID", DEFAULT_MODULE_ID))

    return Settings(
        delay_ms=delay_ms,
        mqtt_host=str(cfg.get("MQTT_HOST", "localhost")),
        mqtt_port=mqtt_port,
        mqtt_keepalive=_as_int("MQTT_KEEPALIVE", cfg.get("MQTT_KEEPALIVE", 30)),
        mqtt_username=cfg.get("MQTT_USERNAME"),
        mqtt_password=cfg.get("MQTT_PASSWORD"),
        mqtt_tls=_as_bool(cfg.get("MQTT_TLS", False)),
        module_id=module_id,
        topic_prefix=str(cfg.get("TOPIC_PREFIX", f"modules/{module_id}")).rstrip("/"),
        publish_timeout_s=_as_float("PUBLISH_TIMEOUT_S", cfg.get("PUBLISH_TIMEOUT_S", 5.0)),
        thermal_zone_path=str(cfg.get("THERMAL_ZONE_PATH", THERMAL_ZONE0_PATH)),
    )
