import json

import pytest

from relay.config import THERMAL_ZONE0_PATH, load_settings
from relay.errors import ConfigurationError


@pytest.fixture
def config_file(tmp_path):
    def _write(obj) -> str:
        p = tmp_path / "appsettings.json"
        p.write_text(obj if isinstance(obj, str) else json.dumps(obj))
        return str(p)
    return _write


def test_defaults(settings):
    assert settings.delay_ms == 5000
    assert settings.mqtt_host == "localhost"
    assert settings.mqtt_port == 1883
    assert settings.module_id == "rpicputemp"
    assert settings.topic_prefix == "modules/rpicputemp"
    assert settings.thermal_zone_path == THERMAL_ZONE0_PATH
    assert settings.mqtt_tls is False


def test_json_file_is_read_case_insensitively(config_file):
    s = load_settings(environ={}, config_path=config_file({"Delay": 1000, "mqtt_host": "hub"}))
    assert s.delay_ms == 1000
    assert s.mqtt_host == "hub"


def test_environment_wins_over_file(config_file):
    s = load_settings(environ={"DELAY": "250"}, config_path=config_file({"Delay": 1000}))
    assert s.delay_ms == 250


def test_config_path_from_environment(config_file):
    path = config_file({"Delay": 42})
    assert load_settings(environ={"RELAY_CONFIG": path}).delay_ms == 42


def test_topic_prefix_follows_module_id():
    s = load_settings(environ={"MODULE_ID": "cpu2"}, config_path="/nonexistent.json")
    assert s.topic_prefix == "modules/cpu2"


def test_tls_flag():
    assert load_settings(environ={"MQTT_TLS": "true"}, config_path="/nonexistent.json").mqtt_tls is True


@pytest.mark.parametrize("env", [
    {"DELAY": "soon"},
    {"DELAY": "-1"},
    {"MQTT_PORT": "0"},
    {"MQTT_PORT": "abc"},
    {"PUBLISH_TIMEOUT_S": "x"},
])
def test_invalid_values(env):
    with pytest.raises(ConfigurationError):
        load_settings(environ=env, config_path="/nonexistent.json")


def test_invalid_json_file(config_file):
    with pytest.raises(ConfigurationError):
        load_settings(environ={}, config_path=config_file("{not json"))


def test_json_file_must_be_object(config_file):
    with pytest.raises(ConfigurationError):
        load_settings(environ={}, config_path=config_file([1, 2]))


@pytest.mark.parametrize("key", ["Delay", "delay", "DELAY"])
def test_environment_keys_are_case_insensitive(key):
    assert load_settings(environ={key: "1000"}, config_path="/nonexistent.json").delay_ms == 1000


def test_mixed_case_environment_still_wins_over_file(config_file):
    s = load_settings(environ={"Delay": "250"}, config_path=config_file({"DELAY": 1000}))
    assert s.delay_ms == 250
