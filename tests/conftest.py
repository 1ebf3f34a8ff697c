import pytest

from relay.config import load_settings


@pytest.fixture
def settings(tmp_path):
    """Settings with every default, no JSON file."""
    return load_settings(environ={}, config_path=str(tmp_path / "missing.json"))


@pytest.fixture
def sensor_file(tmp_path):
    def _write(content: str) -> str:
        p = tmp_path / "temp"
        p.write_text(content)
        return str(p)
    return _write
