from .config import THERMAL_ZONE0_PATH


def read_thermal_zone_temp(path: str = THERMAL_ZONE0_PATH) -> float:
    """
    Reads the CPU temperature in degrees Celsius.

    The kernel exposes one line with an integer count of milli-degrees,
    e.g. "45678\\n" -> 45.678. Read and parse errors propagate.
    """
    with open(path, "r", encoding="ascii") as f:
        line = f.readline()

    return int(line.strip()) / 1000
