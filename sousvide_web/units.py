from enum import IntEnum

from .errors import InvalidUnit

# Offset between the Kelvin and Celsius scales
KELVIN_OFFSET = 273.15


class TemperatureUnit(IntEnum):
    """
    Temperature unit systems understood by the web interface.
    The integer values are the ones stored in the settings file.
    """
    KELVIN = 0
    CELSIUS = 1
    FAHRENHEIT = 2

    @property
    def suffix(self) -> str:
        return _SUFFIXES[self]

    @classmethod
    def parse(cls, value) -> "TemperatureUnit":
        """
        Converts a raw value into a TemperatureUnit.

        Accepts members, integers (0, 1, 2), digit strings and unit names
        ("kelvin", "Celsius", ...). Anything else raises InvalidUnit.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise InvalidUnit(f"Invalid temperature unit: {value!r}")
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError as e:
                raise InvalidUnit(f"Invalid temperature unit: {value!r}") from e
        if isinstance(value, str):
            key = value.strip()
            if key.isdigit():
                return cls.parse(int(key))
            try:
                return cls[key.upper()]
            except KeyError as e:
                raise InvalidUnit(f"Invalid temperature unit: {value!r}") from e
        raise InvalidUnit(f"Invalid temperature unit: {value!r}")


_SUFFIXES = {
    TemperatureUnit.KELVIN: " K",
    TemperatureUnit.CELSIUS: " C",
    TemperatureUnit.FAHRENHEIT: " F",
}


def suffix_for(unit) -> str:
    """Display suffix for a unit. Unrecognized values fall back to Kelvin."""
    try:
        return TemperatureUnit.parse(unit).suffix
    except InvalidUnit:
        return _SUFFIXES[TemperatureUnit.KELVIN]


def from_kelvin(value: float, unit) -> float:
    """Convert a temperature in Kelvin into the given unit system."""
    unit = TemperatureUnit.parse(unit)
    if unit is TemperatureUnit.CELSIUS:
        return value - KELVIN_OFFSET
    if unit is TemperatureUnit.FAHRENHEIT:
        return (value - KELVIN_OFFSET) * 1.8 + 32
    return value


def to_kelvin(value: float, unit) -> float:
    """Convert a temperature expressed in the given unit system into Kelvin."""
    unit = TemperatureUnit.parse(unit)
    if unit is TemperatureUnit.CELSIUS:
        return value + KELVIN_OFFSET
    if unit is TemperatureUnit.FAHRENHEIT:
        return (value - 32) / 1.8 + KELVIN_OFFSET
    return value


def convert(value: float, source, target) -> float:
    return from_kelvin(to_kelvin(value, source), target)


def format_temperature(value_kelvin: float | None, unit, precision: int = 1) -> str:
    """Render a Kelvin reading for display, e.g. '62.3 F'. None renders as '--'."""
    if value_kelvin is None:
        return "--"
    return f"{from_kelvin(value_kelvin, unit):.{precision}f}{suffix_for(unit)}"
