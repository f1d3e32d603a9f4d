import pytest

from sousvide_web.errors import InvalidUnit
from sousvide_web.units import (
    TemperatureUnit,
    convert,
    format_temperature,
    from_kelvin,
    suffix_for,
    to_kelvin,
)


@pytest.mark.parametrize("unit", list(TemperatureUnit))
@pytest.mark.parametrize("value", [0.0, 77.0, 273.15, 290.0, 373.15, 1234.5678, -40.0])
def test_to_kelvin_inverts_from_kelvin(unit, value):
    assert to_kelvin(from_kelvin(value, unit), unit) == pytest.approx(value, abs=1e-9)


def test_from_kelvin_reference_points():
    assert from_kelvin(273.15, TemperatureUnit.CELSIUS) == 0.0
    assert from_kelvin(273.15, TemperatureUnit.FAHRENHEIT) == 32.0
    assert from_kelvin(373.15, TemperatureUnit.FAHRENHEIT) == pytest.approx(212.0)
    assert from_kelvin(310.0, TemperatureUnit.KELVIN) == 310.0


def test_celsius_to_kelvin_adds_offset():
    assert to_kelvin(0.0, TemperatureUnit.CELSIUS) == pytest.approx(273.15)
    assert to_kelvin(100.0, TemperatureUnit.CELSIUS) == pytest.approx(373.15)


def test_fahrenheit_to_kelvin():
    assert to_kelvin(32.0, TemperatureUnit.FAHRENHEIT) == pytest.approx(273.15)
    assert to_kelvin(212.0, TemperatureUnit.FAHRENHEIT) == pytest.approx(373.15)


def test_values_below_absolute_zero_are_not_rejected():
    assert from_kelvin(-10.0, TemperatureUnit.CELSIUS) == pytest.approx(-283.15)
    assert to_kelvin(-500.0, TemperatureUnit.FAHRENHEIT) < 0


def test_raw_integer_units_are_accepted():
    assert from_kelvin(273.15, 1) == 0.0
    assert to_kelvin(32.0, 2) == pytest.approx(273.15)


def test_conversion_rejects_unknown_unit():
    with pytest.raises(InvalidUnit):
        from_kelvin(300.0, 3)
    with pytest.raises(InvalidUnit):
        to_kelvin(300.0, "rankine")


def test_suffixes():
    assert suffix_for(TemperatureUnit.KELVIN) == " K"
    assert suffix_for(TemperatureUnit.CELSIUS) == " C"
    assert suffix_for(TemperatureUnit.FAHRENHEIT) == " F"


@pytest.mark.parametrize("value", [5, -1, "rankine", None])
def test_unknown_suffix_falls_back_to_kelvin(value):
    assert suffix_for(value) == " K"


@pytest.mark.parametrize(
    "raw, expected",
    [
        (TemperatureUnit.CELSIUS, TemperatureUnit.CELSIUS),
        (0, TemperatureUnit.KELVIN),
        ("2", TemperatureUnit.FAHRENHEIT),
        ("kelvin", TemperatureUnit.KELVIN),
        ("Celsius", TemperatureUnit.CELSIUS),
        (" FAHRENHEIT ", TemperatureUnit.FAHRENHEIT),
    ],
)
def test_parse_accepts_members_numbers_and_names(raw, expected):
    assert TemperatureUnit.parse(raw) is expected


@pytest.mark.parametrize("raw", [3, -1, "", "centigrade", True, 1.0, None])
def test_parse_rejects_everything_else(raw):
    with pytest.raises(InvalidUnit):
        TemperatureUnit.parse(raw)


def test_invalid_unit_is_a_value_error():
    assert issubclass(InvalidUnit, ValueError)


def test_convert_goes_through_kelvin():
    assert convert(100.0, TemperatureUnit.CELSIUS, TemperatureUnit.FAHRENHEIT) == pytest.approx(212.0)
    assert convert(-40.0, TemperatureUnit.FAHRENHEIT, TemperatureUnit.CELSIUS) == pytest.approx(-40.0)


def test_format_temperature():
    assert format_temperature(273.15, TemperatureUnit.CELSIUS) == "0.0 C"
    assert format_temperature(290.0, TemperatureUnit.FAHRENHEIT, precision=2) == "62.33 F"
    assert format_temperature(None, TemperatureUnit.KELVIN) == "--"
