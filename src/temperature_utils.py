#!/usr/bin/env python3
"""
Temperature conversion utilities for the converter
Handles conversion between Celsius and Fahrenheit and display formatting
"""

from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Union


def celsius_to_fahrenheit(celsius: float) -> float:
    """Convert Celsius to Fahrenheit

    Formula: °F = °C × 9/5 + 32

    Args:
        celsius: Temperature in degrees Celsius

    Returns:
        Temperature in degrees Fahrenheit
    """
    return celsius * 9 / 5 + 32


def fahrenheit_to_celsius(fahrenheit: float) -> float:
    """Convert Fahrenheit to Celsius

    Formula: °C = (°F - 32) × 5/9

    Args:
        fahrenheit: Temperature in degrees Fahrenheit

    Returns:
        Temperature in degrees Celsius
    """
    return (fahrenheit - 32) * 5 / 9


def _scale_name(scale) -> str:
    # Accepts plain strings as well as TemperatureScale members
    name = getattr(scale, 'display_name', scale)
    return name.lower() if isinstance(name, str) else ''


def get_unit_symbol(scale) -> str:
    """Get the display symbol for a temperature scale

    Args:
        scale: Scale name ('Celsius' or 'Fahrenheit') or a TemperatureScale

    Returns:
        Display symbol ('°C', '°F'), or a bare '°' for anything else
    """
    name = _scale_name(scale)
    if name == 'celsius':
        return '°C'
    elif name == 'fahrenheit':
        return '°F'
    else:
        return '°'  # Unknown scale


def format_number(value: Union[int, float], decimal_places: int = 2) -> str:
    """Format a number in fixed point notation

    Rounds half away from zero on the shortest decimal representation of the
    value, so 2.675 formats as '2.68' rather than the binary '2.67'.

    Args:
        value: Number to format
        decimal_places: Digits after the decimal point (default 2)

    Returns:
        Formatted string (e.g., "22.50")
    """
    if decimal_places < 0:
        raise ValueError(f"decimal_places must be non-negative: {decimal_places}")
    with localcontext() as ctx:
        # Wide enough for any finite double at any requested precision
        ctx.prec = 400 + decimal_places
        quantum = Decimal(1).scaleb(-decimal_places)
        rounded = Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP)
    return format(rounded, 'f')


def format_temperature(temp: float, scale, precision: int = 1) -> str:
    """Format temperature value with unit symbol

    Args:
        temp: Temperature value
        scale: Temperature scale ('Celsius' or 'Fahrenheit')
        precision: Number of decimal places (default 1)

    Returns:
        Formatted temperature string (e.g., "72.5°F")
    """
    return f"{format_number(temp, precision)}{get_unit_symbol(scale)}"


def format_conversion_result(input_value: float, output_value: float,
                             from_unit, to_unit) -> str:
    """Format a conversion for the result display

    Input is shown with one decimal place, output with two.

    Returns:
        String in the form "72.5°F → 22.50°C"
    """
    return (f"{format_number(input_value, 1)}{get_unit_symbol(from_unit)} → "
            f"{format_number(output_value)}{get_unit_symbol(to_unit)}")


def format_history_entry(from_unit, to_unit, input_value: float,
                         output_value: float) -> str:
    """Format a conversion as a history line

    Returns:
        String in the form "F to C: 72.5 => 22.50"
    """
    from_initial = getattr(from_unit, 'display_name', from_unit)[:1]
    to_initial = getattr(to_unit, 'display_name', to_unit)[:1]
    return (f"{from_initial} to {to_initial}: "
            f"{format_number(input_value, 1)} => {format_number(output_value)}")


def get_input_hint_text(direction_name: str) -> str:
    """Get hint text for the temperature input of a conversion direction"""
    if direction_name == 'Fahrenheit to Celsius':
        return 'e.g., 72.5'
    elif direction_name == 'Celsius to Fahrenheit':
        return 'e.g., 22.8'
    else:
        return 'Enter temperature value'


def get_input_suffix(direction_name: str) -> str:
    """Get the unit suffix for the temperature input of a conversion direction"""
    if direction_name == 'Fahrenheit to Celsius':
        return '°F'
    elif direction_name == 'Celsius to Fahrenheit':
        return '°C'
    else:
        return '°'
