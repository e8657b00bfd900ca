#!/usr/bin/env python3
"""
Input validation for temperature text entry
Character filtering, numeric checks, and physical range checks
"""

import re
import math
from enum import Enum
from typing import Optional

from settings import ConverterSettings, DEFAULT_SETTINGS

# Character-level filter applied while text is typed. Accepts partial input
# such as '', '-' and '.', so it is not a numeric check on its own.
NUMBER_FORMAT = re.compile(r'^-?\d*\.?\d*$')
INVALID_CHARACTERS = re.compile(r'[^0-9.-]')

# Absolute zero to a generous upper bound, per scale
REASONABLE_RANGES = {
    'celsius': (-273.15, 1000.0),
    'fahrenheit': (-459.67, 1832.0),
}


class InputError(Enum):
    """Reasons raw temperature text can be rejected or flagged"""
    EMPTY_INPUT = 'empty_input'
    NOT_A_NUMBER = 'not_a_number'
    UNREASONABLE_VALUE = 'unreasonable_value'
    RESULT_OUT_OF_RANGE = 'result_out_of_range'


class ParseResult:
    """Outcome of parsing raw temperature text"""

    def __init__(self, value: Optional[float] = None,
                 error: Optional[InputError] = None, message: Optional[str] = None):
        self.value = value
        self.error = error
        self.message = message

    @property
    def is_advisory(self) -> bool:
        """True when the value parsed but looks physically unreasonable"""
        return self.error is InputError.UNREASONABLE_VALUE

    @property
    def ok(self) -> bool:
        """True when a value is available for conversion"""
        return self.value is not None and (self.error is None or self.is_advisory)

    def __repr__(self):
        return f"ParseResult(value={self.value!r}, error={self.error!r})"


def is_valid_number_format(text: str) -> bool:
    """Check text against the numeric input filter (sign, digits, one point)"""
    return NUMBER_FORMAT.fullmatch(text) is not None


def sanitize_numeric_input(text: str) -> str:
    """Remove every character that cannot appear in numeric input"""
    return INVALID_CHARACTERS.sub('', text)


def is_valid_numeric_text(text: str) -> bool:
    """Check that text is a complete, finite decimal number

    Args:
        text: Raw input text, e.g. "-10.5"

    Returns:
        True if text is non-empty, passes the input filter and parses
        to a finite value
    """
    if not text or not is_valid_number_format(text):
        return False
    try:
        value = float(text)
    except ValueError:
        return False
    return math.isfinite(value)


def is_reasonable_temperature(value: float, scale) -> bool:
    """Check if a temperature lies within the physical range of its scale

    Args:
        value: Temperature value
        scale: Scale name ('Celsius' or 'Fahrenheit') or a TemperatureScale

    Returns:
        True if within range; always True for an unrecognized scale
    """
    name = getattr(scale, 'display_name', scale)
    bounds = REASONABLE_RANGES.get(name.lower()) if isinstance(name, str) else None
    if bounds is None:
        return True
    low, high = bounds
    return low <= value <= high


def parse_temperature_input(text: Optional[str], scale=None,
                            settings: ConverterSettings = DEFAULT_SETTINGS) -> ParseResult:
    """Parse raw temperature text into a checkable result

    Never raises for bad input; the caller decides how to present errors.
    An unreasonable value is advisory: the value is still returned.

    Args:
        text: Raw text from the input field
        scale: Optional source scale for the range check
        settings: Source of the error messages

    Returns:
        ParseResult with either a value, an error, or both (advisory)
    """
    stripped = (text or '').strip()
    if not stripped:
        return ParseResult(error=InputError.EMPTY_INPUT,
                           message=settings.empty_input_error)

    if not is_valid_numeric_text(stripped):
        return ParseResult(error=InputError.NOT_A_NUMBER,
                           message=settings.invalid_number_error)

    value = float(stripped)
    if scale is not None and not is_reasonable_temperature(value, scale):
        return ParseResult(value=value, error=InputError.UNREASONABLE_VALUE,
                           message=settings.unreasonable_value_error)

    return ParseResult(value=value)
