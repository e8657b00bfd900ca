#!/usr/bin/env python3
"""
Configuration for the temperature converter
Loads settings from config.env and the environment
"""

import os
import sys
import logging
from typing import NamedTuple, Optional
from dotenv import load_dotenv

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class ConverterSettings(NamedTuple):
    """Immutable converter configuration"""
    max_history_entries: int = 20
    default_decimal_places: int = 2
    empty_input_error: str = 'Please enter a temperature value'
    invalid_number_error: str = 'Please enter a valid number'
    unreasonable_value_error: str = 'Temperature value seems unreasonable'
    result_out_of_range_error: str = 'Converted value is too large to display'
    default_direction: str = 'Fahrenheit to Celsius'
    log_level: str = 'INFO'
    log_file: Optional[str] = None
    web_host: str = '127.0.0.1'
    web_port: int = 5000


DEFAULT_SETTINGS = ConverterSettings()


def _int_setting(name: str, default: int, minimum: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")
    if value < minimum:
        raise ValueError(f"{name} must be at least {minimum}, got {value}")
    return value


def load_settings(env_file: Optional[str] = 'config.env') -> ConverterSettings:
    """Load converter settings

    Values already present in the environment take precedence over the
    ones in env_file.

    Args:
        env_file: dotenv file to read, or None to use the environment only

    Returns:
        ConverterSettings built from the environment

    Raises:
        ValueError: If a numeric setting is malformed or out of range
    """
    if env_file:
        load_dotenv(env_file)

    defaults = DEFAULT_SETTINGS
    return ConverterSettings(
        max_history_entries=_int_setting('MAX_HISTORY_ENTRIES', defaults.max_history_entries, 1),
        default_decimal_places=_int_setting('DEFAULT_DECIMAL_PLACES', defaults.default_decimal_places, 0),
        empty_input_error=os.getenv('EMPTY_INPUT_ERROR', defaults.empty_input_error),
        invalid_number_error=os.getenv('INVALID_NUMBER_ERROR', defaults.invalid_number_error),
        unreasonable_value_error=os.getenv('UNREASONABLE_VALUE_ERROR', defaults.unreasonable_value_error),
        result_out_of_range_error=os.getenv('RESULT_OUT_OF_RANGE_ERROR', defaults.result_out_of_range_error),
        default_direction=os.getenv('DEFAULT_DIRECTION', defaults.default_direction),
        log_level=os.getenv('LOG_LEVEL', defaults.log_level).upper(),
        log_file=os.getenv('LOG_FILE') or None,
        web_host=os.getenv('WEB_HOST', defaults.web_host),
        web_port=_int_setting('WEB_PORT', defaults.web_port, 1),
    )


def configure_logging(settings: ConverterSettings) -> None:
    """Configure root logging from settings"""
    handlers = [logging.StreamHandler(sys.stdout)]
    if settings.log_file:
        handlers.append(logging.FileHandler(settings.log_file))

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers
    )
