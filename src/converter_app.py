#!/usr/bin/env python3
"""
Temperature converter session
Input handling, conversion and history for one converter session
"""

import math
import logging
from typing import Dict, List, Optional, Union

from settings import ConverterSettings, load_settings, configure_logging
from input_validation import InputError, ParseResult, is_valid_number_format, parse_temperature_input
from conversion_models import ConversionDirection, ConversionEntry, ConversionHistory
from temperature_utils import format_number, get_input_hint_text, get_input_suffix
import web_interface

logger = logging.getLogger(__name__)


class ConversionOutcome:
    """Result of a conversion attempt"""

    def __init__(self, parse_result: ParseResult, entry: Optional[ConversionEntry] = None):
        self.parse_result = parse_result
        self.entry = entry

    @property
    def success(self) -> bool:
        return self.entry is not None

    @property
    def error(self):
        """Blocking InputError, or None"""
        if self.success:
            return None
        return self.parse_result.error

    @property
    def message(self) -> Optional[str]:
        return self.parse_result.message

    @property
    def warning(self) -> Optional[str]:
        """Advisory message for a converted but unreasonable value"""
        if self.success and self.parse_result.is_advisory:
            return self.parse_result.message
        return None


class ConverterSession:
    """One converter session: selected direction, last result and history"""

    def __init__(self, settings: Optional[ConverterSettings] = None):
        self.settings = settings or load_settings(env_file=None)
        self.direction = ConversionDirection.from_display_name(self.settings.default_direction)
        self.history = ConversionHistory(max_entries=self.settings.max_history_entries)
        self.converted_value: Optional[float] = None

        logger.info(f"Converter session started - Direction: {self.direction.display_name}, "
                    f"History limit: {self.history.max_entries}")

    def set_direction(self, direction: Union[ConversionDirection, str]) -> ConversionDirection:
        """Select the conversion direction (by member or display name)

        Raises:
            UnknownDirectionName: If a display name is not recognized
        """
        if not isinstance(direction, ConversionDirection):
            direction = ConversionDirection.from_display_name(direction)
        if direction != self.direction:
            self.direction = direction
            self.converted_value = None
            logger.debug(f"Direction changed: {direction.display_name}")
        return direction

    @staticmethod
    def filter_input(previous: str, proposed: str) -> str:
        """Apply the numeric input filter to an edit

        Returns proposed if it is acceptable partial numeric input,
        otherwise previous.
        """
        return proposed if is_valid_number_format(proposed) else previous

    def input_changed(self) -> None:
        """Drop the shown result once the input text is edited"""
        self.converted_value = None

    def perform_conversion(self, text: str) -> ConversionOutcome:
        """Validate text, convert it and record the conversion

        Input problems are returned in the outcome rather than raised.
        """
        parsed = parse_temperature_input(text, self.direction.from_scale, self.settings)
        if not parsed.ok:
            logger.debug(f"Rejected input {text!r}: {parsed.error.value}")
            return ConversionOutcome(parsed)

        # Inputs near the float limit can overflow the target scale
        if not math.isfinite(self.direction.convert(parsed.value)):
            logger.debug(f"Rejected input {text!r}: {InputError.RESULT_OUT_OF_RANGE.value}")
            return ConversionOutcome(ParseResult(error=InputError.RESULT_OUT_OF_RANGE,
                                                 message=self.settings.result_out_of_range_error))

        if parsed.is_advisory:
            logger.warning(f"Converting unreasonable {self.direction.from_scale.display_name} "
                           f"value: {parsed.value}")

        entry = self.history.add_conversion(self.direction, parsed.value)
        self.converted_value = entry.output_value
        logger.info(f"Converted {entry.detailed_display_text}")
        return ConversionOutcome(parsed, entry)

    @property
    def result_text(self) -> Optional[str]:
        """Last converted value with its unit, or None"""
        if self.converted_value is None:
            return None
        return (f"{format_number(self.converted_value, self.settings.default_decimal_places)}"
                f"{self.direction.to_scale.symbol}")

    def clear_all(self) -> None:
        """Clear the current input result"""
        self.converted_value = None

    def clear_history(self) -> None:
        count = len(self.history)
        self.history.clear()
        logger.info(f"Cleared {count} history entries")

    def export_history(self) -> List[Dict]:
        return self.history.serialize()

    def import_history(self, records: List[Dict], clear_existing: bool = True) -> int:
        return self.history.deserialize(records, clear_existing=clear_existing)

    def get_status(self) -> Dict:
        """Get current session status"""
        name = self.direction.display_name
        return {
            'direction': name,
            'input_hint': get_input_hint_text(name),
            'input_suffix': get_input_suffix(name),
            'converted_value': self.converted_value,
            'result_text': self.result_text,
            'history_count': len(self.history),
            'max_history_entries': self.history.max_entries,
        }


def main():
    """Main entry point"""
    settings = load_settings('config.env')
    configure_logging(settings)

    logger.info("=" * 60)
    logger.info("Temperature Converter Starting")
    logger.info("=" * 60)

    session = ConverterSession(settings)
    web_interface.set_session(session)
    web_interface.run_web_server(host=settings.web_host, port=settings.web_port)


if __name__ == '__main__':
    main()
