#!/usr/bin/env python3
"""
Conversion data model
Temperature scales, conversion directions, conversion entries and the
bounded conversion history
"""

import json
import math
import logging
from datetime import datetime, timedelta
from enum import Enum
from statistics import fmean
from typing import Dict, Iterator, List, Optional, Tuple

from settings import DEFAULT_SETTINGS
from temperature_utils import (
    celsius_to_fahrenheit,
    fahrenheit_to_celsius,
    format_conversion_result,
    format_history_entry,
    get_unit_symbol
)

logger = logging.getLogger(__name__)

# Tolerance for checking an entry's output against its direction
CONVERSION_REL_TOL = 1e-9
CONVERSION_ABS_TOL = 1e-9


class ConversionModelError(Exception):
    """Base class for conversion model errors"""


class UnknownScaleName(ConversionModelError, ValueError):
    """No temperature scale has the given name"""


class UnknownDirectionName(ConversionModelError, ValueError):
    """No conversion direction has the given display name"""


class MalformedRecordError(ConversionModelError, ValueError):
    """A serialized history record cannot be turned back into an entry"""


class HistoryIndexError(ConversionModelError, IndexError):
    """A history position outside the current entries was requested"""


class TemperatureScale(Enum):
    """Supported temperature scales"""
    CELSIUS = 'Celsius'
    FAHRENHEIT = 'Fahrenheit'

    @property
    def display_name(self) -> str:
        return self.value

    @property
    def symbol(self) -> str:
        return get_unit_symbol(self.value)

    @classmethod
    def from_string(cls, name: str) -> 'TemperatureScale':
        """Look up a scale by name (case-insensitive)"""
        if isinstance(name, str):
            for scale in cls:
                if scale.value.lower() == name.lower():
                    return scale
        raise UnknownScaleName(f"Unknown temperature scale: {name}")


class ConversionDirection(Enum):
    """Supported conversion directions"""
    FAHRENHEIT_TO_CELSIUS = ('Fahrenheit to Celsius', TemperatureScale.FAHRENHEIT, TemperatureScale.CELSIUS)
    CELSIUS_TO_FAHRENHEIT = ('Celsius to Fahrenheit', TemperatureScale.CELSIUS, TemperatureScale.FAHRENHEIT)

    def __init__(self, display_name: str, from_scale: TemperatureScale, to_scale: TemperatureScale):
        self.display_name = display_name
        self.from_scale = from_scale
        self.to_scale = to_scale

    def convert(self, value: float) -> float:
        """Convert a value from this direction's source scale to its target"""
        return _CONVERTERS[self](value)

    @classmethod
    def from_display_name(cls, display_name: str) -> 'ConversionDirection':
        """Look up a direction by its exact display name"""
        for direction in cls:
            if direction.display_name == display_name:
                return direction
        raise UnknownDirectionName(f"Unknown conversion direction: {display_name}")


_CONVERTERS = {
    ConversionDirection.FAHRENHEIT_TO_CELSIUS: fahrenheit_to_celsius,
    ConversionDirection.CELSIUS_TO_FAHRENHEIT: celsius_to_fahrenheit,
}


def _as_naive(timestamp: datetime) -> datetime:
    # Aware timestamps are compared in local time
    if timestamp.tzinfo is not None:
        return timestamp.astimezone().replace(tzinfo=None)
    return timestamp


def _parse_timestamp(text: str) -> datetime:
    # fromisoformat only accepts a trailing Z from Python 3.11
    if isinstance(text, str) and text.endswith(('Z', 'z')):
        text = text[:-1] + '+00:00'
    return _as_naive(datetime.fromisoformat(text))


class ConversionEntry:
    """One completed temperature conversion

    Entries are immutable. Equality and hashing cover the direction, input
    and output values; the timestamp is not part of an entry's identity.
    """

    __slots__ = ('_direction', '_input_value', '_output_value', '_timestamp')

    def __init__(self, direction: ConversionDirection, input_value: float,
                 output_value: float, timestamp: Optional[datetime] = None):
        if not isinstance(direction, ConversionDirection):
            raise TypeError(f"direction must be a ConversionDirection, got {direction!r}")
        input_value = float(input_value)
        output_value = float(output_value)
        if not (math.isfinite(input_value) and math.isfinite(output_value)):
            raise ValueError("Conversion values must be finite")

        expected = direction.convert(input_value)
        if not math.isclose(output_value, expected,
                            rel_tol=CONVERSION_REL_TOL, abs_tol=CONVERSION_ABS_TOL):
            raise ValueError(
                f"Output {output_value} does not match {direction.display_name} "
                f"of {input_value} (expected {expected})")

        object.__setattr__(self, '_direction', direction)
        object.__setattr__(self, '_input_value', input_value)
        object.__setattr__(self, '_output_value', output_value)
        object.__setattr__(self, '_timestamp', timestamp if timestamp is not None else datetime.now())

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    @classmethod
    def create(cls, direction: ConversionDirection, input_value: float,
               timestamp: Optional[datetime] = None) -> 'ConversionEntry':
        """Convert input_value and record the result"""
        return cls(direction, input_value, direction.convert(float(input_value)), timestamp)

    @property
    def direction(self) -> ConversionDirection:
        return self._direction

    @property
    def input_value(self) -> float:
        return self._input_value

    @property
    def output_value(self) -> float:
        return self._output_value

    @property
    def timestamp(self) -> datetime:
        return self._timestamp

    @property
    def from_unit(self) -> str:
        return self._direction.from_scale.display_name

    @property
    def to_unit(self) -> str:
        return self._direction.to_scale.display_name

    @property
    def from_symbol(self) -> str:
        return self._direction.from_scale.symbol

    @property
    def to_symbol(self) -> str:
        return self._direction.to_scale.symbol

    @property
    def display_text(self) -> str:
        """History line, e.g. "F to C: 72.5 => 22.50" """
        return format_history_entry(self.from_unit, self.to_unit,
                                    self._input_value, self._output_value)

    @property
    def detailed_display_text(self) -> str:
        """Result line, e.g. "72.5°F → 22.50°C" """
        return format_conversion_result(self._input_value, self._output_value,
                                        self.from_unit, self.to_unit)

    def copy_with(self, direction: Optional[ConversionDirection] = None,
                  input_value: Optional[float] = None,
                  output_value: Optional[float] = None,
                  timestamp: Optional[datetime] = None) -> 'ConversionEntry':
        """Return a new entry with the given fields replaced"""
        return ConversionEntry(
            direction if direction is not None else self._direction,
            input_value if input_value is not None else self._input_value,
            output_value if output_value is not None else self._output_value,
            timestamp if timestamp is not None else self._timestamp
        )

    def to_dict(self) -> Dict:
        """Serialize to a JSON-compatible record"""
        return {
            'direction': self._direction.display_name,
            'inputValue': self._input_value,
            'outputValue': self._output_value,
            'timestamp': self._timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, record: Dict) -> 'ConversionEntry':
        """Rebuild an entry from a serialized record

        Older exports name the direction field 'conversionType'; both
        spellings are accepted.

        Raises:
            MalformedRecordError: If the record cannot be reconstructed
        """
        try:
            direction_name = record['direction'] if 'direction' in record else record['conversionType']
            direction = ConversionDirection.from_display_name(direction_name)
            input_value = record['inputValue']
            output_value = record['outputValue']
            for value in (input_value, output_value):
                if isinstance(value, bool) or not isinstance(value, (int, float)):
                    raise ValueError(f"Not a number: {value!r}")
            timestamp = _parse_timestamp(record['timestamp'])
            return cls(direction, input_value, output_value, timestamp)
        except (KeyError, TypeError, ValueError, OverflowError) as e:
            raise MalformedRecordError(f"Malformed history record {record!r}: {e}") from e

    def __eq__(self, other):
        if self is other:
            return True
        if not isinstance(other, ConversionEntry):
            return NotImplemented
        return (self._direction == other._direction
                and self._input_value == other._input_value
                and self._output_value == other._output_value)

    def __hash__(self):
        return hash((self._direction, self._input_value, self._output_value))

    def __repr__(self):
        return (f"ConversionEntry(direction={self._direction.display_name}, "
                f"input={self._input_value}{self.from_symbol}, "
                f"output={self._output_value:.2f}{self.to_symbol}, "
                f"timestamp={self._timestamp.isoformat()})")


class ConversionHistory:
    """Bounded conversion history, most recent entry first

    Insertion order is authoritative: the entry at index 0 is always the
    last one added, whatever the timestamps say.
    """

    def __init__(self, max_entries: int = DEFAULT_SETTINGS.max_history_entries):
        if isinstance(max_entries, bool) or not isinstance(max_entries, int) or max_entries < 1:
            raise ValueError(f"max_entries must be a positive integer, got {max_entries!r}")
        self.max_entries = max_entries
        self._entries: List[ConversionEntry] = []

    @property
    def entries(self) -> Tuple[ConversionEntry, ...]:
        """Read-only view of the entries, newest first"""
        return tuple(self._entries)

    @property
    def is_empty(self) -> bool:
        return not self._entries

    @property
    def latest(self) -> Optional[ConversionEntry]:
        """Most recent entry, or None when empty"""
        return self._entries[0] if self._entries else None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ConversionEntry]:
        return iter(tuple(self._entries))

    def _truncate(self) -> List[ConversionEntry]:
        evicted = self._entries[self.max_entries:]
        if evicted:
            del self._entries[self.max_entries:]
            logger.debug(f"Evicted {len(evicted)} history entries (limit {self.max_entries})")
        return evicted

    def add_entry(self, entry: ConversionEntry) -> List[ConversionEntry]:
        """Add an entry as the most recent one

        Returns:
            Entries evicted from the tail to stay within max_entries
        """
        if not isinstance(entry, ConversionEntry):
            raise TypeError(f"Expected a ConversionEntry, got {entry!r}")
        self._entries.insert(0, entry)
        return self._truncate()

    def add_conversion(self, direction: ConversionDirection, input_value: float) -> ConversionEntry:
        """Convert input_value, record the result and return the new entry

        The timestamp never goes backwards relative to the current newest
        entry, even if the wall clock does.
        """
        timestamp = datetime.now()
        if self._entries and timestamp < self._entries[0].timestamp:
            timestamp = self._entries[0].timestamp
        entry = ConversionEntry.create(direction, input_value, timestamp)
        self.add_entry(entry)
        return entry

    def remove_entry(self, entry: ConversionEntry) -> bool:
        """Remove the first entry equal to entry

        Returns:
            True if an entry was removed
        """
        try:
            self._entries.remove(entry)
        except ValueError:
            return False
        return True

    def remove_at(self, index: int) -> ConversionEntry:
        """Remove and return the entry at index

        Raises:
            HistoryIndexError: If index is not in [0, len)
        """
        if not 0 <= index < len(self._entries):
            raise HistoryIndexError(f"Index out of range: {index}")
        return self._entries.pop(index)

    def clear(self) -> None:
        self._entries.clear()

    def filter_by_direction(self, direction: ConversionDirection) -> List[ConversionEntry]:
        return [entry for entry in self._entries if entry.direction == direction]

    def filter_by_date_range(self, start: datetime, end: datetime) -> List[ConversionEntry]:
        """Entries from start (less one millisecond) through the end of the day after end"""
        lower = _as_naive(start) - timedelta(milliseconds=1)
        upper = _as_naive(end) + timedelta(days=1)
        return [entry for entry in self._entries
                if lower <= _as_naive(entry.timestamp) <= upper]

    def statistics(self) -> Dict:
        """Summary statistics over the current entries"""
        if not self._entries:
            return {
                'total_conversions': 0,
                'fahrenheit_to_celsius_count': 0,
                'celsius_to_fahrenheit_count': 0,
                'average_input_value': 0.0,
                'average_output_value': 0.0,
            }

        return {
            'total_conversions': len(self._entries),
            'fahrenheit_to_celsius_count': len(self.filter_by_direction(ConversionDirection.FAHRENHEIT_TO_CELSIUS)),
            'celsius_to_fahrenheit_count': len(self.filter_by_direction(ConversionDirection.CELSIUS_TO_FAHRENHEIT)),
            'average_input_value': fmean(entry.input_value for entry in self._entries),
            'average_output_value': fmean(entry.output_value for entry in self._entries),
            'oldest_entry': self._entries[-1].timestamp,
            'newest_entry': self._entries[0].timestamp,
        }

    def serialize(self) -> List[Dict]:
        """Export entries, newest first, as JSON-compatible records"""
        return [entry.to_dict() for entry in self._entries]

    def deserialize(self, records: List[Dict], clear_existing: bool = True) -> int:
        """Import entries from serialized records

        Malformed records are skipped. The result is ordered newest first by
        timestamp and trimmed to max_entries.

        Returns:
            Number of records successfully imported
        """
        if clear_existing:
            self.clear()

        loaded = 0
        for record in records:
            try:
                entry = ConversionEntry.from_dict(record)
            except MalformedRecordError as e:
                logger.warning(f"Skipping history record: {e}")
                continue
            self._entries.append(entry)
            loaded += 1

        self._entries.sort(key=lambda entry: _as_naive(entry.timestamp), reverse=True)
        self._truncate()
        logger.info(f"Imported {loaded} of {len(records)} history records")
        return loaded

    def to_json(self) -> str:
        return json.dumps(self.serialize())

    def from_json(self, text: str, clear_existing: bool = True) -> int:
        """Import entries from a JSON document holding a list of records

        Raises:
            ValueError: If the document is not valid JSON or not a list
        """
        records = json.loads(text)
        if not isinstance(records, list):
            raise ValueError("History JSON must be a list of records")
        return self.deserialize(records, clear_existing=clear_existing)
