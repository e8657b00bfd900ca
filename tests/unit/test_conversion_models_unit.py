#!/usr/bin/env python3
"""
Unit tests for conversion_models module
Tests temperature scales, conversion directions and conversion entries
"""

import unittest
import os
from datetime import datetime, timezone
import sys

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))

from conversion_models import (
    ConversionDirection,
    ConversionEntry,
    ConversionModelError,
    MalformedRecordError,
    TemperatureScale,
    UnknownDirectionName,
    UnknownScaleName
)

F_TO_C = ConversionDirection.FAHRENHEIT_TO_CELSIUS
C_TO_F = ConversionDirection.CELSIUS_TO_FAHRENHEIT


class TestTemperatureScale(unittest.TestCase):
    """Test TemperatureScale"""

    def test_display_names_and_symbols(self):
        """Test scale attributes"""
        self.assertEqual(TemperatureScale.CELSIUS.display_name, 'Celsius')
        self.assertEqual(TemperatureScale.CELSIUS.symbol, '°C')
        self.assertEqual(TemperatureScale.FAHRENHEIT.display_name, 'Fahrenheit')
        self.assertEqual(TemperatureScale.FAHRENHEIT.symbol, '°F')

    def test_from_string(self):
        """Test case-insensitive lookup"""
        self.assertIs(TemperatureScale.from_string('celsius'), TemperatureScale.CELSIUS)
        self.assertIs(TemperatureScale.from_string('FAHRENHEIT'), TemperatureScale.FAHRENHEIT)

    def test_from_string_unknown(self):
        """Test unknown scale names fail loudly"""
        with self.assertRaises(UnknownScaleName) as cm:
            TemperatureScale.from_string('Kelvin')
        self.assertIn('Kelvin', str(cm.exception))
        self.assertIsInstance(cm.exception, ValueError)
        self.assertIsInstance(cm.exception, ConversionModelError)


class TestConversionDirection(unittest.TestCase):
    """Test ConversionDirection"""

    def test_attributes(self):
        """Test direction scales and names"""
        self.assertEqual(F_TO_C.display_name, 'Fahrenheit to Celsius')
        self.assertIs(F_TO_C.from_scale, TemperatureScale.FAHRENHEIT)
        self.assertIs(F_TO_C.to_scale, TemperatureScale.CELSIUS)
        self.assertEqual(C_TO_F.display_name, 'Celsius to Fahrenheit')
        self.assertIs(C_TO_F.from_scale, TemperatureScale.CELSIUS)
        self.assertIs(C_TO_F.to_scale, TemperatureScale.FAHRENHEIT)

    def test_convert(self):
        """Test each direction carries its conversion"""
        self.assertEqual(F_TO_C.convert(212), 100.0)
        self.assertEqual(C_TO_F.convert(100), 212.0)
        self.assertEqual(F_TO_C.convert(-40), -40.0)

    def test_from_display_name(self):
        """Test lookup by display name"""
        self.assertIs(ConversionDirection.from_display_name('Fahrenheit to Celsius'), F_TO_C)
        self.assertIs(ConversionDirection.from_display_name('Celsius to Fahrenheit'), C_TO_F)

    def test_from_display_name_unknown(self):
        """Test unknown and wrongly cased names fail loudly"""
        with self.assertRaises(UnknownDirectionName):
            ConversionDirection.from_display_name('Kelvin to Celsius')
        with self.assertRaises(UnknownDirectionName):
            ConversionDirection.from_display_name('fahrenheit to celsius')


class TestConversionEntry(unittest.TestCase):
    """Test ConversionEntry"""

    def test_create_computes_output(self):
        """Test create() converts the input"""
        entry = ConversionEntry.create(F_TO_C, 72.5)
        self.assertEqual(entry.direction, F_TO_C)
        self.assertEqual(entry.input_value, 72.5)
        self.assertAlmostEqual(entry.output_value, 22.5, places=9)
        self.assertIsInstance(entry.timestamp, datetime)

    def test_inconsistent_output_rejected(self):
        """Test an entry cannot disagree with its own direction"""
        with self.assertRaises(ValueError):
            ConversionEntry(F_TO_C, 72.5, 50.0)

    def test_output_within_tolerance_accepted(self):
        """Test tiny floating point differences are tolerated"""
        expected = F_TO_C.convert(98.6)
        entry = ConversionEntry(F_TO_C, 98.6, expected + 1e-12)
        self.assertAlmostEqual(entry.output_value, 37.0, places=9)

    def test_non_finite_values_rejected(self):
        """Test NaN and infinity are rejected"""
        with self.assertRaises(ValueError):
            ConversionEntry(F_TO_C, float('nan'), float('nan'))
        with self.assertRaises(ValueError):
            ConversionEntry(C_TO_F, float('inf'), float('inf'))

    def test_direction_type_checked(self):
        """Test the direction must be a ConversionDirection"""
        with self.assertRaises(TypeError):
            ConversionEntry('Fahrenheit to Celsius', 32, 0)

    def test_immutable(self):
        """Test entry attributes cannot be reassigned"""
        entry = ConversionEntry.create(F_TO_C, 32)
        with self.assertRaises(AttributeError):
            entry.input_value = 10
        with self.assertRaises(AttributeError):
            entry.extra = 'value'

    def test_equality_ignores_timestamp(self):
        """Test equality covers direction and values only"""
        a = ConversionEntry.create(F_TO_C, 32, datetime(2024, 1, 1, 12, 0))
        b = ConversionEntry.create(F_TO_C, 32, datetime(2025, 6, 1, 8, 30))
        self.assertEqual(a, b)
        self.assertEqual(hash(a), hash(b))
        self.assertNotEqual(a, ConversionEntry.create(F_TO_C, 33))
        self.assertNotEqual(a, ConversionEntry.create(C_TO_F, 32))
        self.assertNotEqual(a, 'not an entry')

    def test_unit_views(self):
        """Test derived unit names and symbols"""
        entry = ConversionEntry.create(C_TO_F, 22.8)
        self.assertEqual(entry.from_unit, 'Celsius')
        self.assertEqual(entry.to_unit, 'Fahrenheit')
        self.assertEqual(entry.from_symbol, '°C')
        self.assertEqual(entry.to_symbol, '°F')

    def test_display_text(self):
        """Test history and result lines"""
        entry = ConversionEntry.create(F_TO_C, 72.5)
        self.assertEqual(entry.display_text, 'F to C: 72.5 => 22.50')
        self.assertEqual(entry.detailed_display_text, '72.5°F → 22.50°C')

    def test_copy_with(self):
        """Test copy_with replaces fields and revalidates"""
        original = ConversionEntry.create(F_TO_C, 32, datetime(2024, 1, 1))
        later = original.copy_with(timestamp=datetime(2024, 2, 1))
        self.assertEqual(later, original)
        self.assertEqual(later.timestamp, datetime(2024, 2, 1))
        self.assertEqual(original.timestamp, datetime(2024, 1, 1))

        flipped = original.copy_with(direction=C_TO_F, output_value=C_TO_F.convert(32))
        self.assertEqual(flipped.direction, C_TO_F)
        self.assertAlmostEqual(flipped.output_value, 89.6, places=9)

        with self.assertRaises(ValueError):
            original.copy_with(input_value=100)

    def test_repr(self):
        """Test repr contains the key fields"""
        text = repr(ConversionEntry.create(F_TO_C, 72.5, datetime(2024, 1, 15, 10, 30)))
        self.assertIn('Fahrenheit to Celsius', text)
        self.assertIn('72.5°F', text)
        self.assertIn('22.50°C', text)
        self.assertIn('2024-01-15T10:30:00', text)


class TestConversionEntrySerialization(unittest.TestCase):
    """Test ConversionEntry record conversion"""

    def test_to_dict(self):
        """Test the serialized record shape"""
        entry = ConversionEntry.create(F_TO_C, 212, datetime(2024, 1, 15, 10, 30))
        self.assertEqual(entry.to_dict(), {
            'direction': 'Fahrenheit to Celsius',
            'inputValue': 212.0,
            'outputValue': 100.0,
            'timestamp': '2024-01-15T10:30:00',
        })

    def test_from_dict(self):
        """Test rebuilding an entry from a record"""
        entry = ConversionEntry.from_dict({
            'direction': 'Celsius to Fahrenheit',
            'inputValue': 100,
            'outputValue': 212,
            'timestamp': '2024-01-15T10:30:00.000',
        })
        self.assertEqual(entry, ConversionEntry.create(C_TO_F, 100))
        self.assertEqual(entry.timestamp, datetime(2024, 1, 15, 10, 30))

    def test_from_dict_legacy_key(self):
        """Test records using conversionType for the direction"""
        entry = ConversionEntry.from_dict({
            'conversionType': 'Fahrenheit to Celsius',
            'inputValue': 32.0,
            'outputValue': 0.0,
            'timestamp': '2024-01-15T10:30:00',
        })
        self.assertEqual(entry.direction, F_TO_C)

    def test_from_dict_aware_timestamp(self):
        """Test UTC timestamps are normalized to naive local time"""
        entry = ConversionEntry.from_dict({
            'direction': 'Fahrenheit to Celsius',
            'inputValue': 32.0,
            'outputValue': 0.0,
            'timestamp': '2024-01-15T10:30:00+00:00',
        })
        expected = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)
        self.assertIsNone(entry.timestamp.tzinfo)
        self.assertEqual(entry.timestamp, expected)

    def test_from_dict_malformed(self):
        """Test every kind of malformed record raises MalformedRecordError"""
        good = {
            'direction': 'Fahrenheit to Celsius',
            'inputValue': 32.0,
            'outputValue': 0.0,
            'timestamp': '2024-01-15T10:30:00',
        }
        bad_records = [
            {**good, 'direction': 'Kelvin to Celsius'},
            {**good, 'timestamp': 'yesterday'},
            {**good, 'timestamp': None},
            {**good, 'inputValue': '32'},
            {**good, 'inputValue': True},
            {**good, 'outputValue': 99.0},
            {k: v for k, v in good.items() if k != 'inputValue'},
            {k: v for k, v in good.items() if k != 'direction'},
            None,
            'not a record',
        ]
        for record in bad_records:
            with self.assertRaises(MalformedRecordError, msg=repr(record)):
                ConversionEntry.from_dict(record)


if __name__ == '__main__':
    unittest.main()
