import os
import sys
import unittest

import yaml

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from algorithms import WeightConverter
from db import SettingsRepository
from models import AppearanceMode, WeightUnit
from user_settings import UserSettings


class WeightConverterTest(unittest.TestCase):
    def test_conversion(self) -> None:
        self.assertAlmostEqual(WeightConverter.from_lbs(100, "kg"), 45.3592)
        self.assertAlmostEqual(WeightConverter.to_lbs(100, "kg"), 220.462)
        self.assertEqual(WeightConverter.to_lbs(135, "lbs"), 135)
        with self.assertRaises(ValueError):
            WeightConverter.factors("stone")

    def test_format(self) -> None:
        self.assertEqual(WeightConverter.format_weight(45, "lbs"), "45")
        self.assertEqual(WeightConverter.format_weight(47.5, "lbs"), "47.5")
        self.assertEqual(WeightConverter.format_weight(100, "kg"), "45.4")


class UserSettingsTest(unittest.TestCase):
    def setUp(self) -> None:
        self.db_path = "test_user_settings.db"
        self.yaml_path = "test_user_settings.yaml"
        for path in (self.db_path, self.yaml_path):
            if os.path.exists(path):
                os.remove(path)
        self.settings = UserSettings(SettingsRepository(self.db_path, self.yaml_path))

    def tearDown(self) -> None:
        for path in (self.db_path, self.yaml_path):
            if os.path.exists(path):
                os.remove(path)

    def test_defaults(self) -> None:
        self.assertEqual(self.settings.weight_unit, WeightUnit.LBS)
        self.assertEqual(self.settings.default_rest_duration, 90.0)
        self.assertTrue(self.settings.haptic_feedback_enabled)
        self.assertTrue(self.settings.sound_enabled)
        self.assertEqual(self.settings.appearance_mode, AppearanceMode.LIGHT)
        self.assertEqual(self.settings.first_weekday, 0)

    def test_conversion_round_trip(self) -> None:
        for unit in WeightUnit:
            self.settings.weight_unit = unit
            for value in (0, 45, 102.5, 317.75):
                self.assertAlmostEqual(
                    self.settings.convert_to_lbs(self.settings.convert_from_lbs(value)),
                    value,
                    places=2,
                )

    def test_formatting_follows_unit(self) -> None:
        self.assertEqual(self.settings.format_set(45, 10), "45 × 10")
        self.assertEqual(self.settings.format_weight_with_unit(100), "100 lbs")
        self.settings.weight_unit = WeightUnit.KG
        self.assertEqual(self.settings.format_weight_with_unit(100), "45.4 kg")
        self.assertAlmostEqual(self.settings.convert_to_lbs(100), 220.462)
        self.assertAlmostEqual(self.settings.convert_from_lbs(220.462), 100, places=2)

    def test_values_persist(self) -> None:
        self.settings.weight_unit = "kg"
        self.settings.default_rest_duration = 120
        self.settings.sound_enabled = False
        self.settings.week_start = "sunday"
        reloaded = UserSettings(SettingsRepository(self.db_path, self.yaml_path))
        self.assertEqual(reloaded.weight_unit, WeightUnit.KG)
        self.assertEqual(reloaded.default_rest_duration, 120.0)
        self.assertFalse(reloaded.sound_enabled)
        self.assertEqual(reloaded.first_weekday, 6)
        with open(self.yaml_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        self.assertEqual(data["weight_unit"], "kg")
        self.assertFalse(data["sound_enabled"])

    def test_invalid_values(self) -> None:
        with self.assertRaises(ValueError):
            self.settings.default_rest_duration = 0
        with self.assertRaises(ValueError):
            self.settings.week_start = "friday"
        with self.assertRaises(ValueError):
            self.settings.weight_unit = "stone"
        self.assertEqual(self.settings.default_rest_duration, 90.0)

    def test_yaml_edit_is_picked_up(self) -> None:
        with open(self.yaml_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        data["weight_unit"] = "kg"
        with open(self.yaml_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(data, f)
        self.settings.load()
        self.assertEqual(self.settings.weight_unit, WeightUnit.KG)

    def test_invalid_yaml_rejected(self) -> None:
        with open(self.yaml_path, "w", encoding="utf-8") as f:
            yaml.safe_dump({"weight_unit": "stone"}, f)
        with self.assertRaises(ValueError):
            SettingsRepository(self.db_path, self.yaml_path)


if __name__ == "__main__":
    unittest.main()
