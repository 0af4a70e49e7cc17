"""Unit tests for modules/utils/settings_utils.py"""

import unittest
import sys
from pathlib import Path

# Add modules directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from modules.utils.settings_utils import first_set, merge_layers


class TestMergeLayers(unittest.TestCase):
    """Test merge_layers() left-to-right precedence."""

    def test_later_layer_wins(self):
        self.assertEqual(merge_layers({"a": 1}, {"a": 2}), {"a": 2})

    def test_none_does_not_override(self):
        self.assertEqual(merge_layers({"a": 1}, {"a": None}), {"a": 1})

    def test_fields_fall_back_independently(self):
        defaults = {"duration": "60s", "threshold": 1, "aligner": "ALIGN_RATE"}
        overrides = {"duration": None, "threshold": 10, "aligner": None}
        self.assertEqual(
            merge_layers(defaults, overrides),
            {"duration": "60s", "threshold": 10, "aligner": "ALIGN_RATE"},
        )

    def test_three_layers(self):
        result = merge_layers({"a": 1, "b": 1, "c": 1}, {"b": 2, "c": 2}, {"c": 3})
        self.assertEqual(result, {"a": 1, "b": 2, "c": 3})

    def test_none_layers_skipped(self):
        self.assertEqual(merge_layers(None, {"a": 1}, None), {"a": 1})

    def test_falsy_values_override(self):
        """Zero and empty lists are real values, not missing ones."""
        self.assertEqual(merge_layers({"t": 1, "g": ["x"]}, {"t": 0, "g": []}), {"t": 0, "g": []})

    def test_inputs_not_mutated(self):
        base = {"a": 1}
        merge_layers(base, {"a": 2})
        self.assertEqual(base, {"a": 1})


class TestFirstSet(unittest.TestCase):
    """Test first_set() precedence."""

    def test_first_value_wins(self):
        self.assertEqual(first_set("a", "b"), "a")

    def test_skips_none_and_empty(self):
        self.assertEqual(first_set(None, "", "c"), "c")

    def test_all_missing(self):
        self.assertIsNone(first_set(None, None))


if __name__ == "__main__":
    unittest.main()
