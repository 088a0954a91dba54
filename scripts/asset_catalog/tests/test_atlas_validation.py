"""
Tests for atlas validation functionality.
"""

import unittest

from ..processing.atlas import AtlasConfig, AtlasValidator, AtlasResult
from ..processing.packing import Rectangle


class TestAtlasValidator(unittest.TestCase):
    """Test AtlasValidator class functionality."""

    def setUp(self):
        """Set up test fixtures."""
        self.config = AtlasConfig(padding=1, max_size=(1024, 1024))
        self.validator = AtlasValidator(self.config)

    def _result(self, placements, width=64, height=64, padding=1):
        return AtlasResult(width=width, height=height, placements=placements, data=b"", padding=padding)

    def test_validate_placements_valid(self):
        """Test validation of valid placements."""
        result = self._result({
            "a": Rectangle(1, 1, 30, 30),
            "b": Rectangle(33, 1, 30, 30),
        })

        self.assertEqual(self.validator.validate_placements(result), [])

    def test_validate_placements_out_of_bounds(self):
        """Test detection of frames outside the canvas."""
        result = self._result({"a": Rectangle(40, 40, 30, 30)})

        errors = self.validator.validate_placements(result)

        self.assertEqual(len(errors), 1)
        self.assertIn("extends beyond atlas", errors[0])

    def test_validate_placements_negative(self):
        result = self._result({"a": Rectangle(-1, 0, 10, 10)})

        errors = self.validator.validate_placements(result)

        self.assertTrue(any("negative coordinates" in e for e in errors))

    def test_validate_placements_invalid_dimensions(self):
        result = self._result({"a": Rectangle(1, 1, 0, 10)})

        errors = self.validator.validate_placements(result)

        self.assertTrue(any("invalid dimensions" in e for e in errors))

    def test_validate_placements_padding_overlap(self):
        """Cells touching without room for padding overlap once padded."""
        result = self._result({
            "a": Rectangle(1, 1, 10, 10),
            "b": Rectangle(12, 1, 10, 10),
        })

        errors = self.validator.validate_placements(result)

        self.assertEqual(errors, ["Frames 'a' and 'b' overlap"])

    def test_validate_placements_no_padding(self):
        result = self._result({
            "a": Rectangle(0, 0, 10, 10),
            "b": Rectangle(10, 0, 10, 10),
        }, padding=0)

        self.assertEqual(self.validator.validate_placements(result), [])


if __name__ == '__main__':
    unittest.main()
