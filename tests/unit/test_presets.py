"""
Tests for false-negative detection presets.
"""

import pytest

from apnea_clusters.analysis.presets import (
    AVAILABLE_PRESETS,
    DEFAULT_PRESET,
    get_false_negative_options,
)
from apnea_clusters.analysis.types import FalseNegativeOptions
from apnea_clusters.errors import InvalidParameterError


class TestPresets:
    """Test preset values and lookup."""

    def test_default_is_balanced(self):
        assert DEFAULT_PRESET == "balanced"
        assert get_false_negative_options() == FalseNegativeOptions()

    def test_strict(self):
        strict = get_false_negative_options("strict")

        assert strict.fl_threshold == 0.9
        assert strict.peak_flg_level_min == 0.98
        assert strict.min_duration_sec == 120

    def test_lenient(self):
        lenient = get_false_negative_options("lenient")

        assert lenient.fl_threshold == 0.5
        assert lenient.peak_flg_level_min == 0.85
        assert lenient.min_duration_sec == 45

    def test_presets_ordered_by_strictness(self):
        strict = AVAILABLE_PRESETS["strict"]
        balanced = AVAILABLE_PRESETS["balanced"]
        lenient = AVAILABLE_PRESETS["lenient"]

        assert (
            strict.peak_flg_level_min
            > balanced.peak_flg_level_min
            > lenient.peak_flg_level_min
        )
        assert strict.min_duration_sec > balanced.min_duration_sec
        assert balanced.min_duration_sec > lenient.min_duration_sec

    def test_unknown_preset(self):
        with pytest.raises(InvalidParameterError) as exc_info:
            get_false_negative_options("paranoid")

        assert exc_info.value.parameter == "preset"
