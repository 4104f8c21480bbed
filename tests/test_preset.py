"""Tests for autohide.preset."""

import pytest

from autohide.preset import PRESETS, get_preset_patterns


class TestPresets:
    @pytest.mark.parametrize(
        ("preset", "required_patterns"),
        [
            ("python", ["__pycache__", "*.egg-info"]),
            ("node", ["node_modules"]),
            ("build", ["build", "dist"]),
            ("editor", ["*.swp"]),
        ],
    )
    def test_presets_include_expected_patterns(
        self, preset: str, required_patterns: list[str]
    ) -> None:
        """Known presets must include expected patterns.

        Args:
            preset: Preset name to test.
            required_patterns: Patterns expected in the resulting list.
        """
        patterns = get_preset_patterns(preset)
        for pattern in required_patterns:
            assert pattern in patterns

    def test_returns_a_copy(self) -> None:
        patterns = get_preset_patterns("node")
        patterns.append("extra")
        assert "extra" not in PRESETS["node"]

    def test_unknown_preset_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown preset"):
            get_preset_patterns("java")

    def test_all_presets_are_lists(self) -> None:
        for name, patterns in PRESETS.items():
            assert isinstance(patterns, list), f"Preset '{name}' should be a list"
            assert all(isinstance(p, str) and p for p in patterns)
