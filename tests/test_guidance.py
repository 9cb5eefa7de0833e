"""Tests for oc.utils.guidance.load_implementation_rules."""

from unittest.mock import patch


class TestLoadImplementationRules:
    def test_returns_rules_when_enabled(self):
        with patch("oc.config._config", {"implementation_rules_enabled": True}):
            from oc.utils.guidance import load_implementation_rules
            result = load_implementation_rules()
            assert len(result) > 0

    def test_returns_empty_when_disabled(self):
        with patch("oc.config._config", {"implementation_rules_enabled": False}):
            from oc.utils.guidance import load_implementation_rules
            assert load_implementation_rules() == ""

    def test_returns_empty_when_key_missing(self):
        with patch("oc.config._config", {}):
            from oc.utils.guidance import load_implementation_rules
            assert load_implementation_rules() == ""

    def test_content_contains_key_phrases(self):
        with patch("oc.config._config", {"implementation_rules_enabled": True}):
            from oc.utils.guidance import load_implementation_rules
            result = load_implementation_rules().lower()
            assert "tailwind" in result
            assert "jquery" in result
            assert "placehold.co" in result
