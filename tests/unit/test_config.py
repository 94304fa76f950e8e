"""
Unit tests for environment-driven settings.
"""

import pytest
from pydantic import ValidationError

from escape_room.config import get_settings


class TestSettings:
    """ESCAPE_ROOM_* variables -> Settings."""

    def test_defaults(self):
        settings = get_settings()

        assert settings.gap_marker == "[GAP]"
        assert settings.mismatch_delay_ms == 500
        assert settings.shuffle_seed is None

    def test_mismatch_delay_in_seconds(self, monkeypatch):
        monkeypatch.setenv("ESCAPE_ROOM_MISMATCH_DELAY_MS", "250")
        get_settings.cache_clear()

        assert get_settings().mismatch_delay_seconds == 0.25

    def test_custom_gap_marker(self, monkeypatch):
        monkeypatch.setenv("ESCAPE_ROOM_GAP_MARKER", "___")
        get_settings.cache_clear()

        assert get_settings().gap_marker == "___"

    def test_empty_gap_marker_rejected(self, monkeypatch):
        monkeypatch.setenv("ESCAPE_ROOM_GAP_MARKER", "")
        get_settings.cache_clear()

        with pytest.raises(ValidationError):
            get_settings()

    def test_negative_delay_rejected(self, monkeypatch):
        monkeypatch.setenv("ESCAPE_ROOM_MISMATCH_DELAY_MS", "-1")
        get_settings.cache_clear()

        with pytest.raises(ValidationError):
            get_settings()
