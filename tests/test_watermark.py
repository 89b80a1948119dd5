"""
Unit tests for the watermark module.
"""

from datetime import timedelta

import pytest

from release_watcher.watermark import Watermark


class TestWatermark:
    """Tests for novelty checks and advancing."""

    def test_starts_at_construction_time(self, clock) -> None:
        """Test the initial watermark value."""
        watermark = Watermark(clock)

        assert watermark.last_checked_at == clock.now

    @pytest.mark.parametrize("offset", [-3600, -1, 0])
    def test_not_newer_at_or_before_construction(self, clock, offset: int) -> None:
        """Test that releases up to construction time are not new."""
        watermark = Watermark(clock)

        assert not watermark.is_newer(clock.now + timedelta(seconds=offset))

    def test_newer_after_construction(self, clock) -> None:
        """Test that a later release is new."""
        watermark = Watermark(clock)

        assert watermark.is_newer(clock.now + timedelta(microseconds=1))

    def test_advance_moves_to_now(self, clock) -> None:
        """Test that advance() uses the clock, not release times."""
        watermark = Watermark(clock)
        release_time = clock.now + timedelta(seconds=10)
        assert watermark.is_newer(release_time)

        advanced_to = clock.tick(60)
        watermark.advance()

        assert watermark.last_checked_at == advanced_to
        assert not watermark.is_newer(release_time)
        assert not watermark.is_newer(advanced_to)
        assert watermark.is_newer(advanced_to + timedelta(seconds=1))

    def test_never_moves_backwards(self, clock) -> None:
        """Test that a clock going backwards keeps the watermark."""
        watermark = Watermark(clock)
        start = watermark.last_checked_at

        clock.tick(-30)
        watermark.advance()

        assert watermark.last_checked_at == start

    def test_default_clock_is_utc(self) -> None:
        """Test that the default clock produces aware datetimes."""
        watermark = Watermark()

        assert watermark.last_checked_at.tzinfo is not None
