"""Tests for capacity models."""

import pytest
from flipsd.models.capacity import CapacityCheck, CapacityReport, format_size


def _report(
    check: CapacityCheck = CapacityCheck.PREFLIGHT,
    staged: int = 10_000,
    total: int = 0,
    free: int = 0,
    margin: int = 20,
    reclaimable: int = 0,
) -> CapacityReport:
    return CapacityReport(
        check=check,
        staged_bytes=staged,
        total_bytes=total,
        free_bytes=free,
        margin_percent=margin,
        reclaimable_bytes=reclaimable,
    )


class TestCapacityReport:
    """Tests for CapacityReport."""

    def test_required_bytes_includes_margin(self) -> None:
        """Required size is staged size grown by the margin."""
        assert _report(staged=10_000, margin=20).required_bytes == 12_000
        assert _report(staged=10_000, margin=10).required_bytes == 11_000

    def test_required_bytes_uses_integer_math(self) -> None:
        """Fractional bytes are truncated."""
        assert _report(staged=1_001, margin=10).required_bytes == 1_101

    def test_preflight_compares_total(self) -> None:
        """Pre-flight uses total capacity and ignores free space."""
        report = _report(total=11_000, free=1_000_000)
        assert report.available_bytes == 11_000
        assert report.fits is False

    def test_final_compares_free(self) -> None:
        """Final check uses free space and ignores total capacity."""
        report = _report(CapacityCheck.FINAL, total=1, free=12_000, margin=10)
        assert report.available_bytes == 12_000
        assert report.fits is True
        assert report.remaining_bytes == 1_000

    def test_final_adds_reclaimable(self) -> None:
        """Reclaimable bytes count as available in the final check."""
        report = _report(CapacityCheck.FINAL, free=10_000, margin=10, reclaimable=1_000)
        assert report.available_bytes == 11_000
        assert report.fits is True

    def test_boundary_is_inclusive(self) -> None:
        """Content exactly filling the requirement fits."""
        assert _report(total=12_000).fits is True
        assert _report(total=11_999).fits is False

    def test_decision_is_monotonic_in_capacity(self) -> None:
        """Once capacity passes the threshold, larger capacities never reject."""
        decisions = [_report(total=total).fits for total in range(11_000, 13_001, 250)]
        first_accept = decisions.index(True)
        assert all(decisions[first_accept:])
        assert not any(decisions[:first_accept])

    def test_negative_staged_rejected(self) -> None:
        """Staged size cannot be negative."""
        with pytest.raises(ValueError, match="negative"):
            _report(staged=-1)

    def test_margin_range_validated(self) -> None:
        """Margin must be between 0 and 100."""
        with pytest.raises(ValueError, match="Margin"):
            _report(margin=101)

    def test_describe_mentions_figures(self) -> None:
        """describe() includes the buffer and verdict."""
        text = _report(staged=1024 * 1024, total=1024 * 1024).describe()
        assert "does not fit" in text
        assert "20% buffer" in text
        assert "total capacity" in text


class TestFormatSize:
    """Tests for format_size."""

    def test_zero_and_none(self) -> None:
        """Zero and None render as 0 B."""
        assert format_size(0) == "0 B"
        assert format_size(None) == "0 B"

    def test_units(self) -> None:
        """Sizes scale through KB, MB and GB."""
        assert format_size(512) == "512 B"
        assert format_size(2048) == "2.0 KB"
        assert format_size(5 * 1024 * 1024) == "5.0 MB"
        assert format_size(3 * 1024**3) == "3.0 GB"
