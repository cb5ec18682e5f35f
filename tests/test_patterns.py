"""Tests for batch identifier pattern analysis."""

import pytest

from pharmachain.analysis import analyze, is_suspicious, match_manufacturer


class TestManufacturerFamilies:
    """Tests for labeler-prefix matching."""

    @pytest.mark.parametrize(
        "identifier, expected",
        [
            ("68180-518-01", "Pfizer"),
            ("00069-001-30", "Pfizer"),
            ("50458-220-10", "Johnson"),
            ("00006-007-41", "Merck"),
            ("00078-123-45", "Novartis"),
            ("50242-040-62", "Roche"),
        ],
    )
    def test_known_families(self, identifier, expected):
        assert match_manufacturer(identifier) == expected

    def test_unknown_labeler(self):
        assert match_manufacturer("99999-999-99") is None

    def test_requires_exact_shape(self):
        """Family patterns are anchored: extra characters break the match."""
        assert match_manufacturer("68180-518-01X") is None
        assert match_manufacturer("X68180-518-01") is None


class TestSuspiciousPatterns:
    """Tests for counterfeit markers."""

    @pytest.mark.parametrize(
        "identifier",
        [
            "FAKE_COUNTERFEIT_001",
            "fake-123",
            "Test0001",
            "demo_batch",
            "COUNTERFEIT9",
            "1" * 20,
            "ABCDEFGHIJ",
            "68180 518 01",
        ],
    )
    def test_suspicious(self, identifier):
        assert is_suspicious(identifier)

    @pytest.mark.parametrize("identifier", ["68180-518-01", "PFIZER_2025_A1", "1" * 19, "ABCDEFGHI"])
    def test_not_suspicious(self, identifier):
        assert not is_suspicious(identifier)


class TestAnalyze:
    """Tests for the analyze function."""

    def test_known_ndc_scores_full(self):
        """Manufacturer match + NDC structure + length saturate the score."""
        result = analyze("68180-518-01")
        assert result.confidence == 1.0
        assert result.score == 100
        assert result.manufacturer == "Pfizer"
        assert "Matches Pfizer NDC pattern" in result.reasonings
        assert "Follows NDC hyphen structure" in result.reasonings
        assert "Appropriate batch ID length" in result.reasonings

    def test_counterfeit_identifier(self):
        """0.5 - 0.4 (suspicious) + 0.1 (letters and digits), long length earns nothing."""
        result = analyze("FAKE_COUNTERFEIT_001")
        assert result.confidence == pytest.approx(0.2)
        assert result.score == 20
        assert result.manufacturer == "Unknown"
        assert result.reasonings == (
            "Contains suspicious pattern",
            "Unusual batch ID length",
            "Good character composition",
        )

    def test_unregistered_ndc_shape(self):
        """Unknown labeler still earns length and structure bonuses."""
        result = analyze("99999-999-99")
        assert result.confidence == pytest.approx(0.8)
        assert result.manufacturer == "Unknown"

    def test_reasoning_order(self):
        result = analyze("PFIZER_2025_A1")
        assert result.reasonings == ("Appropriate batch ID length", "Good character composition")
        assert result.confidence == pytest.approx(0.7)

    def test_clamped_at_zero(self):
        """A short suspicious letters-only code cannot go negative."""
        result = analyze("FAKE")
        assert result.confidence == pytest.approx(0.1)
        assert 0.0 <= result.confidence <= 1.0

    def test_empty_identifier(self):
        result = analyze("")
        assert result.confidence == pytest.approx(0.5)
        assert result.reasonings == ("Unusual batch ID length",)

    def test_deterministic(self):
        assert analyze("50458-220-10") == analyze("50458-220-10")

    @pytest.mark.parametrize(
        "identifier",
        ["", "x", "68180-518-01", "FAKE_COUNTERFEIT_001", "1" * 40, "  ", "PFIZER_2025"],
    )
    def test_bounds(self, identifier):
        result = analyze(identifier)
        assert 0.0 <= result.confidence <= 1.0
        assert 0 <= result.score <= 100
