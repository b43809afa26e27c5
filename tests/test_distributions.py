"""Tests for standard normal distribution functions."""

import math

import pytest

from options_scout.distributions import norm_cdf, norm_pdf


class TestNormPdf:
    """Tests for norm_pdf."""

    def test_peak_at_zero(self):
        """Density peaks at 1/sqrt(2 pi)."""
        assert norm_pdf(0) == pytest.approx(1 / math.sqrt(2 * math.pi))

    def test_symmetric(self):
        """phi(x) equals phi(-x)."""
        assert norm_pdf(1.3) == pytest.approx(norm_pdf(-1.3))

    def test_infinite_input_is_zero(self):
        """Density vanishes at +/- infinity."""
        assert norm_pdf(math.inf) == 0.0
        assert norm_pdf(-math.inf) == 0.0


class TestNormCdf:
    """Tests for norm_cdf."""

    @pytest.mark.parametrize(
        "x,expected",
        [
            (0.0, 0.5),
            (1.0, 0.841345),
            (-1.0, 0.158655),
            (1.96, 0.975002),
            (-2.5, 0.006210),
            (3.0, 0.998650),
        ],
    )
    def test_known_values(self, x, expected):
        """Matches tabulated values within the approximation error."""
        assert norm_cdf(x) == pytest.approx(expected, abs=1e-6)

    @pytest.mark.parametrize("x", [0.1, 0.5, 1.0, 2.0, 4.0, 8.0])
    def test_symmetry(self, x):
        """N(x) + N(-x) == 1."""
        assert norm_cdf(x) + norm_cdf(-x) == pytest.approx(1.0, abs=1e-12)

    def test_monotonic(self):
        """CDF never decreases."""
        xs = [i / 10 for i in range(-60, 61)]
        values = [norm_cdf(x) for x in xs]
        assert all(b >= a for a, b in zip(values, values[1:]))

    @pytest.mark.parametrize("x", [-50.0, -10.0, -1.0, 0.0, 1.0, 10.0, 50.0])
    def test_bounded(self, x):
        """Result stays within [0, 1]."""
        assert 0.0 <= norm_cdf(x) <= 1.0

    def test_extreme_tails_exact(self):
        """Beyond |x| > 37 the result is exactly 0 or 1."""
        assert norm_cdf(40) == 1.0
        assert norm_cdf(-40) == 0.0
        assert norm_cdf(math.inf) == 1.0
        assert norm_cdf(-math.inf) == 0.0

    def test_nan_rejected(self):
        """NaN input raises ValueError."""
        with pytest.raises(ValueError, match="NaN"):
            norm_cdf(float("nan"))
