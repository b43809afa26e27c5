"""Tests for the Greeks calculator."""

import pytest

from options_scout.exceptions import InvalidInputError
from options_scout.greeks import GreeksCalculator
from options_scout.models import Greeks, OptionType


@pytest.fixture
def calculator() -> GreeksCalculator:
    """Calculator at the default 5% rate."""
    return GreeksCalculator()


GRID = [
    (spot, strike, days, vol)
    for spot in (50.0, 100.0, 250.0)
    for strike in (45.0, 100.0, 260.0)
    for days in (1, 30, 180)
    for vol in (0.1, 0.35, 0.9)
]


class TestReferenceContract:
    """S=K=100, 30 days, 30% vol, 5% rate."""

    def test_call_greeks(self, calculator):
        """Delta, gamma, theta and vega of the ATM call."""
        greeks = calculator.calculate(100, 100, 30, 0.30, "call")
        assert isinstance(greeks, Greeks)
        assert greeks.delta == pytest.approx(0.536, abs=0.002)
        assert greeks.gamma == pytest.approx(0.0462, abs=0.0005)
        assert greeks.theta == pytest.approx(-0.0638, abs=0.001)
        assert greeks.vega == pytest.approx(0.114, abs=0.001)

    def test_put_greeks(self, calculator):
        """Put delta is call delta minus one; gamma and vega match."""
        call = calculator.calculate(100, 100, 30, 0.30, OptionType.CALL)
        put = calculator.calculate(100, 100, 30, 0.30, OptionType.PUT)
        assert put.delta == pytest.approx(call.delta - 1)
        assert put.gamma == pytest.approx(call.gamma)
        assert put.vega == pytest.approx(call.vega)
        assert put.theta > call.theta

    def test_rate_override(self, calculator):
        """A per-call rate overrides the calculator default."""
        default = calculator.calculate(100, 100, 30, 0.30, "call")
        zero_rate = calculator.calculate(100, 100, 30, 0.30, "call", rate=0.0)
        assert zero_rate.delta < default.delta

    def test_constructor_rate(self):
        """The constructor rate is used when none is passed."""
        assert GreeksCalculator(0.0).risk_free_rate == 0.0
        assert GreeksCalculator().risk_free_rate == 0.05


class TestGreekProperties:
    """Properties over a grid of contracts."""

    @pytest.mark.parametrize("spot,strike,days,vol", GRID)
    def test_delta_bounds(self, calculator, spot, strike, days, vol):
        """Call delta in [0, 1], put delta in [-1, 0]."""
        call = calculator.calculate(spot, strike, days, vol, "call")
        put = calculator.calculate(spot, strike, days, vol, "put")
        assert 0.0 <= call.delta <= 1.0
        assert -1.0 <= put.delta <= 0.0

    @pytest.mark.parametrize("spot,strike,days,vol", GRID)
    def test_gamma_symmetry(self, calculator, spot, strike, days, vol):
        """Calls and puts share gamma and vega."""
        call = calculator.calculate(spot, strike, days, vol, "call")
        put = calculator.calculate(spot, strike, days, vol, "put")
        assert call.gamma == pytest.approx(put.gamma)
        assert call.vega == pytest.approx(put.vega)
        assert call.gamma >= 0
        assert call.vega >= 0

    @pytest.mark.parametrize("days,vol", [(7, 0.2), (30, 0.3), (90, 0.5)])
    def test_call_delta_decreases_with_strike(self, calculator, days, vol):
        """Call delta strictly decreases as strike rises."""
        deltas = [
            calculator.calculate(100, k, days, vol, "call").delta for k in range(80, 121, 5)
        ]
        assert all(b < a for a, b in zip(deltas, deltas[1:]))

    @pytest.mark.parametrize("days,vol", [(7, 0.2), (30, 0.3), (90, 0.5)])
    def test_put_delta_magnitude_increases_with_strike(self, calculator, days, vol):
        """|put delta| strictly increases as strike rises."""
        deltas = [
            abs(calculator.calculate(100, k, days, vol, "put").delta) for k in range(80, 121, 5)
        ]
        assert all(b > a for a, b in zip(deltas, deltas[1:]))

    def test_long_call_theta_negative(self, calculator):
        """Long calls decay."""
        assert calculator.calculate(100, 100, 60, 0.25, "call").theta < 0


class TestEdgeCases:
    """Tests for expired contracts and invalid input."""

    def test_expired_contract_is_finite(self, calculator):
        """DTE 0 is evaluated with a floor instead of dividing by zero."""
        greeks = calculator.calculate(100, 100, 0, 0.30, "call")
        assert 0.0 <= greeks.delta <= 1.0
        assert greeks.gamma > 0

    def test_negative_dte_matches_floor(self, calculator):
        """Past-expiry contracts use the same floor as DTE 0."""
        assert calculator.calculate(100, 100, -3, 0.30, "put") == calculator.calculate(
            100, 100, 0, 0.30, "put"
        )

    @pytest.mark.parametrize(
        "spot,strike,vol", [(0, 100, 0.3), (100, 0, 0.3), (100, 100, 0), (100, 100, -1)]
    )
    def test_invalid_inputs(self, calculator, spot, strike, vol):
        """Non-positive spot, strike or volatility raise InvalidInputError."""
        with pytest.raises(InvalidInputError):
            calculator.calculate(spot, strike, 30, vol, "call")

    def test_to_dict_rounds(self, calculator):
        """to_dict rounds to 4 decimals."""
        data = calculator.calculate(100, 100, 30, 0.30, "call").to_dict()
        assert set(data) == {"delta", "gamma", "theta", "vega"}
        assert data["vega"] == pytest.approx(0.1139, abs=1e-4)
