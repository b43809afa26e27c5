"""Tests for implied volatility recovery."""

import warnings

import pytest

from options_scout.black_scholes import black_scholes_price, black_scholes_vega_raw
from options_scout.exceptions import ConvergenceWarning, InvalidInputError
from options_scout.greeks import GreeksCalculator
from options_scout.implied_volatility import (
    ImpliedVolatilitySolver,
    implied_volatility,
    requote_from_market,
)
from options_scout.models import QuoteSource

T30 = 30 / 365


@pytest.fixture
def solver() -> ImpliedVolatilitySolver:
    """Solver with default settings."""
    return ImpliedVolatilitySolver()


# Contracts whose price still responds to volatility; vega below 0.5 per unit
# cannot pin sigma to 1e-3 from a 1e-4 price tolerance
ROUND_TRIP_GRID = [
    (strike, t, sigma, option_type)
    for strike in (80.0, 90.0, 95.0, 100.0, 105.0, 110.0, 120.0)
    for t in (7 / 365, 14 / 365, 30 / 365, 0.25, 1.0)
    for sigma in (0.20, 0.30, 0.60, 1.00, 1.50)
    for option_type in ("call", "put")
    if black_scholes_vega_raw(100, strike, t, 0.05, sigma) > 0.5
]


class TestSolve:
    """Tests for ImpliedVolatilitySolver.solve."""

    def test_reference_contract(self, solver):
        """The model price at 30% vol solves back to 30% from a 20% start."""
        price = black_scholes_price(100, 100, T30, 0.05, 0.30, "call")
        result = solver.solve(price, 100, 100, T30, "call", initial_guess=0.20)
        assert result.converged
        assert result.reason == "converged"
        assert result.volatility == pytest.approx(0.30, abs=1e-3)
        assert result.iterations < 20
        assert abs(result.price_error) < solver.tolerance

    def test_higher_price_means_higher_vol(self, solver):
        """An observed 4.62 for the reference contract implies more than 30% vol."""
        result = solver.solve(4.62, 100, 100, T30, "call", initial_guess=0.20)
        assert result.converged
        assert result.volatility > 0.35
        assert black_scholes_price(100, 100, T30, 0.05, result.volatility, "call") == (
            pytest.approx(4.62, abs=1e-3)
        )

    @pytest.mark.parametrize("strike,t,sigma,option_type", ROUND_TRIP_GRID)
    def test_round_trip(self, solver, strike, t, sigma, option_type):
        """Prices generated by the model recover their volatility."""
        price = black_scholes_price(100, strike, t, 0.05, sigma, option_type)
        result = solver.solve(price, 100, strike, t, option_type)
        assert result.converged
        assert result.volatility == pytest.approx(sigma, abs=1e-3)

    def test_rate_override(self, solver):
        """A per-call rate overrides the solver default."""
        price = black_scholes_price(100, 100, 0.5, 0.0, 0.25, "call")
        result = solver.solve(price, 100, 100, 0.5, "call", rate=0.0)
        assert result.volatility == pytest.approx(0.25, abs=1e-3)

    @pytest.mark.parametrize(
        "strike,t,sigma,option_type",
        [
            (110.0, 7 / 365, 1.5, "call"),
            (80.0, 30 / 365, 1.0, "put"),
            (80.0, 14 / 365, 1.0, "put"),
            (120.0, 14 / 365, 1.5, "call"),
        ],
    )
    def test_high_vol_out_of_the_money(self, solver, strike, t, sigma, option_type):
        """Contracts with almost no vega at the starting guess still converge."""
        price = black_scholes_price(100, strike, t, 0.05, sigma, option_type)
        result = solver.solve(price, 100, strike, t, option_type)
        assert result.converged
        assert result.volatility == pytest.approx(sigma, abs=1e-3)

    def test_volatility_stays_in_bracket(self, solver):
        """An unreachably high price ends at the bracket ceiling, not beyond it."""
        with pytest.warns(ConvergenceWarning, match="max_iterations"):
            result = solver.solve(99.0, 100, 10, 7 / 365, "call")
        assert not result.converged
        assert result.volatility <= solver.max_volatility

    def test_zero_vega_stops_early(self):
        """A contract with no vega anywhere in the bracket stops without dividing by zero."""
        solver = ImpliedVolatilitySolver(initial_guess=0.01, max_volatility=0.02)
        with pytest.warns(ConvergenceWarning, match="zero_vega"):
            result = solver.solve(95.0, 100, 10, 7 / 365, "call")
        assert not result.converged
        assert result.reason == "zero_vega"
        assert result.iterations < 20
        assert 0.01 <= result.volatility <= 0.02

    def test_max_iterations(self):
        """A tight iteration cap yields a flagged best estimate."""
        solver = ImpliedVolatilitySolver(max_iterations=1)
        with pytest.warns(ConvergenceWarning):
            result = solver.solve(8.0, 100, 100, 0.5, "call")
        assert not result.converged
        assert result.reason == "max_iterations"
        assert result.iterations == 1
        assert result.volatility > 0

    def test_below_intrinsic_flagged(self, solver):
        """A price under the model floor can never converge."""
        with pytest.warns(ConvergenceWarning, match="below_intrinsic"):
            result = solver.solve(5.0, 120, 100, 0.25, "call")
        assert not result.converged
        assert result.reason == "below_intrinsic"
        assert result.volatility > 0

    def test_volatility_never_non_positive(self, solver):
        """Overshooting below zero is clamped to the tolerance floor."""
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", ConvergenceWarning)
            result = solver.solve(0.01, 100, 130, 0.1, "call", initial_guess=2.0)
        assert result.volatility > 0

    def test_convergence_logs_nothing_at_warning(self, solver, caplog):
        """Converged solves do not log warnings."""
        price = black_scholes_price(100, 95, 0.25, 0.05, 0.4, "put")
        solver.solve(price, 100, 95, 0.25, "put")
        assert not [r for r in caplog.records if r.levelname == "WARNING"]

    @pytest.mark.parametrize(
        "args",
        [
            (0, 100, 100, 0.25, "call"),
            (5, 0, 100, 0.25, "call"),
            (5, 100, 0, 0.25, "call"),
            (5, 100, 100, 0, "call"),
            (5, 100, 100, 0.25, "future"),
        ],
    )
    def test_invalid_inputs(self, solver, args):
        """Non-positive inputs and bad option types are rejected."""
        with pytest.raises(InvalidInputError):
            solver.solve(*args)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"tolerance": 0},
            {"max_iterations": 0},
            {"initial_guess": -0.1},
            {"max_volatility": 1e-5},
        ],
    )
    def test_invalid_configuration(self, kwargs):
        """Solver settings must be positive."""
        with pytest.raises(InvalidInputError):
            ImpliedVolatilitySolver(**kwargs)

    def test_result_to_dict(self, solver):
        """Result serializes with a percent field."""
        price = black_scholes_price(100, 100, T30, 0.05, 0.30, "call")
        data = solver.solve(price, 100, 100, T30, "call").to_dict()
        assert data["converged"] is True
        assert data["volatility_pct"] == pytest.approx(30.0, abs=0.1)


class TestImpliedVolatilityWrapper:
    """Tests for the implied_volatility convenience function."""

    def test_returns_float(self):
        """Only the estimate is returned."""
        price = black_scholes_price(100, 105, 0.5, 0.05, 0.35, "call")
        assert implied_volatility(price, 100, 105, 0.5, "call") == pytest.approx(0.35, abs=1e-3)


class TestRequoteFromMarket:
    """Tests for re-pricing a quote from observed market prices."""

    def test_market_requote(self, atm_call):
        """A market requote recovers IV and Greeks without touching the original."""
        observed = black_scholes_price(100, 100, 30 / 365, 0.05, 0.45, "call")
        requoted = requote_from_market(
            atm_call, spot=100, bid=observed - 0.05, ask=observed + 0.05, last=observed
        )

        assert requoted.source is QuoteSource.MARKET
        assert requoted.iv_converged
        assert requoted.implied_volatility == pytest.approx(0.45, abs=1e-3)
        assert requoted.last == observed
        assert requoted.greeks == GreeksCalculator().calculate(
            100, 100, 30, requoted.implied_volatility, "call"
        )
        assert requoted.time_value == pytest.approx(observed)
        assert atm_call.source is QuoteSource.SIMULATED
        assert atm_call.implied_volatility == 0.30

    def test_market_volume_override(self, atm_call):
        """Observed volume and open interest replace the synthetic values."""
        requoted = requote_from_market(
            atm_call, spot=100, bid=3.5, ask=3.7, last=3.6, volume=42, open_interest=99
        )
        assert requoted.volume == 42
        assert requoted.open_interest == 99

    def test_intrinsic_updated_for_new_spot(self, atm_call):
        """Intrinsic value follows the spot the quote is re-priced against."""
        requoted = requote_from_market(atm_call, spot=105, bid=6.9, ask=7.1, last=7.0)
        assert requoted.intrinsic_value == pytest.approx(5.0)
        assert requoted.time_value == pytest.approx(2.0)

    def test_below_intrinsic_keeps_time_value_non_negative(self, quote_factory):
        """A deep in-the-money put under intrinsic value gets zero time value."""
        put = quote_factory(option_type="put", strike=150.0, delta=-0.95)
        with pytest.warns(ConvergenceWarning, match="below_intrinsic"):
            requoted = requote_from_market(put, spot=100, bid=49.0, ask=49.5, last=49.2)
        assert not requoted.iv_converged
        assert requoted.intrinsic_value == pytest.approx(49.2)
        assert requoted.time_value == 0.0
        assert requoted.intrinsic_value + requoted.time_value == requoted.last
