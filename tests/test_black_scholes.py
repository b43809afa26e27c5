"""Tests for Black-Scholes pricing."""

import math

import pytest

from options_scout.black_scholes import (
    black_scholes_price,
    black_scholes_vega_raw,
    calculate_d1_d2,
    intrinsic_value,
    price_inputs,
)
from options_scout.exceptions import InvalidInputError
from options_scout.models import OptionType, PricingInputs

T30 = 30 / 365

PARITY_GRID = [
    (spot, strike, t, rate, vol)
    for spot in (80.0, 100.0, 125.0)
    for strike in (90.0, 100.0, 110.0)
    for t in (7 / 365, 0.25, 1.0)
    for rate in (0.0, 0.05)
    for vol in (0.15, 0.45)
]


class TestIntrinsicValue:
    """Tests for intrinsic_value."""

    @pytest.mark.parametrize(
        "spot,strike,option_type,expected",
        [
            (110, 100, "call", 10.0),
            (90, 100, "call", 0.0),
            (90, 100, "put", 10.0),
            (110, 100, "put", 0.0),
            (100, 100, OptionType.CALL, 0.0),
        ],
    )
    def test_intrinsic(self, spot, strike, option_type, expected):
        """Exercise value is max(0, S-K) for calls and max(0, K-S) for puts."""
        assert intrinsic_value(spot, strike, option_type) == pytest.approx(expected)

    def test_invalid_option_type(self):
        """Unknown option types are rejected."""
        with pytest.raises(InvalidInputError, match="call' or 'put"):
            intrinsic_value(100, 100, "straddle")


class TestD1D2:
    """Tests for calculate_d1_d2."""

    def test_atm_values(self):
        """ATM d1/d2 for the reference contract."""
        d1, d2 = calculate_d1_d2(100, 100, T30, 0.05, 0.30)
        assert d1 == pytest.approx(0.0908, abs=1e-3)
        assert d1 - d2 == pytest.approx(0.30 * math.sqrt(T30))

    @pytest.mark.parametrize(
        "args",
        [
            (0, 100, 0.5, 0.05, 0.3),
            (100, -1, 0.5, 0.05, 0.3),
            (100, 100, 0, 0.05, 0.3),
            (100, 100, 0.5, 0.05, 0),
            (100, 100, 0.5, math.nan, 0.3),
        ],
    )
    def test_invalid_inputs(self, args):
        """Out-of-domain inputs fail fast."""
        with pytest.raises(InvalidInputError):
            calculate_d1_d2(*args)


class TestBlackScholesPrice:
    """Tests for black_scholes_price."""

    def test_reference_call(self):
        """S=K=100, 30 days, 5%, 30% vol call prices at about 3.63."""
        assert black_scholes_price(100, 100, T30, 0.05, 0.30, "call") == pytest.approx(
            3.63, abs=0.01
        )

    def test_reference_put(self):
        """Matching put prices at about 3.22."""
        assert black_scholes_price(100, 100, T30, 0.05, 0.30, "put") == pytest.approx(
            3.22, abs=0.01
        )

    @pytest.mark.parametrize("spot,strike,t,rate,vol", PARITY_GRID)
    def test_put_call_parity(self, spot, strike, t, rate, vol):
        """C - P == S - K e^(-rT)."""
        call = black_scholes_price(spot, strike, t, rate, vol, OptionType.CALL)
        put = black_scholes_price(spot, strike, t, rate, vol, OptionType.PUT)
        assert call - put == pytest.approx(spot - strike * math.exp(-rate * t), abs=1e-5)

    @pytest.mark.parametrize("spot,strike,t,rate,vol", PARITY_GRID)
    def test_call_at_least_intrinsic(self, spot, strike, t, rate, vol):
        """A call is never worth less than exercising it."""
        price = black_scholes_price(spot, strike, t, rate, vol, "call")
        assert price >= intrinsic_value(spot, strike, "call") - 1e-9

    @pytest.mark.parametrize("spot,strike,t,vol", [(s, k, t, v) for s, k, t, _, v in PARITY_GRID])
    def test_put_at_least_intrinsic_without_carry(self, spot, strike, t, vol):
        """With a zero rate a European put is never worth less than exercising it."""
        price = black_scholes_price(spot, strike, t, 0.0, vol, "put")
        assert price >= intrinsic_value(spot, strike, "put") - 1e-9

    @pytest.mark.parametrize(
        "spot,strike,option_type", [(110, 100, "call"), (90, 100, "put"), (100, 100, "call")]
    )
    def test_expired_equals_intrinsic(self, spot, strike, option_type):
        """At t=0 the price is exactly intrinsic value."""
        price = black_scholes_price(spot, strike, 0, 0.05, 0.30, option_type)
        assert price == intrinsic_value(spot, strike, option_type)

    def test_expired_ignores_volatility(self):
        """No volatility is needed once expired."""
        assert black_scholes_price(105, 100, 0, 0.05, None, "call") == 5.0

    def test_price_increases_with_volatility(self):
        """Vega is positive: more volatility, higher price."""
        prices = [black_scholes_price(100, 105, 0.5, 0.05, v, "call") for v in (0.1, 0.2, 0.4)]
        assert prices == sorted(prices)
        assert prices[0] < prices[-1]

    def test_deep_otm_not_negative(self):
        """Approximation noise never yields a negative price."""
        assert black_scholes_price(10, 500, 0.01, 0.05, 0.1, "call") >= 0.0

    @pytest.mark.parametrize(
        "spot,strike,vol",
        [(0, 100, 0.3), (-5, 100, 0.3), (100, 0, 0.3), (100, 100, 0), (100, 100, -0.2)],
    )
    def test_invalid_inputs(self, spot, strike, vol):
        """Non-positive spot, strike or volatility raise InvalidInputError."""
        with pytest.raises(InvalidInputError):
            black_scholes_price(spot, strike, 0.5, 0.05, vol, "call")

    def test_invalid_input_is_value_error(self):
        """InvalidInputError is also a ValueError."""
        with pytest.raises(ValueError):
            black_scholes_price(100, 100, 0.5, 0.05, 0, "call")


class TestVegaRaw:
    """Tests for black_scholes_vega_raw."""

    def test_reference_vega(self):
        """Per-unit vega is 100x the display vega (about 11.4)."""
        assert black_scholes_vega_raw(100, 100, T30, 0.05, 0.30) == pytest.approx(11.39, abs=0.02)

    def test_expired_vega_is_zero(self):
        """No vega once expired."""
        assert black_scholes_vega_raw(100, 100, 0, 0.05, 0.30) == 0.0


class TestPriceInputs:
    """Tests for pricing from a PricingInputs bundle."""

    def test_matches_direct_call(self):
        """price_inputs() forwards every field."""
        inputs = PricingInputs(
            spot=100,
            strike=95,
            time_to_expiration_years=0.25,
            risk_free_rate=0.03,
            volatility=0.25,
            option_type="put",
        )
        assert price_inputs(inputs) == pytest.approx(
            black_scholes_price(100, 95, 0.25, 0.03, 0.25, OptionType.PUT)
        )

    def test_zero_time_allowed(self):
        """A zero time to expiration is a valid input."""
        inputs = PricingInputs(100, 90, 0.0, 0.05, 0.2, OptionType.CALL)
        assert price_inputs(inputs) == 10.0
