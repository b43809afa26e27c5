"""
Black-Scholes pricing for European options.

Formula Reference:
    d1 = [ln(S/K) + (r + sigma^2/2)T] / (sigma sqrt(T))
    d2 = d1 - sigma sqrt(T)
    Call = S N(d1) - K e^(-rT) N(d2)
    Put  = K e^(-rT) N(-d2) - S N(-d1)
    where:
        S = Spot price
        K = Strike price
        T = Time to expiration in years
        r = Risk-free rate (decimal)
        sigma = Annualized volatility (decimal)
"""

import math
from typing import Union

from .distributions import norm_cdf, norm_pdf
from .exceptions import InvalidInputError
from .models import OptionType, PricingInputs
from .utils.validation import require_finite, require_positive

OptionTypeLike = Union[OptionType, str]


def intrinsic_value(spot: float, strike: float, option_type: OptionTypeLike) -> float:
    """
    Exercise value of an option at the given spot.

    Args:
        spot: Underlying price
        strike: Strike price
        option_type: CALL or PUT

    Returns:
        max(0, S - K) for calls, max(0, K - S) for puts
    """
    if OptionType.parse(option_type) is OptionType.CALL:
        return max(0.0, spot - strike)
    return max(0.0, strike - spot)


def calculate_d1_d2(
    spot: float, strike: float, time_years: float, rate: float, volatility: float
) -> tuple[float, float]:
    """
    Compute the Black-Scholes d1 and d2 terms.

    Args:
        spot: Underlying price (> 0)
        strike: Strike price (> 0)
        time_years: Time to expiration in years (> 0)
        rate: Risk-free rate (decimal)
        volatility: Annualized volatility (> 0)

    Returns:
        Tuple of (d1, d2)

    Raises:
        InvalidInputError: If any input is out of domain
    """
    require_positive(spot, "spot")
    require_positive(strike, "strike")
    require_positive(time_years, "time_years")
    require_positive(volatility, "volatility")
    require_finite(rate, "rate")

    vol_sqrt_t = volatility * math.sqrt(time_years)
    d1 = (math.log(spot / strike) + (rate + 0.5 * volatility**2) * time_years) / vol_sqrt_t
    d2 = d1 - vol_sqrt_t
    return d1, d2


def black_scholes_price(
    spot: float,
    strike: float,
    time_years: float,
    rate: float,
    volatility: float,
    option_type: OptionTypeLike,
) -> float:
    """
    Theoretical Black-Scholes price of a European option.

    At or past expiration (time_years <= 0) the intrinsic value is returned
    exactly. The result is floored at zero to absorb approximation noise
    on deep out-of-the-money contracts.

    Args:
        spot: Underlying price
        strike: Strike price
        time_years: Time to expiration in years
        rate: Risk-free rate (decimal)
        volatility: Annualized volatility (decimal)
        option_type: CALL or PUT

    Returns:
        Option price (>= 0)

    Raises:
        InvalidInputError: If spot or strike are non-positive, or if
            volatility is non-positive while time remains
    """
    option_type = OptionType.parse(option_type)
    spot = require_positive(spot, "spot")
    strike = require_positive(strike, "strike")
    time_years = require_finite(time_years, "time_years")

    if time_years <= 0:
        return intrinsic_value(spot, strike, option_type)

    if volatility is None or not volatility > 0:
        raise InvalidInputError(
            f"volatility must be positive when time remains, got {volatility}"
        )

    d1, d2 = calculate_d1_d2(spot, strike, time_years, rate, volatility)
    discounted_strike = strike * math.exp(-rate * time_years)

    if option_type is OptionType.CALL:
        price = spot * norm_cdf(d1) - discounted_strike * norm_cdf(d2)
    else:
        price = discounted_strike * norm_cdf(-d2) - spot * norm_cdf(-d1)

    return max(0.0, price)


def black_scholes_vega_raw(
    spot: float, strike: float, time_years: float, rate: float, volatility: float
) -> float:
    """
    Vega per unit of volatility: S sqrt(T) phi(d1).

    This is the derivative used by Newton-Raphson. The display vega
    reported by GreeksCalculator is this value divided by 100.

    Returns:
        dPrice/dSigma, or 0.0 at/after expiration
    """
    if time_years <= 0:
        return 0.0
    d1, _ = calculate_d1_d2(spot, strike, time_years, rate, volatility)
    return spot * math.sqrt(time_years) * norm_pdf(d1)


def price_inputs(inputs: PricingInputs) -> float:
    """Price a PricingInputs bundle with black_scholes_price()."""
    return black_scholes_price(
        inputs.spot,
        inputs.strike,
        inputs.time_to_expiration_years,
        inputs.risk_free_rate,
        inputs.volatility,
        inputs.option_type,
    )
