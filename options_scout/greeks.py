"""
Analytical Black-Scholes Greeks.

Conventions:
    - delta: N(d1) for calls, N(d1) - 1 for puts
    - gamma: phi(d1) / (S sigma sqrt(T))
    - theta: reported per calendar day (annual theta / 365)
    - vega: reported per 1 percentage point of volatility (raw vega / 100)

Expired contracts (DTE <= 0) are evaluated with a 0.001-year floor so the
Greeks stay finite.
"""

import logging
import math
from typing import Optional

from .black_scholes import OptionTypeLike, calculate_d1_d2
from .constants import DAYS_PER_YEAR, DEFAULT_RISK_FREE_RATE, MIN_TIME_TO_EXPIRY_YEARS
from .distributions import norm_cdf, norm_pdf
from .models import Greeks, OptionType
from .utils.validation import require_finite, require_positive

logger = logging.getLogger(__name__)


class GreeksCalculator:
    """
    Calculator for option Greeks under Black-Scholes.

    Example:
        calculator = GreeksCalculator(risk_free_rate=0.05)
        greeks = calculator.calculate(
            spot=100.0,
            strike=100.0,
            days_to_expiration=30,
            volatility=0.30,
            option_type="call",
        )
        print(f"Delta: {greeks.delta:.3f}")
    """

    def __init__(self, risk_free_rate: Optional[float] = None):
        """
        Initialize the Greeks calculator.

        Args:
            risk_free_rate: Annual risk-free rate (default: 0.05 = 5%)
        """
        self.risk_free_rate = (
            DEFAULT_RISK_FREE_RATE if risk_free_rate is None else risk_free_rate
        )

    def calculate(
        self,
        spot: float,
        strike: float,
        days_to_expiration: float,
        volatility: float,
        option_type: OptionTypeLike,
        rate: Optional[float] = None,
    ) -> Greeks:
        """
        Calculate delta, gamma, theta and vega.

        Args:
            spot: Underlying price
            strike: Strike price
            days_to_expiration: Calendar days until expiration
            volatility: Annualized volatility (decimal)
            option_type: CALL or PUT
            rate: Override of the calculator's risk-free rate

        Returns:
            Greeks with theta per day and vega per vol point (unrounded)

        Raises:
            InvalidInputError: If spot, strike or volatility are non-positive
        """
        option_type = OptionType.parse(option_type)
        spot = require_positive(spot, "spot")
        strike = require_positive(strike, "strike")
        volatility = require_positive(volatility, "volatility")
        days_to_expiration = require_finite(days_to_expiration, "days_to_expiration")
        r = self.risk_free_rate if rate is None else rate

        T = days_to_expiration / DAYS_PER_YEAR
        if T <= 0:
            T = MIN_TIME_TO_EXPIRY_YEARS

        d1, d2 = calculate_d1_d2(spot, strike, T, r, volatility)
        sqrt_t = math.sqrt(T)
        pdf_d1 = norm_pdf(d1)
        discounted_strike = strike * math.exp(-r * T)

        gamma = pdf_d1 / (spot * volatility * sqrt_t)
        vega = spot * sqrt_t * pdf_d1 / 100
        decay = -(spot * pdf_d1 * volatility) / (2 * sqrt_t)

        if option_type is OptionType.CALL:
            delta = norm_cdf(d1)
            theta = (decay - r * discounted_strike * norm_cdf(d2)) / DAYS_PER_YEAR
        else:
            delta = norm_cdf(d1) - 1
            theta = (decay + r * discounted_strike * norm_cdf(-d2)) / DAYS_PER_YEAR

        logger.debug(
            f"Greeks {option_type.value} S={spot} K={strike} T={T:.4f} sigma={volatility}: "
            f"delta={delta:.4f} gamma={gamma:.4f} theta={theta:.4f} vega={vega:.4f}"
        )

        return Greeks(delta=delta, gamma=gamma, theta=theta, vega=vega)
