"""
Implied volatility recovery via Newton-Raphson.

The solver iterates sigma_{n+1} = sigma_n - (BS(sigma_n) - P) / vega(sigma_n)
using the per-unit vega S sqrt(T) phi(d1). The display vega (per vol point)
is 100x smaller and would overshoot every step.

Each iteration also narrows a bracket [tolerance, max_volatility] around
the answer, since the model price rises monotonically with sigma. A Newton
step that would leave the bracket, or a vega too small to divide by, is
replaced by a bisection step. Out-of-the-money contracts with a high
implied volatility have almost no vega at the 0.30 starting guess, and
plain Newton either collapses to the floor or runs away from them.

Example:
    solver = ImpliedVolatilitySolver()
    result = solver.solve(
        market_price=3.63,
        spot=100.0,
        strike=100.0,
        time_years=30 / 365,
        option_type="call",
    )
    if result.converged:
        print(f"IV: {result.volatility:.2%}")
"""

import logging
import math
import warnings
from typing import Optional

from .black_scholes import (
    OptionTypeLike,
    black_scholes_price,
    black_scholes_vega_raw,
    intrinsic_value,
)
from .constants import (
    DAYS_PER_YEAR,
    DEFAULT_RISK_FREE_RATE,
    IV_INITIAL_GUESS,
    IV_MAX_ITERATIONS,
    IV_MAX_VOLATILITY,
    IV_MIN_VEGA,
    IV_TOLERANCE,
    MIN_TIME_TO_EXPIRY_YEARS,
)
from .exceptions import ConvergenceWarning, InvalidInputError
from .greeks import GreeksCalculator
from .models import IVSolveResult, OptionQuote, OptionType
from .utils.validation import require_positive

logger = logging.getLogger(__name__)


class ImpliedVolatilitySolver:
    """
    Newton-Raphson implied volatility solver.

    A solve that does not reach tolerance still returns its best estimate,
    flagged with converged=False, and emits a ConvergenceWarning.

    Attributes:
        tolerance: Price tolerance for convergence (also the sigma floor)
        max_iterations: Iteration cap
        initial_guess: Starting sigma
        risk_free_rate: Default annual risk-free rate
        max_volatility: Upper end of the search bracket
    """

    def __init__(
        self,
        tolerance: float = IV_TOLERANCE,
        max_iterations: int = IV_MAX_ITERATIONS,
        initial_guess: float = IV_INITIAL_GUESS,
        risk_free_rate: float = DEFAULT_RISK_FREE_RATE,
        max_volatility: float = IV_MAX_VOLATILITY,
    ):
        """
        Initialize the solver.

        Raises:
            InvalidInputError: If tolerance, max_iterations or initial_guess
                are non-positive, or max_volatility does not exceed tolerance
        """
        self.tolerance = require_positive(tolerance, "tolerance")
        if int(max_iterations) < 1:
            raise InvalidInputError(f"max_iterations must be at least 1, got {max_iterations}")
        self.max_iterations = int(max_iterations)
        self.initial_guess = require_positive(initial_guess, "initial_guess")
        self.risk_free_rate = risk_free_rate
        if max_volatility <= self.tolerance:
            raise InvalidInputError(
                f"max_volatility must exceed tolerance ({self.tolerance}), got {max_volatility}"
            )
        self.max_volatility = max_volatility

    def solve(
        self,
        market_price: float,
        spot: float,
        strike: float,
        time_years: float,
        option_type: OptionTypeLike,
        rate: Optional[float] = None,
        initial_guess: Optional[float] = None,
    ) -> IVSolveResult:
        """
        Solve for the volatility that reproduces an observed option price.

        Args:
            market_price: Observed option price (> 0)
            spot: Underlying price (> 0)
            strike: Strike price (> 0)
            time_years: Time to expiration in years (> 0)
            option_type: CALL or PUT
            rate: Override of the solver's risk-free rate
            initial_guess: Override of the solver's starting sigma

        Returns:
            IVSolveResult with the estimate and its convergence flag

        Raises:
            InvalidInputError: If any price, strike or time input is non-positive
        """
        option_type = OptionType.parse(option_type)
        market_price = require_positive(market_price, "market_price")
        spot = require_positive(spot, "spot")
        strike = require_positive(strike, "strike")
        time_years = require_positive(time_years, "time_years")
        r = self.risk_free_rate if rate is None else rate
        if initial_guess is None:
            sigma = self.initial_guess
        else:
            sigma = require_positive(initial_guess, "initial_guess")
        low, high = self.tolerance, self.max_volatility
        sigma = min(max(sigma, low), high)

        reason = "max_iterations"
        converged = False
        iterations = 0
        price_error = float("nan")

        for iterations in range(1, self.max_iterations + 1):
            model_price = black_scholes_price(spot, strike, time_years, r, sigma, option_type)
            price_error = model_price - market_price
            if abs(price_error) < self.tolerance:
                converged = True
                reason = "converged"
                break

            # Model price rises with sigma, so the error sign tells which side the root is on
            if price_error > 0:
                high = sigma
            else:
                low = sigma

            vega = black_scholes_vega_raw(spot, strike, time_years, r, sigma)
            if vega < IV_MIN_VEGA and high - low <= self.tolerance:
                reason = "zero_vega"
                break

            step = sigma - price_error / vega if vega >= IV_MIN_VEGA else None
            if step is not None and low < step < high:
                sigma = step
            else:
                sigma = (low + high) / 2
        else:
            model_price = black_scholes_price(spot, strike, time_years, r, sigma, option_type)
            price_error = model_price - market_price

        # Lowest price the model can produce: intrinsic value against the discounted strike
        floor_price = intrinsic_value(spot, strike * math.exp(-r * time_years), option_type)
        if market_price < floor_price - self.tolerance:
            converged = False
            reason = "below_intrinsic"

        result = IVSolveResult(
            volatility=sigma,
            converged=converged,
            iterations=iterations,
            price_error=price_error,
            reason=reason,
        )

        if not converged:
            message = (
                f"IV solve did not converge ({reason}) for {option_type.value} "
                f"K={strike} S={spot} price={market_price}: "
                f"sigma={sigma:.4f} after {iterations} iterations"
            )
            logger.warning(message)
            warnings.warn(message, ConvergenceWarning, stacklevel=2)
        else:
            logger.debug(
                f"IV solved for {option_type.value} K={strike}: "
                f"sigma={sigma:.4f} in {iterations} iterations"
            )

        return result


def implied_volatility(
    market_price: float,
    spot: float,
    strike: float,
    time_years: float,
    option_type: OptionTypeLike,
    rate: float = DEFAULT_RISK_FREE_RATE,
    initial_guess: float = IV_INITIAL_GUESS,
) -> float:
    """
    Convenience wrapper returning only the volatility estimate.

    Use ImpliedVolatilitySolver.solve() when the convergence flag matters.
    """
    solver = ImpliedVolatilitySolver(initial_guess=initial_guess, risk_free_rate=rate)
    return solver.solve(market_price, spot, strike, time_years, option_type).volatility


def requote_from_market(
    quote: OptionQuote,
    spot: float,
    bid: float,
    ask: float,
    last: float,
    solver: Optional[ImpliedVolatilitySolver] = None,
    greeks_calculator: Optional[GreeksCalculator] = None,
    volume: Optional[int] = None,
    open_interest: Optional[int] = None,
) -> OptionQuote:
    """
    Re-price a contract from an observed market price.

    Recovers IV from last, recomputes Greeks at that IV and returns a new
    quote tagged as a MARKET source. The original quote is not modified.

    Intrinsic value is capped at last, so a deep in-the-money European
    put trading under its undiscounted intrinsic value is recorded with
    zero time value rather than a negative one.

    Args:
        quote: Contract to re-price
        spot: Current underlying price
        bid: Observed bid
        ask: Observed ask
        last: Observed last trade price
        solver: IV solver (default: ImpliedVolatilitySolver())
        greeks_calculator: Greeks calculator (default uses the solver's rate)
        volume: Observed volume (default: keep existing)
        open_interest: Observed open interest (default: keep existing)

    Returns:
        New OptionQuote with market prices, recovered IV and Greeks
    """
    solver = solver or ImpliedVolatilitySolver()
    greeks_calculator = greeks_calculator or GreeksCalculator(solver.risk_free_rate)

    time_years = max(quote.days_to_expiration / DAYS_PER_YEAR, MIN_TIME_TO_EXPIRY_YEARS)
    result = solver.solve(last, spot, quote.strike, time_years, quote.option_type)
    greeks = greeks_calculator.calculate(
        spot,
        quote.strike,
        quote.days_to_expiration,
        result.volatility,
        quote.option_type,
        rate=solver.risk_free_rate,
    )

    return quote.with_market_data(
        bid=bid,
        ask=ask,
        last=last,
        implied_volatility=result.volatility,
        greeks=greeks,
        iv_converged=result.converged,
        volume=volume,
        open_interest=open_interest,
        intrinsic_value=min(intrinsic_value(spot, quote.strike, quote.option_type), last),
    )
