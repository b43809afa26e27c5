"""
Standard normal distribution functions.

The cumulative distribution uses the Abramowitz & Stegun formula 26.2.17
polynomial approximation (maximum absolute error 7.5e-8), which is fast,
dependency-free and accurate enough for option pricing.

Formula Reference:
    For x >= 0:
        t = 1 / (1 + p x)
        N(x) = 1 - phi(x) (b1 t + b2 t^2 + b3 t^3 + b4 t^4 + b5 t^5)
    For x < 0:
        N(x) = 1 - N(-x)
"""

import math

# Abramowitz & Stegun 26.2.17 coefficients
_P = 0.2316419
_B1 = 0.319381530
_B2 = -0.356563782
_B3 = 1.781477937
_B4 = -1.821255978
_B5 = 1.330274429

# Beyond this |x| the tail is below double precision and N(x) is exactly 0 or 1
_TAIL_CUTOFF = 37.0

_INV_SQRT_2PI = 1.0 / math.sqrt(2.0 * math.pi)


def norm_pdf(x: float) -> float:
    """Standard normal probability density phi(x)."""
    if math.isinf(x):
        return 0.0
    return _INV_SQRT_2PI * math.exp(-0.5 * x * x)


def norm_cdf(x: float) -> float:
    """
    Standard normal cumulative distribution N(x).

    Args:
        x: Point at which to evaluate the CDF

    Returns:
        Probability in [0, 1]; exactly 0.0 or 1.0 for |x| > 37

    Raises:
        ValueError: If x is NaN
    """
    if math.isnan(x):
        raise ValueError("norm_cdf is undefined for NaN")
    if x > _TAIL_CUTOFF:
        return 1.0
    if x < -_TAIL_CUTOFF:
        return 0.0

    ax = abs(x)
    t = 1.0 / (1.0 + _P * ax)
    poly = t * (_B1 + t * (_B2 + t * (_B3 + t * (_B4 + t * _B5))))
    upper = norm_pdf(ax) * poly

    if x >= 0:
        return 1.0 - upper
    return upper
