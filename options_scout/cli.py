"""
Options Scout command-line interface.

Prices contracts, computes Greeks, solves implied volatility, summarizes
synthetic option chains, scans symbols for scored opportunities and
reports IV rank premium signals.
"""

import json
import logging
import sys
import warnings
from datetime import date
from typing import Any, Optional

import click

from .black_scholes import black_scholes_price, intrinsic_value
from .chain_analytics import (
    expected_move_from_chain,
    gamma_exposure,
    max_pain,
    put_call_ratio,
    volatility_skew,
)
from .chain_synthesizer import OptionChainSynthesizer
from .config import ScoutSettings, load_settings
from .constants import DAYS_PER_YEAR, MAX_TOTAL_SCORE
from .exceptions import ConvergenceWarning, ScoutError
from .greeks import GreeksCalculator
from .implied_volatility import ImpliedVolatilitySolver
from .iv_rank import IVRankCalculator
from .models import OptionQuote, ScoredOpportunity, Timeframe
from .providers import SimulatedMarketDataProvider
from .scoring import (
    OpportunityScanner,
    ScanConfig,
    format_signal_table,
    format_table,
    signals_to_json,
    to_json,
)

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
OPTION_TYPE_CHOICES = ["call", "put"]
TIMEFRAME_CHOICES = [t.value for t in Timeframe]


def _print_error(message: str) -> None:
    """Print error message in red."""
    click.secho(f"Error: {message}", fg="red", err=True)


def _print_success(message: str) -> None:
    """Print success message in green."""
    click.secho(message, fg="green")


def _print_warning(message: str) -> None:
    """Print warning message in yellow."""
    click.secho(f"Warning: {message}", fg="yellow")


def _print_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2))


def _get_settings(ctx: click.Context) -> ScoutSettings:
    return ctx.obj["settings"]


def _print_chain_summary(
    symbol: str, spot: float, chain: list[OptionQuote], analytics: dict[str, Any]
) -> None:
    """Print a formatted chain summary."""
    expirations = sorted({q.expiration for q in chain})
    click.echo()
    click.secho(f"{symbol} @ ${spot:.2f}", bold=True)
    click.echo("-" * 50)
    click.echo(f"Contracts:   {len(chain)}")
    click.echo(f"Expirations: {len(expirations)} ({expirations[0]} to {expirations[-1]})")

    move = analytics["expected_move"]
    if move:
        click.echo(
            f"Expected move: ${move['dollars']:.2f} ({move['percent']:.2f}%) "
            f"range ${move['lower_bound']:.2f} - ${move['upper_bound']:.2f}"
        )
    if analytics["max_pain"] is not None:
        click.echo(f"Max pain:    ${analytics['max_pain']:.2f}")

    ratio = analytics["put_call_ratio"]
    click.echo(
        f"Put/Call:    {ratio['volume_ratio']:.2f} volume, "
        f"{ratio['open_interest_ratio']:.2f} OI ({ratio['sentiment']})"
    )

    skew = analytics["volatility_skew"]
    if skew:
        click.echo(f"IV skew:     {skew['skew']:+.2f} pts ({skew['interpretation']})")

    gamma = analytics["gamma_exposure"]
    click.echo(f"Gamma risk:  {gamma['risk']} ({gamma['exposure']:.2f})")


def _print_opportunity_detail(opportunity: ScoredOpportunity) -> None:
    """Print the component breakdown for the top opportunity."""
    q = opportunity.quote
    click.echo()
    click.secho(
        f"Top pick: {q.underlying_symbol} ${q.strike:.2f} {q.option_type.value.upper()} "
        f"{q.expiration.isoformat()}",
        bold=True,
    )
    for name, value in opportunity.component_scores.as_dict().items():
        click.echo(f"  {name:<12} {value:>5.1f}")
    click.echo(f"  {'total':<12} {opportunity.total_score:>5.1f}/{MAX_TOTAL_SCORE:.0f}")
    if opportunity.reasons:
        click.echo(f"  Why: {'; '.join(opportunity.reasons)}")
    click.echo(
        f"  Target ${opportunity.target_price:.2f}, stop ${opportunity.stop_loss:.2f}, "
        f"expected return {opportunity.expected_return:.2f}x"
    )


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="YAML settings file",
    envvar="SCOUT_CONFIG",
)
@click.option("--seed", type=int, default=None, help="Seed for synthetic data")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.option("--json", "output_json", is_flag=True, help="JSON output")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Optional[str],
    seed: Optional[int],
    verbose: bool,
    output_json: bool,
) -> None:
    """
    Options Scout - price options and scan for scored opportunities.

    Black-Scholes pricing, Greeks, implied volatility, synthetic chains
    and a ten-factor opportunity scanner.
    """
    ctx.ensure_object(dict)

    try:
        settings = load_settings(config_path, seed=seed)
    except ScoutError as e:
        _print_error(str(e))
        sys.exit(1)

    level = logging.DEBUG if verbose else getattr(logging, settings.log_level)
    if output_json and not verbose:
        # Keep JSON output free of progress logging
        level = max(level, logging.WARNING)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)

    ctx.obj["settings"] = settings
    ctx.obj["verbose"] = verbose
    ctx.obj["json"] = output_json


@cli.command()
@click.argument("spot", type=float)
@click.argument("strike", type=float)
@click.option("--days", type=int, required=True, help="Days to expiration")
@click.option("--vol", type=float, required=True, help="Annualized volatility (e.g. 0.30)")
@click.option("--type", "option_type", type=click.Choice(OPTION_TYPE_CHOICES), default="call")
@click.option("--rate", type=float, default=None, help="Risk-free rate (default: settings)")
@click.pass_context
def price(
    ctx: click.Context,
    spot: float,
    strike: float,
    days: int,
    vol: float,
    option_type: str,
    rate: Optional[float],
) -> None:
    """
    Black-Scholes theoretical price.

    \b
    Examples:
      scout price 100 100 --days 30 --vol 0.30
      scout price 185.5 180 --days 14 --vol 0.25 --type put
    """
    settings = _get_settings(ctx)
    rate = settings.risk_free_rate if rate is None else rate

    try:
        value = black_scholes_price(spot, strike, days / DAYS_PER_YEAR, rate, vol, option_type)
        intrinsic = intrinsic_value(spot, strike, option_type)
    except ScoutError as e:
        _print_error(str(e))
        sys.exit(1)

    if ctx.obj["json"]:
        _print_json(
            {
                "spot": spot,
                "strike": strike,
                "days_to_expiration": days,
                "volatility": vol,
                "rate": rate,
                "option_type": option_type,
                "price": round(value, 4),
                "intrinsic_value": round(intrinsic, 4),
                "time_value": round(value - intrinsic, 4),
            }
        )
        return

    click.echo(f"{option_type.upper()} ${strike:.2f} on ${spot:.2f}, {days} DTE, IV {vol:.1%}")
    click.echo(f"Price:      ${value:.4f}")
    click.echo(f"Intrinsic:  ${intrinsic:.4f}")
    click.echo(f"Time value: ${value - intrinsic:.4f}")


@cli.command()
@click.argument("spot", type=float)
@click.argument("strike", type=float)
@click.option("--days", type=int, required=True, help="Days to expiration")
@click.option("--vol", type=float, required=True, help="Annualized volatility (e.g. 0.30)")
@click.option("--type", "option_type", type=click.Choice(OPTION_TYPE_CHOICES), default="call")
@click.option("--rate", type=float, default=None, help="Risk-free rate (default: settings)")
@click.pass_context
def greeks(
    ctx: click.Context,
    spot: float,
    strike: float,
    days: int,
    vol: float,
    option_type: str,
    rate: Optional[float],
) -> None:
    """
    Delta, gamma, theta (per day) and vega (per vol point).

    \b
    Example:
      scout greeks 100 105 --days 21 --vol 0.35
    """
    settings = _get_settings(ctx)
    calculator = GreeksCalculator(settings.risk_free_rate)

    try:
        result = calculator.calculate(spot, strike, days, vol, option_type, rate=rate)
    except ScoutError as e:
        _print_error(str(e))
        sys.exit(1)

    if ctx.obj["json"]:
        _print_json(result.to_dict())
        return

    click.echo(f"Delta: {result.delta:+.4f}")
    click.echo(f"Gamma: {result.gamma:.4f}")
    click.echo(f"Theta: {result.theta:+.4f}/day")
    click.echo(f"Vega:  {result.vega:.4f}/vol pt")


@cli.command()
@click.argument("market_price", type=float)
@click.argument("spot", type=float)
@click.argument("strike", type=float)
@click.option("--days", type=int, required=True, help="Days to expiration")
@click.option("--type", "option_type", type=click.Choice(OPTION_TYPE_CHOICES), default="call")
@click.option("--rate", type=float, default=None, help="Risk-free rate (default: settings)")
@click.pass_context
def iv(
    ctx: click.Context,
    market_price: float,
    spot: float,
    strike: float,
    days: int,
    option_type: str,
    rate: Optional[float],
) -> None:
    """
    Solve implied volatility from an observed option price.

    \b
    Example:
      scout iv 3.63 100 100 --days 30
    """
    settings = _get_settings(ctx)
    solver = ImpliedVolatilitySolver(
        tolerance=settings.iv_tolerance,
        max_iterations=settings.iv_max_iterations,
        risk_free_rate=settings.risk_free_rate,
    )

    try:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", ConvergenceWarning)
            result = solver.solve(
                market_price, spot, strike, days / DAYS_PER_YEAR, option_type, rate=rate
            )
    except ScoutError as e:
        _print_error(str(e))
        sys.exit(1)

    if ctx.obj["json"]:
        _print_json(result.to_dict())
        return

    click.echo(f"Implied volatility: {result.volatility:.2%}")
    click.echo(f"Iterations:         {result.iterations}")
    if result.converged:
        _print_success("Converged")
    else:
        _print_warning(
            f"did not converge ({result.reason}), price error {result.price_error:+.4f}"
        )


@cli.command()
@click.argument("symbol")
@click.option("--spot", type=float, default=None, help="Underlying price (default: simulated)")
@click.option("--base-iv", type=float, default=None, help="Fixed base IV (default: random)")
@click.pass_context
def chain(
    ctx: click.Context, symbol: str, spot: Optional[float], base_iv: Optional[float]
) -> None:
    """
    Synthesize an option chain and summarize it.

    \b
    Examples:
      scout --seed 42 chain AAPL --spot 185.50
      scout --json chain TSLA
    """
    settings = _get_settings(ctx)
    symbol = symbol.upper()

    try:
        if spot is None:
            provider = SimulatedMarketDataProvider(
                seed=settings.seed, risk_free_rate=settings.risk_free_rate
            )
            spot = provider.get_spot_price(symbol)

        synthesizer = OptionChainSynthesizer(
            seed=settings.seed,
            risk_free_rate=settings.risk_free_rate,
            spread_pct=settings.spread_pct,
            unusual_activity_probability=settings.unusual_activity_probability,
        )
        quotes = synthesizer.synthesize(symbol, spot, base_iv=base_iv)
    except ScoutError as e:
        _print_error(str(e))
        sys.exit(1)

    move = expected_move_from_chain(quotes, spot)
    skew = volatility_skew(quotes)
    analytics = {
        "expected_move": move.to_dict() if move else None,
        "max_pain": max_pain(quotes),
        "put_call_ratio": put_call_ratio(quotes).to_dict(),
        "volatility_skew": skew.to_dict() if skew else None,
        "gamma_exposure": gamma_exposure(quotes, spot).to_dict(),
    }

    if ctx.obj["json"]:
        _print_json(
            {
                "symbol": symbol,
                "spot": spot,
                "generated_at": date.today().isoformat(),
                "analytics": analytics,
                "contracts": [q.to_dict() for q in quotes],
            }
        )
        return

    _print_chain_summary(symbol, spot, quotes, analytics)


@cli.command()
@click.argument("symbols", nargs=-1, required=True)
@click.option(
    "--timeframe",
    "-t",
    type=click.Choice(TIMEFRAME_CHOICES),
    default=Timeframe.MEDIUM.value,
    help="Holding horizon (short 1-7, medium 8-30, long 31-90 DTE)",
)
@click.option("--min-score", type=float, default=None, help="Minimum score (default: settings)")
@click.option("--limit", type=int, default=None, help="Maximum results (default: settings)")
@click.option("--workers", type=int, default=1, help="Threads for per-symbol scans")
@click.pass_context
def scan(
    ctx: click.Context,
    symbols: tuple[str, ...],
    timeframe: str,
    min_score: Optional[float],
    limit: Optional[int],
    workers: int,
) -> None:
    """
    Scan symbols for high-scoring option opportunities.

    Uses simulated market data: a seeded spot price, synthetic chain and
    volatility history per symbol.

    \b
    Examples:
      scout --seed 42 scan AAPL TSLA NVDA
      scout scan SPY --timeframe short --min-score 60 --limit 10
    """
    settings = _get_settings(ctx)

    try:
        config = ScanConfig(
            timeframe=timeframe,
            min_score=settings.min_score if min_score is None else min_score,
            min_cost=settings.min_cost,
            max_cost=settings.max_cost,
            limit=settings.result_limit if limit is None else limit,
            max_workers=workers,
        )
        scanner = OpportunityScanner(
            config,
            seed=settings.seed,
            risk_free_rate=settings.risk_free_rate,
            daily_volatility=settings.daily_volatility_proxy,
            iv_rank_calculator=IVRankCalculator(settings.min_history_samples),
        )
        provider = SimulatedMarketDataProvider(
            seed=settings.seed, risk_free_rate=settings.risk_free_rate
        )
        results = scanner.scan(symbols, provider)
    except ScoutError as e:
        _print_error(str(e))
        sys.exit(1)

    if ctx.obj["json"]:
        click.echo(to_json(results))
        return

    if not results:
        _print_warning(
            f"No opportunities scored >= {config.min_score:.0f} "
            f"({config.timeframe.value} timeframe)"
        )
        return

    _print_success(f"Found {len(results)} opportunities ({config.timeframe.value} timeframe)")
    for line in format_table(results):
        click.echo(line)
    if ctx.obj["verbose"]:
        _print_opportunity_detail(results[0])


@cli.command()
@click.argument("symbols", nargs=-1, required=True)
@click.option("--limit", type=int, default=None, help="Maximum signals (default: settings)")
@click.option("--workers", type=int, default=1, help="Threads for per-symbol scans")
@click.pass_context
def signals(
    ctx: click.Context, symbols: tuple[str, ...], limit: Optional[int], workers: int
) -> None:
    """
    Scan symbols for IV rank premium signals.

    Ranks each symbol's at-the-money IV against its simulated volatility
    history. High ranks suggest selling an iron condor, low ranks buying a
    call debit spread.

    \b
    Examples:
      scout --seed 42 signals AAPL TSLA NVDA
      scout --json signals SPY QQQ
    """
    settings = _get_settings(ctx)

    try:
        config = ScanConfig(
            limit=settings.result_limit if limit is None else limit, max_workers=workers
        )
        scanner = OpportunityScanner(
            config,
            seed=settings.seed,
            risk_free_rate=settings.risk_free_rate,
            iv_rank_calculator=IVRankCalculator(settings.min_history_samples),
        )
        provider = SimulatedMarketDataProvider(
            seed=settings.seed, risk_free_rate=settings.risk_free_rate
        )
        results = scanner.scan_signals(symbols, provider)
    except ScoutError as e:
        _print_error(str(e))
        sys.exit(1)

    if ctx.obj["json"]:
        click.echo(signals_to_json(results))
        return

    if not results:
        _print_warning("No IV rank signals outside the neutral band")
        return

    _print_success(f"Found {len(results)} IV rank signals")
    for line in format_signal_table(results):
        click.echo(line)


def main() -> None:
    """Entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
