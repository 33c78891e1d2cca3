from pathlib import Path
from typing import Optional

import typer
from loguru import logger

from config.settings import get_settings
from signal_audit.backtest import build_daily_signal_series, build_market_audit_report, extract_events
from signal_audit.data import load_series_file
from signal_audit.models import AssetAuditInput, CurrentSignal, ScoreMarket
from signal_audit.scoring import (
    MARKET_PROFILES,
    ScoreEngine,
    effective_thresholds,
    normalize_score_market,
)
from signal_audit.utils.exceptions import DataLoadError, SignalAuditError
from signal_audit.utils.logging import setup_logging
from signal_audit.validation import LeaveOneOutValidator

app = typer.Typer(no_args_is_help=True)


def _fmt(value: Optional[float], suffix: str = "", digits: int = 2) -> str:
    if value is None:
        return "-"
    return f"{value:.{digits}f}{suffix}"


def _load_assets(files: list[Path], market: Optional[str]) -> list[AssetAuditInput]:
    return [load_series_file(path, market) for path in files]


def _pick_market(market: Optional[str], assets: list[AssetAuditInput]) -> ScoreMarket:
    resolved = normalize_score_market(market)
    if resolved is not None:
        return resolved
    if market:
        logger.warning(f"Unknown market '{market}', falling back to DEFAULT")
        return ScoreMarket.DEFAULT
    if assets:
        return assets[0].market
    return get_settings().scoring.default_market


@app.command()
def score(
    files: list[Path] = typer.Argument(..., help="Series files (JSON or CSV)"),
    market: Optional[str] = typer.Option(None, help="Market key or alias"),
    mode: Optional[str] = typer.Option(None, help="STANDARD or HIGH_CONF"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON"),
) -> None:
    """Score the latest day of each asset."""
    try:
        settings = get_settings()
        setup_logging(settings.log_level, settings.log_dir)

        for asset in _load_assets(files, market):
            engine = ScoreEngine(
                market=asset.market,
                mode=mode or settings.scoring.default_mode,
            )
            result = engine.score_series(asset.closes, asset.volumes)

            if as_json:
                typer.echo(result.model_dump_json())
            else:
                typer.echo(
                    f"{asset.symbol:<12} {result.status:<5} score {result.score:>3}  "
                    f"confidence {result.confidence:.2f}  "
                    f"[{result.market.value}/{result.mode.value}]"
                )

    except DataLoadError as e:
        typer.echo(f"Data error: {e}", err=True)
        raise typer.Exit(code=1)


@app.command()
def audit(
    files: list[Path] = typer.Argument(..., help="Series files (JSON or CSV)"),
    market: Optional[str] = typer.Option(None, help="Market key or alias"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON"),
) -> None:
    """Walk-forward backtest of the five signal strategies."""
    try:
        settings = get_settings()
        setup_logging(settings.log_level, settings.log_dir)

        assets = _load_assets(files, market)
        resolved = _pick_market(market, assets)
        report = build_market_audit_report(
            resolved,
            assets,
            window=settings.audit.window,
            top_assets=settings.audit.top_assets,
            recent_trades=settings.audit.recent_trades,
        )

        if as_json:
            typer.echo(report.model_dump_json(indent=2))
            return

        typer.echo(f"Backtest audit: {report.market.value}")
        typer.echo("=" * 78)
        typer.echo(
            f"Assets: {report.processed_assets}/{report.universe_size} processed, "
            f"{report.skipped_assets} skipped (window {report.window})"
        )
        for skipped in report.skipped:
            typer.echo(f"  skipped {skipped.symbol}: {skipped.reason}")
        typer.echo("")
        typer.echo(
            f"{'Strategy':<18} {'Trades':>6} {'Win%':>6} {'Avg%':>7} "
            f"{'Flat':>8} {'Comp.100':>9} {'MaxDD%':>7} {'Open':>5}"
        )
        for stats in report.strategies:
            winrate = stats.winrate * 100 if stats.winrate is not None else None
            typer.echo(
                f"{stats.label:<18} {stats.closed_trades:>6} {_fmt(winrate, digits=1):>6} "
                f"{_fmt(stats.avg_return_pct):>7} {_fmt(stats.flat_profit_on_100_each):>8} "
                f"{_fmt(stats.compounded_value_of_100):>9} {_fmt(stats.max_drawdown_pct):>7} "
                f"{stats.open_positions:>5}"
            )

    except SignalAuditError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)


@app.command()
def validate(
    files: list[Path] = typer.Argument(..., help="Series files (JSON or CSV)"),
    market: Optional[str] = typer.Option(None, help="Market key or alias"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON"),
) -> None:
    """Leave-one-out validation of the market's recommended cutoff."""
    try:
        settings = get_settings()
        setup_logging(settings.log_level, settings.log_dir)

        assets = _load_assets(files, market)
        resolved = _pick_market(market, assets)

        events = []
        current = []
        for asset in assets:
            scoped = asset.model_copy(update={"market": resolved})
            points = build_daily_signal_series(scoped, window=settings.audit.window)
            events.extend(extract_events(points, asset.symbol, asset.name))

            live = ScoreEngine(market=resolved).score_series(asset.closes, asset.volumes)
            current.append(
                CurrentSignal(
                    symbol=asset.symbol,
                    name=asset.name,
                    status=live.status,
                    score=live.score,
                )
            )
        events.sort(key=lambda e: e.date)

        validator = LeaveOneOutValidator(
            target_winrate=settings.validation.target_winrate,
            min_coverage=settings.validation.min_coverage,
            min_trades=settings.validation.min_trades,
            min_validation_trades=settings.validation.min_validation_trades,
            max_signals_per_market=settings.validation.max_signals_per_market,
        )
        report = validator.validate(resolved, events, current)

        if as_json:
            typer.echo(report.model_dump_json(indent=2))
            return

        typer.echo(f"Validation: {report.market.value}")
        typer.echo("=" * 50)
        typer.echo(f"Events: {report.events}")
        rec = report.recommendation
        if rec is None:
            typer.echo("Recommendation: none (not enough events)")
        else:
            typer.echo(
                f"Recommendation: {rec.horizon} cutoff {rec.cutoff} "
                f"({rec.trades} trades, winrate {rec.winrate:.0%}, avg {rec.avg_return_pct:.2f}%)"
            )
        val = report.validation
        typer.echo(
            f"Held-out: {val.trades} trades, winrate {val.winrate:.0%}, "
            f"avg {val.avg_return_pct:.2f}% (BUY {val.buy_count} / SELL {val.sell_count})"
        )
        typer.echo(f"Passed: {'YES' if report.passed else 'NO'}")
        typer.echo(f"Live signals: {report.current_signals}")
        for signal in report.signals:
            typer.echo(f"  {signal.action:<12} {signal.symbol:<12} strength {signal.strength}")

    except SignalAuditError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)


@app.command()
def status() -> None:
    """Show the effective configuration."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_dir)

    typer.echo("Signal Audit Configuration")
    typer.echo("=" * 50)
    typer.echo(f"Default market: {settings.scoring.default_market.value}")
    typer.echo(f"Default mode: {settings.scoring.default_mode.value}")
    typer.echo(f"Log level: {settings.log_level}")
    typer.echo(f"Log directory: {settings.log_dir}")
    typer.echo("")

    typer.echo("Market profiles:")
    for market, profile in MARKET_PROFILES.items():
        thresholds = effective_thresholds(profile, settings.scoring.default_mode)
        typer.echo(
            f"  {market.value:<10} buy >= {thresholds.buy_threshold:<3} "
            f"sell <= {thresholds.sell_threshold:<3} "
            f"min confidence {thresholds.min_confidence:.2f}"
        )
    typer.echo("")

    typer.echo("Backtest:")
    typer.echo(f"  Window: {settings.audit.window}")
    typer.echo(f"  Top assets: {settings.audit.top_assets}")
    typer.echo(f"  Recent trades: {settings.audit.recent_trades}")
    typer.echo("")

    typer.echo("Validation:")
    typer.echo(f"  Target winrate: {settings.validation.target_winrate:.0%}")
    typer.echo(f"  Min coverage: {settings.validation.min_coverage:.0%}")
    typer.echo(f"  Min trades: {settings.validation.min_trades}")
    typer.echo(f"  Min validation trades: {settings.validation.min_validation_trades}")
    typer.echo(f"  Max signals per market: {settings.validation.max_signals_per_market}")


if __name__ == "__main__":
    app()
