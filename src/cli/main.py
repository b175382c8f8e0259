"""
CLI entry point: fno-ledger import | report | positions | daily | export | health.

Every command loads config from --config (default config.yaml), rebuilds
the ledger from the execution store and prints human-readable figures.
"""

import logging
import sys
from datetime import date
from pathlib import Path

import click
from dotenv import load_dotenv

from config import load_config

load_dotenv()

logger = logging.getLogger("ledger")


def _setup_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s  %(message)s",
        stream=sys.stderr,
    )


def _events(cfg):
    from cli.structured_log import StructuredEventLogger

    return StructuredEventLogger(
        cfg.account,
        enabled=cfg.alerting.structured_logs,
        webhook_url=cfg.alerting.webhook_url,
    )


def _analytics(cfg, since: date | None = None, until: date | None = None, symbol: str | None = None):
    """Load stored executions and run the full recompute."""
    from config.fee_schedule import DEFAULT_FEE_SCHEDULE, load_fee_schedule
    from data.execution_store import ExecutionStore
    from ledger_core.pipeline import run_analytics

    schedule = DEFAULT_FEE_SCHEDULE
    if cfg.analytics.fee_overrides_path:
        schedule = load_fee_schedule(overrides_path=cfg.analytics.fee_overrides_path)

    store = ExecutionStore(cfg.data.db_path)
    executions = store.get_executions(since=since, until=until, symbol=symbol)
    return run_analytics(
        executions,
        exchange=cfg.analytics.exchange,
        schedule=schedule,
        workers=cfg.analytics.workers,
        rolling_window=cfg.analytics.rolling_window,
    )


def _date_option(value: str | None) -> date | None:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"expected ISO date (YYYY-MM-DD), got {value!r}") from None


@click.group()
@click.option("--config", "config_path", default="config.yaml", help="Path to config file.")
@click.pass_context
def cli(ctx: click.Context, config_path: str) -> None:
    """fno-ledger: India F&O trade ledger, FIFO P&L, charges and risk analytics."""
    _setup_logging()
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


# ---------- fno-ledger import ----------


@cli.command("import")
@click.argument("paths", nargs=-1, type=click.Path(dir_okay=False))
@click.option("--show-errors", is_flag=True, default=False, help="Print every rejected row.")
@click.pass_context
def import_(ctx: click.Context, paths: tuple[str, ...], show_errors: bool) -> None:
    """Parse one or more tradebook CSV files and store their executions.

    With no PATHS, every *.csv in data.tradebook_dir is imported in name
    order. Re-importing a file is safe: executions are keyed by trade id.
    """
    cfg = load_config(ctx.obj["config_path"])
    from data.execution_store import ExecutionStore
    from data.tradebook import TradebookError, load_tradebook

    events = _events(cfg)
    if not paths:
        paths = tuple(str(p) for p in sorted(Path(cfg.data.tradebook_dir).glob("*.csv")))
        if not paths:
            events.error("import failed", detail=f"no CSV files in {cfg.data.tradebook_dir}")
            click.echo(f"Error: no CSV files in {cfg.data.tradebook_dir}", err=True)
            raise SystemExit(1)

    store = ExecutionStore(cfg.data.db_path)

    failed = False
    for path in paths:
        events.import_start(path)
        try:
            parsed = load_tradebook(path)
        except TradebookError as exc:
            events.error("import failed", detail=str(exc))
            click.echo(f"Error: {exc}", err=True)
            failed = True
            continue

        added = store.write_executions(parsed.executions)
        events.import_complete(parsed.total_rows, parsed.valid_rows, len(parsed.errors), added)
        click.echo(f"{path}: {parsed.valid_rows}/{parsed.total_rows} rows valid, {added} new executions")
        if parsed.errors:
            click.echo(f"  {len(parsed.errors)} rows rejected")
            shown = parsed.errors if show_errors else parsed.errors[:5]
            for err in shown:
                click.echo(f"    {err}")

    click.echo(f"Total executions in store: {store.count_executions()}")
    if failed:
        raise SystemExit(1)


# ---------- fno-ledger report ----------


@cli.command()
@click.option("--start", "start_str", default=None, help="Start trade date filter (ISO).")
@click.option("--end", "end_str", default=None, help="End trade date filter (ISO).")
@click.option("--symbol", default=None, help="Restrict to one trading symbol.")
@click.option("--detail", is_flag=True, default=False, help="Include grouped and behaviour reports.")
@click.pass_context
def report(ctx: click.Context, start_str: str | None, end_str: str | None, symbol: str | None, detail: bool) -> None:
    """Summary, charges, drawdown, streaks and risk-adjusted ratios."""
    cfg = load_config(ctx.obj["config_path"])
    from cli.output import (
        format_charges,
        format_drawdown,
        format_ratios,
        format_reports,
        format_streaks,
        format_summary,
    )

    result = _analytics(cfg, _date_option(start_str), _date_option(end_str), symbol)
    click.echo(format_summary(result))
    if not result.orders:
        return

    _events(cfg).analytics_complete(
        result.fingerprint, len(result.positions), len(result.days), result.statistics.net_pnl
    )
    click.echo("")
    click.echo(format_charges(result.charges))
    click.echo(format_drawdown(result.drawdown))
    click.echo(format_streaks(result.streaks))
    click.echo(format_ratios(result.ratios))
    if detail:
        click.echo(format_reports(result.reports))


# ---------- fno-ledger positions ----------


@cli.command()
@click.option("--status", "status_filter", type=click.Choice(["all", "open", "closed"]), default="all", show_default=True)
@click.option("--symbol", default=None, help="Restrict to one trading symbol.")
@click.option("--last", "last_n", default=None, type=int, help="Only show the last N positions.")
@click.pass_context
def positions(ctx: click.Context, status_filter: str, symbol: str | None, last_n: int | None) -> None:
    """List matched positions with entry, exit and realized P&L."""
    cfg = load_config(ctx.obj["config_path"])
    from cli.output import format_positions
    from ledger_core.position_engine import closed_positions, open_positions

    result = _analytics(cfg, symbol=symbol)
    rows = result.positions
    if status_filter == "open":
        rows = open_positions(rows)
    elif status_filter == "closed":
        rows = closed_positions(rows)
    if last_n is not None:
        rows = rows[-last_n:]
    click.echo(format_positions(rows))


# ---------- fno-ledger daily ----------


@cli.command()
@click.option("--start", "start_str", default=None, help="Start trade date filter (ISO).")
@click.option("--end", "end_str", default=None, help="End trade date filter (ISO).")
@click.pass_context
def daily(ctx: click.Context, start_str: str | None, end_str: str | None) -> None:
    """Per-day turnover, charges, net P&L and win rate."""
    cfg = load_config(ctx.obj["config_path"])
    from cli.output import format_days

    result = _analytics(cfg, _date_option(start_str), _date_option(end_str))
    click.echo(format_days(result.days))


# ---------- fno-ledger export ----------


@cli.command()
@click.option("--out", "out_path", default=None, help="JSONL path (default: journal.path from config).")
@click.pass_context
def export(ctx: click.Context, out_path: str | None) -> None:
    """Append positions, day records and a summary to the JSONL journal."""
    cfg = load_config(ctx.obj["config_path"])
    from journal import JournalWriter

    result = _analytics(cfg)
    journal = JournalWriter(out_path or cfg.journal.path, echo_stdout=cfg.journal.echo_stdout)
    lines = journal.export(result)
    _events(cfg).export_complete(str(journal.path), lines)
    click.echo(f"Wrote {lines} records to {journal.path}")


# ---------- fno-ledger health ----------


@cli.command()
@click.pass_context
def health(ctx: click.Context) -> None:
    """Check system health: config, fee schedule, DB access.

    Exit code 0 = healthy, 1 = unhealthy.
    """
    checks: list[tuple[str, bool, str]] = []

    try:
        cfg = load_config(ctx.obj["config_path"])
        checks.append(("config", True, f"loaded (account={cfg.account})"))
    except Exception as e:
        checks.append(("config", False, str(e)))
        _print_health(checks)
        raise SystemExit(1)

    try:
        from config.fee_schedule import load_fee_schedule
        schedule = load_fee_schedule(overrides_path=cfg.analytics.fee_overrides_path or None)
        checks.append(("fee_schedule", True, f"validated (version={schedule.version})"))
    except Exception as e:
        checks.append(("fee_schedule", False, str(e)))

    try:
        from data.execution_store import ExecutionStore
        store = ExecutionStore(cfg.data.db_path)
        count = store.count_executions()
        span = store.date_range()
        detail = f"{count} executions"
        if span:
            detail += f" ({span[0].isoformat()} -> {span[1].isoformat()})"
        checks.append(("store", True, detail))
    except Exception as e:
        checks.append(("store", False, str(e)))

    _print_health(checks)
    healthy = all(ok for _, ok, _ in checks)
    raise SystemExit(0 if healthy else 1)


def _print_health(checks: list[tuple[str, bool, str]]) -> None:
    for name, ok, detail in checks:
        status = "OK" if ok else "FAIL"
        click.echo(f"  [{status}] {name}: {detail}")
    healthy = all(ok for _, ok, _ in checks)
    click.echo(f"\nHealth: {'HEALTHY' if healthy else 'UNHEALTHY'}")


if __name__ == "__main__":
    cli()
