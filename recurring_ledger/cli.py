"""CLI over a JSON export: mortgage plans, what-if simulations and the bill forecast.

Usage:
    python -m recurring_ledger.cli export.json plan --id m1 --from 2025-01 --months 24
    python -m recurring_ledger.cli export.json simulate --id m1 --from 2025-01 --extra 200 --extra-from 2025-03
    python -m recurring_ledger.cli export.json simulate --id m1 --from 2025-01 --rate 2026-01=3.9 --lump 2025-06=5000
    python -m recurring_ledger.cli export.json forecast --filter UTILITY --months 6 --today 2025-03-10
"""

import argparse
import asyncio
import logging
import sys
from datetime import date
from decimal import Decimal, InvalidOperation

from recurring_ledger.config import settings
from recurring_ledger.engine.forecast import ALL_KINDS, build_forecast
from recurring_ledger.engine.periods import parse_period_key
from recurring_ledger.engine.plan import build_plan
from recurring_ledger.engine.simulate import simulate_plan
from recurring_ledger.models.obligation import ObligationKind
from recurring_ledger.models.results import Forecast, Plan
from recurring_ledger.models.scenario import (
    OneTimeExtra,
    RateOverride,
    RecurringExtra,
    Scenario,
)
from recurring_ledger.store.base import NotAMortgage, ObligationNotFound
from recurring_ledger.store.memory import MemoryStore
from recurring_ledger.store.queries import load_forecast_inputs, load_mortgage

logger = logging.getLogger(__name__)


# ── Helpers ──────────────────────────────────────────────────────────────────

def _money(v) -> str:
    return f"{Decimal(v):,.2f}"


def _header(title: str) -> None:
    print(f"\n{'=' * 72}")
    print(f"  {title}")
    print(f"{'=' * 72}")


def _period_arg(value: str) -> str:
    value = value.strip()
    try:
        parse_period_key(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))
    return value


def _decimal_arg(value: str) -> Decimal:
    try:
        return Decimal(value)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}")


def _dated_arg(value: str) -> tuple[str, Decimal]:
    """Parse YYYY-MM=NUMBER."""
    key, sep, number = value.partition("=")
    if not sep:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM=NUMBER, got {value!r}")
    return _period_arg(key), _decimal_arg(number)


def _date_arg(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {value!r}")


def _filter_arg(value: str) -> str:
    value = value.strip().upper()
    if value != ALL_KINDS:
        try:
            ObligationKind.parse(value)
        except ValueError:
            raise argparse.ArgumentTypeError(f"unknown filter {value!r}")
    return value


# ── Report sections ──────────────────────────────────────────────────────────

def print_plan(title: str, plan: Plan, show_scenario: bool = False) -> None:
    _header(f"{title}: {plan.start_period}, {plan.months_requested} months")
    header = (
        f"  {'Period':<7}  {'Due':<10}  {'Days':>4}  {'Rate':>6}  {'Payment':>10}  "
        f"{'Interest':>10}  {'Principal':>11}  {'Fee':>7}  {'Balance':>13}"
    )
    print(header)
    print(
        f"  {'-' * 7}  {'-' * 10}  {'-' * 4}  {'-' * 6}  {'-' * 10}  "
        f"{'-' * 10}  {'-' * 11}  {'-' * 7}  {'-' * 13}"
    )
    for row in plan.schedule:
        s = row.schedule
        print(
            f"  {row.period_key:<7}  {row.due_date.isoformat():<10}  {s.days:>4}  "
            f"{float(s.interest_rate):>6.3f}  {_money(s.payment_total):>10}  "
            f"{_money(s.interest):>10}  {_money(s.principal):>11}  "
            f"{_money(s.fee):>7}  {_money(s.balance_end):>13}"
        )
        applied = row.scenario_applied
        if show_scenario and applied and (applied.recurring_extra or applied.one_time_extra):
            print(
                f"  {'':<7}  extra: actual {_money(applied.extra_actual)}, "
                f"recurring {_money(applied.recurring_extra)}, "
                f"one-time {_money(applied.one_time_extra)}"
            )

    t = plan.totals
    print()
    print(f"  Total Interest:     {_money(t.total_interest)}")
    print(f"  Total Fees:         {_money(t.total_fees)}")
    print(f"  Total Principal:    {_money(t.total_principal)}")
    if plan.payoff_period_key:
        print(f"  Paid Off:           {plan.payoff_period_key} ({plan.payoff_date.isoformat()}), "
              f"after {plan.months_to_payoff} months")
    else:
        print("  Paid Off:           not within horizon")
    print()


def print_forecast(forecast: Forecast) -> None:
    meta = forecast.meta
    _header(f"Forecast ({meta.filter}), {len(forecast.forecast)} months")
    print(f"  {'Month':<7}  {'Items':>5}  {'Fixed':>11}  {'Min':>11}  {'Max':>11}  {'Paid':>11}")
    print(f"  {'-' * 7}  {'-' * 5}  {'-' * 11}  {'-' * 11}  {'-' * 11}  {'-' * 11}")
    for b in forecast.forecast:
        print(
            f"  {b.key:<7}  {b.items_count:>5}  {_money(b.expected_fixed_total):>11}  "
            f"{_money(b.expected_min):>11}  {_money(b.expected_max):>11}  {_money(b.paid_total):>11}"
        )

    print()
    print(f"  Next 3 months:      {_money(meta.sum3.min)} – {_money(meta.sum3.max)} "
          f"(paid {_money(meta.sum3.paid)})")

    if forecast.next_bills:
        _header("Next Bills")
        for bill in forecast.next_bills:
            print(
                f"  {bill.due_date.isoformat()}  {bill.title:<28} {bill.kind:<12} "
                f"{_money(bill.expected_max):>11}  {bill.status}"
            )

    mortgages = [e for e in forecast.expenses if e.derived.months_left is not None]
    if mortgages:
        _header("Mortgages")
        for e in mortgages:
            d = e.derived
            print(f"  {e.obligation.title}")
            print(f"    Remaining:        {_money(e.obligation.remaining_balance)}")
            print(f"    Months Left:      {d.months_left}")
            if d.est_interest is not None:
                print(f"    Est. Interest:    {_money(d.est_interest)}/mo")
                print(f"    Est. Principal:   {_money(d.est_principal)}/mo")
    print()


# ── Commands ─────────────────────────────────────────────────────────────────

def _scenario(args) -> Scenario:
    recurring = None
    if args.extra is not None:
        recurring = RecurringExtra(amount=args.extra, start_period=args.extra_from or args.start_period)
    return Scenario(
        recurring_extra=recurring,
        rate_overrides=tuple(RateOverride(start_period=k, interest_rate=r) for k, r in args.rate),
        one_time_extras=tuple(OneTimeExtra(period_key=k, amount=a) for k, a in args.lump),
    )


async def run(args) -> None:
    store = MemoryStore.from_json(args.export)

    if args.command in ("plan", "simulate"):
        inputs = await load_mortgage(store, args.id, args.start_period, args.months)
        if args.command == "plan":
            plan = build_plan(
                inputs.obligation, inputs.snapshots, inputs.payments,
                args.start_period, args.months,
            )
            print_plan(f"Plan: {inputs.obligation.title}", plan)
        else:
            plan = simulate_plan(
                inputs.obligation, inputs.snapshots, inputs.payments,
                args.start_period, args.months, scenario=_scenario(args),
            )
            print_plan(f"Simulation: {inputs.obligation.title}", plan, show_scenario=True)
        return

    today = args.today or date.today()
    inputs = await load_forecast_inputs(
        store, today, args.months,
        past_months=args.past_months, include_inactive=args.include_inactive,
    )
    forecast = build_forecast(
        inputs.obligations, inputs.payments, inputs.terms,
        timeline_start=inputs.timeline_start,
        today=today,
        kind_filter=args.filter,
        months=inputs.total_months,
        upcoming_days=settings.upcoming_horizon_days,
        upcoming_limit=settings.upcoming_limit,
    )
    print_forecast(forecast)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Recurring obligations ledger CLI")
    parser.add_argument("export", help="JSON export with obligations, terms and payments")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (("plan", "Amortization plan"), ("simulate", "What-if simulation")):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("--id", required=True, help="Mortgage obligation id")
        p.add_argument("--from", dest="start_period", type=_period_arg, required=True,
                       help="First period, YYYY-MM")
        p.add_argument("--months", type=int, default=settings.plan_default_months,
                       choices=range(1, settings.plan_max_months + 1), metavar="N",
                       help=f"Horizon in months (default: {settings.plan_default_months})")
        if name == "simulate":
            p.add_argument("--extra", type=_decimal_arg, help="Recurring extra principal per month")
            p.add_argument("--extra-from", type=_period_arg,
                           help="First period of the recurring extra (default: --from)")
            p.add_argument("--rate", type=_dated_arg, action="append", default=[],
                           metavar="YYYY-MM=RATE", help="Rate override from a period (repeatable)")
            p.add_argument("--lump", type=_dated_arg, action="append", default=[],
                           metavar="YYYY-MM=AMOUNT", help="One-time extra principal (repeatable)")

    f = sub.add_parser("forecast", help="Month-by-month bill forecast")
    f.add_argument("--filter", type=_filter_arg, default=ALL_KINDS,
                   help="ALL, MORTGAGE, UTILITY, INSURANCE or SUBSCRIPTION")
    f.add_argument("--months", type=int, default=settings.forecast_default_months,
                   choices=range(settings.forecast_min_months, settings.forecast_max_months + 1),
                   metavar="N", help=f"Months ahead (default: {settings.forecast_default_months})")
    f.add_argument("--past-months", type=int, default=0,
                   choices=range(0, settings.forecast_max_past_months + 1), metavar="N",
                   help="Months of history before the current month")
    f.add_argument("--include-inactive", action="store_true", help="Include archived obligations")
    f.add_argument("--today", type=_date_arg, help="Reference date, YYYY-MM-DD (default: today)")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else settings.log_level)

    try:
        asyncio.run(run(args))
    except FileNotFoundError:
        print(f"Export not found: {args.export}", file=sys.stderr)
        return 1
    except ObligationNotFound as e:
        print(f"Not found: {e.obligation_id}", file=sys.stderr)
        return 1
    except NotAMortgage as e:
        print(f"Not a mortgage: {e.obligation_id}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Invalid export {args.export}: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
