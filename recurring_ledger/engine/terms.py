"""Resolve which terms apply to an obligation in a given month."""

from collections import defaultdict
from datetime import date
from typing import Iterable, Optional, Sequence

from recurring_ledger.models.obligation import Obligation
from recurring_ledger.models.terms import EffectiveTerms, TermsSnapshot


def base_terms(obligation: Obligation) -> EffectiveTerms:
    return EffectiveTerms(
        amount=obligation.amount,
        estimate_min=obligation.estimate_min,
        estimate_max=obligation.estimate_max,
        interest_rate=obligation.interest_rate,
        has_monthly_fee=obligation.has_monthly_fee,
        monthly_fee=obligation.monthly_fee,
        remaining_balance=obligation.remaining_balance,
        mortgage_holder=obligation.mortgage_holder,
        mortgage_kind=obligation.mortgage_kind,
    )


def latest_snapshot(
    snapshots: Sequence[TermsSnapshot], month: date
) -> Optional[TermsSnapshot]:
    """Last snapshot with from_date <= month. Snapshots must be sorted ascending."""
    chosen = None
    for snapshot in snapshots:
        if snapshot.from_date <= month:
            chosen = snapshot
        else:
            break
    return chosen


def _pick(override, fallback):
    return fallback if override is None else override


def resolve_terms(
    obligation: Obligation,
    snapshots: Sequence[TermsSnapshot],
    month: date,
) -> EffectiveTerms:
    """Merge the obligation's base terms with the snapshot in force for month.

    Fields the snapshot leaves unset fall back to the base values. No history
    means the base values unchanged.
    """
    base = base_terms(obligation)
    chosen = latest_snapshot(snapshots, month)
    if chosen is None:
        return base

    return EffectiveTerms(
        amount=_pick(chosen.amount, base.amount),
        estimate_min=_pick(chosen.estimate_min, base.estimate_min),
        estimate_max=_pick(chosen.estimate_max, base.estimate_max),
        interest_rate=_pick(chosen.interest_rate, base.interest_rate),
        has_monthly_fee=_pick(chosen.has_monthly_fee, base.has_monthly_fee),
        monthly_fee=_pick(chosen.monthly_fee, base.monthly_fee),
        remaining_balance=_pick(chosen.remaining_balance, base.remaining_balance),
        mortgage_holder=base.mortgage_holder,
        mortgage_kind=base.mortgage_kind,
        from_date=chosen.from_date,
    )


def index_terms(rows: Iterable[TermsSnapshot]) -> dict[str, list[TermsSnapshot]]:
    """Group snapshot rows by obligation id, each list sorted by from_date."""
    index: dict[str, list[TermsSnapshot]] = defaultdict(list)
    for row in rows:
        index[row.obligation_id].append(row)
    for snapshots in index.values():
        snapshots.sort(key=lambda s: s.from_date)
    return dict(index)
