"""
Tablero de cobranzas: agregados sobre un conjunto de cuotas ya filtrado por
alcance. No escribe nada; dos llamadas con la misma entrada dan lo mismo.
"""
from __future__ import annotations

from collections import defaultdict
from dataclasses import asdict, dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from django.utils import timezone

from policies.billing import compute_installment_status
from policies.models import Installment

DEFAULT_DUE_SOON_DAYS = 7
DEFAULT_LETTER_THRESHOLD = 3
ZERO = Decimal("0.00")


@dataclass
class StatsSummary:
    counts: Dict[str, int] = field(default_factory=dict)
    total: int = 0
    pending_count: int = 0
    overdue_count: int = 0
    outstanding_amount: Decimal = ZERO
    collected_today: Decimal = ZERO
    collected_month: Decimal = ZERO
    policies_count: int = 0
    due_soon_count: int = 0
    letters_required: List[int] = field(default_factory=list)

    def as_dict(self):
        data = asdict(self)
        for key in ("outstanding_amount", "collected_today", "collected_month"):
            data[key] = f"{data[key]:.2f}"
        return data


def get_stats(
    installments: Iterable[Installment],
    today: Optional[date] = None,
    *,
    due_soon_days: Optional[int] = None,
    letter_threshold: Optional[int] = None,
) -> StatsSummary:
    today = today or timezone.localdate()
    if due_soon_days is None:
        due_soon_days = DEFAULT_DUE_SOON_DAYS
    if letter_threshold is None:
        letter_threshold = DEFAULT_LETTER_THRESHOLD
    due_soon_limit = today + timedelta(days=due_soon_days)

    summary = StatsSummary(
        counts={
            Installment.Status.PENDING: 0,
            Installment.Status.PARTIAL: 0,
            Installment.Status.OVERDUE: 0,
            Installment.Status.PAID: 0,
        }
    )
    policies_with_debt = set()
    overdue_by_policy = defaultdict(int)

    for inst in installments:
        status = compute_installment_status(inst, today=today)
        summary.total += 1
        summary.counts[status] += 1

        if status == Installment.Status.PAID:
            if inst.paid_date == today:
                summary.collected_today += inst.amount_paid
            if inst.paid_date and (inst.paid_date.year, inst.paid_date.month) == (today.year, today.month):
                summary.collected_month += inst.amount_paid
            continue

        summary.pending_count += 1
        summary.outstanding_amount += inst.outstanding_balance
        policies_with_debt.add(inst.policy_id)
        if status == Installment.Status.OVERDUE:
            summary.overdue_count += 1
            overdue_by_policy[inst.policy_id] += 1
        elif status == Installment.Status.PENDING and inst.due_date <= due_soon_limit:
            summary.due_soon_count += 1

    summary.policies_count = len(policies_with_debt)
    summary.letters_required = sorted(
        policy_id for policy_id, count in overdue_by_policy.items() if count >= letter_threshold
    )
    return summary
