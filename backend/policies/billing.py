# backend/policies/billing.py
from __future__ import annotations

from calendar import monthrange
from datetime import date
from decimal import ROUND_DOWN, Decimal
from typing import Iterable, List, Optional

from django.db import transaction
from django.utils import timezone

from common.models import AppSettings
from .models import Installment, Policy

CENT = Decimal("0.01")


def _today(today: Optional[date] = None) -> date:
    return today or timezone.localdate()


def _add_months(start: date, months: int) -> date:
    """
    Sum month intervals keeping the day when possible. When the target month
    does not have that day (e.g., 31 -> February), fallback to the last day.
    """
    if months == 0:
        return start
    year = start.year + (start.month - 1 + months) // 12
    month = (start.month - 1 + months) % 12 + 1
    last_day = monthrange(year, month)[1]
    return date(year, month, min(start.day, last_day))


def compute_installment_status(installment: Installment, today: Optional[date] = None) -> str:
    """
    Stateless status derivation (first match wins):
    - Persisted PAID stays PAID, whatever the due date.
    - due_date < today -> OVERDUE, also for partially paid installments.
    - Otherwise the persisted status (PENDING or PARTIAL).

    Never cached nor persisted: call it on every read.
    """
    if installment.status == Installment.Status.PAID:
        return Installment.Status.PAID
    if installment.due_date < _today(today):
        return Installment.Status.OVERDUE
    return installment.status


def count_overdue(installments: Iterable[Installment], today: Optional[date] = None) -> int:
    today = _today(today)
    return sum(
        1 for inst in installments
        if compute_installment_status(inst, today=today) == Installment.Status.OVERDUE
    )


def requires_collections_letter(
    installments: Iterable[Installment],
    today: Optional[date] = None,
    *,
    threshold: Optional[int] = None,
) -> bool:
    """
    True cuando la póliza acumula el umbral de cuotas vencidas (por defecto 3,
    configurable en AppSettings) y corresponde emitir aviso de mora.
    """
    if threshold is None:
        threshold = AppSettings.get_solo().overdue_letter_threshold
    return count_overdue(installments, today=today) >= threshold


def days_overdue(installment: Installment, today: Optional[date] = None) -> int:
    """Días de mora; 0 si está pagada o aún no vence."""
    if installment.status == Installment.Status.PAID:
        return 0
    return max(0, (_today(today) - installment.due_date).days)


def can_register_payment(installment: Installment) -> bool:
    return installment.status != Installment.Status.PAID


def can_extend(installment: Installment) -> bool:
    return installment.status != Installment.Status.PAID


def summarize_policy(
    policy: Policy,
    installments: Optional[Iterable[Installment]] = None,
    today: Optional[date] = None,
    *,
    threshold: Optional[int] = None,
) -> dict:
    """
    Collapse a policy's installments into the collections summary shown in the
    dashboard list.
    """
    today = _today(today)
    if installments is None:
        installments = policy.installments.all()
    installments = list(installments)
    if threshold is None:
        threshold = AppSettings.get_solo().overdue_letter_threshold

    total_paid = Decimal("0.00")
    total_pending = Decimal("0.00")
    pending_count = 0
    overdue_count = 0
    for inst in installments:
        total_paid += inst.amount_paid or Decimal("0")
        status = compute_installment_status(inst, today=today)
        if status == Installment.Status.PAID:
            continue
        pending_count += 1
        total_pending += inst.outstanding_balance
        if status == Installment.Status.OVERDUE:
            overdue_count += 1

    return {
        "policy_id": policy.id,
        "total_paid": total_paid,
        "total_pending": total_pending,
        "pending_count": pending_count,
        "overdue_count": overdue_count,
        "requires_collections_letter": overdue_count >= threshold,
    }


def split_premium(total: Decimal, count: int) -> List[Decimal]:
    """
    Divide the premium into `count` amounts that add up exactly to `total`;
    leftover cents go to the first installment.
    """
    if count <= 0:
        return []
    total = Decimal(total).quantize(CENT)
    base = (total / count).quantize(CENT, rounding=ROUND_DOWN)
    amounts = [base] * count
    amounts[0] += total - base * count
    return amounts


def build_schedule(policy: Policy, count: int, first_due: date) -> List[Installment]:
    """
    Monthly schedule with the premium split evenly. Schedule generation belongs
    to policy issuance; this helper backs seeds and tests.
    """
    if count <= 0:
        return []
    installments = [
        Installment(
            policy=policy,
            sequence=idx + 1,
            amount_due=amount,
            due_date=_add_months(first_due, idx),
            status=Installment.Status.PENDING,
        )
        for idx, amount in enumerate(split_premium(policy.total_premium, count))
    ]
    with transaction.atomic():
        Installment.objects.bulk_create(installments)
    return list(policy.installments.order_by("sequence"))
