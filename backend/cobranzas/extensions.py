"""Prórrogas de vencimiento de cuotas."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from django.utils import timezone
from django.utils.dateparse import parse_date

from policies.models import Installment
from .exceptions import ExtensionValidationError, InstallmentAlreadyPaid
from .locking import atomic_operation, lock_installment

logger = logging.getLogger(__name__)


@dataclass
class ExtensionResult:
    installment: Installment
    previous_due_date: date
    new_due_date: date
    original_due_date: date
    extension_days: int


def _as_date(value) -> Optional[date]:
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return parse_date(value.strip())
        except ValueError:
            return None
    return None


def extension_days(installment: Installment) -> int:
    """Días totales corridos respecto del vencimiento original; 0 sin prórrogas."""
    if not installment.original_due_date:
        return 0
    return (installment.due_date - installment.original_due_date).days


def history_with_days(installment: Installment):
    """Historial de prórrogas con los días de cada una, para mostrar."""
    rows = []
    for entry in installment.extension_history or []:
        previous, new = _as_date(entry.get("previous_date")), _as_date(entry.get("new_date"))
        days = (new - previous).days if previous and new else None
        rows.append({**entry, "days": days})
    return rows


def extend_due_date(
    installment_id,
    new_due_date,
    reason: str = "",
    *,
    actor: str,
    today: Optional[date] = None,
    scope=None,
) -> ExtensionResult:
    today = today or timezone.localdate()
    new_date = _as_date(new_due_date)
    if new_date is None:
        raise ExtensionValidationError("Fecha de vencimiento inválida.", installment_id=installment_id)
    if new_date <= today:
        logger.warning(
            "cobranzas_extension_rejected",
            extra={"installment_id": installment_id, "reason": "not_in_future", "new_due_date": new_date.isoformat()},
        )
        raise ExtensionValidationError(
            "La nueva fecha de vencimiento debe ser posterior a hoy.", installment_id=installment_id
        )

    with atomic_operation("extend_due_date", installment_id=installment_id):
        installment = lock_installment(installment_id, scope=scope)
        if installment.is_paid:
            logger.warning(
                "cobranzas_extension_rejected",
                extra={"installment_id": installment.id, "reason": "already_paid"},
            )
            raise InstallmentAlreadyPaid(
                "No se puede prorrogar una cuota pagada.", installment_id=installment.id
            )
        previous = installment.due_date
        if new_date <= previous:
            raise ExtensionValidationError(
                f"La nueva fecha debe ser posterior al vencimiento actual ({previous.isoformat()}).",
                installment_id=installment.id,
            )

        if installment.original_due_date is None:
            installment.original_due_date = previous
        history = list(installment.extension_history or [])
        history.append(
            {
                "previous_date": previous.isoformat(),
                "new_date": new_date.isoformat(),
                "reason": (reason or "").strip(),
                "actor": actor or "",
                "timestamp": timezone.now().isoformat(),
            }
        )
        installment.extension_history = history
        installment.due_date = new_date
        installment.save(update_fields=["due_date", "original_due_date", "extension_history", "updated_at"])

    days = (new_date - previous).days
    logger.info(
        "cobranzas_due_date_extended",
        extra={
            "installment_id": installment.id,
            "policy_id": installment.policy_id,
            "previous_due_date": previous.isoformat(),
            "new_due_date": new_date.isoformat(),
            "extension_days": days,
            "actor": actor,
        },
    )
    return ExtensionResult(
        installment=installment,
        previous_due_date=previous,
        new_due_date=new_date,
        original_due_date=installment.original_due_date,
        extension_days=days,
    )
