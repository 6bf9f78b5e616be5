"""
Registro de pagos sobre cuotas.

Un pago se clasifica contra el saldo pendiente de la cuota (parcial, exacto o
con exceso), se imputa y deja un PaymentRecord. El exceso nunca se aplica
solo: se devuelve como RedistributionRequest para que el operador decida.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from django.utils import timezone

from policies.models import Installment
from .classifier import EXACT, EXCESS, PARTIAL, ZERO, Classification, classify_payment, to_money
from .exceptions import InstallmentAlreadyPaid, PaymentValidationError
from .locking import atomic_operation, lock_installment
from .models import PaymentRecord
from .proofs import get_proof_checker

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RedistributionRequest:
    policy_id: int
    source_installment_id: int
    excess_amount: Decimal
    origin_record_id: int

    def as_dict(self):
        return {
            "policy_id": self.policy_id,
            "source_installment_id": self.source_installment_id,
            "excess_amount": f"{self.excess_amount:.2f}",
            "origin_record_id": self.origin_record_id,
        }


@dataclass
class PaymentResult:
    kind: str
    installment: Installment
    record: PaymentRecord
    amount_applied: Decimal
    remaining_balance: Optional[Decimal] = None
    excess_amount: Optional[Decimal] = None
    redistribution: Optional[RedistributionRequest] = None


def append_note(existing: str, line: str) -> str:
    existing = (existing or "").rstrip()
    return f"{existing}\n{line}" if existing else line


def _payment_note(classification: Classification, payment_date: date, extra: str = "") -> str:
    if classification.kind == PARTIAL:
        line = (
            f"[{payment_date.isoformat()}] Pago parcial de {classification.amount_applied:.2f}. "
            f"Saldo pendiente: {classification.remaining_balance:.2f}."
        )
    elif classification.kind == EXCESS:
        line = (
            f"[{payment_date.isoformat()}] Pago de {classification.amount_tendered:.2f} con exceso de "
            f"{classification.excess_amount:.2f}. Cuota saldada."
        )
    else:
        line = f"[{payment_date.isoformat()}] Pago completo de {classification.amount_applied:.2f}."
    if extra:
        line = f"{line} {extra.strip()}"
    return line


def apply_classified_payment(
    installment: Installment,
    classification: Classification,
    *,
    payment_date: date,
    notes: str = "",
    proof_reference: str = "",
    actor: str = "",
    origin: Optional[PaymentRecord] = None,
    note_suffix: str = "",
) -> PaymentRecord:
    """
    Imputa un pago ya clasificado sobre una cuota bloqueada. Lo usan tanto el
    registro de pagos como la redistribución de excesos.
    """
    if classification.settles_installment:
        installment.amount_paid = installment.amount_due
        installment.status = Installment.Status.PAID
        installment.paid_date = payment_date
    else:
        installment.amount_paid = (installment.amount_paid or ZERO) + classification.amount_applied
        installment.status = Installment.Status.PARTIAL

    installment.notes = append_note(
        installment.notes, _payment_note(classification, payment_date, note_suffix)
    )
    installment.save(update_fields=["amount_paid", "status", "paid_date", "notes", "updated_at"])

    return PaymentRecord.objects.create(
        installment=installment,
        amount=classification.amount_applied,
        kind=classification.kind,
        excess_amount=classification.excess_amount,
        payment_date=payment_date,
        notes=(notes or "").strip(),
        proof_reference=proof_reference or "",
        origin=origin,
        actor=actor or "",
    )


def register_payment(
    installment_id,
    amount_tendered,
    payment_date: Optional[date] = None,
    notes: str = "",
    proof_reference: Optional[str] = None,
    *,
    actor: str = "",
    scope=None,
) -> PaymentResult:
    amount = to_money(amount_tendered)
    if amount <= ZERO:
        logger.warning(
            "cobranzas_payment_rejected",
            extra={"installment_id": installment_id, "reason": "non_positive_amount"},
        )
        raise PaymentValidationError("El monto pagado debe ser mayor a cero.", installment_id=installment_id)

    reference = (proof_reference or "").strip()
    if not reference:
        logger.warning(
            "cobranzas_payment_rejected",
            extra={"installment_id": installment_id, "reason": "missing_proof"},
        )
        raise PaymentValidationError(
            "Es obligatorio adjuntar el comprobante de pago.", installment_id=installment_id
        )

    payment_date = payment_date or timezone.localdate()

    with atomic_operation("register_payment", installment_id=installment_id):
        installment = lock_installment(installment_id, scope=scope)
        # se verifica con la fila bloqueada: un doble envío ve la cuota ya pagada
        if installment.is_paid:
            logger.warning(
                "cobranzas_payment_rejected",
                extra={"installment_id": installment.id, "reason": "already_paid"},
            )
            raise InstallmentAlreadyPaid(installment_id=installment.id)

        if not get_proof_checker().exists(reference, installment):
            logger.warning(
                "cobranzas_payment_rejected",
                extra={"installment_id": installment.id, "reason": "proof_not_found"},
            )
            raise PaymentValidationError(
                "El comprobante indicado no existe o no corresponde a esta cuota.",
                installment_id=installment.id,
            )

        classification = classify_payment(amount, installment.amount_due, installment.amount_paid)
        record = apply_classified_payment(
            installment,
            classification,
            payment_date=payment_date,
            notes=notes,
            proof_reference=reference,
            actor=actor,
        )

    result = PaymentResult(
        kind=classification.kind,
        installment=installment,
        record=record,
        amount_applied=classification.amount_applied,
    )
    if classification.kind == PARTIAL:
        result.remaining_balance = classification.remaining_balance
    elif classification.kind == EXACT:
        result.remaining_balance = ZERO
    elif classification.kind == EXCESS:
        result.remaining_balance = ZERO
        result.excess_amount = classification.excess_amount
        result.redistribution = RedistributionRequest(
            policy_id=installment.policy_id,
            source_installment_id=installment.id,
            excess_amount=classification.excess_amount,
            origin_record_id=record.id,
        )

    logger.info(
        "cobranzas_payment_registered",
        extra={
            "installment_id": installment.id,
            "policy_id": installment.policy_id,
            "kind": classification.kind,
            "amount_tendered": str(classification.amount_tendered),
            "amount_applied": str(classification.amount_applied),
            "excess_amount": str(classification.excess_amount),
            "record_id": record.id,
            "actor": actor,
        },
    )
    return result
