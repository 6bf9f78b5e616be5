"""
Redistribución del exceso de un pago entre las demás cuotas pendientes de la
misma póliza.

Flujo: build_candidate_set() -> auto_distribute() / manual_distribution()
(previsualización, sin efectos) -> apply_redistribution(), que vuelve a
validar contra las filas bloqueadas y aplica todo o nada.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_DOWN, Decimal
from typing import Dict, Iterable, List, Mapping, Optional

from django.utils import timezone

from policies.billing import compute_installment_status
from policies.models import Installment
from .classifier import CENT, ZERO, PAYMENT_TOLERANCE, classify_payment, to_money
from .exceptions import (
    ExcessNotAvailable,
    InstallmentNotFound,
    NothingToRedistribute,
    PaymentValidationError,
    RedistributionValidationError,
)
from .locking import atomic_operation, get_installment, lock_installments, visible_installments
from .models import PaymentRecord
from .payments import append_note, apply_classified_payment

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Candidate:
    installment_id: int
    sequence: int
    due_date: date
    effective_status: str
    amount_original: Decimal

    def as_dict(self):
        return {
            "installment_id": self.installment_id,
            "sequence": self.sequence,
            "due_date": self.due_date.isoformat(),
            "effective_status": self.effective_status,
            "amount_original": f"{self.amount_original:.2f}",
        }


@dataclass
class AllocationLine:
    installment_id: int
    sequence: int
    amount_original: Decimal
    amount_applied: Decimal = ZERO

    @property
    def resulting_balance(self) -> Decimal:
        return max(self.amount_original - self.amount_applied, ZERO)

    def as_dict(self):
        return {
            "installment_id": self.installment_id,
            "sequence": self.sequence,
            "amount_original": f"{self.amount_original:.2f}",
            "amount_applied": f"{self.amount_applied:.2f}",
            "resulting_balance": f"{self.resulting_balance:.2f}",
        }


@dataclass
class ExcessAllocation:
    source_installment_id: int
    excess_amount: Decimal
    lines: List[AllocationLine] = field(default_factory=list)

    @property
    def total_applied(self) -> Decimal:
        return sum((line.amount_applied for line in self.lines), ZERO)

    @property
    def unallocated(self) -> Decimal:
        return self.excess_amount - self.total_applied

    def as_dict(self):
        return {
            "source_installment_id": self.source_installment_id,
            "excess_amount": f"{self.excess_amount:.2f}",
            "total_applied": f"{self.total_applied:.2f}",
            "unallocated": f"{self.unallocated:.2f}",
            "lines": [line.as_dict() for line in self.lines],
        }


@dataclass
class RedistributionResult:
    source_installment_id: int
    excess_amount: Decimal
    applied_total: Decimal
    per_installment_results: List[dict]
    records: List[PaymentRecord]


def _money(value) -> Decimal:
    try:
        return to_money(value)
    except PaymentValidationError as exc:
        raise RedistributionValidationError(exc.detail)


def _positive_excess(excess_amount) -> Decimal:
    excess = _money(excess_amount)
    if excess <= ZERO:
        raise RedistributionValidationError("El exceso a redistribuir debe ser mayor a cero.")
    return excess


def build_candidate_set(policy_id, source_installment_id, *, scope=None, today=None) -> List[Candidate]:
    """
    Cuotas de la póliza, excepto la de origen, que no estén pagadas. Ordenadas
    por número de cuota; amount_original es el saldo pendiente de cada una.
    """
    source = get_installment(source_installment_id, scope=scope)
    if str(source.policy_id) != str(policy_id):
        raise InstallmentNotFound(
            "La cuota de origen no pertenece a la póliza indicada.",
            installment_id=source.id,
            policy_id=policy_id,
        )
    today = today or timezone.localdate()
    siblings = (
        visible_installments(scope)
        .filter(policy_id=source.policy_id)
        .exclude(pk=source.pk)
        .exclude(status=Installment.Status.PAID)
        .order_by("sequence")
    )
    return [
        Candidate(
            installment_id=inst.id,
            sequence=inst.sequence,
            due_date=inst.due_date,
            effective_status=compute_installment_status(inst, today=today),
            amount_original=inst.outstanding_balance,
        )
        for inst in siblings
        if inst.outstanding_balance > ZERO
    ]


def _empty_allocation(source_installment_id, excess: Decimal, candidates: Iterable[Candidate]) -> ExcessAllocation:
    return ExcessAllocation(
        source_installment_id=source_installment_id,
        excess_amount=excess,
        lines=[
            AllocationLine(
                installment_id=c.installment_id,
                sequence=c.sequence,
                amount_original=c.amount_original,
            )
            for c in candidates
        ],
    )


def auto_distribute(
    excess_amount,
    candidates: List[Candidate],
    selected_ids: Optional[Iterable[int]] = None,
    *,
    source_installment_id=None,
) -> ExcessAllocation:
    """
    Reparto en partes iguales entre las cuotas elegidas (todas si no se elige
    ninguna). Cada parte se topea en el saldo de su cuota; los centavos que no
    dividen exacto van a las primeras cuotas. Lo que los topes dejan sin
    asignar queda en `unallocated`.
    """
    excess = _positive_excess(excess_amount)
    if not candidates:
        raise NothingToRedistribute()

    allocation = _empty_allocation(source_installment_id, excess, candidates)
    if selected_ids is None:
        chosen = list(allocation.lines)
    else:
        wanted = {int(i) for i in selected_ids}
        known = {line.installment_id for line in allocation.lines}
        unknown = sorted(wanted - known)
        if unknown:
            raise RedistributionValidationError(
                "Las cuotas seleccionadas no son candidatas para la redistribución.",
                installment_ids=unknown,
            )
        chosen = [line for line in allocation.lines if line.installment_id in wanted]
    if not chosen:
        raise RedistributionValidationError("Seleccioná al menos una cuota para redistribuir el exceso.")

    share = (excess / len(chosen)).quantize(CENT, rounding=ROUND_DOWN)
    leftover_cents = int((excess - share * len(chosen)) / CENT)
    for idx, line in enumerate(chosen):
        amount = share + (CENT if idx < leftover_cents else ZERO)
        line.amount_applied = min(amount, line.amount_original)
    return allocation


def manual_distribution(
    excess_amount,
    candidates: List[Candidate],
    amounts: Mapping,
    *,
    source_installment_id=None,
) -> ExcessAllocation:
    """Montos indicados por el operador, topeados en el saldo de cada cuota."""
    excess = _positive_excess(excess_amount)
    if not candidates:
        raise NothingToRedistribute()

    allocation = _empty_allocation(source_installment_id, excess, candidates)
    by_id = {line.installment_id: line for line in allocation.lines}
    for raw_id, raw_amount in (amounts or {}).items():
        try:
            line = by_id[int(raw_id)]
        except (KeyError, ValueError, TypeError):
            raise RedistributionValidationError(
                "La cuota indicada no es candidata para la redistribución.",
                installment_id=raw_id,
            )
        amount = _money(raw_amount)
        if amount < ZERO:
            raise RedistributionValidationError(
                f"El monto para la cuota {line.sequence} no puede ser negativo.",
                installment_id=line.installment_id,
            )
        line.amount_applied = min(amount, line.amount_original)
    return allocation


def validate_allocation(allocation: ExcessAllocation) -> ExcessAllocation:
    if allocation.excess_amount <= ZERO:
        raise RedistributionValidationError("El exceso a redistribuir debe ser mayor a cero.")
    for line in allocation.lines:
        if line.amount_applied < ZERO:
            raise RedistributionValidationError(
                f"El monto para la cuota {line.sequence} no puede ser negativo.",
                installment_id=line.installment_id,
            )
        if line.amount_applied > line.amount_original:
            raise RedistributionValidationError(
                f"La cuota {line.sequence} solo adeuda {line.amount_original:.2f}; "
                f"no puede recibir {line.amount_applied:.2f}.",
                installment_id=line.installment_id,
            )
    if not any(line.amount_applied > ZERO for line in allocation.lines):
        raise RedistributionValidationError("Asigná el exceso al menos a una cuota.")

    difference = allocation.total_applied - allocation.excess_amount
    if abs(difference) > PAYMENT_TOLERANCE:
        raise RedistributionValidationError(
            f"El total redistribuido ({allocation.total_applied:.2f}) difiere del exceso "
            f"({allocation.excess_amount:.2f}) en {abs(difference):.2f}.",
            difference=f"{difference:.2f}",
        )
    return allocation


def _requested_amounts(allocations) -> Dict[int, Decimal]:
    """
    Acepta un ExcessAllocation, una lista de AllocationLine o de dicts
    {"installment_id", "amount_applied"}.
    """
    if isinstance(allocations, ExcessAllocation):
        allocations = allocations.lines
    requested: Dict[int, Decimal] = {}
    for item in allocations or []:
        if isinstance(item, AllocationLine):
            raw_id, raw_amount = item.installment_id, item.amount_applied
        else:
            raw_id, raw_amount = item.get("installment_id"), item.get("amount_applied", item.get("amount"))
        try:
            pk = int(raw_id)
        except (ValueError, TypeError):
            raise RedistributionValidationError("Cuota inválida en la distribución.", installment_id=raw_id)
        if pk in requested:
            raise RedistributionValidationError(
                "Cada cuota puede aparecer una sola vez en la distribución.", installment_id=pk
            )
        requested[pk] = _money(raw_amount)
    return requested


def apply_redistribution(
    source_installment_id,
    excess_amount,
    allocations,
    *,
    payment_date: Optional[date] = None,
    actor: str = "",
    scope=None,
) -> RedistributionResult:
    excess = _positive_excess(excess_amount)
    requested = _requested_amounts(allocations)
    payment_date = payment_date or timezone.localdate()

    with atomic_operation("apply_redistribution", installment_id=source_installment_id):
        source = get_installment(source_installment_id, scope=scope)
        candidate_ids = set(
            visible_installments(scope)
            .filter(policy_id=source.policy_id)
            .exclude(pk=source.pk)
            .exclude(status=Installment.Status.PAID)
            .values_list("pk", flat=True)
        )
        if not candidate_ids:
            logger.warning(
                "cobranzas_redistribution_rejected",
                extra={"installment_id": source.id, "reason": "no_candidates", "excess_amount": str(excess)},
            )
            raise NothingToRedistribute(installment_id=source.id)

        foreign = sorted(set(requested) - candidate_ids)
        if foreign:
            raise RedistributionValidationError(
                "Solo se puede redistribuir a cuotas pendientes de la misma póliza.",
                installment_ids=foreign,
            )

        locked = lock_installments([source.id, *requested.keys()], scope=scope)
        source = locked[source.id]
        # con la cuota de origen bloqueada, el saldo del exceso no puede moverse
        origin = (
            source.payment_records.filter(kind=PaymentRecord.Kind.EXCESS, origin__isnull=True)
            .order_by("-created_at", "-id")
            .first()
        )
        if origin is None:
            logger.warning(
                "cobranzas_redistribution_rejected",
                extra={"installment_id": source.id, "reason": "no_excess_record", "excess_amount": str(excess)},
            )
            raise ExcessNotAvailable(
                "La cuota de origen no registra un pago con exceso.", installment_id=source.id
            )
        available = origin.available_excess()
        if excess > available:
            logger.warning(
                "cobranzas_redistribution_rejected",
                extra={
                    "installment_id": source.id,
                    "reason": "excess_exhausted",
                    "excess_amount": str(excess),
                    "available_excess": str(available),
                },
            )
            raise ExcessNotAvailable(
                f"El exceso disponible del pago #{origin.id} es {max(available, ZERO):.2f}; "
                f"no se pueden redistribuir {excess:.2f}.",
                installment_id=source.id,
                origin_record_id=origin.id,
                available_excess=f"{max(available, ZERO):.2f}",
            )

        targets = sorted((locked[pk] for pk in requested), key=lambda inst: inst.sequence)
        # se vuelve a validar contra las filas bloqueadas; pudieron cambiar desde la previsualización
        allocation = ExcessAllocation(
            source_installment_id=source.id,
            excess_amount=excess,
            lines=[
                AllocationLine(
                    installment_id=inst.id,
                    sequence=inst.sequence,
                    amount_original=ZERO if inst.is_paid else inst.outstanding_balance,
                    amount_applied=requested[inst.id],
                )
                for inst in targets
            ],
        )
        try:
            validate_allocation(allocation)
        except RedistributionValidationError as exc:
            logger.warning(
                "cobranzas_redistribution_rejected",
                extra={"installment_id": source.id, "reason": exc.detail},
            )
            raise

        suffix = f"Redistribución del exceso de la cuota {source.sequence} (pago #{origin.id})."

        records = []
        per_installment = []
        for inst, line in zip(targets, allocation.lines):
            if line.amount_applied <= ZERO:
                continue
            classification = classify_payment(line.amount_applied, inst.amount_due, inst.amount_paid)
            record = apply_classified_payment(
                inst,
                classification,
                payment_date=payment_date,
                notes=suffix,
                actor=actor,
                origin=origin,
                note_suffix=suffix,
            )
            records.append(record)
            per_installment.append(
                {
                    "installment_id": inst.id,
                    "sequence": inst.sequence,
                    "amount_original": line.amount_original,
                    "amount_applied": record.amount,
                    "resulting_balance": inst.outstanding_balance,
                    "kind": classification.kind,
                    "status": inst.status,
                    "record_id": record.id,
                }
            )

        # una línea dentro de la tolerancia salda la cuota completa; se controla lo imputado de verdad
        applied_total = sum((record.amount for record in records), ZERO)
        drift = applied_total - excess
        if abs(drift) > PAYMENT_TOLERANCE:
            logger.warning(
                "cobranzas_redistribution_rejected",
                extra={
                    "installment_id": source.id,
                    "reason": "applied_total_drift",
                    "excess_amount": str(excess),
                    "applied_total": str(applied_total),
                },
            )
            raise RedistributionValidationError(
                f"Lo imputado a las cuotas ({applied_total:.2f}) difiere del exceso "
                f"({excess:.2f}) en {abs(drift):.2f}.",
                difference=f"{drift:.2f}",
            )

        source.notes = append_note(
            source.notes,
            f"[{payment_date.isoformat()}] Exceso de {applied_total:.2f} redistribuido "
            f"entre {len(records)} cuota(s).",
        )
        source.save(update_fields=["notes", "updated_at"])

    logger.info(
        "cobranzas_redistribution_applied",
        extra={
            "installment_id": source.id,
            "policy_id": source.policy_id,
            "excess_amount": str(excess),
            "applied_total": str(applied_total),
            "targets": [r["installment_id"] for r in per_installment],
            "origin_record_id": origin.id,
            "actor": actor,
        },
    )
    return RedistributionResult(
        source_installment_id=source.id,
        excess_amount=excess,
        applied_total=applied_total,
        per_installment_results=per_installment,
        records=records,
    )
