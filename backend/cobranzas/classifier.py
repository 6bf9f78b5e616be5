"""
Clasificación de un monto pagado contra el saldo de una cuota.

Siempre se clasifica contra el saldo pendiente (monto de la cuota menos lo ya
pagado), de modo que un segundo pago sobre una cuota parcial completa la
diferencia y no el monto original.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from .exceptions import PaymentValidationError

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
# Tolerancia fija para absorber redondeos de centavos.
PAYMENT_TOLERANCE = Decimal("0.01")

PARTIAL = "partial"
EXACT = "exact"
EXCESS = "excess"


def to_money(value) -> Decimal:
    """Normaliza a Decimal con dos decimales; acepta str, int, float o Decimal."""
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value).strip())
        except (InvalidOperation, ValueError, TypeError):
            raise PaymentValidationError(f"Monto inválido: {value!r}.")
    if not amount.is_finite():
        raise PaymentValidationError(f"Monto inválido: {value!r}.")
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def within_tolerance(a: Decimal, b: Decimal) -> bool:
    return abs(a - b) <= PAYMENT_TOLERANCE


@dataclass(frozen=True)
class Classification:
    kind: str
    amount_tendered: Decimal
    amount_applied: Decimal
    remaining_balance: Decimal = ZERO
    excess_amount: Decimal = ZERO

    @property
    def settles_installment(self) -> bool:
        return self.kind in (EXACT, EXCESS)


def classify_payment(amount_tendered, amount_due, amount_paid=ZERO) -> Classification:
    """
    partial: tendered < saldo (fuera de tolerancia), informa remaining_balance.
    exact:   |tendered - saldo| <= 0.01; se imputa el saldo completo.
    excess:  tendered > saldo + 0.01; se imputa el saldo y se informa el excedente.
    """
    tendered = to_money(amount_tendered)
    outstanding = max(to_money(amount_due) - to_money(amount_paid or ZERO), ZERO)

    if within_tolerance(tendered, outstanding):
        return Classification(kind=EXACT, amount_tendered=tendered, amount_applied=outstanding)
    if tendered < outstanding:
        return Classification(
            kind=PARTIAL,
            amount_tendered=tendered,
            amount_applied=tendered,
            remaining_balance=outstanding - tendered,
        )
    return Classification(
        kind=EXCESS,
        amount_tendered=tendered,
        amount_applied=outstanding,
        excess_amount=tendered - outstanding,
    )

