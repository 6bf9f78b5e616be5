from decimal import Decimal

from django.db import models

from policies.models import Installment


class PaymentRecord(models.Model):
    """
    Un registro por pago imputado a una cuota. Solo se crea; nunca se edita
    ni se borra.
    """

    class Kind:
        PARTIAL = "partial"
        EXACT = "exact"
        EXCESS = "excess"

        CHOICES = [
            (PARTIAL, "Parcial"),
            (EXACT, "Exacto"),
            (EXCESS, "Con exceso"),
        ]

    installment = models.ForeignKey(
        Installment,
        on_delete=models.PROTECT,
        related_name="payment_records",
    )
    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        help_text="Monto efectivamente imputado a la cuota (sin el exceso).",
    )
    kind = models.CharField(max_length=8, choices=Kind.CHOICES)
    excess_amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Excedente del pago por encima del saldo (solo pagos con exceso).",
    )
    payment_date = models.DateField()
    notes = models.TextField(blank=True)
    proof_reference = models.CharField(max_length=255, blank=True)
    origin = models.ForeignKey(
        "self",
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="redistributed_records",
        help_text="Pago con exceso del que proviene este registro (redistribución).",
    )
    actor = models.CharField(max_length=150, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        verbose_name = "Pago registrado"
        verbose_name_plural = "Pagos registrados"

    def __str__(self):
        return f"Pago {self.id} - {self.installment} ({self.amount})"

    @property
    def is_redistribution(self) -> bool:
        return self.origin_id is not None

    def available_excess(self) -> Decimal:
        """Exceso que todavía no se redistribuyó a otras cuotas."""
        used = self.redistributed_records.aggregate(total=models.Sum("amount"))["total"]
        return self.excess_amount - (used or Decimal("0.00"))
