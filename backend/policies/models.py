from decimal import Decimal

from django.db import models


class Policy(models.Model):
    STATUS = [
        ("active", "Activa"),
        ("expired", "Vencida"),
        ("cancelled", "Cancelada"),
        ("renewed", "Renovada"),
    ]
    CURRENCIES = [
        ("Bs", "Bolivianos"),
        ("USD", "Dólares"),
        ("USDT", "Tether"),
        ("UFV", "Unidad de Fomento a la Vivienda"),
    ]

    number = models.CharField(max_length=30, unique=True)
    holder_name = models.CharField("Asegurado", max_length=200, blank=True)
    currency = models.CharField(max_length=4, choices=CURRENCIES, default="Bs")
    total_premium = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    status = models.CharField(max_length=20, choices=STATUS, default="active")
    start_date = models.DateField(null=True, blank=True)
    end_date = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["number"]
        verbose_name = "Póliza"
        verbose_name_plural = "Pólizas"

    def __str__(self):
        return f"{self.number} - {self.holder_name}".strip(" -")


class Installment(models.Model):
    class Status:
        # Estados persistidos. "overdue" nunca se guarda: se deriva en policies.billing.
        PENDING = "pending"
        PARTIAL = "partial"
        PAID = "paid"
        OVERDUE = "overdue"

        CHOICES = [
            (PENDING, "Pendiente"),
            (PARTIAL, "Parcial"),
            (PAID, "Pagado"),
        ]

    policy = models.ForeignKey(
        Policy,
        on_delete=models.PROTECT,
        related_name="installments",
    )
    sequence = models.PositiveIntegerField(help_text="Número de cuota dentro de la póliza (1..N)")
    amount_due = models.DecimalField(max_digits=14, decimal_places=2)
    amount_paid = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    due_date = models.DateField()
    original_due_date = models.DateField(
        null=True,
        blank=True,
        help_text="Vencimiento anterior a la primera prórroga. Se fija una sola vez.",
    )
    extension_history = models.JSONField(default=list, blank=True)
    paid_date = models.DateField(null=True, blank=True)
    status = models.CharField(max_length=12, choices=Status.CHOICES, default=Status.PENDING)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["policy_id", "sequence"]
        unique_together = ["policy", "sequence"]
        verbose_name = "Cuota"
        verbose_name_plural = "Cuotas"

    def __str__(self):
        return f"{self.policy.number} - cuota {self.sequence}"

    @property
    def outstanding_balance(self) -> Decimal:
        balance = (self.amount_due or Decimal("0")) - (self.amount_paid or Decimal("0"))
        return max(balance, Decimal("0.00"))

    @property
    def is_paid(self) -> bool:
        return self.status == self.Status.PAID
