from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("policies", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="PaymentRecord",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "amount",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Monto efectivamente imputado a la cuota (sin el exceso).",
                        max_digits=14,
                    ),
                ),
                (
                    "kind",
                    models.CharField(
                        choices=[("partial", "Parcial"), ("exact", "Exacto"), ("excess", "Con exceso")],
                        max_length=8,
                    ),
                ),
                ("payment_date", models.DateField()),
                ("notes", models.TextField(blank=True)),
                ("proof_reference", models.CharField(blank=True, max_length=255)),
                ("actor", models.CharField(blank=True, max_length=150)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "installment",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payment_records",
                        to="policies.installment",
                    ),
                ),
                (
                    "origin",
                    models.ForeignKey(
                        blank=True,
                        help_text="Pago con exceso del que proviene este registro (redistribución).",
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="redistributed_records",
                        to="cobranzas.paymentrecord",
                    ),
                ),
            ],
            options={
                "verbose_name": "Pago registrado",
                "verbose_name_plural": "Pagos registrados",
                "ordering": ["-created_at", "-id"],
            },
        ),
    ]
