from decimal import Decimal

from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Policy",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("number", models.CharField(max_length=30, unique=True)),
                ("holder_name", models.CharField(blank=True, max_length=200, verbose_name="Asegurado")),
                (
                    "currency",
                    models.CharField(
                        choices=[
                            ("Bs", "Bolivianos"),
                            ("USD", "Dólares"),
                            ("USDT", "Tether"),
                            ("UFV", "Unidad de Fomento a la Vivienda"),
                        ],
                        default="Bs",
                        max_length=4,
                    ),
                ),
                ("total_premium", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("active", "Activa"),
                            ("expired", "Vencida"),
                            ("cancelled", "Cancelada"),
                            ("renewed", "Renovada"),
                        ],
                        default="active",
                        max_length=20,
                    ),
                ),
                ("start_date", models.DateField(blank=True, null=True)),
                ("end_date", models.DateField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Póliza",
                "verbose_name_plural": "Pólizas",
                "ordering": ["number"],
            },
        ),
        migrations.CreateModel(
            name="Installment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("sequence", models.PositiveIntegerField(help_text="Número de cuota dentro de la póliza (1..N)")),
                ("amount_due", models.DecimalField(decimal_places=2, max_digits=14)),
                ("amount_paid", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("due_date", models.DateField()),
                (
                    "original_due_date",
                    models.DateField(
                        blank=True,
                        help_text="Vencimiento anterior a la primera prórroga. Se fija una sola vez.",
                        null=True,
                    ),
                ),
                ("extension_history", models.JSONField(blank=True, default=list)),
                ("paid_date", models.DateField(blank=True, null=True)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pendiente"),
                            ("partial", "Parcial"),
                            ("paid", "Pagado"),
                        ],
                        default="pending",
                        max_length=12,
                    ),
                ),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "policy",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="installments",
                        to="policies.policy",
                    ),
                ),
            ],
            options={
                "verbose_name": "Cuota",
                "verbose_name_plural": "Cuotas",
                "ordering": ["policy_id", "sequence"],
                "unique_together": {("policy", "sequence")},
            },
        ),
    ]
