from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="AppSettings",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("singleton", models.BooleanField(default=True, editable=False, unique=True)),
                (
                    "overdue_letter_threshold",
                    models.PositiveIntegerField(
                        default=3,
                        help_text="Cantidad de cuotas vencidas a partir de la cual la póliza requiere carta de cobranza.",
                        verbose_name="Cuotas vencidas para aviso de mora",
                    ),
                ),
                (
                    "due_soon_days",
                    models.PositiveIntegerField(
                        default=7,
                        help_text="Ventana (en días) para contar cuotas próximas a vencer en el tablero.",
                        verbose_name="Días para 'por vencer'",
                    ),
                ),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Configuración",
                "verbose_name_plural": "Configuración",
            },
        ),
    ]
