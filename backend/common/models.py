from django.db import models


class AppSettings(models.Model):
    """
    Parámetros de negocio editables por admins (singleton).
    """

    singleton = models.BooleanField(default=True, editable=False, unique=True)
    overdue_letter_threshold = models.PositiveIntegerField(
        "Cuotas vencidas para aviso de mora",
        default=3,
        help_text="Cantidad de cuotas vencidas a partir de la cual la póliza requiere carta de cobranza.",
    )
    due_soon_days = models.PositiveIntegerField(
        "Días para 'por vencer'",
        default=7,
        help_text="Ventana (en días) para contar cuotas próximas a vencer en el tablero.",
    )
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Configuración"
        verbose_name_plural = "Configuración"

    def __str__(self):
        return "Configuración de cobranzas"

    @classmethod
    def get_solo(cls):
        obj, _ = cls.objects.get_or_create(singleton=True)
        return obj
