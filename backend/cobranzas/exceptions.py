"""
Errores del motor de cobranzas.

Los servicios los levantan; las vistas los traducen a respuestas con el
status HTTP de cada familia. Ninguno se reintenta dentro del core.
"""


class CobranzaError(Exception):
    code = "cobranza_error"
    http_status = 400
    default_detail = "No se pudo completar la operación de cobranza."

    def __init__(self, detail=None, **context):
        self.detail = detail or self.default_detail
        self.context = context
        super().__init__(self.detail)

    def as_dict(self):
        payload = {"detail": self.detail, "code": self.code}
        payload.update({k: v for k, v in self.context.items() if v is not None})
        return payload


# === Entrada inválida (corregible por quien llama) ===
class ValidationError(CobranzaError):
    code = "validation_error"
    http_status = 400


class PaymentValidationError(ValidationError):
    code = "invalid_payment"


class RedistributionValidationError(ValidationError):
    code = "invalid_redistribution"


class ExtensionValidationError(ValidationError):
    code = "invalid_extension"


# === Recurso inexistente en el alcance visible ===
class NotFoundError(CobranzaError):
    code = "not_found"
    http_status = 404
    default_detail = "Recurso no encontrado."


class InstallmentNotFound(NotFoundError):
    code = "installment_not_found"
    default_detail = "Cuota no encontrada."


# === Operación inválida para el estado actual ===
class ConflictError(CobranzaError):
    code = "conflict"
    http_status = 409


class InstallmentAlreadyPaid(ConflictError):
    code = "installment_already_paid"
    default_detail = "Esta cuota ya está marcada como pagada."


class NothingToRedistribute(ConflictError):
    code = "nothing_to_redistribute"
    default_detail = "La póliza no tiene otras cuotas pendientes para recibir el exceso."


class ExcessNotAvailable(ConflictError):
    code = "excess_not_available"
    default_detail = "La cuota de origen no tiene un exceso disponible por ese monto."


# === Falla del almacenamiento ===
class PersistenceError(CobranzaError):
    code = "persistence_error"
    http_status = 503
    default_detail = "No se pudo guardar la operación. No se aplicó ningún cambio; intentá nuevamente."
