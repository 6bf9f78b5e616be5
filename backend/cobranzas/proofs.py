"""
Colaborador externo de comprobantes de pago.

El core solo guarda la referencia opaca del comprobante; el binario vive en el
storage. El checker se resuelve desde settings.COBRANZAS_PROOF_CHECKER para
poder reemplazarlo por el servicio documental que corresponda.
"""
import logging
import posixpath

from django.conf import settings
from django.core.files.storage import default_storage
from django.utils.module_loading import import_string

logger = logging.getLogger(__name__)


def proof_prefix(installment) -> str:
    base = getattr(settings, "COBRANZAS_PROOF_PREFIX", "comprobantes")
    return posixpath.join(base, str(installment.policy_id), str(installment.id)) + "/"


def proof_upload_to(installment, filename: str) -> str:
    """Ruta de subida sugerida para el comprobante de una cuota."""
    return proof_prefix(installment) + posixpath.basename(filename)


class StorageProofChecker:
    """
    Un comprobante pertenece a la cuota si está bajo su prefijo y existe en el
    storage por defecto.
    """

    def __init__(self, storage=None):
        self.storage = storage or default_storage

    def exists(self, reference: str, installment) -> bool:
        reference = (reference or "").strip()
        if not reference.startswith(proof_prefix(installment)):
            return False
        return self.storage.exists(reference)


def get_proof_checker():
    checker_cls = import_string(settings.COBRANZAS_PROOF_CHECKER)
    return checker_cls()
