import logging
from contextlib import contextmanager
from typing import Dict, Iterable

from django.db import DatabaseError, transaction

from policies.models import Installment
from .exceptions import InstallmentNotFound, PersistenceError

logger = logging.getLogger(__name__)


@contextmanager
def atomic_operation(operation: str, **log_extra):
    """
    Una operación de cobranza = una transacción. Cualquier error de base de
    datos se expone como PersistenceError, con todo revertido.
    """
    try:
        with transaction.atomic():
            yield
    except DatabaseError as exc:
        logger.error(
            "cobranzas_persistence_error",
            extra={"operation": operation, **log_extra},
            exc_info=True,
        )
        raise PersistenceError(operation=operation) from exc


def visible_installments(scope=None):
    return scope if scope is not None else Installment.objects.all()


def get_installment(installment_id, scope=None) -> Installment:
    try:
        return visible_installments(scope).get(pk=installment_id)
    except (Installment.DoesNotExist, ValueError, TypeError):
        raise InstallmentNotFound(installment_id=installment_id)


def lock_installments(ids: Iterable[int], scope=None) -> Dict[int, Installment]:
    """
    Bloquea las cuotas pedidas en orden ascendente de id (select_for_update)
    para que dos operaciones sobre la misma póliza no se crucen. Debe llamarse
    dentro de atomic_operation().
    """
    try:
        wanted = sorted({int(i) for i in ids})
    except (ValueError, TypeError):
        raise InstallmentNotFound()
    if scope is not None:
        visible = set(scope.filter(pk__in=wanted).values_list("pk", flat=True))
        for pk in wanted:
            if pk not in visible:
                raise InstallmentNotFound(installment_id=pk)
    locked = {
        inst.pk: inst
        for inst in Installment.objects.select_for_update().filter(pk__in=wanted).order_by("pk")
    }
    for pk in wanted:
        if pk not in locked:
            raise InstallmentNotFound(installment_id=pk)
    return locked


def lock_installment(installment_id, scope=None) -> Installment:
    try:
        pk = int(installment_id)
    except (ValueError, TypeError):
        raise InstallmentNotFound(installment_id=installment_id)
    return lock_installments([pk], scope=scope)[pk]
