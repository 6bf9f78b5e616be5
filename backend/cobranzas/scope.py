"""
Alcance de datos visible para quien llama.

La autorización por rol/equipo es externa: este módulo solo resuelve el
callable configurado en settings.COBRANZAS_SCOPE_RESOLVER, que recibe el
request y devuelve el queryset de cuotas sobre el que el usuario puede operar.
"""
from django.conf import settings
from django.utils.module_loading import import_string

from policies.models import Installment


def all_installments(request=None):
    return Installment.objects.all()


def resolve_scope(request):
    resolver = import_string(settings.COBRANZAS_SCOPE_RESOLVER)
    return resolver(request)
