from django.urls import path

from .views import (
    collections_stats,
    installment_extensions,
    installment_payments,
    installment_status,
    redistribution_apply,
    redistribution_candidates,
    redistribution_preview,
)

urlpatterns = [
    path("installments/<int:pk>/status", installment_status, name="cobranzas-status"),
    path("installments/<int:pk>/payments", installment_payments, name="cobranzas-payments"),
    path(
        "installments/<int:pk>/redistribution/candidates",
        redistribution_candidates,
        name="cobranzas-redistribution-candidates",
    ),
    path(
        "installments/<int:pk>/redistribution/preview",
        redistribution_preview,
        name="cobranzas-redistribution-preview",
    ),
    path("installments/<int:pk>/redistribution", redistribution_apply, name="cobranzas-redistribution"),
    path("installments/<int:pk>/extensions", installment_extensions, name="cobranzas-extensions"),
    path("stats", collections_stats, name="cobranzas-stats"),
]
