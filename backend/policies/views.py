# backend/policies/views.py
from django.db.models import Prefetch, Q
from django.utils import timezone
from rest_framework import permissions, viewsets
from rest_framework.response import Response

from cobranzas.scope import resolve_scope
from common.models import AppSettings
from .billing import summarize_policy
from .models import Installment, Policy
from .serializers import PolicyCollectionsSerializer


def _flag(value):
    return (value or "").strip().lower() in ("1", "true", "yes")


class PolicyViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Listado de pólizas para el tablero de cobranzas. Solo lectura: las cuotas
    se mutan únicamente vía /api/cobranzas/.
    """

    serializer_class = PolicyCollectionsSerializer
    permission_classes = [permissions.IsAdminUser]

    def get_queryset(self):
        scope = resolve_scope(self.request)
        qs = (
            Policy.objects.filter(installments__in=scope)
            .distinct()
            .prefetch_related(
                Prefetch(
                    "installments",
                    queryset=Installment.objects.filter(id__in=scope.values("id")).order_by("sequence"),
                )
            )
            .order_by("number")
        )
        q = (self.request.query_params.get("search") or "").strip()
        if q:
            qs = qs.filter(Q(number__icontains=q) | Q(holder_name__icontains=q))
        currency = (self.request.query_params.get("currency") or "").strip()
        if currency:
            qs = qs.filter(currency=currency)
        return qs

    def _context_for(self, policies):
        today = timezone.localdate()
        threshold = AppSettings.get_solo().overdue_letter_threshold
        installments_map = {p.id: list(p.installments.all()) for p in policies}
        summary_map = {
            p.id: summarize_policy(p, installments_map[p.id], today, threshold=threshold)
            for p in policies
        }
        context = self.get_serializer_context()
        context.update(
            {
                "today": today,
                "installments_map": installments_map,
                "summary_map": summary_map,
            }
        )
        return context

    def list(self, request, *args, **kwargs):
        policies = list(self.get_queryset())
        context = self._context_for(policies)
        summary_map = context["summary_map"]

        # filtros sobre valores derivados: se aplican en memoria, no existen en DB
        if _flag(request.query_params.get("only_pending")):
            policies = [p for p in policies if summary_map[p.id]["pending_count"] > 0]
        if _flag(request.query_params.get("requires_letter")):
            policies = [p for p in policies if summary_map[p.id]["requires_collections_letter"]]

        page = self.paginate_queryset(policies)
        serializer = self.get_serializer(page if page is not None else policies, many=True, context=context)
        if page is not None:
            return self.get_paginated_response(serializer.data)
        return Response(serializer.data)

    def retrieve(self, request, *args, **kwargs):
        policy = self.get_object()
        context = self._context_for([policy])
        serializer = self.get_serializer(policy, context=context)
        return Response(serializer.data)
