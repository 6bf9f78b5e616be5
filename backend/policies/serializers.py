# backend/policies/serializers.py
from rest_framework import serializers

from .billing import compute_installment_status, days_overdue
from .models import Installment, Policy


class InstallmentSerializer(serializers.ModelSerializer):
    effective_status = serializers.SerializerMethodField()
    outstanding_balance = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    days_overdue = serializers.SerializerMethodField()

    class Meta:
        model = Installment
        fields = [
            "id",
            "policy",
            "sequence",
            "amount_due",
            "amount_paid",
            "outstanding_balance",
            "due_date",
            "original_due_date",
            "extension_history",
            "paid_date",
            "status",
            "effective_status",
            "days_overdue",
            "notes",
        ]
        read_only_fields = fields

    def _today(self):
        return self.context.get("today")

    def get_effective_status(self, obj):
        return compute_installment_status(obj, today=self._today())

    def get_days_overdue(self, obj):
        return days_overdue(obj, today=self._today())


class PolicyCollectionsSerializer(serializers.ModelSerializer):
    """
    Póliza con sus cuotas y los totales de cobranza calculados al vuelo.
    El resumen llega precalculado en context["summary_map"].
    """

    installments = serializers.SerializerMethodField()
    total_paid = serializers.SerializerMethodField()
    total_pending = serializers.SerializerMethodField()
    pending_count = serializers.SerializerMethodField()
    overdue_count = serializers.SerializerMethodField()
    requires_collections_letter = serializers.SerializerMethodField()

    class Meta:
        model = Policy
        fields = [
            "id",
            "number",
            "holder_name",
            "currency",
            "total_premium",
            "status",
            "start_date",
            "end_date",
            "total_paid",
            "total_pending",
            "pending_count",
            "overdue_count",
            "requires_collections_letter",
            "installments",
        ]
        read_only_fields = fields

    def _summary(self, obj):
        return self.context.get("summary_map", {}).get(obj.id, {})

    def get_installments(self, obj):
        installments = self.context.get("installments_map", {}).get(obj.id)
        if installments is None:
            installments = list(obj.installments.all())
        return InstallmentSerializer(installments, many=True, context=self.context).data

    def get_total_paid(self, obj):
        value = self._summary(obj).get("total_paid")
        return None if value is None else f"{value:.2f}"

    def get_total_pending(self, obj):
        value = self._summary(obj).get("total_pending")
        return None if value is None else f"{value:.2f}"

    def get_pending_count(self, obj):
        return self._summary(obj).get("pending_count")

    def get_overdue_count(self, obj):
        return self._summary(obj).get("overdue_count")

    def get_requires_collections_letter(self, obj):
        return self._summary(obj).get("requires_collections_letter")
