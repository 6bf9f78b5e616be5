from rest_framework import serializers

from policies.serializers import InstallmentSerializer
from .models import PaymentRecord


class PaymentRecordSerializer(serializers.ModelSerializer):
    class Meta:
        model = PaymentRecord
        fields = [
            "id",
            "installment",
            "amount",
            "kind",
            "excess_amount",
            "payment_date",
            "notes",
            "proof_reference",
            "origin",
            "actor",
            "created_at",
        ]
        read_only_fields = fields


class PaymentInputSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    payment_date = serializers.DateField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    proof_reference = serializers.CharField(required=False, allow_blank=True, default="")


class PreviewInputSerializer(serializers.Serializer):
    MODES = (("auto", "auto"), ("manual", "manual"))

    excess_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    mode = serializers.ChoiceField(choices=MODES, default="auto")
    selected_ids = serializers.ListField(child=serializers.IntegerField(), required=False, allow_null=True)
    amounts = serializers.DictField(
        child=serializers.DecimalField(max_digits=14, decimal_places=2), required=False, default=dict
    )


class AllocationItemSerializer(serializers.Serializer):
    installment_id = serializers.IntegerField()
    amount_applied = serializers.DecimalField(max_digits=14, decimal_places=2)


class RedistributionInputSerializer(serializers.Serializer):
    excess_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    allocations = AllocationItemSerializer(many=True)
    payment_date = serializers.DateField(required=False)


class ExtensionInputSerializer(serializers.Serializer):
    new_due_date = serializers.DateField()
    reason = serializers.CharField(required=False, allow_blank=True, default="")


def installment_payload(installment, today=None):
    return InstallmentSerializer(installment, context={"today": today}).data
