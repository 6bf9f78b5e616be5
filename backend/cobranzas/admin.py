from django.contrib import admin

from .models import PaymentRecord


@admin.register(PaymentRecord)
class PaymentRecordAdmin(admin.ModelAdmin):
    """Los registros de pago son inmutables: solo lectura en el admin."""

    list_display = ("id", "installment", "kind", "amount", "payment_date", "origin", "actor", "created_at")
    list_filter = ("kind", "payment_date")
    search_fields = ("installment__policy__number", "proof_reference", "actor")
    readonly_fields = [f.name for f in PaymentRecord._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
