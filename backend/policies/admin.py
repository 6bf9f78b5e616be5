from django.contrib import admin
from .models import Policy, Installment


class InstallmentInline(admin.TabularInline):
    model = Installment
    extra = 0
    fields = ("sequence", "amount_due", "amount_paid", "due_date", "original_due_date", "status", "paid_date")
    readonly_fields = ("amount_paid", "original_due_date", "status", "paid_date")
    can_delete = False


@admin.register(Policy)
class PolicyAdmin(admin.ModelAdmin):
    list_display = ("number", "holder_name", "currency", "total_premium", "status")
    search_fields = ("number", "holder_name")
    list_filter = ("status", "currency")
    inlines = [InstallmentInline]


@admin.register(Installment)
class InstallmentAdmin(admin.ModelAdmin):
    list_display = ("policy", "sequence", "amount_due", "amount_paid", "due_date", "status")
    list_filter = ("status",)
    search_fields = ("policy__number",)
    # Pagos y prórrogas solo se registran vía API para conservar el historial.
    readonly_fields = (
        "amount_paid",
        "original_due_date",
        "extension_history",
        "paid_date",
        "status",
    )

    def has_delete_permission(self, request, obj=None):
        return False
