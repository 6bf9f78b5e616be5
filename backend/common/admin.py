from django.contrib import admin
from .models import AppSettings


@admin.register(AppSettings)
class AppSettingsAdmin(admin.ModelAdmin):
    list_display = (
        "overdue_letter_threshold",
        "due_soon_days",
        "updated_at",
    )

    def has_add_permission(self, request):
        # Limit to single instance
        return not AppSettings.objects.exists()

    def has_delete_permission(self, request, obj=None):
        return False
