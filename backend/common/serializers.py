from rest_framework import serializers
from .models import AppSettings


class AppSettingsSerializer(serializers.ModelSerializer):
    class Meta:
        model = AppSettings
        fields = ("overdue_letter_threshold", "due_soon_days", "updated_at")
        read_only_fields = ("updated_at",)

    def validate_overdue_letter_threshold(self, value):
        if value < 1:
            raise serializers.ValidationError("El umbral debe ser al menos 1.")
        return value
