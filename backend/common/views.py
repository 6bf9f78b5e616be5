import logging

from rest_framework import permissions
from rest_framework.response import Response
from rest_framework.views import APIView

from .models import AppSettings
from .serializers import AppSettingsSerializer

logger = logging.getLogger(__name__)


class AppSettingsView(APIView):
    permission_classes = [permissions.IsAdminUser]

    def get(self, request):
        obj = AppSettings.get_solo()
        return Response(AppSettingsSerializer(obj).data)

    def patch(self, request):
        obj = AppSettings.get_solo()
        serializer = AppSettingsSerializer(obj, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        logger.info(
            "app_settings_updated",
            extra={"user_id": request.user.id, "fields": sorted(serializer.validated_data)},
        )
        return Response(serializer.data)

    put = patch
