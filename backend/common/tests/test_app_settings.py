from django.contrib.auth import get_user_model
from django.db import IntegrityError
from django.test import TestCase
from rest_framework.test import APITestCase, APIClient

from common.models import AppSettings


User = get_user_model()


class AppSettingsSingletonTests(TestCase):
    def test_get_solo_returns_same_instance(self):
        first = AppSettings.get_solo()
        second = AppSettings.get_solo()
        self.assertEqual(first.pk, second.pk)
        self.assertEqual(AppSettings.objects.count(), 1)

    def test_defaults(self):
        obj = AppSettings.get_solo()
        self.assertEqual(obj.overdue_letter_threshold, 3)
        self.assertEqual(obj.due_soon_days, 7)

    def test_second_row_is_rejected(self):
        AppSettings.get_solo()
        with self.assertRaises(IntegrityError):
            AppSettings.objects.create()


class AppSettingsViewTests(APITestCase):
    def setUp(self):
        self.admin = User.objects.create_superuser(
            username="admin-settings",
            email="admin-settings@example.com",
            password="AdminSettings123",
        )
        self.client = APIClient()
        self.client.force_authenticate(user=self.admin)

    def test_admin_can_read_settings(self):
        res = self.client.get("/api/admin/settings")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["overdue_letter_threshold"], 3)

    def test_patch_updates_threshold(self):
        res = self.client.patch("/api/admin/settings", {"overdue_letter_threshold": 4}, format="json")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(AppSettings.get_solo().overdue_letter_threshold, 4)

    def test_zero_threshold_rejected(self):
        res = self.client.patch("/api/admin/settings", {"overdue_letter_threshold": 0}, format="json")
        self.assertEqual(res.status_code, 400)
        self.assertEqual(AppSettings.get_solo().overdue_letter_threshold, 3)

    def test_non_admin_forbidden(self):
        user = User.objects.create_user(username="cobrador", password="Cobrador123")
        client = APIClient()
        client.force_authenticate(user=user)
        res = client.get("/api/admin/settings")
        self.assertEqual(res.status_code, 403)
