from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import override_settings
from django.urls import reverse
from django.utils import timezone
from rest_framework.test import APIClient, APITestCase

from policies.models import Installment, Policy


User = get_user_model()


def only_first_policy(request=None):
    return Installment.objects.filter(policy__number="API-1")


class PolicyCollectionsApiTests(APITestCase):
    def setUp(self):
        self.admin = User.objects.create_superuser(
            username="admin-policies",
            email="admin-policies@example.com",
            password="AdminPolicies123",
        )
        self.client = APIClient()
        self.client.force_authenticate(user=self.admin)
        today = timezone.localdate()

        self.late = Policy.objects.create(number="API-1", holder_name="Ana Rojas", total_premium=Decimal("3000.00"))
        for seq in range(1, 4):
            Installment.objects.create(
                policy=self.late,
                sequence=seq,
                amount_due=Decimal("1000.00"),
                due_date=today - timedelta(days=10 * (4 - seq)),
            )
        self.clean = Policy.objects.create(number="API-2", holder_name="Luis Vaca", currency="USD", total_premium=Decimal("500.00"))
        Installment.objects.create(
            policy=self.clean,
            sequence=1,
            amount_due=Decimal("500.00"),
            amount_paid=Decimal("500.00"),
            due_date=today - timedelta(days=3),
            status=Installment.Status.PAID,
            paid_date=today - timedelta(days=4),
        )

    def test_list_includes_collections_summary(self):
        res = self.client.get(reverse("policies-list"))
        self.assertEqual(res.status_code, 200)
        rows = {row["number"]: row for row in res.data["results"]}
        self.assertEqual(rows["API-1"]["overdue_count"], 3)
        self.assertTrue(rows["API-1"]["requires_collections_letter"])
        self.assertEqual(rows["API-1"]["total_pending"], "3000.00")
        self.assertEqual(rows["API-2"]["pending_count"], 0)
        self.assertEqual(rows["API-2"]["installments"][0]["effective_status"], "paid")

    def test_filters_on_derived_values(self):
        res = self.client.get(reverse("policies-list"), {"only_pending": "1"})
        self.assertEqual([row["number"] for row in res.data["results"]], ["API-1"])
        res = self.client.get(reverse("policies-list"), {"requires_letter": "true"})
        self.assertEqual([row["number"] for row in res.data["results"]], ["API-1"])

    def test_search_and_currency(self):
        res = self.client.get(reverse("policies-list"), {"search": "vaca"})
        self.assertEqual([row["number"] for row in res.data["results"]], ["API-2"])
        res = self.client.get(reverse("policies-list"), {"currency": "USD"})
        self.assertEqual([row["number"] for row in res.data["results"]], ["API-2"])

    def test_retrieve(self):
        res = self.client.get(reverse("policies-detail", args=[self.late.id]))
        self.assertEqual(res.status_code, 200)
        self.assertEqual(len(res.data["installments"]), 3)
        self.assertEqual(res.data["installments"][0]["days_overdue"], 30)

    @override_settings(COBRANZAS_SCOPE_RESOLVER="policies.tests.test_policies_api.only_first_policy")
    def test_scope_hides_other_policies(self):
        res = self.client.get(reverse("policies-list"))
        self.assertEqual([row["number"] for row in res.data["results"]], ["API-1"])
        res = self.client.get(reverse("policies-detail", args=[self.clean.id]))
        self.assertEqual(res.status_code, 404)

    def test_non_admin_is_forbidden(self):
        user = User.objects.create_user(username="cliente", password="Cliente123")
        client = APIClient()
        client.force_authenticate(user=user)
        res = client.get(reverse("policies-list"))
        self.assertEqual(res.status_code, 403)

    def test_anonymous_is_rejected(self):
        res = APIClient().get(reverse("policies-list"))
        self.assertEqual(res.status_code, 401)

    def test_read_only_surface(self):
        res = self.client.post(reverse("policies-list"), {"number": "NUEVA"}, format="json")
        self.assertEqual(res.status_code, 405)
        res = self.client.patch(reverse("policies-detail", args=[self.clean.id]), {"holder_name": "x"}, format="json")
        self.assertEqual(res.status_code, 405)
