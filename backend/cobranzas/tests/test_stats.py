from datetime import date
from decimal import Decimal

from django.test import TestCase

from cobranzas.stats import get_stats
from policies.models import Installment

from .helpers import make_policy


class StatsTests(TestCase):
    def setUp(self):
        self.today = date(2025, 3, 15)
        # póliza morosa: 3 vencidas
        self.late, late_insts = make_policy(
            "STA-1",
            ["100.00", "100.00", "100.00", "100.00"],
            [date(2025, 1, 10), date(2025, 2, 10), date(2025, 3, 10), date(2025, 4, 10)],
        )
        # póliza al día con un cobro hoy y otro a principio de mes
        self.clean, clean_insts = make_policy(
            "STA-2",
            ["50.00", "50.00", "50.00"],
            [date(2025, 3, 1), date(2025, 3, 15), date(2025, 3, 20)],
        )
        for inst, paid_on in ((clean_insts[0], date(2025, 3, 2)), (clean_insts[1], self.today)):
            inst.amount_paid = inst.amount_due
            inst.status = Installment.Status.PAID
            inst.paid_date = paid_on
            inst.save()
        # parcial y vencida: suma solo el saldo
        late_insts[0].amount_paid = Decimal("40.00")
        late_insts[0].status = Installment.Status.PARTIAL
        late_insts[0].save()

    def test_counts_and_amounts(self):
        summary = get_stats(Installment.objects.all(), today=self.today)
        self.assertEqual(summary.total, 7)
        self.assertEqual(summary.counts, {"pending": 2, "partial": 0, "overdue": 3, "paid": 2})
        self.assertEqual(summary.pending_count, 5)
        self.assertEqual(summary.overdue_count, 3)
        self.assertEqual(summary.outstanding_amount, Decimal("410.00"))
        self.assertEqual(summary.collected_today, Decimal("50.00"))
        self.assertEqual(summary.collected_month, Decimal("100.00"))
        self.assertEqual(summary.policies_count, 2)
        self.assertEqual(summary.due_soon_count, 1)
        self.assertEqual(summary.letters_required, [self.late.id])

    def test_due_soon_window_and_threshold(self):
        summary = get_stats(Installment.objects.all(), today=self.today, due_soon_days=30, letter_threshold=4)
        self.assertEqual(summary.due_soon_count, 2)
        self.assertEqual(summary.letters_required, [])

    def test_due_soon_counts_only_untouched_installments(self):
        upcoming = Installment.objects.get(policy=self.clean, sequence=3)
        upcoming.amount_paid = Decimal("10.00")
        upcoming.status = Installment.Status.PARTIAL
        upcoming.save()
        summary = get_stats(Installment.objects.all(), today=self.today)
        self.assertEqual(summary.counts["partial"], 1)
        self.assertEqual(summary.due_soon_count, 0)

    def test_scoped_input(self):
        summary = get_stats(Installment.objects.filter(policy=self.clean), today=self.today)
        self.assertEqual(summary.total, 3)
        self.assertEqual(summary.overdue_count, 0)
        self.assertEqual(summary.policies_count, 1)

    def test_is_idempotent_and_read_only(self):
        qs = Installment.objects.all()
        before = list(qs.values_list("id", "status", "amount_paid", "updated_at"))
        first = get_stats(qs, today=self.today).as_dict()
        second = get_stats(qs, today=self.today).as_dict()
        self.assertEqual(first, second)
        self.assertEqual(list(qs.values_list("id", "status", "amount_paid", "updated_at")), before)
        self.assertEqual(first["outstanding_amount"], "410.00")

    def test_empty(self):
        summary = get_stats([], today=self.today)
        self.assertEqual(summary.total, 0)
        self.assertEqual(summary.outstanding_amount, Decimal("0.00"))
