from decimal import Decimal

from django.test import SimpleTestCase

from cobranzas.classifier import EXACT, EXCESS, PARTIAL, classify_payment, to_money
from cobranzas.exceptions import PaymentValidationError


class ClassifyPaymentTests(SimpleTestCase):
    def test_exact(self):
        result = classify_payment("1000.00", "1000.00")
        self.assertEqual(result.kind, EXACT)
        self.assertEqual(result.amount_applied, Decimal("1000.00"))
        self.assertEqual(result.excess_amount, Decimal("0.00"))
        self.assertTrue(result.settles_installment)

    def test_tolerance_absorbs_one_cent(self):
        self.assertEqual(classify_payment("999.99", "1000.00").kind, EXACT)
        self.assertEqual(classify_payment("1000.01", "1000.00").kind, EXACT)
        # se imputa el saldo completo, no lo entregado
        self.assertEqual(classify_payment("999.99", "1000.00").amount_applied, Decimal("1000.00"))

    def test_partial_outside_tolerance(self):
        result = classify_payment("999.98", "1000.00")
        self.assertEqual(result.kind, PARTIAL)
        self.assertEqual(result.remaining_balance, Decimal("0.02"))
        self.assertFalse(result.settles_installment)

    def test_partial(self):
        result = classify_payment(Decimal("700"), Decimal("1000"))
        self.assertEqual(result.kind, PARTIAL)
        self.assertEqual(result.amount_applied, Decimal("700.00"))
        self.assertEqual(result.remaining_balance, Decimal("300.00"))

    def test_excess(self):
        result = classify_payment("650.00", "500.00")
        self.assertEqual(result.kind, EXCESS)
        self.assertEqual(result.amount_applied, Decimal("500.00"))
        self.assertEqual(result.excess_amount, Decimal("150.00"))
        self.assertTrue(result.settles_installment)

    def test_classifies_against_remaining_balance(self):
        result = classify_payment("300.00", "1000.00", "700.00")
        self.assertEqual(result.kind, EXACT)
        self.assertEqual(result.amount_applied, Decimal("300.00"))

        result = classify_payment("400.00", "1000.00", "700.00")
        self.assertEqual(result.kind, EXCESS)
        self.assertEqual(result.excess_amount, Decimal("100.00"))

    def test_invalid_amounts(self):
        for value in ("abc", "", None, "NaN", "Infinity"):
            with self.subTest(value=value):
                with self.assertRaises(PaymentValidationError):
                    to_money(value)

    def test_to_money_rounds_half_up(self):
        self.assertEqual(to_money("10.005"), Decimal("10.01"))
        self.assertEqual(to_money(3), Decimal("3.00"))
