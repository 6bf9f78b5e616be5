from datetime import date
from decimal import Decimal
from unittest import mock

from django.db import DatabaseError
from django.test import TestCase, override_settings

from cobranzas.exceptions import (
    InstallmentAlreadyPaid,
    InstallmentNotFound,
    PaymentValidationError,
    PersistenceError,
)
from cobranzas.models import PaymentRecord
from cobranzas.payments import register_payment
from policies.models import Installment

from .helpers import ACCEPT_PROOFS, REJECT_PROOFS, make_policy

PAID_ON = date(2025, 1, 8)
PROOF = "comprobantes/1/1/transferencia.pdf"


@override_settings(COBRANZAS_PROOF_CHECKER=ACCEPT_PROOFS)
class RegisterPaymentTests(TestCase):
    def setUp(self):
        self.policy, (self.first, self.second, self.third) = make_policy(
            "PAY-1", ["1000.00", "1000.00", "1000.00"]
        )

    def _pay(self, installment, amount, **kwargs):
        kwargs.setdefault("proof_reference", PROOF)
        kwargs.setdefault("actor", "cajero")
        return register_payment(installment.id, amount, PAID_ON, **kwargs)

    def test_exact_payment_settles_installment(self):
        result = self._pay(self.first, "1000.00", notes="Transferencia BNB")
        self.assertEqual(result.kind, "exact")
        self.assertEqual(result.remaining_balance, Decimal("0.00"))
        self.assertIsNone(result.redistribution)

        self.first.refresh_from_db()
        self.assertEqual(self.first.status, Installment.Status.PAID)
        self.assertEqual(self.first.amount_paid, Decimal("1000.00"))
        self.assertEqual(self.first.paid_date, PAID_ON)
        self.assertIn("[2025-01-08] Pago completo de 1000.00.", self.first.notes)

        record = PaymentRecord.objects.get()
        self.assertEqual(record.installment_id, self.first.id)
        self.assertEqual(record.amount, Decimal("1000.00"))
        self.assertEqual(record.kind, "exact")
        self.assertEqual(record.proof_reference, PROOF)
        self.assertEqual(record.notes, "Transferencia BNB")
        self.assertEqual(record.actor, "cajero")

    def test_partial_then_exact_on_remaining_balance(self):
        result = self._pay(self.first, "700.00")
        self.assertEqual(result.kind, "partial")
        self.assertEqual(result.remaining_balance, Decimal("300.00"))
        self.first.refresh_from_db()
        self.assertEqual(self.first.status, Installment.Status.PARTIAL)
        self.assertEqual(self.first.amount_paid, Decimal("700.00"))
        self.assertIsNone(self.first.paid_date)
        self.assertIn("Pago parcial de 700.00. Saldo pendiente: 300.00.", self.first.notes)

        result = self._pay(self.first, "300.00")
        self.assertEqual(result.kind, "exact")
        self.first.refresh_from_db()
        self.assertEqual(self.first.status, Installment.Status.PAID)
        self.assertEqual(self.first.amount_paid, self.first.amount_due)
        self.assertEqual(PaymentRecord.objects.filter(installment=self.first).count(), 2)

    def test_partial_within_tolerance_of_remaining_settles(self):
        self._pay(self.first, "700.00")
        result = self._pay(self.first, "299.99")
        self.assertEqual(result.kind, "exact")
        self.first.refresh_from_db()
        self.assertEqual(self.first.amount_paid, Decimal("1000.00"))
        self.assertTrue(self.first.is_paid)

    def test_excess_settles_and_returns_redistribution_request(self):
        result = self._pay(self.first, "1200.00")
        self.assertEqual(result.kind, "excess")
        self.assertEqual(result.excess_amount, Decimal("200.00"))
        self.assertEqual(result.amount_applied, Decimal("1000.00"))

        request = result.redistribution
        self.assertEqual(request.policy_id, self.policy.id)
        self.assertEqual(request.source_installment_id, self.first.id)
        self.assertEqual(request.excess_amount, Decimal("200.00"))
        self.assertEqual(request.origin_record_id, result.record.id)

        self.first.refresh_from_db()
        self.assertTrue(self.first.is_paid)
        self.assertEqual(result.record.amount, Decimal("1000.00"))
        # el exceso nunca se aplica solo
        self.second.refresh_from_db()
        self.assertEqual(self.second.amount_paid, Decimal("0.00"))
        self.assertEqual(self.second.status, Installment.Status.PENDING)

    def test_rejects_non_positive_amount(self):
        for amount in ("0", "-10.00"):
            with self.subTest(amount=amount):
                with self.assertRaises(PaymentValidationError):
                    self._pay(self.first, amount)
        self.assertFalse(PaymentRecord.objects.exists())

    def test_rejects_missing_proof(self):
        with self.assertRaises(PaymentValidationError):
            self._pay(self.first, "1000.00", proof_reference="  ")
        self.first.refresh_from_db()
        self.assertEqual(self.first.status, Installment.Status.PENDING)

    @override_settings(COBRANZAS_PROOF_CHECKER=REJECT_PROOFS)
    def test_rejects_unknown_proof(self):
        with self.assertRaises(PaymentValidationError):
            self._pay(self.first, "1000.00")
        self.first.refresh_from_db()
        self.assertEqual(self.first.amount_paid, Decimal("0.00"))
        self.assertFalse(PaymentRecord.objects.exists())

    def test_paid_installment_is_a_conflict(self):
        self._pay(self.first, "1000.00")
        with self.assertRaises(InstallmentAlreadyPaid) as ctx:
            self._pay(self.first, "1000.00")
        self.assertEqual(ctx.exception.http_status, 409)
        self.assertEqual(PaymentRecord.objects.count(), 1)

    def test_missing_installment(self):
        with self.assertRaises(InstallmentNotFound) as ctx:
            register_payment(999999, "10.00", PAID_ON, proof_reference=PROOF)
        self.assertEqual(ctx.exception.http_status, 404)

    def test_installment_outside_scope(self):
        scope = Installment.objects.exclude(pk=self.first.pk)
        with self.assertRaises(InstallmentNotFound):
            self._pay(self.first, "1000.00", scope=scope)

    def test_database_failure_rolls_back(self):
        with mock.patch(
            "cobranzas.payments.PaymentRecord.objects.create", side_effect=DatabaseError("disk full")
        ):
            with self.assertRaises(PersistenceError) as ctx:
                self._pay(self.first, "1000.00")
        self.assertEqual(ctx.exception.http_status, 503)
        self.first.refresh_from_db()
        self.assertEqual(self.first.status, Installment.Status.PENDING)
        self.assertEqual(self.first.amount_paid, Decimal("0.00"))
        self.assertEqual(self.first.notes, "")
