from datetime import date
from decimal import Decimal

from policies.models import Installment, Policy

ACCEPT_PROOFS = "cobranzas.tests.helpers.AcceptingProofChecker"
REJECT_PROOFS = "cobranzas.tests.helpers.RejectingProofChecker"


class AcceptingProofChecker:
    def exists(self, reference, installment):
        return True


class RejectingProofChecker:
    def exists(self, reference, installment):
        return False


def make_policy(number, amounts, due_dates=None, currency="Bs"):
    """Póliza con una cuota por monto; vencimientos mensuales desde 2025-01-10 salvo que se indiquen."""
    amounts = [Decimal(a) for a in amounts]
    policy = Policy.objects.create(number=number, currency=currency, total_premium=sum(amounts))
    if due_dates is None:
        due_dates = [date(2025, idx + 1, 10) for idx in range(len(amounts))]
    installments = [
        Installment.objects.create(policy=policy, sequence=idx + 1, amount_due=amount, due_date=due)
        for idx, (amount, due) in enumerate(zip(amounts, due_dates))
    ]
    return policy, installments
