from datetime import date, timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand

from cobranzas.models import PaymentRecord
from policies.billing import build_schedule
from policies.models import Installment, Policy

DEMO_PREFIX = "DEMO-"


class Command(BaseCommand):
    help = "Seed demo policies with monthly installment schedules for local development/testing."

    def add_arguments(self, parser):
        parser.add_argument(
            "--reset",
            action="store_true",
            help="Borra las polizas demo (y sus cuotas) antes de crear.",
        )
        parser.add_argument(
            "--admin-password",
            default="",
            help="Si se indica, crea/actualiza el superusuario 'cobranzas' con esa clave.",
        )

    def handle(self, *args, **options):
        self.stdout.write("Creando polizas de ejemplo...")
        if options.get("reset"):
            self._reset_data()

        password = options.get("admin_password") or ""
        if password:
            self._seed_admin(password)

        created = 0
        for data in self._policy_data():
            if Policy.objects.filter(number=data["number"]).exists():
                self.stdout.write(f"  - {data['number']} ya existe, se omite.")
                continue
            self._seed_policy(**data)
            created += 1
        self.stdout.write(self.style.SUCCESS(f"Seed de cobranzas completado ({created} polizas nuevas)."))

    def _policy_data(self):
        today = date.today()
        return [
            # al día: primera cuota vence la semana próxima
            dict(
                number=f"{DEMO_PREFIX}0001",
                holder_name="Juan Pérez",
                currency="Bs",
                total_premium=Decimal("6000.00"),
                count=6,
                first_due=today + timedelta(days=5),
                paid=0,
            ),
            # con mora: tres cuotas vencidas, requiere aviso de cobranza
            dict(
                number=f"{DEMO_PREFIX}0002",
                holder_name="María Gutiérrez",
                currency="USD",
                total_premium=Decimal("1200.00"),
                count=12,
                first_due=today - timedelta(days=100),
                paid=0,
            ),
            # parcialmente cobrada
            dict(
                number=f"{DEMO_PREFIX}0003",
                holder_name="Transportes Illimani SRL",
                currency="Bs",
                total_premium=Decimal("10000.00"),
                count=4,
                first_due=today - timedelta(days=40),
                paid=1,
            ),
        ]

    def _seed_policy(self, number, holder_name, currency, total_premium, count, first_due, paid):
        policy = Policy.objects.create(
            number=number,
            holder_name=holder_name,
            currency=currency,
            total_premium=total_premium,
            start_date=first_due,
            end_date=first_due + timedelta(days=365),
        )
        installments = build_schedule(policy, count, first_due)
        for inst in installments[:paid]:
            inst.amount_paid = inst.amount_due
            inst.status = Installment.Status.PAID
            inst.paid_date = inst.due_date
            inst.notes = f"[{inst.due_date.isoformat()}] Pago completo de {inst.amount_due:.2f}."
            inst.save(update_fields=["amount_paid", "status", "paid_date", "notes", "updated_at"])
        self.stdout.write(f"  + {policy.number}: {len(installments)} cuotas")
        return policy

    def _seed_admin(self, password):
        User = get_user_model()
        user, _ = User.objects.get_or_create(username="cobranzas", defaults={"email": "cobranzas@example.com"})
        user.is_staff = True
        user.is_superuser = True
        user.set_password(password)
        user.save()
        self.stdout.write("  + superusuario 'cobranzas'")

    def _reset_data(self):
        policies = Policy.objects.filter(number__startswith=DEMO_PREFIX)
        # PaymentRecord protege a Installment; se borran primero los registros demo
        PaymentRecord.objects.filter(installment__policy__in=policies, origin__isnull=False).delete()
        PaymentRecord.objects.filter(installment__policy__in=policies).delete()
        Installment.objects.filter(policy__in=policies).delete()
        deleted, _ = policies.delete()
        self.stdout.write(f"  - {deleted} polizas demo borradas")
