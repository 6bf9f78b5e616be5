from django.core.management.base import BaseCommand, CommandError

from common.models import AppSettings
from policies.models import Installment, Policy
from cobranzas.stats import get_stats


class Command(BaseCommand):
    help = "Imprime el resumen de cobranzas y las polizas que requieren aviso de mora. No modifica datos."

    def add_arguments(self, parser):
        parser.add_argument("--policy", dest="policy_id", type=int, help="Limitar a una poliza (id).")

    def handle(self, *args, **options):
        qs = Installment.objects.all()
        policy_id = options.get("policy_id")
        if policy_id:
            if not Policy.objects.filter(pk=policy_id).exists():
                raise CommandError(f"La poliza {policy_id} no existe.")
            qs = qs.filter(policy_id=policy_id)

        settings_obj = AppSettings.get_solo()
        summary = get_stats(
            qs,
            due_soon_days=settings_obj.due_soon_days,
            letter_threshold=settings_obj.overdue_letter_threshold,
        )

        self.stdout.write(f"Cuotas: {summary.total}")
        for status, count in summary.counts.items():
            self.stdout.write(f"  {status:<8} {count}")
        self.stdout.write(f"Pendientes: {summary.pending_count} | Vencidas: {summary.overdue_count}")
        self.stdout.write(f"Vencen en {settings_obj.due_soon_days} dias: {summary.due_soon_count}")
        self.stdout.write(f"Saldo pendiente: {summary.outstanding_amount:.2f}")
        self.stdout.write(
            f"Cobrado hoy: {summary.collected_today:.2f} | Cobrado en el mes: {summary.collected_month:.2f}"
        )
        self.stdout.write(f"Polizas con deuda: {summary.policies_count}")

        if not summary.letters_required:
            self.stdout.write(self.style.SUCCESS("Ninguna poliza requiere aviso de mora."))
            return
        self.stdout.write(
            self.style.WARNING(
                f"Requieren aviso de mora ({settings_obj.overdue_letter_threshold}+ cuotas vencidas):"
            )
        )
        for policy in Policy.objects.filter(pk__in=summary.letters_required).order_by("number"):
            self.stdout.write(f"  - {policy.number} {policy.holder_name}".rstrip())
