from functools import wraps

from django.utils import timezone
from rest_framework import permissions, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from common.models import AppSettings
from policies.billing import (
    can_extend,
    can_register_payment,
    compute_installment_status,
    days_overdue,
)
from .exceptions import CobranzaError, RedistributionValidationError
from .extensions import extend_due_date, history_with_days
from .locking import get_installment
from .payments import register_payment
from .redistribution import (
    apply_redistribution,
    auto_distribute,
    build_candidate_set,
    manual_distribution,
    validate_allocation,
)
from .scope import resolve_scope
from .serializers import (
    ExtensionInputSerializer,
    PaymentInputSerializer,
    PaymentRecordSerializer,
    PreviewInputSerializer,
    RedistributionInputSerializer,
    installment_payload,
)
from .stats import get_stats


def _money(value):
    return None if value is None else f"{value:.2f}"


def _actor(request):
    user = getattr(request, "user", None)
    return user.get_username() if user is not None and user.is_authenticated else ""


def cobranza_errors(view):
    """Traduce los errores del motor de cobranzas a respuestas HTTP."""

    @wraps(view)
    def wrapper(request, *args, **kwargs):
        try:
            return view(request, *args, **kwargs)
        except CobranzaError as exc:
            return Response(exc.as_dict(), status=exc.http_status)

    return wrapper


@api_view(["GET"])
@permission_classes([permissions.IsAdminUser])
@cobranza_errors
def installment_status(request, pk):
    today = timezone.localdate()
    inst = get_installment(pk, scope=resolve_scope(request))
    return Response(
        {
            "installment_id": inst.id,
            "policy_id": inst.policy_id,
            "sequence": inst.sequence,
            "status": inst.status,
            "effective_status": compute_installment_status(inst, today=today),
            "days_overdue": days_overdue(inst, today=today),
            "amount_due": _money(inst.amount_due),
            "amount_paid": _money(inst.amount_paid),
            "outstanding_balance": _money(inst.outstanding_balance),
            "due_date": inst.due_date,
            "original_due_date": inst.original_due_date,
            "extension_history": history_with_days(inst),
            "can_register_payment": can_register_payment(inst),
            "can_extend": can_extend(inst),
        }
    )


@api_view(["GET", "POST"])
@permission_classes([permissions.IsAdminUser])
@cobranza_errors
def installment_payments(request, pk):
    scope = resolve_scope(request)
    if request.method == "GET":
        inst = get_installment(pk, scope=scope)
        return Response(PaymentRecordSerializer(inst.payment_records.all(), many=True).data)

    ser = PaymentInputSerializer(data=request.data)
    ser.is_valid(raise_exception=True)
    data = ser.validated_data
    result = register_payment(
        pk,
        data["amount"],
        data.get("payment_date"),
        notes=data.get("notes", ""),
        proof_reference=data.get("proof_reference"),
        actor=_actor(request),
        scope=scope,
    )
    return Response(
        {
            "kind": result.kind,
            "amount_applied": _money(result.amount_applied),
            "remaining_balance": _money(result.remaining_balance),
            "excess_amount": _money(result.excess_amount),
            "redistribution": result.redistribution.as_dict() if result.redistribution else None,
            "record": PaymentRecordSerializer(result.record).data,
            "installment": installment_payload(result.installment),
        },
        status=status.HTTP_201_CREATED,
    )


@api_view(["GET"])
@permission_classes([permissions.IsAdminUser])
@cobranza_errors
def redistribution_candidates(request, pk):
    scope = resolve_scope(request)
    source = get_installment(pk, scope=scope)
    candidates = build_candidate_set(source.policy_id, source.id, scope=scope)
    return Response(
        {
            "source_installment_id": source.id,
            "policy_id": source.policy_id,
            "candidates": [c.as_dict() for c in candidates],
        }
    )


@api_view(["POST"])
@permission_classes([permissions.IsAdminUser])
@cobranza_errors
def redistribution_preview(request, pk):
    """Arma la distribución propuesta sin aplicar nada."""
    ser = PreviewInputSerializer(data=request.data)
    ser.is_valid(raise_exception=True)
    data = ser.validated_data

    scope = resolve_scope(request)
    source = get_installment(pk, scope=scope)
    candidates = build_candidate_set(source.policy_id, source.id, scope=scope)
    if data["mode"] == "manual":
        allocation = manual_distribution(
            data["excess_amount"], candidates, data.get("amounts") or {}, source_installment_id=source.id
        )
    else:
        allocation = auto_distribute(
            data["excess_amount"], candidates, data.get("selected_ids"), source_installment_id=source.id
        )

    payload = allocation.as_dict()
    try:
        validate_allocation(allocation)
        payload.update({"valid": True, "error": None})
    except RedistributionValidationError as exc:
        payload.update({"valid": False, "error": exc.detail})
    return Response(payload)


@api_view(["POST"])
@permission_classes([permissions.IsAdminUser])
@cobranza_errors
def redistribution_apply(request, pk):
    ser = RedistributionInputSerializer(data=request.data)
    ser.is_valid(raise_exception=True)
    data = ser.validated_data
    result = apply_redistribution(
        pk,
        data["excess_amount"],
        data["allocations"],
        payment_date=data.get("payment_date"),
        actor=_actor(request),
        scope=resolve_scope(request),
    )
    return Response(
        {
            "source_installment_id": result.source_installment_id,
            "excess_amount": _money(result.excess_amount),
            "applied_total": _money(result.applied_total),
            "per_installment_results": [
                {
                    **row,
                    "amount_original": _money(row["amount_original"]),
                    "amount_applied": _money(row["amount_applied"]),
                    "resulting_balance": _money(row["resulting_balance"]),
                }
                for row in result.per_installment_results
            ],
        },
        status=status.HTTP_201_CREATED,
    )


@api_view(["POST"])
@permission_classes([permissions.IsAdminUser])
@cobranza_errors
def installment_extensions(request, pk):
    ser = ExtensionInputSerializer(data=request.data)
    ser.is_valid(raise_exception=True)
    data = ser.validated_data
    result = extend_due_date(
        pk,
        data["new_due_date"],
        data.get("reason", ""),
        actor=_actor(request),
        scope=resolve_scope(request),
    )
    return Response(
        {
            "installment_id": result.installment.id,
            "previous_due_date": result.previous_due_date,
            "new_due_date": result.new_due_date,
            "original_due_date": result.original_due_date,
            "extension_days": result.extension_days,
            "installment": installment_payload(result.installment),
        }
    )


@api_view(["GET"])
@permission_classes([permissions.IsAdminUser])
def collections_stats(request):
    qs = resolve_scope(request)
    policy_id = (request.query_params.get("policy_id") or "").strip()
    if policy_id:
        if not policy_id.isdigit():
            return Response({"detail": "policy_id inválido"}, status=400)
        qs = qs.filter(policy_id=int(policy_id))
    settings_obj = AppSettings.get_solo()
    summary = get_stats(
        qs,
        due_soon_days=settings_obj.due_soon_days,
        letter_threshold=settings_obj.overdue_letter_threshold,
    )
    return Response(summary.as_dict())
