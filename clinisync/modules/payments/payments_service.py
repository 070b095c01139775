# clinisync/modules/payments/payments_service.py
"""Payments and the patient balance they move."""

import logging
from decimal import Decimal

from clinisync.common.database.store import EntityStore
from clinisync.common.errors import NotFoundError, ValidationFailedError
from clinisync.common.utils.global_messages import GlobalMessages
from clinisync.models.models import ActivityAction, Patient, Payment, PaymentStatus, TreatmentPlan, User
from clinisync.modules.access import access_service
from clinisync.modules.activities.activity_service import log_activity
from .schemas import PaymentCreate

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def money(value) -> Decimal:
    return Decimal(value or 0).quantize(CENTS)


def payment_status_for(amount_paid: Decimal, total_cost: Decimal) -> PaymentStatus:
    """Status after a payment. Recording a payment never yields pending or overdue."""
    if amount_paid >= total_cost:
        return PaymentStatus.COMPLETED
    return PaymentStatus.CURRENT


async def record_payment(store: EntityStore, user: User, patient_id: str, data: PaymentCreate) -> Payment:
    """
    Record a payment and move the patient's balance in the same transaction.

    Over-payments are accepted. The balance is not clamped and the activity
    is flagged with the surplus.

    Raises:
        NotFoundError: unknown patient, or unknown treatment plan.
        ForbiddenError: the patient is outside the user's scope.
        ValidationFailedError: the treatment plan belongs to another patient.
    """
    patient = await access_service.require_patient_access(store, user, patient_id)

    if data.treatment_plan_id:
        plan = await store.get(TreatmentPlan, data.treatment_plan_id)
        if plan is None:
            raise NotFoundError(GlobalMessages.TREATMENT_PLAN_NOT_FOUND)
        if plan.patient_id != patient.id:
            raise ValidationFailedError(GlobalMessages.TREATMENT_PLAN_PATIENT_MISMATCH)

    amount = money(data.amount)
    payment = await store.create(
        Payment,
        patient_id=patient.id,
        treatment_plan_id=data.treatment_plan_id,
        amount=amount,
        payment_method=data.payment_method,
        notes=data.notes,
        recorded_by=user.id,
    )

    total_cost = money(patient.total_cost)
    amount_paid = money(patient.amount_paid) + amount
    await store.update(Patient, patient.id, {
        "amount_paid": amount_paid,
        "payment_status": payment_status_for(amount_paid, total_cost),
    })

    metadata = {"paymentId": payment.id, "amount": str(amount)}
    surplus = amount_paid - total_cost
    if surplus > 0:
        metadata.update(overpaid=True, surplus=str(surplus))
        logger.warning("Patient %s overpaid by %s", patient.id, surplus)

    await log_activity(
        store,
        user_id=user.id,
        action=ActivityAction.PAYMENT_RECORDED,
        description=f"Recorded payment of ${amount}",
        patient_id=patient.id,
        metadata=metadata,
    )
    await store.commit()
    logger.info("Payment %s recorded for patient %s", payment.id, patient.id)
    return payment
