"""
Tests for mutations and the audit trail they leave.
"""
from decimal import Decimal

import pydantic
import pytest

from clinisync.auth import auth_service
from clinisync.common.errors import (
    ConflictError, ForbiddenError, InvalidRoleError, NotFoundError, ValidationFailedError,
)
from clinisync.common.storage.file_storage import StoredFile
from clinisync.models.models import (
    Activity, ActivityAction, ImageType, Patient, PaymentStatus, TreatmentPlanStatus, TreatmentStatus, UserRole,
)
from clinisync.modules.consultants import consultants_service
from clinisync.modules.consultants.schemas import ConsultantCreate
from clinisync.modules.images import images_service
from clinisync.modules.patients import patients_service
from clinisync.modules.patients.schemas import PatientCreate, PatientUpdate
from clinisync.modules.payments import payments_service
from clinisync.modules.payments.schemas import PaymentCreate
from clinisync.modules.treatment_plans import treatment_plans_service
from clinisync.modules.treatment_plans.schemas import TreatmentPlanCreate, TreatmentPlanUpdate


async def activities_of(store, action):
    return await store.get_activities(Activity.action == action)


def stored_file(name="panoramic.png"):
    return StoredFile(filename=f"image-1-1{name[-4:]}", original_name=name, size=10)


# ============================================================================
# Patients
# ============================================================================

class TestCreatePatient:

    async def test_clinician_creates_patient_for_own_clinic(self, store, clinic, relationship, make_patient):
        patient = await make_patient(clinic, relationship, clinic_id="ignored")

        assert patient.clinic_id == clinic.id
        assert patient.treatment_status == TreatmentStatus.ACTIVE
        assert patient.progress_percentage == 0
        assert patient.amount_paid == Decimal("0")
        assert patient.payment_status == PaymentStatus.PENDING

        [activity] = await activities_of(store, ActivityAction.PATIENT_CREATED)
        assert activity.user_id == clinic.id
        assert activity.patient_id == patient.id
        assert activity.activity_metadata == {"patientId": patient.id}

    async def test_consultant_must_name_the_clinic(self, store, consultant_user, relationship, make_patient):
        with pytest.raises(ValidationFailedError):
            await make_patient(consultant_user, relationship)
        assert await activities_of(store, ActivityAction.PATIENT_CREATED) == []

    async def test_consultant_creates_patient_for_named_clinic(self, clinic, consultant_user, relationship, make_patient):
        patient = await make_patient(consultant_user, relationship, clinic_id=clinic.id)
        assert patient.clinic_id == clinic.id

    async def test_unknown_consultant_relationship(self, store, clinic):
        data = PatientCreate(name="Jane", consultant_id="missing", treatment_type="Braces", total_cost=Decimal("10"))
        with pytest.raises(NotFoundError):
            await patients_service.create_patient(store, clinic, data)
        assert await store.scan(Patient) == []

    async def test_relationship_of_another_clinic_is_rejected(self, other_clinic, relationship, make_patient):
        with pytest.raises(ValidationFailedError):
            await make_patient(other_clinic, relationship)


class TestUpdatePatient:

    async def test_update_records_changed_fields(self, store, clinic, relationship, make_patient):
        patient = await make_patient(clinic, relationship)
        changes = PatientUpdate(progress_percentage=40, treatment_status=TreatmentStatus.ON_HOLD)

        updated = await patients_service.update_patient(store, clinic, patient.id, changes)

        assert updated.progress_percentage == 40
        assert updated.treatment_status == TreatmentStatus.ON_HOLD
        [activity] = await activities_of(store, ActivityAction.PATIENT_UPDATED)
        assert activity.activity_metadata["patientId"] == patient.id
        assert sorted(activity.activity_metadata["updates"]) == ["progress_percentage", "treatment_status"]

    async def test_update_outside_scope_is_forbidden(self, store, clinic, other_clinic, relationship, make_patient):
        patient = await make_patient(clinic, relationship)
        with pytest.raises(ForbiddenError):
            await patients_service.update_patient(store, other_clinic, patient.id, PatientUpdate(name="X"))
        assert await activities_of(store, ActivityAction.PATIENT_UPDATED) == []

    async def test_update_unknown_patient(self, store, clinic):
        with pytest.raises(NotFoundError):
            await patients_service.update_patient(store, clinic, "missing", PatientUpdate(name="X"))

    async def test_mark_overdue_keeps_balance(self, store, clinic, relationship, make_patient):
        patient = await make_patient(clinic, relationship)

        updated = await patients_service.update_patient(
            store, clinic, patient.id, PatientUpdate(payment_status=PaymentStatus.OVERDUE)
        )

        assert updated.payment_status == PaymentStatus.OVERDUE
        assert updated.amount_paid == Decimal("0")

    def test_required_fields_reject_null(self):
        with pytest.raises(pydantic.ValidationError):
            PatientUpdate(total_cost=None)
        assert PatientUpdate(clinical_notes=None).model_dump(exclude_unset=True) == {"clinical_notes": None}


# ============================================================================
# Treatment plans
# ============================================================================

class TestTreatmentPlans:

    async def test_create_and_update_step(self, store, clinic, relationship, make_patient):
        patient = await make_patient(clinic, relationship)
        plan = await treatment_plans_service.create_treatment_plan(
            store, clinic, patient.id,
            TreatmentPlanCreate(step_number=1, title="X-ray", description="Full mouth", cost=Decimal("80.00")),
        )
        assert plan.status == TreatmentPlanStatus.SCHEDULED

        updated = await treatment_plans_service.update_treatment_plan(
            store, clinic, plan.id, TreatmentPlanUpdate(status=TreatmentPlanStatus.COMPLETED),
        )
        assert updated.status == TreatmentPlanStatus.COMPLETED
        assert updated.title == "X-ray"

        [created] = await activities_of(store, ActivityAction.TREATMENT_PLAN_CREATED)
        [changed] = await activities_of(store, ActivityAction.TREATMENT_PLAN_UPDATED)
        assert created.activity_metadata == {"treatmentPlanId": plan.id}
        assert changed.activity_metadata == {"treatmentPlanId": plan.id}

    async def test_update_unknown_plan(self, store, clinic):
        with pytest.raises(NotFoundError):
            await treatment_plans_service.update_treatment_plan(store, clinic, "missing", TreatmentPlanUpdate(title="x"))

    async def test_create_for_foreign_patient_is_forbidden(self, store, clinic, other_clinic, relationship, make_patient):
        patient = await make_patient(clinic, relationship)
        with pytest.raises(ForbiddenError):
            await treatment_plans_service.create_treatment_plan(
                store, other_clinic, patient.id,
                TreatmentPlanCreate(step_number=1, title="X-ray", description="", cost=Decimal("1")),
            )


# ============================================================================
# Payments
# ============================================================================

class TestRecordPayment:

    async def test_full_payment_completes(self, store, clinic, relationship, make_patient):
        patient = await make_patient(clinic, relationship, total_cost="1000.00")
        payment = await payments_service.record_payment(
            store, clinic, patient.id, PaymentCreate(amount=Decimal("1000.00"), payment_method="card"),
        )

        patient = await store.get(Patient, patient.id)
        assert patient.amount_paid == Decimal("1000.00")
        assert patient.payment_status == PaymentStatus.COMPLETED
        assert payment.recorded_by == clinic.id
        [activity] = await activities_of(store, ActivityAction.PAYMENT_RECORDED)
        assert activity.activity_metadata == {"paymentId": payment.id, "amount": "1000.00"}

    async def test_partial_payment_is_current(self, store, clinic, relationship, make_patient):
        patient = await make_patient(clinic, relationship, total_cost="1000.00")
        await payments_service.record_payment(
            store, clinic, patient.id, PaymentCreate(amount=Decimal("400.00"), payment_method="cash"),
        )

        patient = await store.get(Patient, patient.id)
        assert patient.amount_paid == Decimal("400.00")
        assert patient.payment_status == PaymentStatus.CURRENT

    async def test_payments_accumulate(self, store, clinic, relationship, make_patient):
        patient = await make_patient(clinic, relationship, total_cost="1000.00")
        for amount in ("400.00", "600.00"):
            await payments_service.record_payment(
                store, clinic, patient.id, PaymentCreate(amount=Decimal(amount), payment_method="cash"),
            )

        patient = await store.get(Patient, patient.id)
        assert patient.amount_paid == Decimal("1000.00")
        assert patient.payment_status == PaymentStatus.COMPLETED

    async def test_overpayment_is_flagged(self, store, clinic, relationship, make_patient):
        patient = await make_patient(clinic, relationship, total_cost="100.00")
        await payments_service.record_payment(
            store, clinic, patient.id, PaymentCreate(amount=Decimal("150.00"), payment_method="card"),
        )

        patient = await store.get(Patient, patient.id)
        assert patient.amount_paid == Decimal("150.00")
        assert patient.payment_status == PaymentStatus.COMPLETED
        [activity] = await activities_of(store, ActivityAction.PAYMENT_RECORDED)
        assert activity.activity_metadata["overpaid"] is True
        assert activity.activity_metadata["surplus"] == "50.00"

    async def test_payment_for_foreign_patient_writes_nothing(self, store, clinic, other_clinic, relationship, make_patient):
        patient = await make_patient(clinic, relationship)
        with pytest.raises(ForbiddenError):
            await payments_service.record_payment(
                store, other_clinic, patient.id, PaymentCreate(amount=Decimal("10"), payment_method="card"),
            )
        assert await store.get_payments_by_patient(patient.id) == []
        assert await activities_of(store, ActivityAction.PAYMENT_RECORDED) == []

    async def test_treatment_plan_of_another_patient_is_rejected(self, store, clinic, relationship, make_patient):
        first = await make_patient(clinic, relationship, name="First")
        second = await make_patient(clinic, relationship, name="Second")
        plan = await treatment_plans_service.create_treatment_plan(
            store, clinic, first.id,
            TreatmentPlanCreate(step_number=1, title="X-ray", description="", cost=Decimal("80")),
        )
        with pytest.raises(ValidationFailedError):
            await payments_service.record_payment(
                store, clinic, second.id,
                PaymentCreate(amount=Decimal("80"), payment_method="card", treatment_plan_id=plan.id),
            )


# ============================================================================
# Images
# ============================================================================

class TestMedicalImages:

    async def test_upload_defaults_to_other(self, store, clinic, relationship, make_patient):
        patient = await make_patient(clinic, relationship)
        image = await images_service.upload_medical_image(store, clinic, patient.id, stored_file(), None)

        assert image.image_type == ImageType.OTHER
        [activity] = await activities_of(store, ActivityAction.IMAGE_UPLOADED)
        assert activity.description == "Uploaded other image: panoramic.png"
        assert activity.activity_metadata == {"imageId": image.id, "imageType": "other"}

    async def test_delete_twice(self, store, clinic, relationship, make_patient):
        patient = await make_patient(clinic, relationship)
        image = await images_service.upload_medical_image(store, clinic, patient.id, stored_file(), ImageType.X_RAY)

        await images_service.delete_medical_image(store, clinic, image.id)
        with pytest.raises(NotFoundError):
            await images_service.delete_medical_image(store, clinic, image.id)

        assert len(await activities_of(store, ActivityAction.IMAGE_DELETED)) == 1

    async def test_delete_outside_scope(self, store, clinic, other_clinic, relationship, make_patient):
        patient = await make_patient(clinic, relationship)
        image = await images_service.upload_medical_image(store, clinic, patient.id, stored_file(), ImageType.X_RAY)

        with pytest.raises(ForbiddenError):
            await images_service.delete_medical_image(store, other_clinic, image.id)
        assert len(await store.get_medical_images_by_patient(patient.id)) == 1


# ============================================================================
# Consultants
# ============================================================================

class TestConsultantRelationships:

    async def test_clinician_adds_consultant(self, store, clinic, consultant_user):
        consultant = await consultants_service.create_consultant_relationship(
            store, clinic, ConsultantCreate(user_id=consultant_user.id, specialty="Endodontics"),
        )

        assert consultant.clinic_id == clinic.id
        assert consultant.is_active is True
        [activity] = await activities_of(store, ActivityAction.CONSULTANT_ADDED)
        assert activity.description == "Added new consultant: Endodontics"
        assert activity.activity_metadata == {"consultantId": consultant.id}

    async def test_duplicate_relationship_conflicts_even_when_inactive(self, store, clinic, consultant_user, make_consultant):
        await make_consultant(clinic, consultant_user, is_active=False)
        with pytest.raises(ConflictError):
            await consultants_service.create_consultant_relationship(
                store, clinic, ConsultantCreate(user_id=consultant_user.id, specialty="Endodontics"),
            )

    async def test_unknown_consultant_user(self, store, clinic):
        with pytest.raises(NotFoundError):
            await consultants_service.create_consultant_relationship(
                store, clinic, ConsultantCreate(user_id="missing", specialty="Endodontics"),
            )

    async def test_consultants_cannot_add_consultants(self, store, consultant_user, clinic):
        with pytest.raises(ForbiddenError):
            await consultants_service.create_consultant_relationship(
                store, consultant_user, ConsultantCreate(user_id=clinic.id, specialty="Endodontics"),
            )


# ============================================================================
# Role switching
# ============================================================================

class TestSwitchRole:

    async def test_switch_to_held_role_changes_scope(self, store, make_user, other_clinic, make_consultant, make_patient):
        dual = await make_user("dual", UserRole.CLINICIAN, UserRole.CONSULTANT)
        relationship = await make_consultant(other_clinic, dual)
        await make_patient(other_clinic, relationship)

        assert await patients_service.list_patients_enriched(store, dual) == []
        user = await auth_service.switch_role(store, dual, UserRole.CONSULTANT)

        assert user.current_role == UserRole.CONSULTANT
        assert len(await patients_service.list_patients_enriched(store, user)) == 1

    async def test_switch_to_role_not_held(self, store, clinic):
        with pytest.raises(InvalidRoleError):
            await auth_service.switch_role(store, clinic, UserRole.CONSULTANT)
        assert clinic.current_role == UserRole.CLINICIAN
