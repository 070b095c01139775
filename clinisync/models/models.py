# clinisync/models/models.py

from datetime import datetime, timezone
import enum
from typing import Optional

from sqlalchemy import (
    JSON, Boolean, Column, Date, DateTime, Integer, Numeric, String, Text,
    Enum as SAEnum,
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.types import TypeDecorator

Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize a datetime to aware UTC; naive values are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class UTCDateTime(TypeDecorator):
    """DateTime that always hands back timezone-aware UTC values.

    SQLite drops the offset on storage, so naive values read back are
    re-tagged as UTC.
    """
    impl = DateTime
    cache_ok = True

    def __init__(self):
        super().__init__(timezone=True)

    def process_bind_param(self, value, dialect):
        return to_utc(value)

    def process_result_value(self, value, dialect):
        return to_utc(value)


# ============================================================================
# ENUMS
# ============================================================================

class UserRole(enum.Enum):
    CLINICIAN = "clinician"
    CONSULTANT = "consultant"


class TreatmentStatus(enum.Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    ON_HOLD = "on-hold"


class PaymentStatus(enum.Enum):
    PENDING = "pending"
    CURRENT = "current"
    OVERDUE = "overdue"
    COMPLETED = "completed"


class TreatmentPlanStatus(enum.Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ImageType(enum.Enum):
    X_RAY = "x-ray"
    INTRAORAL = "intraoral"
    EXTRAORAL = "extraoral"
    PROGRESS = "progress"
    BEFORE = "before"
    AFTER = "after"
    OTHER = "other"


class ActivityAction(enum.Enum):
    PATIENT_CREATED = "patient_created"
    PATIENT_UPDATED = "patient_updated"
    TREATMENT_PLAN_CREATED = "treatment_plan_created"
    TREATMENT_PLAN_UPDATED = "treatment_plan_updated"
    PAYMENT_RECORDED = "payment_recorded"
    IMAGE_UPLOADED = "image_uploaded"
    IMAGE_DELETED = "image_deleted"
    CONSULTANT_ADDED = "consultant_added"


# ============================================================================
# USER MODELS
# ============================================================================

class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, nullable=False)
    username = Column(String(100), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(200), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    # list of UserRole values, e.g. ["clinician", "consultant"]
    roles = Column(JSON, nullable=False, default=list)
    current_role = Column(SAEnum(UserRole), nullable=False)
    specialty = Column(String(200), nullable=True)
    clinic_name = Column(String(200), nullable=True)
    created_at = Column(UTCDateTime(), nullable=False, default=utcnow)

    def has_role(self, role: UserRole) -> bool:
        return role.value in (self.roles or [])

    def __repr__(self):
        return f"<User(id={self.id}, username={self.username}, current_role={self.current_role.value})>"


class Consultant(Base):
    """A consultant-role user's relationship with one clinic."""
    __tablename__ = "consultants"

    id = Column(String(36), primary_key=True, nullable=False)
    user_id = Column(String(36), nullable=False, index=True)
    clinic_id = Column(String(36), nullable=False, index=True)
    specialty = Column(String(200), nullable=False)
    next_visit = Column(UTCDateTime(), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(UTCDateTime(), nullable=False, default=utcnow)

    def __repr__(self):
        return f"<Consultant(id={self.id}, user_id={self.user_id}, clinic_id={self.clinic_id})>"


# ============================================================================
# PATIENT MODELS
# ============================================================================

class Patient(Base):
    __tablename__ = "patients"

    id = Column(String(36), primary_key=True, nullable=False)
    patient_id = Column(String(20), unique=True, nullable=False, index=True)
    name = Column(String(200), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    consultant_id = Column(String(36), nullable=False, index=True)
    clinic_id = Column(String(36), nullable=False, index=True)
    chief_complaint = Column(Text, nullable=True)
    treatment_type = Column(String(200), nullable=False)
    treatment_status = Column(SAEnum(TreatmentStatus), nullable=False, default=TreatmentStatus.ACTIVE)
    progress_percentage = Column(Integer, nullable=False, default=0)
    total_cost = Column(Numeric(10, 2), nullable=False)
    amount_paid = Column(Numeric(10, 2), nullable=False, default=0)
    payment_status = Column(SAEnum(PaymentStatus), nullable=False, default=PaymentStatus.PENDING)
    next_appointment = Column(UTCDateTime(), nullable=True)
    clinical_notes = Column(Text, nullable=True)
    created_at = Column(UTCDateTime(), nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime(), nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<Patient(id={self.id}, patient_id={self.patient_id})>"


class TreatmentPlan(Base):
    """One step of a patient's treatment plan."""
    __tablename__ = "treatment_plans"

    id = Column(String(36), primary_key=True, nullable=False)
    patient_id = Column(String(36), nullable=False, index=True)
    step_number = Column(Integer, nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    scheduled_date = Column(UTCDateTime(), nullable=True)
    completed_date = Column(UTCDateTime(), nullable=True)
    cost = Column(Numeric(10, 2), nullable=False)
    status = Column(SAEnum(TreatmentPlanStatus), nullable=False, default=TreatmentPlanStatus.SCHEDULED)
    payment_required = Column(Boolean, nullable=False, default=True)
    created_at = Column(UTCDateTime(), nullable=False, default=utcnow)


class MedicalImage(Base):
    __tablename__ = "medical_images"

    id = Column(String(36), primary_key=True, nullable=False)
    patient_id = Column(String(36), nullable=False, index=True)
    filename = Column(String(255), nullable=False)
    original_name = Column(String(255), nullable=False)
    image_type = Column(SAEnum(ImageType), nullable=False, default=ImageType.OTHER)
    uploaded_by = Column(String(36), nullable=False)
    uploaded_at = Column(UTCDateTime(), nullable=False, default=utcnow)


class Payment(Base):
    __tablename__ = "payments"

    id = Column(String(36), primary_key=True, nullable=False)
    patient_id = Column(String(36), nullable=False, index=True)
    treatment_plan_id = Column(String(36), nullable=True)
    amount = Column(Numeric(10, 2), nullable=False)
    payment_date = Column(UTCDateTime(), nullable=False, default=utcnow)
    payment_method = Column(String(50), nullable=False)
    notes = Column(Text, nullable=True)
    recorded_by = Column(String(36), nullable=False)


# ============================================================================
# AUDIT
# ============================================================================

class Activity(Base):
    """Append-only audit entry."""
    __tablename__ = "activities"

    id = Column(String(36), primary_key=True, nullable=False)
    user_id = Column(String(36), nullable=False, index=True)
    patient_id = Column(String(36), nullable=True, index=True)
    action = Column(SAEnum(ActivityAction), nullable=False)
    description = Column(Text, nullable=False)
    # "metadata" is reserved on declarative classes
    activity_metadata = Column("metadata", JSON, nullable=True)
    created_at = Column(UTCDateTime(), nullable=False, default=utcnow)


class IdSequence(Base):
    """High-water mark for human-readable identifiers."""
    __tablename__ = "id_sequences"

    id = Column(String(50), primary_key=True, nullable=False)
    value = Column(Integer, nullable=False, default=0)
