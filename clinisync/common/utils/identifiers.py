import secrets
import uuid
from typing import TYPE_CHECKING, Optional

from clinisync.models.models import IdSequence, Patient

if TYPE_CHECKING:
    from clinisync.common.database.store import EntityStore

PATIENT_SEQUENCE = "patient"
PATIENT_ID_WIDTH = 5


def new_id() -> str:
    """Return a fresh globally unique identifier for an entity primary key."""
    return str(uuid.uuid4())


def generate_token_id(nbytes: int = 16) -> str:
    """Random URL-safe string used as a session key."""
    return secrets.token_urlsafe(nbytes)


def parse_patient_sequence(value: Optional[str]) -> int:
    """
    Read the numeric part of a patient identifier.

    Args:
        value (str): A stored identifier such as "00042".

    Returns:
        int: The parsed number, or 0 when the value is not numeric.
    """
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def format_patient_sequence(number: int) -> str:
    """
    Format a sequence number as a zero-padded patient identifier.

    Args:
        number (int): The sequence number.

    Returns:
        str: A zero-padded identifier, e.g. 7 -> "00007".
    """
    return str(number).zfill(PATIENT_ID_WIDTH)


async def next_patient_sequence(store: "EntityStore") -> str:
    """
    Reserve the next human-readable patient identifier.

    The highest identifier among stored patients is combined with a
    persisted high-water mark, so numbers keep increasing after deletions.
    Must run inside the same unit of work as the patient insert.
    """
    patients = await store.scan(Patient)
    highest = max((parse_patient_sequence(p.patient_id) for p in patients), default=0)

    counter = await store.get(IdSequence, PATIENT_SEQUENCE)
    if counter is None:
        counter = await store.create(IdSequence, id=PATIENT_SEQUENCE, value=0)

    counter.value = max(counter.value, highest) + 1
    await store.session.flush()
    return format_patient_sequence(counter.value)
