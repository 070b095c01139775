# clinisync/modules/images/images_service.py

import logging

from clinisync.common.database.store import EntityStore
from clinisync.common.errors import NotFoundError
from clinisync.common.storage.file_storage import StoredFile
from clinisync.common.utils.global_messages import GlobalMessages
from clinisync.models.models import ActivityAction, ImageType, MedicalImage, User
from clinisync.modules.access import access_service
from clinisync.modules.activities.activity_service import log_activity

logger = logging.getLogger(__name__)


async def upload_medical_image(
    store: EntityStore,
    user: User,
    patient_id: str,
    stored_file: StoredFile,
    image_type: ImageType = ImageType.OTHER,
) -> MedicalImage:
    """Attach an already stored file to a patient."""
    patient = await access_service.require_patient_access(store, user, patient_id)

    image = await store.create(
        MedicalImage,
        patient_id=patient.id,
        filename=stored_file.filename,
        original_name=stored_file.original_name,
        image_type=image_type or ImageType.OTHER,
        uploaded_by=user.id,
    )
    await log_activity(
        store,
        user_id=user.id,
        action=ActivityAction.IMAGE_UPLOADED,
        description=f"Uploaded {image.image_type.value} image: {image.original_name}",
        patient_id=patient.id,
        metadata={"imageId": image.id, "imageType": image.image_type.value},
    )
    await store.commit()
    logger.info("Image %s uploaded for patient %s", image.id, patient.id)
    return image


async def delete_medical_image(store: EntityStore, user: User, image_id: str) -> MedicalImage:
    """
    Delete an image record and return it.

    Raises:
        NotFoundError: unknown image id, including one deleted earlier.
        ForbiddenError: the image's patient is outside the user's scope.
    """
    image = await store.get(MedicalImage, image_id)
    if image is None:
        raise NotFoundError(GlobalMessages.IMAGE_NOT_FOUND)
    patient = await access_service.require_patient_access(store, user, image.patient_id)

    if not await store.delete(MedicalImage, image.id):
        raise NotFoundError(GlobalMessages.IMAGE_NOT_FOUND)
    await log_activity(
        store,
        user_id=user.id,
        action=ActivityAction.IMAGE_DELETED,
        description=f"Deleted image: {image.original_name}",
        patient_id=patient.id,
        metadata={"imageId": image.id},
    )
    await store.commit()
    logger.info("Image %s deleted by user %s", image.id, user.id)
    return image
