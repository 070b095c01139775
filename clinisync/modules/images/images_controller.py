# clinisync/modules/images/images_controller.py

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile, status
from fastapi.concurrency import run_in_threadpool

from clinisync.auth.dependencies import get_current_user
from clinisync.common.database.database import get_store
from clinisync.common.database.store import EntityStore
from clinisync.common.errors import DomainError
from clinisync.common.storage.file_storage import FileStorage
from clinisync.common.utils.global_messages import GlobalMessages
from clinisync.models.models import ImageType, User

from . import images_service as service
from .schemas import DeleteImageResponse, MedicalImageResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Images"])


def get_file_storage(request: Request) -> FileStorage:
    return request.app.state.file_storage


@router.post(
    "/patients/{patient_id}/images",
    response_model=MedicalImageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def upload_image(
    patient_id: str,
    image: Optional[UploadFile] = File(None),
    image_type: ImageType = Form(ImageType.OTHER),
    current_user: User = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
    file_storage: FileStorage = Depends(get_file_storage),
):
    """
    Upload a medical image for a patient.

    Accepts jpeg, jpg, png, gif, pdf and dcm files up to the configured size.
    """
    if image is None or not image.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=GlobalMessages.NO_FILE_UPLOADED)

    try:
        # The parser has spooled the upload to disk; refuse it before loading it into memory
        if image.size is not None:
            file_storage.validate(image.filename, image.content_type, image.size)
        data = await image.read()
        stored = await run_in_threadpool(file_storage.store, data, image.filename, image.content_type)
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))

    try:
        return await service.upload_medical_image(store, current_user, patient_id, stored, image_type)
    except DomainError as e:
        file_storage.remove(stored.filename)
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception:
        file_storage.remove(stored.filename)
        raise


@router.delete("/images/{image_id}", response_model=DeleteImageResponse)
async def delete_image(
    image_id: str,
    current_user: User = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
    file_storage: FileStorage = Depends(get_file_storage),
):
    """Delete a medical image and its stored file."""
    try:
        image = await service.delete_medical_image(store, current_user, image_id)
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))

    if not file_storage.remove(image.filename):
        logger.warning("Stored file %s for image %s was already missing", image.filename, image.id)
    return DeleteImageResponse(success=True)
