# clinisync/modules/user/user_service.py

import logging

from clinisync.common.database.store import EntityStore
from clinisync.common.errors import ConflictError
from clinisync.common.utils.global_messages import GlobalMessages
from clinisync.models.models import User

logger = logging.getLogger(__name__)


async def update_user_profile(store: EntityStore, current_user: User, profile_data: dict) -> User:
    """
    Update the current user's profile with provided data.

    Only the fields provided (non-None) will be updated. A new email must not
    belong to another user.
    """
    changes = {key: value for key, value in profile_data.items() if value is not None}

    email = changes.get("email")
    if email and email != current_user.email:
        existing = await store.get_user_by_email(email)
        if existing and existing.id != current_user.id:
            raise ConflictError(GlobalMessages.EMAIL_EXISTS)

    updated = await store.update(User, current_user.id, changes)
    await store.commit()
    logger.info("Profile updated for user %s", current_user.id)
    return updated
