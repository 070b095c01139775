# clinisync/auth/auth_service.py

import logging
from typing import List, Optional, Tuple

from passlib.context import CryptContext

from clinisync.auth.sessions import SessionDirectory
from clinisync.common.database.store import EntityStore
from clinisync.common.errors import ConflictError, InvalidRoleError
from clinisync.common.utils.global_messages import GlobalMessages
from clinisync.models.models import User, UserRole

logger = logging.getLogger(__name__)

# Initialize the password context (bcrypt)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify that the provided password matches the hashed password."""
    return pwd_context.verify(plain_password, hashed_password)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def normalize_roles(roles: List[UserRole]) -> List[str]:
    """Deduplicate roles, keeping the order they were given in."""
    seen: List[str] = []
    for role in roles:
        if role.value not in seen:
            seen.append(role.value)
    return seen


async def create_user(
    store: EntityStore,
    username: str,
    password: str,
    name: str,
    email: str,
    roles: List[UserRole],
    current_role: UserRole,
    specialty: Optional[str] = None,
    clinic_name: Optional[str] = None,
) -> User:
    """Create a new user. Username and email must both be unused."""
    if await store.get_user_by_username(username):
        raise ConflictError(GlobalMessages.USERNAME_EXISTS)
    if await store.get_user_by_email(email):
        raise ConflictError(GlobalMessages.EMAIL_EXISTS)

    role_values = normalize_roles(roles)
    if current_role.value not in role_values:
        raise InvalidRoleError(GlobalMessages.INVALID_ROLE)

    return await store.create(
        User,
        username=username,
        password_hash=hash_password(password),
        name=name,
        email=email,
        roles=role_values,
        current_role=current_role,
        specialty=specialty,
        clinic_name=clinic_name,
    )


async def register_user(
    store: EntityStore,
    sessions: SessionDirectory,
    **fields,
) -> Tuple[User, str]:
    """Create a user and open a session for them."""
    user = await create_user(store, **fields)
    await store.commit()
    logger.info("Registered user %s", user.id)
    return user, sessions.issue(user.id)


async def authenticate_user(store: EntityStore, username: str, password: str) -> Optional[User]:
    """Return the user when the credentials match, otherwise None."""
    user = await store.get_user_by_username(username)
    if user is None or not verify_password(password, user.password_hash):
        return None
    return user


async def login_user(
    store: EntityStore,
    sessions: SessionDirectory,
    username: str,
    password: str,
) -> Optional[Tuple[User, str]]:
    """Authenticate a user and return the user with a new session token."""
    user = await authenticate_user(store, username, password)
    if user is None:
        return None
    return user, sessions.issue(user.id)


async def switch_role(store: EntityStore, user: User, new_role: UserRole) -> User:
    """
    Change which role the user is acting as.

    Only roles the user already holds are accepted. This is the only
    operation that changes which scoping rules apply to the user.
    """
    if not user.has_role(new_role):
        raise InvalidRoleError(GlobalMessages.INVALID_ROLE)
    updated = await store.update(User, user.id, {"current_role": new_role})
    await store.commit()
    logger.info("User %s switched role to %s", user.id, new_role.value)
    return updated
