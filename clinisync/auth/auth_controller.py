# clinisync/auth/auth_controller.py

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials

from clinisync.auth import auth_service, schemas
from clinisync.auth.dependencies import bearer_scheme, get_current_user, get_sessions
from clinisync.auth.sessions import SessionDirectory
from clinisync.common.database.database import get_store
from clinisync.common.database.store import EntityStore
from clinisync.common.errors import DomainError
from clinisync.common.utils.global_messages import GlobalMessages
from clinisync.models.models import User

router = APIRouter(prefix="/api/auth", tags=["auth"])


def user_to_response(user: User) -> schemas.UserResponse:
    """Convert User model to UserResponse schema."""
    return schemas.UserResponse.model_validate(user)


@router.post("/register", response_model=schemas.RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(
    register_data: schemas.RegisterRequest,
    store: EntityStore = Depends(get_store),
    sessions: SessionDirectory = Depends(get_sessions),
):
    """
    Register a new user account and open a session.

    - **username** / **email**: must both be unused
    - **password**: minimum 8 characters, repeated in **confirm_password**
    - **roles**: one or more of clinician, consultant
    - **current_role**: the role to start acting as; must be one of **roles**
    """
    try:
        user, access_token = await auth_service.register_user(
            store,
            sessions,
            username=register_data.username,
            password=register_data.password,
            name=register_data.name,
            email=register_data.email,
            roles=register_data.roles,
            current_role=register_data.current_role,
            specialty=register_data.specialty,
            clinic_name=register_data.clinic_name,
        )
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))

    return schemas.RegisterResponse(access_token=access_token, user=user_to_response(user))


@router.post("/login", response_model=schemas.LoginResponse)
async def login(
    credentials: schemas.LoginRequest,
    store: EntityStore = Depends(get_store),
    sessions: SessionDirectory = Depends(get_sessions),
):
    """
    Authenticate a user and return a session token.
    """
    result = await auth_service.login_user(store, sessions, credentials.username, credentials.password)
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=GlobalMessages.INVALID_CREDENTIALS,
        )
    user, access_token = result
    return schemas.LoginResponse(access_token=access_token, user=user_to_response(user))


@router.post("/logout", response_model=schemas.LogoutResponse)
async def logout(
    current_user: User = Depends(get_current_user),
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    sessions: SessionDirectory = Depends(get_sessions),
):
    """Revoke the session used for this request."""
    sessions.revoke(credentials.credentials)
    return schemas.LogoutResponse()


@router.get("/me", response_model=schemas.UserResponse)
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """
    Get the current authenticated user's information.
    """
    return user_to_response(current_user)


@router.put("/role", response_model=schemas.UserResponse)
async def switch_role(
    request: schemas.SwitchRoleRequest,
    current_user: User = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
):
    """
    Switch the role the current user acts as. Scoping rules follow the new role.
    """
    try:
        user = await auth_service.switch_role(store, current_user, request.current_role)
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return user_to_response(user)
