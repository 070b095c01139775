# clinisync/auth/dependencies.py

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from clinisync.auth.sessions import SessionDirectory
from clinisync.common.database.database import get_store
from clinisync.common.database.store import EntityStore
from clinisync.common.utils.global_messages import GlobalMessages
from clinisync.models.models import User

bearer_scheme = HTTPBearer(auto_error=False)


def get_sessions(request: Request) -> SessionDirectory:
    return request.app.state.sessions


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    sessions: SessionDirectory = Depends(get_sessions),
    store: EntityStore = Depends(get_store),
) -> User:
    """
    Dependency to retrieve the current user from the session token in the Authorization header.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=GlobalMessages.AUTHENTICATION_REQUIRED,
            headers={"WWW-Authenticate": "Bearer"},
        )

    session = sessions.lookup(credentials.credentials)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=GlobalMessages.SESSION_EXPIRED,
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = await store.get(User, session.user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=GlobalMessages.USER_NOT_FOUND,
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user
