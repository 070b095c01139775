# clinisync/auth/sessions.py
"""Session directory: maps bearer tokens to (user id, expiry)."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

import jwt
from jwt.exceptions import InvalidTokenError

from clinisync.common.config import settings
from clinisync.common.utils.identifiers import generate_token_id


@dataclass(frozen=True)
class SessionRecord:
    user_id: str
    expires: datetime


class SessionDirectory:
    """
    Issues signed session tokens and remembers which ones are live.

    The token is a JWT carrying the user id and a random session key. The
    directory is the authority: a token whose key was revoked or whose
    expiry has passed is treated as absent. Expired entries are dropped at
    lookup time, never swept proactively.
    """

    def __init__(
        self,
        secret: Optional[str] = None,
        algorithm: Optional[str] = None,
        ttl: Optional[timedelta] = None,
    ):
        self.secret = secret or settings.JWT_SECRET
        self.algorithm = algorithm or settings.JWT_ALGORITHM
        self.ttl = ttl if ttl is not None else timedelta(hours=settings.SESSION_TTL_HOURS)
        self._sessions: Dict[str, SessionRecord] = {}

    def issue(self, user_id: str) -> str:
        """Create a session for ``user_id`` and return its token."""
        session_key = generate_token_id()
        expires = datetime.now(timezone.utc) + self.ttl
        self._sessions[session_key] = SessionRecord(user_id=user_id, expires=expires)
        return jwt.encode(
            {"sub": user_id, "jti": session_key, "exp": expires},
            self.secret,
            algorithm=self.algorithm,
        )

    def _session_key(self, token: str) -> Optional[str]:
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"verify_exp": False},
            )
        except InvalidTokenError:
            return None
        return payload.get("jti")

    def lookup(self, token: str) -> Optional[SessionRecord]:
        """Return the live session for ``token``, or None."""
        session_key = self._session_key(token)
        if session_key is None:
            return None
        record = self._sessions.get(session_key)
        if record is None:
            return None
        if record.expires <= datetime.now(timezone.utc):
            self._sessions.pop(session_key, None)
            return None
        return record

    def revoke(self, token: str) -> bool:
        session_key = self._session_key(token)
        if session_key is None:
            return False
        return self._sessions.pop(session_key, None) is not None

    def __len__(self) -> int:
        return len(self._sessions)
