import jwt
import logging
from datetime import datetime, timezone
from typing import Optional
from rawgle.config import settings
from rawgle.core.datetime_utils import utc_now

logger = logging.getLogger(__name__)


class TokenStore:
    """In-memory holder for the bearer credential sent with every API request"""

    def __init__(self, token: Optional[str] = None):
        self._token: Optional[str] = token or None

    def get(self) -> Optional[str]:
        return self._token

    def set(self, token: str):
        self._token = token or None

    def clear(self):
        self._token = None

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None and not self.is_expired()

    def expires_at(self) -> Optional[datetime]:
        """
        Read the `exp` claim without verifying the signature.
        Verification is the backend's job; the client only needs to know
        whether sending the token is pointless.
        """
        if not self._token:
            return None
        try:
            claims = jwt.decode(self._token, options={"verify_signature": False})
        except jwt.InvalidTokenError:
            # Opaque (non-JWT) token
            return None
        exp = claims.get("exp")
        if exp is None:
            return None
        try:
            return datetime.fromtimestamp(int(exp), tz=timezone.utc)
        except (TypeError, ValueError, OverflowError):
            logger.warning(f"Ignoring malformed exp claim: {exp!r}")
            return None

    def is_expired(self) -> bool:
        expires_at = self.expires_at()
        return expires_at is not None and expires_at <= utc_now()


# Global instance
token_store = TokenStore(settings.API_TOKEN)
