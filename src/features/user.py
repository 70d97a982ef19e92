import logging
from typing import Any, Dict, Optional

from db.user import UserDB
from assistant.errors import AuthenticationError

logger = logging.getLogger(__name__)


def _filter_user_fields(item: Dict[str, Any]) -> Dict[str, Any]:
    """Extract only the user fields the assistant needs; the token hash never leaves this module."""
    return {
        "user_id": item.get("user_id"),
        "email": item.get("email"),
        "name": item.get("name"),
        "status": item.get("status"),
    }


class TokenAuthenticator:
    """Resolves a caller's bearer token to an active user."""

    def __init__(self, db: Optional[UserDB] = None):
        self.db = db or UserDB()

    def authenticate(self, token: Optional[str]) -> Dict[str, Any]:
        if not token or not token.strip():
            raise AuthenticationError("Missing caller token")
        item = self.db.lookup_user_by_token(token.strip())
        if not item:
            logger.info("auth_rejected", extra={"reason": "unknown_token"})
            raise AuthenticationError("Invalid caller token")
        if item.get("status", "active") != "active":
            logger.info("auth_rejected", extra={"reason": "inactive", "user_id": item.get("user_id")})
            raise AuthenticationError("User is not active")
        return _filter_user_fields(item)
