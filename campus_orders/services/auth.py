"""Access token handling (tokens are issued by the auth service)"""
from dataclasses import dataclass
from jose import jwt, JWTError
import enum
import logging

from campus_orders.config import settings

logger = logging.getLogger(__name__)


class UserRole(str, enum.Enum):
    CLIENT = "CLIENT"
    ADMIN = "ADMIN"


@dataclass(frozen=True)
class CurrentUser:
    """Verified caller identity"""
    user_id: int
    role: UserRole = UserRole.CLIENT

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


class InvalidTokenError(Exception):
    pass


def decode_access_token(token: str) -> CurrentUser:
    """Verify a token and return the identity it carries"""
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        logger.warning(f"Rejected access token: {e}")
        raise InvalidTokenError("Invalid or expired token") from e

    try:
        user_id = int(payload.get("user_id", payload.get("sub")))
        role = UserRole(payload.get("role", UserRole.CLIENT.value))
    except (TypeError, ValueError) as e:
        logger.warning(f"Malformed token claims: {e}")
        raise InvalidTokenError("Malformed token") from e

    return CurrentUser(user_id=user_id, role=role)
