"""FastAPI dependencies shared by the routers"""
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from typing import Optional
import logging

from campus_orders.config import settings
from campus_orders.services.auth import CurrentUser, InvalidTokenError, decode_access_token
from campus_orders.services.order_service import OrderService
from campus_orders.services.pricing import PricingRules

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> CurrentUser:
    """Dependency resolving the caller from the bearer token"""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access token required",
            headers={"WWW-Authenticate": "Bearer"}
        )

    try:
        return decode_access_token(credentials.credentials)
    except InvalidTokenError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"}
        )


def require_admin(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """Dependency rejecting non-administrators"""
    if not user.is_admin:
        logger.warning(f"User {user.user_id} denied admin access")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator privileges required"
        )
    return user


def get_order_service() -> OrderService:
    """Dependency for Order Service"""
    return OrderService(PricingRules.from_settings(settings))
