import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends
from fastapi.security import APIKeyHeader

from config import Settings, get_settings
from exceptions import AuthenticationInvalidError, AuthenticationMissingError
from schemas import CurrentUser

logger = logging.getLogger(__name__)

token_header = APIKeyHeader(name="x-auth-token", auto_error=False)


def create_access_token(data: dict, settings: Optional[Settings] = None):
    settings = settings or get_settings()
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(
        minutes=settings.access_token_expire_minutes
    )
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(
        to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm
    )
    return encoded_jwt


def verify_token(token: Optional[str], settings: Settings) -> CurrentUser:
    if not token:
        raise AuthenticationMissingError()
    try:
        payload = jwt.decode(
            token, settings.jwt_secret, algorithms=[settings.jwt_algorithm]
        )
    except jwt.ExpiredSignatureError:
        logger.warning("Rejected expired token")
        raise AuthenticationInvalidError("Token has expired")
    except jwt.InvalidTokenError:
        logger.warning("Rejected invalid token")
        raise AuthenticationInvalidError()

    user_id = payload.get("sub")
    if user_id is None:
        logger.warning("Rejected token without subject")
        raise AuthenticationInvalidError()
    return CurrentUser(user_id=str(user_id), name=payload.get("name"))


async def get_current_user(
    token: Optional[str] = Depends(token_header),
    settings: Settings = Depends(get_settings),
) -> CurrentUser:
    return verify_token(token, settings)
