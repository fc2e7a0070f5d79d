from datetime import datetime, timedelta, timezone

from fastapi import Depends, Header
from jose import JWTError, jwt

from buildup.config import Settings, get_settings
from buildup.errors import InvalidToken

ALGORITHM = "HS256"


def create_access_token(user, settings: Settings) -> str:
    payload = {
        "sub": user.id,
        "email": user.email,
        "plan": user.membership_plan,
        "iat": datetime.now(timezone.utc),
        "exp": datetime.now(timezone.utc) + timedelta(days=settings.jwt_expire_days),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=ALGORITHM)


def verify_token(
    authorization: str = Header(None),
    settings: Settings = Depends(get_settings),
) -> dict:
    try:
        scheme, token = authorization.split()
        if scheme.lower() != "bearer":
            raise InvalidToken()
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[ALGORITHM])
    except (AttributeError, ValueError, JWTError):
        raise InvalidToken() from None
    if not claims.get("sub"):
        raise InvalidToken()
    return claims
