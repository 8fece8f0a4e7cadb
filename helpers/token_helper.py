import jwt
import datetime
from typing import Any, Dict, List, Optional

from config.settings import settings  # must define SECRET_KEY and ALGORITHM


def create_access_token(
    payload: Dict[str, Any],
    expires_hours: int = 1,
) -> str:
    """
    Generate a JWT access token with the given payload and expiration.
    """
    expire = datetime.datetime.now(datetime.timezone.utc) + datetime.timedelta(hours=expires_hours)
    to_encode = payload.copy()
    to_encode.update({"exp": expire})

    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_identity_token(
    user_id: str,
    name: Optional[str] = None,
    email: Optional[str] = None,
    picture: Optional[str] = None,
    roles: Optional[List[str]] = None,
    expires_hours: Optional[int] = None,
) -> str:
    """
    Mint a token shaped like the identity provider's, embedding:
      - sub (opaque user id)
      - name / email / picture
      - roles (defaults to ["user"])
    Used by local tooling and tests; production tokens come from the provider.
    """
    token_payload: Dict[str, Any] = {
        "sub": user_id,
        "name": name,
        "email": email,
        "picture": picture,
        "roles": roles or ["user"],
    }
    return create_access_token(
        token_payload,
        expires_hours or settings.IDENTITY_TOKEN_EXPIRE_HOURS,
    )
