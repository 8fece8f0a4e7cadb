from fastapi import HTTPException, Depends, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import jwt
from config.settings import settings

security = HTTPBearer()


def auth_middleware(
    credentials: HTTPAuthorizationCredentials = Depends(security),
):
    """
    Verify the identity provider's bearer token and return the caller's
    identity. Credentials and sessions stay with the provider; this service
    only reads the signed claims.
    """
    token = credentials.credentials
    try:
        decoded = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        # expired token → 401
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": "TOKEN_EXPIRED", "message": "Token has expired"},
            headers={"WWW-Authenticate": "Bearer"},
        )
    except jwt.InvalidTokenError:
        # any other decode error → 401
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": "INVALID_TOKEN", "message": "Invalid token"},
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = decoded.get("sub") or decoded.get("id")
    if not user_id:
        # token was structurally OK but payload missing
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": "INVALID_TOKEN", "message": "Invalid token payload"},
            headers={"WWW-Authenticate": "Bearer"},
        )

    roles = decoded.get("roles") or ["user"]
    if isinstance(roles, str):
        roles = [roles]

    return {
        "id": str(user_id),
        "name": decoded.get("name"),
        "email": decoded.get("email"),
        "picture": decoded.get("picture"),
        "roles": list(roles),
    }
