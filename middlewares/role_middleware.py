from fastapi import HTTPException, Depends
from typing import List, Dict, Any
from middlewares.auth_middleware import auth_middleware


def role_middleware(required_roles: List[str] = None):
    # avoid mutable default args
    required_roles = required_roles or []

    def dependency(user: Dict[str, Any] = Depends(auth_middleware)):
        # auth_middleware already raises 401 for bad tokens, so user is guaranteed
        user_roles = user.get("roles", [])
        if required_roles and not any(r in user_roles for r in required_roles):
            raise HTTPException(
                status_code=403,
                detail={"code": "FORBIDDEN", "message": f"Requires one of roles {required_roles}"}
            )
        return user

    return dependency
