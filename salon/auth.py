"""Back office authentication - single admin account, JWT session"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from .config import ACCESS_TOKEN_EXPIRE_MINUTES, ADMIN_COOKIE_NAME, ADMIN_PASSWORD_HASH, ADMIN_USERNAME, ENVIRONMENT
from .security_utils import constant_time_compare, create_jwt_token, verify_jwt_token, verify_password_bcrypt

logger = logging.getLogger(__name__)

# Token may come from the Authorization header or the session cookie
security = HTTPBearer(auto_error=False)

router = APIRouter(prefix="/admin", tags=["Admin Auth"])


class AdminLogin(BaseModel):
    username: str
    password: str


class AdminSession(BaseModel):
    success: bool
    access_token: str
    token_type: str = "bearer"


async def get_current_admin(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    """Return the admin username for a valid session, 401 otherwise"""
    token = credentials.credentials if credentials else request.cookies.get(ADMIN_COOKIE_NAME)

    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    payload = verify_jwt_token(token)
    if not payload or payload.get("role") != "admin":
        logger.warning("⚠️ Rejected admin request with invalid or expired token")
        raise HTTPException(status_code=401, detail="Invalid or expired session")

    return payload.get("sub", "")


@router.post("/login", response_model=AdminSession)
async def login(data: AdminLogin, response: Response):
    """Check the admin credentials and open a session"""
    username_ok = constant_time_compare(data.username, ADMIN_USERNAME)
    password_ok = verify_password_bcrypt(data.password, ADMIN_PASSWORD_HASH)

    if not (username_ok and password_ok):
        logger.warning(f"🔒 Failed admin login for '{data.username}'")
        raise HTTPException(status_code=401, detail="Invalid username or password")

    token = create_jwt_token({"sub": ADMIN_USERNAME, "role": "admin"})
    response.set_cookie(
        key=ADMIN_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=ENVIRONMENT.lower() == "production",
        samesite="lax",
        max_age=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )
    logger.info(f"✅ Admin '{ADMIN_USERNAME}' logged in")
    return AdminSession(success=True, access_token=token)


@router.post("/logout")
async def logout(response: Response):
    response.delete_cookie(ADMIN_COOKIE_NAME)
    return {"success": True}
