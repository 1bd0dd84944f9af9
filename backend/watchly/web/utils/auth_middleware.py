"""
FastAPI dependency xác định user đang gọi API từ bearer token.
"""
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from watchly.web.utils.database import get_db
from watchly.web.utils.jwt import decode_access_token
from watchly.web.schemas.auth import UserResponse
from watchly.web.services.auth_service import AuthService

security = HTTPBearer()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> UserResponse:
    """401 nếu token không decode được, thiếu `sub`, hoặc user đã bị xóa."""
    claims = decode_access_token(credentials.credentials)
    user_id = (claims or {}).get("sub")
    if not user_id:
        raise _unauthorized("Token không hợp lệ hoặc đã hết hạn")

    user = await AuthService.get_user(db, user_id)
    if user is None:
        raise _unauthorized("User không tồn tại")
    return user
