"""
Authentication service - xử lý logic đăng ký và đăng nhập.
"""
import uuid
from typing import Optional
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError

from watchly.web.schemas.auth import RegisterRequest, LoginRequest, UserResponse
from watchly.web.services.profile_service import ProfileService
from watchly.web.utils.database import timestamp_params, utcnow
from watchly.web.utils.password import hash_password, verify_password
from watchly.web.utils.jwt import create_access_token

DUPLICATE_EMAIL_ERROR = "Email đã tồn tại"
INVALID_CREDENTIALS_ERROR = "Email hoặc password không đúng"


class AuthService:
    """Service xử lý authentication."""

    @staticmethod
    async def register(
        db: AsyncSession,
        register_data: RegisterRequest
    ) -> tuple[Optional[UserResponse], Optional[str]]:
        """
        Đăng ký user mới và tạo profile cho user đó.

        Returns:
            Tuple (UserResponse, error_message)
            - Nếu thành công: (UserResponse, None)
            - Nếu lỗi: (None, error_message)
        """
        user_id = str(uuid.uuid4())
        now = utcnow()

        try:
            await db.execute(
                text("""
                    INSERT INTO users (id, email, password_hash, created_at)
                    VALUES (:id, :email, :password_hash, :created_at)
                """).bindparams(*timestamp_params("created_at")),
                {
                    "id": user_id,
                    "email": register_data.email,
                    "password_hash": hash_password(register_data.password),
                    "created_at": now
                }
            )
            await ProfileService.create_profile(
                db,
                user_id=user_id,
                email=register_data.email,
                display_name=register_data.display_name
            )
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            if "email" in str(e.orig).lower() or "unique" in str(e.orig).lower():
                return None, DUPLICATE_EMAIL_ERROR
            return None, f"Lỗi đăng ký: {str(e)}"

        return UserResponse(id=user_id, email=register_data.email, created_at=now), None

    @staticmethod
    async def login(
        db: AsyncSession,
        login_data: LoginRequest
    ) -> tuple[Optional[UserResponse], Optional[str]]:
        """
        Đăng nhập user và cập nhật last_login.

        Returns:
            Tuple (UserResponse, error_message)
        """
        result = await db.execute(
            text("""
                SELECT id, email, password_hash, created_at, last_login
                FROM users
                WHERE email = :email
            """),
            {"email": login_data.email.lower().strip()}
        )

        user_row = result.fetchone()

        if not user_row:
            return None, INVALID_CREDENTIALS_ERROR

        if not verify_password(login_data.password, user_row.password_hash):
            return None, INVALID_CREDENTIALS_ERROR

        now = utcnow()
        await db.execute(
            text("""
                UPDATE users
                SET last_login = :last_login
                WHERE id = :user_id
            """).bindparams(*timestamp_params("last_login")),
            {"user_id": user_row.id, "last_login": now}
        )
        await db.commit()

        user = UserResponse(
            id=user_row.id,
            email=user_row.email,
            created_at=user_row.created_at,
            last_login=now
        )

        return user, None

    @staticmethod
    async def get_user(db: AsyncSession, user_id: str) -> Optional[UserResponse]:
        result = await db.execute(
            text("""
                SELECT id, email, created_at, last_login
                FROM users
                WHERE id = :user_id
            """),
            {"user_id": user_id}
        )
        user_row = result.fetchone()
        if not user_row:
            return None
        return UserResponse.model_validate(user_row)

    @staticmethod
    def create_token(user: UserResponse) -> str:
        token_data = {
            "sub": user.id,
            "email": user.email
        }
        return create_access_token(data=token_data)
