from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError
from app.core.security import verify_password, create_access_token, get_password_hash
from app.models.user import User
from app.repositories.user_repo import UserRepository
from app.schemas.user_schema import UserCreate


class AuthService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.user_repo = UserRepository(db)

    async def authenticate_user(self, email: str, password: str) -> User | None:
        """
        Check email / password. Returns the User, or None on any failure.
        """
        user = await self.user_repo.get_user_by_email(email)

        if not user:
            return None

        # suspended accounts cannot log in
        if not user.is_active:
            return None

        if not verify_password(plain_password=password, hashed_password=user.password_hash):
            return None

        return user

    async def register_user(self, user_create: UserCreate) -> User:
        existing_user = await self.user_repo.get_user_by_email(user_create.email)
        if existing_user:
            raise ConflictError("Email is already registered")

        new_user = User(
            email=user_create.email,
            password_hash=get_password_hash(user_create.password),
            full_name=user_create.full_name,
            role=user_create.role
        )

        created_user = await self.user_repo.create_user(new_user)
        await self.db.commit()
        return created_user

    def create_login_token(self, user: User) -> str:
        return create_access_token(
            data={
                "sub": user.email,
                "user_id": str(user.user_id),
                "role": user.role.value
            }
        )
