"""Profile service: the signed-in user's own account."""

from sqlalchemy.orm import Session

from tms_backend.core.exceptions import NotFoundError, UnprocessableEntityError, field_error
from tms_backend.core.security import hash_password, verify_password
from tms_backend.models.user import User
from tms_backend.repositories.user_repository import UserRepository
from tms_backend.schemas.schemas import ChangePasswordRequest, ProfileUpdate


class ProfileService:

    @staticmethod
    def get_profile(db: Session, user_id: str) -> User:
        user = UserRepository(db).get(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    @staticmethod
    def update_profile(db: Session, user_id: str, data: ProfileUpdate) -> User:
        user = ProfileService.get_profile(db, user_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(user, field, value)
        user.updated_by_id = user_id
        return UserRepository(db).save(user)

    @staticmethod
    def change_password(db: Session, user_id: str, data: ChangePasswordRequest) -> None:
        user = ProfileService.get_profile(db, user_id)
        if not verify_password(data.old_password, user.password_hash):
            raise UnprocessableEntityError(
                "Invalid password", errors=[field_error("old_password", "Old password is incorrect")]
            )
        user.password_hash = hash_password(data.new_password)
        user.updated_by_id = user_id
        UserRepository(db).commit()


profile_service = ProfileService()
