"""User data access."""

from typing import Optional

from tms_backend.models.user import RefreshToken, User
from tms_backend.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    model = User

    def get_by_email(self, email: str, include_deleted: bool = True) -> Optional[User]:
        return self.find_one(User.email == email, include_deleted=include_deleted)

    def get_by_eids(self, eids: list[str]) -> list[User]:
        if not eids:
            return []
        return self.list(filters=[User.eid.in_(eids)], order_by=User.eid)

    def existing_emails(self, emails: list[str]) -> set[str]:
        if not emails:
            return set()
        rows = self.db.query(User.email).filter(User.email.in_(emails)).all()
        return {email for (email,) in rows}


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    model = RefreshToken
    has_soft_delete = False

    def find_valid(self, token_hash: str) -> Optional[RefreshToken]:
        return self.find_one(
            RefreshToken.token_hash == token_hash,
            RefreshToken.revoked_at.is_(None),
        )

    def revoke_all(self, user_id: str, revoked_at) -> int:
        count = (
            self.db.query(RefreshToken)
            .filter(RefreshToken.user_id == user_id, RefreshToken.revoked_at.is_(None))
            .update({"revoked_at": revoked_at}, synchronize_session=False)
        )
        self.db.commit()
        return count
