"""Employee-id (EID) generation with per-prefix range reservation."""

import logging
from typing import Optional, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tms_backend.core.constants import RoleName
from tms_backend.core.exceptions import BadRequestError, UnsupportedRoleError
from tms_backend.models.eid_sequence import EidSequence
from tms_backend.models.user import User

logger = logging.getLogger("tms")

EID_PREFIXES = {
    RoleName.ADMINISTRATOR.value: "AD",
    RoleName.DEPARTMENT_HEAD.value: "DH",
    RoleName.SQA_AUDITOR.value: "QA",
    RoleName.TRAINER.value: "TR",
    RoleName.TRAINEE.value: "TE",
    RoleName.ACADEMIC_DEPARTMENT.value: "AC",
}
EID_DIGITS = 6


def format_eid(prefix: str, number: int) -> str:
    return f"{prefix}{number:0{EID_DIGITS}d}"


def parse_eid_number(eid: Optional[str], prefix: str) -> Optional[int]:
    """Numeric suffix of ``eid``, or None when it is missing or malformed."""
    if not eid or not eid.startswith(prefix):
        return None
    suffix = eid[len(prefix):]
    if not (suffix.isascii() and suffix.isdecimal()):
        return None
    return int(suffix)


class EidService:
    """Hands out ``PREFIX`` + 6-digit ids, never the same one twice.

    The per-prefix ``EidSequence`` row is locked FOR UPDATE while the next
    range is computed and reserved; the unique constraint on ``users.eid``
    stays as the last guard.
    """

    @staticmethod
    def prefix_for(role_name: str) -> str:
        prefix = EID_PREFIXES.get(role_name)
        if prefix is None:
            raise UnsupportedRoleError(f"Role {role_name} is not supported for EID generation")
        return prefix

    @staticmethod
    def matches_role(eid: str, role_name: str) -> bool:
        prefix = EID_PREFIXES.get(role_name)
        return prefix is not None and parse_eid_number(eid, prefix) is not None

    @staticmethod
    def generate(
        db: Session, role_name: str, count: Optional[int] = None
    ) -> Union[str, list[str]]:
        """Reserve one id (``count`` omitted) or ``count`` consecutive ids.

        The reservation is committed before returning, so the session must
        not carry unrelated pending changes.
        """
        if count is not None and count < 1:
            raise BadRequestError("count must be at least 1")
        prefix = EidService.prefix_for(role_name)
        size = 1 if count is None else count

        try:
            sequence = EidService._lock_sequence(db, prefix)
            start = max(sequence.next_value or 1, EidService._next_from_users(db, prefix))
            sequence.next_value = start + size
            db.commit()
        except Exception:
            db.rollback()
            raise

        eids = [format_eid(prefix, start + offset) for offset in range(size)]
        logger.debug("Reserved EIDs %s..%s", eids[0], eids[-1])
        return eids[0] if count is None else eids

    @staticmethod
    def _lock_sequence(db: Session, prefix: str) -> EidSequence:
        sequence = (
            db.query(EidSequence)
            .filter(EidSequence.prefix == prefix)
            .with_for_update()
            .first()
        )
        if sequence is None:
            # A concurrent first allocation for the prefix loses on the PK.
            sequence = EidSequence(prefix=prefix, next_value=1)
            db.add(sequence)
            try:
                db.flush()
            except IntegrityError:
                db.rollback()
                sequence = (
                    db.query(EidSequence)
                    .filter(EidSequence.prefix == prefix)
                    .with_for_update()
                    .one()
                )
        return sequence

    @staticmethod
    def _next_from_users(db: Session, prefix: str) -> int:
        """Greatest existing eid with the prefix, plus one (1 if none or unparsable)."""
        last_eid = (
            db.query(User.eid)
            .filter(User.eid.like(f"{prefix}%"))
            .order_by(User.eid.desc())
            .limit(1)
            .scalar()
        )
        number = parse_eid_number(last_eid, prefix)
        return 1 if number is None else number + 1


eid_service = EidService()
