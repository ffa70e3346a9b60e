"""Per-prefix employee-id reservation counter."""

from sqlalchemy import Column, Integer, String

from tms_backend.db.base import Base


class EidSequence(Base):
    """Next unreserved number for an EID prefix; locked FOR UPDATE while allocating."""
    __tablename__ = "eid_sequences"

    prefix = Column(String(2), primary_key=True)
    next_value = Column(Integer, nullable=False, default=1)
