"""Mapper configuration."""

from sqlalchemy.orm import configure_mappers

from tms_backend.db.base import Base
import tms_backend.models  # noqa: F401


def test_no_relationship_uses_noload():
    configure_mappers()
    lazies = {
        f"{mapper.class_.__name__}.{rel.key}": rel.lazy
        for mapper in Base.registry.mappers
        for rel in mapper.relationships
    }
    assert "noload" not in lazies.values()
    assert lazies["Role.users"] == "raise"
    assert lazies["Permission.roles"] == "raise"
