"""Department data access."""

from typing import Optional

from tms_backend.models.department import Department
from tms_backend.repositories.base import BaseRepository


class DepartmentRepository(BaseRepository[Department]):
    model = Department

    def get_by_code(self, code: str, include_deleted: bool = True) -> Optional[Department]:
        return self.find_one(Department.code == code, include_deleted=include_deleted)

    def get_by_name(self, name: str, include_deleted: bool = True) -> Optional[Department]:
        return self.find_one(Department.name == name, include_deleted=include_deleted)
