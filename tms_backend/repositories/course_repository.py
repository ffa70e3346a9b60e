"""Course and subject data access."""

from typing import Optional

from tms_backend.models.course import Course, Subject
from tms_backend.repositories.base import BaseRepository


class CourseRepository(BaseRepository[Course]):
    model = Course

    def get_by_code(self, code: str) -> Optional[Course]:
        return self.find_one(Course.code == code, include_deleted=True)


class SubjectRepository(BaseRepository[Subject]):
    model = Subject

    def get_by_code(self, course_id: str, code: str) -> Optional[Subject]:
        return self.find_one(Subject.course_id == course_id, Subject.code == code)
