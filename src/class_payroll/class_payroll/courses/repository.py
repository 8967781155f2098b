from __future__ import annotations

from typing import Optional, Protocol

from .model import Course


class CourseRepository(Protocol):
    def get_by_id(self, course_id: int) -> Optional[Course]:
        raise NotImplementedError

    def get_title(self, course_id: int) -> Optional[str]:
        raise NotImplementedError
