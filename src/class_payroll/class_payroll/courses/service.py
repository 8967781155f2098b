from __future__ import annotations

import logging
from typing import Any

from ..common.validators import require_int
from ..core.enums import EventType
from ..core.exceptions import CourseNotFound, ValidationError
from ..core.permissions import Action, Actor, require
from ..events.model import CalendarEvent
from ..events.repository import EventRepository
from ..events.service import EventService
from .repository import CourseRepository

logger = logging.getLogger(__name__)


class CourseScheduleService:
    """Projects a course's weekly sessions onto the calendar.

    Slots are keyed by (course_id, start_time), so running the generation
    again refreshes the same events instead of adding new ones.
    """

    def __init__(self, courses: CourseRepository, events: EventRepository, event_service: EventService):
        self._courses = courses
        self._events = events
        self._event_service = event_service

    def generate_events(self, *, actor: Actor, course_id: Any) -> tuple[list[CalendarEvent], int]:
        """Returns the course's events and how many of them are new."""

        require(actor, Action.GENERATE_COURSE_EVENTS)

        course_id = require_int(course_id, "course_id", minimum=1)
        course = self._courses.get_by_id(course_id)
        if not course:
            raise CourseNotFound(course_id)

        slots = course.session_slots()
        if not slots:
            raise ValidationError(f"Course {course_id} has no scheduled_time or session_count")

        events: list[CalendarEvent] = []
        created = 0
        for number, (start, end) in enumerate(slots, start=1):
            event_id, is_new = self._events.upsert_course_slot(
                course_id=course.course_id,
                start_time=start,
                fields={
                    "title": f"{course.title} - Session {number}",
                    "description": course.description,
                    "event_type": EventType.CLASS,
                    "end_time": end,
                    "teacher_id": course.teacher_id,
                    "created_by": int(actor.user_id),
                },
            )
            created += int(is_new)

            event = self._event_service.get(event_id)
            self._event_service.sync_projections(event)
            events.append(event)

        logger.info("Course %s: %d session event(s), %d new", course_id, len(events), created)
        return events, created
