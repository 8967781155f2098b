from __future__ import annotations

from typing import Optional, Protocol

from ..events.model import CalendarEvent
from .model import Lecture


class LectureRepository(Protocol):
    def get_for_event(self, event_id: int) -> Optional[Lecture]:
        raise NotImplementedError

    def upsert_for_event(self, event: CalendarEvent) -> int:
        """Create or refresh the lecture projected from `event`.

        Keyed by event id, so regenerating never duplicates. Returns lecture id.
        """

        raise NotImplementedError
