from __future__ import annotations

from datetime import datetime

import pytest

from src.class_payroll.class_payroll.core.enums import Role
from src.class_payroll.class_payroll.core.permissions import Actor

from tests.fakes import FakeStore

ADMIN_ID = 1
TEACHER_ID = 7
OTHER_TEACHER_ID = 8


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 3, 15, 12, 0, 0)


@pytest.fixture
def store() -> FakeStore:
    return FakeStore(names={TEACHER_ID: "Ana Teacher", OTHER_TEACHER_ID: "Ben Teacher"})


@pytest.fixture
def container(store):
    return store.container()


@pytest.fixture
def admin() -> Actor:
    return Actor(user_id=ADMIN_ID, role=Role.ADMIN)


@pytest.fixture
def teacher() -> Actor:
    return Actor(user_id=TEACHER_ID, role=Role.TEACHER)


@pytest.fixture
def other_teacher() -> Actor:
    return Actor(user_id=OTHER_TEACHER_ID, role=Role.TEACHER)
