from __future__ import annotations

import pytest

from src.hojaverde.hojaverde.container import wire_services

from tests.fakes import CULTIVO_1, POSTCOSECHA, InMemoryAreas, InMemoryAttendance, InMemoryEmployees, make_employee


@pytest.fixture
def employees():
    staff = [make_employee(n) for n in range(1, 6)]
    staff += [make_employee(n, area=POSTCOSECHA) for n in range(6, 9)]
    staff.append(make_employee(9, area=None))
    staff.append(make_employee(10, active=False))
    return InMemoryEmployees(staff)


@pytest.fixture
def areas():
    return InMemoryAreas([CULTIVO_1, POSTCOSECHA])


@pytest.fixture
def attendance(employees):
    return InMemoryAttendance(employees)


@pytest.fixture
def container(areas, employees, attendance):
    return wire_services(areas_repo=areas, employees_repo=employees, attendance_repo=attendance)
