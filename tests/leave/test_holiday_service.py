from __future__ import annotations

from datetime import date

import pytest

from hrms.core.enums import HolidayType
from hrms.core.exceptions import NotFoundError
from hrms.leave.service import HolidayService


@pytest.fixture
def service(holidays):
    return HolidayService(holidays)


def test_create_and_list(service):
    h = service.create_holiday(name="Founders Day", holiday_date="2026-04-14", holiday_type="Company")
    assert h.holiday_id > 0
    assert h.year == 2026
    assert [x.name for x in service.list_holidays(year=2026)] == ["Founders Day"]


def test_update_moves_year(service):
    h = service.create_holiday(name="Offsite", holiday_date="2026-12-31")
    updated = service.update_holiday(h.holiday_id, holiday_date="2027-01-02", is_active=False)
    assert updated.year == 2027
    assert not updated.is_active
    assert updated.holiday_type == HolidayType.COMPANY


def test_delete_unknown(service):
    with pytest.raises(NotFoundError):
        service.delete_holiday(99)


def test_initialize_is_idempotent(service, holidays):
    n = service.initialize_holidays(year=2026)
    service.initialize_holidays(year=2026)
    assert len(holidays.list_for_year(2026)) == n
    assert date(2026, 12, 25) in {h.holiday_date for h in holidays.list_for_year(2026)}
