"""
Schedule evaluation and alert matching.

A medicine alerts at `now` when three checks pass, in this order:
  1. its schedule includes the calendar date of `now`
  2. its "HH:MM" time equals `now` truncated to the minute
  3. the date of `now` is not already in its taken dates

All dates and times come from the local clock of the evaluating device.
"""
import logging
from collections.abc import Iterable
from datetime import datetime

from medalert.schemas.envelope import is_failure
from medalert.schemas.medicine import (
    CustomDatesSchedule,
    DailySchedule,
    Medicine,
    OneTimeSchedule,
    WeekdaySchedule,
)
from medalert.services.remote_data import RemoteDataClient

logger = logging.getLogger("medalert.schedule")

DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")


def format_date(now: datetime) -> str:
    return now.strftime("%Y-%m-%d")


def format_time(now: datetime) -> str:
    return now.strftime("%H:%M")


def js_weekday(now: datetime) -> int:
    """0=Sunday .. 6=Saturday (datetime.weekday() starts at Monday=0)."""
    return (now.weekday() + 1) % 7


def day_name(day_number: int) -> str:
    if not 0 <= day_number <= 6:
        raise ValueError(f"day number must be 0-6, got {day_number}")
    return DAY_NAMES[day_number]


def is_due(medicine: Medicine, now: datetime) -> bool:
    schedule = medicine.schedule
    if isinstance(schedule, DailySchedule):
        return True
    if isinstance(schedule, WeekdaySchedule):
        return js_weekday(now) in schedule.days
    if isinstance(schedule, OneTimeSchedule):
        return schedule.date == format_date(now)
    if isinstance(schedule, CustomDatesSchedule):
        return format_date(now) in schedule.dates
    # Unknown schedule types alert rather than stay silent.
    logger.warning("Medicine %s has unrecognized schedule type %r; treating as due", medicine.id, schedule.kind)
    return True


def is_taken_on(medicine: Medicine, now: datetime) -> bool:
    return format_date(now) in medicine.taken_dates


def select_alert(medicines: Iterable[Medicine], now: datetime) -> Medicine | None:
    current_time = format_time(now)
    for medicine in medicines:
        if not is_due(medicine, now):
            continue
        if medicine.time != current_time:
            continue
        if is_taken_on(medicine, now):
            continue
        return medicine
    return None


def due_today(medicines: Iterable[Medicine], now: datetime) -> list[Medicine]:
    return [m for m in medicines if is_due(m, now) and not is_taken_on(m, now)]


class ScheduleEngine:
    def __init__(self, data: RemoteDataClient):
        self.data = data

    async def get_next_alert(self, patient_email: str, now: datetime | None = None) -> dict:
        """Return {"success": True, "alert": Medicine | None} or the fetch failure as-is.

        Medicines are re-fetched on every call; backend order decides which
        of several simultaneous alerts is surfaced.
        """
        medicines = await self.data.get_medicines_by_patient(patient_email)
        if is_failure(medicines):
            return medicines
        if now is None:
            now = datetime.now()
        alert = select_alert(medicines, now)
        if alert is not None:
            logger.info("Alert for %s: medicine %s at %s", patient_email, alert.id, alert.time)
        return {"success": True, "alert": alert}

    async def get_due_today(self, patient_email: str, now: datetime | None = None):
        medicines = await self.data.get_medicines_by_patient(patient_email)
        if is_failure(medicines):
            return medicines
        return due_today(medicines, now or datetime.now())
