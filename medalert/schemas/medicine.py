from collections.abc import Mapping
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .records import as_bool, as_date_text, as_list, as_text, parse_int, pick

DAILY = "daily"
SPECIFIC_DAYS = "specific-days"
ONE_TIME = "one-time"
CUSTOM_DATES = "custom-dates"

SCHEDULE_TYPES = (DAILY, SPECIFIC_DAYS, ONE_TIME, CUSTOM_DATES)


class DailySchedule(BaseModel):
    kind: Literal["daily"] = DAILY


class WeekdaySchedule(BaseModel):
    kind: Literal["specific-days"] = SPECIFIC_DAYS
    # 0=Sunday .. 6=Saturday
    days: list[int] = Field(default_factory=list)


class OneTimeSchedule(BaseModel):
    kind: Literal["one-time"] = ONE_TIME
    date: str | None = None


class CustomDatesSchedule(BaseModel):
    kind: Literal["custom-dates"] = CUSTOM_DATES
    dates: list[str] = Field(default_factory=list)


class UnrecognizedSchedule(BaseModel):
    kind: str


Schedule = DailySchedule | WeekdaySchedule | OneTimeSchedule | CustomDatesSchedule | UnrecognizedSchedule


def _weekdays(value: Any) -> list[int]:
    days = []
    for item in as_list(value):
        day = parse_int(item)
        if day is not None:
            days.append(day)
    return days


def _dates(value: Any) -> list[str]:
    return [str(item) for item in as_list(value) if item is not None]


def build_schedule(raw: Mapping) -> Schedule:
    """Build the schedule variant named by the record's type tag.

    Only the column that belongs to the tag is read; stale values left in the
    other schedule columns are ignored.
    """
    kind = pick(raw, "ScheduleType", "scheduleType", "schedule_type", "kind")
    kind = str(kind).strip() if kind is not None else ""
    if not kind or kind == DAILY:
        return DailySchedule()
    if kind == SPECIFIC_DAYS:
        return WeekdaySchedule(days=_weekdays(pick(raw, "SelectedDays", "selectedDays", "selected_days", "days")))
    if kind == ONE_TIME:
        return OneTimeSchedule(date=as_text(pick(raw, "OneTimeDate", "oneTimeDate", "one_time_date", "date")))
    if kind == CUSTOM_DATES:
        return CustomDatesSchedule(dates=_dates(pick(raw, "CustomDates", "customDates", "custom_dates", "dates")))
    return UnrecognizedSchedule(kind=kind)


class Medicine(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    patient_email: str | None = None
    caregiver_email: str | None = None
    name: str | None = None
    time: str | None = None
    stock: int | None = None
    instructions: str = ""
    voice_file_id: str | None = None
    is_paid: bool = False
    schedule: Schedule = Field(default_factory=DailySchedule)
    taken_dates: list[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def from_backend_row(cls, raw: Any):
        if not isinstance(raw, Mapping):
            return raw
        schedule = raw.get("schedule")
        if isinstance(schedule, BaseModel):
            pass
        elif isinstance(schedule, Mapping):
            schedule = build_schedule(schedule)
        else:
            schedule = build_schedule(raw)
        return {
            "id": as_text(pick(raw, "MedicineID", "ID", "Id", "medicineId", "id")),
            "patient_email": as_text(pick(raw, "PatientEmail", "patientEmail", "patient_email")),
            "caregiver_email": as_text(pick(raw, "CaregiverEmail", "caregiverEmail", "caregiver_email")),
            "name": as_text(pick(raw, "Name", "name")),
            "time": as_text(pick(raw, "Time", "time")),
            "stock": parse_int(pick(raw, "Stock", "stock")),
            "instructions": as_text(pick(raw, "Instructions", "instructions")) or "",
            "voice_file_id": as_text(pick(raw, "VoiceFileID", "VoiceFileId", "voiceFileId", "voice_file_id")) or None,
            "is_paid": as_bool(pick(raw, "IsPaid", "isPaid", "is_paid", default=False)),
            "schedule": schedule,
            "taken_dates": _dates(pick(raw, "TakenDates", "takenDates", "taken_dates")),
        }

    @property
    def schedule_type(self) -> str:
        return self.schedule.kind

    def write_fields(self) -> dict:
        """Fields in the shape MedicineCreate/MedicineUpdate accept, for edit flows."""
        schedule = self.schedule
        return {
            "name": self.name,
            "time": self.time,
            "stock": self.stock,
            "instructions": self.instructions,
            "voice_file_id": self.voice_file_id,
            "schedule_type": schedule.kind,
            "selected_days": list(schedule.days) if isinstance(schedule, WeekdaySchedule) else [],
            "custom_dates": list(schedule.dates) if isinstance(schedule, CustomDatesSchedule) else [],
            "one_time_date": schedule.date if isinstance(schedule, OneTimeSchedule) else None,
        }


class _MedicineWrite(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str | None = None
    time: str | None = None
    stock: int | None = None
    instructions: str = ""
    voice_file_id: str | None = None
    schedule_type: str = DAILY
    selected_days: list[int] = Field(default_factory=list)
    custom_dates: list[str] = Field(default_factory=list)
    one_time_date: str | None = None

    @field_validator("stock", mode="before")
    @classmethod
    def normalize_stock(cls, value):
        return parse_int(value)

    @field_validator("instructions", mode="before")
    @classmethod
    def default_instructions(cls, value):
        return value or ""

    @field_validator("schedule_type", mode="before")
    @classmethod
    def default_schedule_type(cls, value):
        return value or DAILY

    @field_validator("selected_days", mode="before")
    @classmethod
    def default_days(cls, value):
        return as_list(value)

    @field_validator("custom_dates", mode="before")
    @classmethod
    def default_dates(cls, value):
        return [as_date_text(item) for item in as_list(value)]

    @field_validator("one_time_date", mode="before")
    @classmethod
    def default_one_time_date(cls, value):
        return as_date_text(value) or None

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True)


class MedicineCreate(_MedicineWrite):
    patient_email: str | None = None
    caregiver_email: str | None = None
    is_paid: bool = False

    @field_validator("voice_file_id", mode="before")
    @classmethod
    def default_voice_file(cls, value):
        return value or None

    @field_validator("is_paid", mode="before")
    @classmethod
    def default_is_paid(cls, value):
        return as_bool(value) if value is not None else False


class MedicineUpdate(_MedicineWrite):
    medicine_id: str

    @field_validator("medicine_id", mode="before")
    @classmethod
    def id_as_text(cls, value):
        return as_text(value)
