from .envelope import failure, is_failure
from .medicine import (
    CustomDatesSchedule,
    DailySchedule,
    Medicine,
    MedicineCreate,
    MedicineUpdate,
    OneTimeSchedule,
    Schedule,
    UnrecognizedSchedule,
    WeekdaySchedule,
)
from .user import UserCreate, UserOut

__all__ = [
    "failure",
    "is_failure",
    "CustomDatesSchedule",
    "DailySchedule",
    "Medicine",
    "MedicineCreate",
    "MedicineUpdate",
    "OneTimeSchedule",
    "Schedule",
    "UnrecognizedSchedule",
    "WeekdaySchedule",
    "UserCreate",
    "UserOut",
]
