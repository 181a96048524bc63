from medalert.config import ClientConfig
from medalert.schemas.envelope import failure, is_failure
from medalert.services.remote_data import RemoteDataClient
from medalert.services.schedule import ScheduleEngine, is_due, select_alert
from medalert.services.security import hash_password

__version__ = "1.0.0"

__all__ = [
    "ClientConfig",
    "RemoteDataClient",
    "ScheduleEngine",
    "failure",
    "hash_password",
    "is_due",
    "is_failure",
    "select_alert",
]
