import os
from dataclasses import dataclass

DEFAULT_TIMEOUT_MS = 30000


@dataclass(frozen=True)
class ClientConfig:
    api_url: str
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    # Storage identifiers are owned by the backend; carried through untouched.
    spreadsheet_id: str = ""
    drive_folder_id: str = ""

    def __post_init__(self):
        if not (self.api_url or "").strip():
            raise ValueError("api_url is required")
        if int(self.timeout_ms) <= 0:
            raise ValueError("timeout_ms must be positive")

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000.0

    @classmethod
    def from_env(cls) -> "ClientConfig":
        return cls(
            api_url=os.getenv("MEDALERT_API_URL", "").strip(),
            timeout_ms=int(os.getenv("MEDALERT_TIMEOUT_MS", str(DEFAULT_TIMEOUT_MS))),
            spreadsheet_id=os.getenv("MEDALERT_SPREADSHEET_ID", ""),
            drive_folder_id=os.getenv("MEDALERT_DRIVE_FOLDER_ID", ""),
        )
