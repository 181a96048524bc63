import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

import httpx
from pydantic import BaseModel, ValidationError

from medalert.config import ClientConfig
from medalert.schemas.envelope import failure, is_failure
from medalert.schemas.medicine import Medicine, MedicineCreate, MedicineUpdate
from medalert.schemas.user import UserCreate, UserOut
from medalert.services.security import hash_password
from medalert.services.voice import DEFAULT_VOICE_EXTENSION, encode_voice_payload, voice_file_name

logger = logging.getLogger("medalert.remote_data")

JSON_HEADERS = {"Content-Type": "application/json"}


def _query_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _read_json(response: httpx.Response) -> Any:
    return response.json()


def _read_bytes(response: httpx.Response) -> bytes:
    return response.content


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    err = errors[0]
    loc = ".".join(str(part) for part in err.get("loc", ()))
    return f"{loc}: {err.get('msg')}" if loc else str(err.get("msg"))


class RemoteDataClient:
    """Async facade over the single backend web-app endpoint.

    Every public coroutine resolves to the backend's payload or to
    {"success": False, "message": ...}; nothing here raises to the caller.
    No state is kept between calls, so one instance can be shared freely.
    """

    def __init__(self, config: ClientConfig, transport: httpx.AsyncBaseTransport | None = None):
        self.config = config
        self._transport = transport

    # ── transport ───────────────────────────────────────

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.config.timeout_seconds,
            transport=self._transport,
            follow_redirects=True,
        )

    async def _send(
        self,
        send: Callable[[httpx.AsyncClient], Awaitable[httpx.Response]],
        read: Callable[[httpx.Response], Any],
    ) -> Any:
        async with self._client() as client:
            response = await send(client)
            if not response.is_success:
                raise RuntimeError(f"HTTP error! status: {response.status_code}")
            return read(response)

    async def _exchange(
        self,
        method: str,
        send: Callable[[httpx.AsyncClient], Awaitable[httpx.Response]],
        read: Callable[[httpx.Response], Any] = _read_json,
    ) -> Any:
        try:
            return await asyncio.wait_for(self._send(send, read), timeout=self.config.timeout_seconds)
        except (asyncio.TimeoutError, httpx.TimeoutException):
            message = f"Request timed out after {self.config.timeout_ms} ms"
        except Exception as exc:
            message = str(exc) or exc.__class__.__name__
        logger.error("API %s Error: %s", method, message)
        return failure(message)

    async def get(self, action: str, params: Mapping[str, Any] | None = None) -> Any:
        query = {"action": action}
        for key, value in (params or {}).items():
            query[key] = _query_value(value)
        return await self._exchange(
            "GET",
            lambda client: client.get(self.config.api_url, params=query, headers=JSON_HEADERS),
        )

    async def post(self, action: str, data: Mapping[str, Any] | None = None) -> Any:
        body = dict(data or {})
        return await self._exchange(
            "POST",
            lambda client: client.post(
                self.config.api_url,
                params={"action": action},
                json=body,
                headers=JSON_HEADERS,
            ),
        )

    def _records(self, result: Any, model: type[BaseModel], action: str) -> Any:
        if is_failure(result):
            return result
        if not isinstance(result, list):
            if result:
                logger.warning("%s returned %s instead of a list", action, type(result).__name__)
            return []
        records = []
        for row in result:
            try:
                records.append(model.model_validate(row))
            except ValidationError as exc:
                logger.warning("%s: skipping malformed row: %s", action, _first_error(exc))
        return records

    # ── users ───────────────────────────────────────────

    async def init_db(self) -> None:
        logger.info("Using remote backend storage at %s", self.config.api_url)

    async def get_users(self) -> list[UserOut] | dict:
        return self._records(await self.get("getUsers"), UserOut, "getUsers")

    async def create_user(self, user: UserCreate | Mapping[str, Any]) -> Any:
        try:
            if not isinstance(user, UserCreate):
                user = UserCreate.model_validate(dict(user))
        except ValidationError as exc:
            logger.error("createUser rejected locally: %s", _first_error(exc))
            return failure(f"Invalid user: {_first_error(exc)}")
        return await self.post("createUser", user.to_payload(hash_password(user.password)))

    async def authenticate_user(self, email: str, password: str) -> Any:
        return await self.post(
            "authenticateUser",
            {"email": email, "passwordHash": hash_password(password)},
        )

    async def get_patients_by_caregiver(self, caregiver_email: str) -> list[UserOut] | dict:
        result = await self.get("getPatientsByCaregiver", {"caregiverEmail": caregiver_email})
        return self._records(result, UserOut, "getPatientsByCaregiver")

    # ── medicines ───────────────────────────────────────

    async def get_medicines(self) -> list[Medicine] | dict:
        return self._records(await self.get("getMedicines"), Medicine, "getMedicines")

    async def get_medicine_by_id(self, medicine_id: str) -> Medicine | dict | None:
        result = await self.get("getMedicineById", {"medicineId": medicine_id})
        if is_failure(result):
            return result
        if not result or not isinstance(result, Mapping):
            return None
        try:
            return Medicine.model_validate(result)
        except ValidationError as exc:
            logger.error("getMedicineById returned a malformed record: %s", _first_error(exc))
            return failure(f"Malformed medicine record: {_first_error(exc)}")

    async def add_medicine(self, data: MedicineCreate | Mapping[str, Any]) -> Any:
        try:
            medicine = data if isinstance(data, MedicineCreate) else MedicineCreate.model_validate(dict(data))
        except ValidationError as exc:
            logger.error("addMedicine rejected locally: %s", _first_error(exc))
            return failure(f"Invalid medicine: {_first_error(exc)}")
        return await self.post("addMedicine", medicine.to_payload())

    async def update_medicine(self, medicine_id: str, data: BaseModel | Mapping[str, Any]) -> Any:
        if isinstance(data, Medicine):
            fields = data.write_fields()
        elif isinstance(data, BaseModel):
            fields = data.model_dump()
        else:
            fields = dict(data)
        # The positional id names the record; ignore any id carried in the data.
        fields.pop("medicineId", None)
        fields["medicine_id"] = medicine_id
        try:
            medicine = MedicineUpdate.model_validate(fields)
        except ValidationError as exc:
            logger.error("updateMedicine rejected locally: %s", _first_error(exc))
            return failure(f"Invalid medicine: {_first_error(exc)}")
        return await self.post("updateMedicine", medicine.to_payload())

    async def delete_medicine(self, medicine_id: str) -> Any:
        return await self.post("deleteMedicine", {"medicineId": medicine_id})

    async def get_medicines_by_patient(self, patient_email: str) -> list[Medicine] | dict:
        result = await self.get("getMedicinesByPatient", {"patientEmail": patient_email})
        return self._records(result, Medicine, "getMedicinesByPatient")

    async def get_medicines_by_caregiver(self, caregiver_email: str) -> list[Medicine] | dict:
        result = await self.get("getMedicinesByCaregiver", {"caregiverEmail": caregiver_email})
        return self._records(result, Medicine, "getMedicinesByCaregiver")

    async def mark_medicine_as_taken(self, medicine_id: str) -> Any:
        # Same-day repeats are collapsed by the backend; retries go through untouched.
        return await self.post("markMedicineAsTaken", {"medicineId": medicine_id})

    # ── voice notes ─────────────────────────────────────

    async def save_voice_file(self, audio: Any, extension: str = DEFAULT_VOICE_EXTENSION) -> Any:
        encoded = encode_voice_payload(audio)
        if is_failure(encoded):
            return encoded
        return await self.post(
            "uploadVoiceFile",
            {"audioBase64": encoded["audioBase64"], "fileName": voice_file_name(extension)},
        )

    async def get_voice_file(self, file_id: str) -> dict:
        """Look up the download URL, then fetch the audio bytes.

        Both exchanges together share one timeout_ms budget.
        """
        try:
            return await asyncio.wait_for(self._fetch_voice_file(file_id), timeout=self.config.timeout_seconds)
        except asyncio.TimeoutError:
            message = f"Request timed out after {self.config.timeout_ms} ms"
        logger.error("getVoiceFile %s: %s", file_id, message)
        return failure(message)

    async def _fetch_voice_file(self, file_id: str) -> dict:
        result = await self.get("getVoiceFile", {"fileId": file_id})
        if is_failure(result):
            return result
        if not isinstance(result, Mapping) or not result.get("success") or not result.get("downloadUrl"):
            logger.error("getVoiceFile %s: no download URL in response", file_id)
            return failure("Voice file response has no download URL")

        download_url = httpx.URL(self.config.api_url).join(str(result["downloadUrl"]))
        content = await self._exchange("GET", lambda client: client.get(download_url), read=_read_bytes)
        if is_failure(content):
            return content
        return {"success": True, "content": content}

    async def delete_voice_file(self, file_id: str) -> Any:
        return await self.post("deleteVoiceFile", {"fileId": file_id})

    # ── reports ─────────────────────────────────────────

    async def get_weekly_report(self, caregiver_email: str) -> Any:
        return await self.get("getWeeklyReport", {"caregiverEmail": caregiver_email})
