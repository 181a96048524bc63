import base64
import logging
import os
import time
from typing import Any

from medalert.schemas.envelope import failure

logger = logging.getLogger("medalert.voice")

VOICE_FILE_PREFIX = "voice_"
DEFAULT_VOICE_EXTENSION = "webm"


def voice_file_name(extension: str = DEFAULT_VOICE_EXTENSION, now_ms: int | None = None) -> str:
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    ext = (extension or DEFAULT_VOICE_EXTENSION).lstrip(".")
    return f"{VOICE_FILE_PREFIX}{now_ms}.{ext}"


def _read_audio(source: Any) -> bytes:
    if isinstance(source, (bytes, bytearray, memoryview)):
        return bytes(source)
    if isinstance(source, (str, os.PathLike)):
        with open(source, "rb") as fh:
            return fh.read()
    if hasattr(source, "read"):
        data = source.read()
        if isinstance(data, str):
            raise TypeError("voice source must be opened in binary mode")
        return bytes(data)
    raise TypeError(f"unsupported voice source: {type(source).__name__}")


def encode_voice_payload(source: Any) -> dict:
    """Read audio from bytes, a path, or a binary file object and base64 it.

    Returns {"success": True, "audioBase64": ...} or the failure envelope.
    """
    try:
        data = _read_audio(source)
    except (OSError, TypeError, ValueError) as exc:
        logger.error("Voice read failed: %s", exc)
        return failure(str(exc))
    return {"success": True, "audioBase64": base64.b64encode(data).decode("ascii")}

