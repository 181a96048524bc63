from collections.abc import Mapping
from typing import Any


def failure(message: str) -> dict:
    return {"success": False, "message": message}


def is_failure(result: Any) -> bool:
    """True for transport failures and for backend rejections alike."""
    return isinstance(result, Mapping) and result.get("success") is False
