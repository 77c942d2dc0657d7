import json
from typing import Any, Dict

from pydantic import BaseModel

from .exceptions import LinkedInError, SubscriptionRequiredError


def to_jsonable(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump()
    if isinstance(data, list):
        return [to_jsonable(item) for item in data]
    if isinstance(data, dict):
        return {key: to_jsonable(value) for key, value in data.items()}
    return data


def build_response(tool: str, data: Any) -> Dict[str, Any]:
    """Successful call: the capability's payload is passed through untouched."""
    return {"tool": tool, "error": False, "data": to_jsonable(data)}


def build_error(tool: str, error: BaseException) -> Dict[str, Any]:
    """Failed call: a human-readable message plus an error marker.

    Subscription failures get their own wording so the caller knows the fix
    is a Sales Navigator seat, not a retry.
    """
    detail = error.message if isinstance(error, LinkedInError) else str(error)
    if isinstance(error, SubscriptionRequiredError):
        message = f"{tool} requires an active LinkedIn Sales Navigator subscription. Error: {detail}"
    else:
        message = f"{tool} failed: {detail}"
    return {
        "tool": tool,
        "error": True,
        "error_type": type(error).__name__,
        "message": message,
    }


def format_result(payload: Dict[str, Any]) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False, default=str)
