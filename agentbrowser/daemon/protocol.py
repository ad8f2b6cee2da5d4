"""Line-delimited JSON protocol for daemon IPC.

One JSON object per line, UTF-8, newline-terminated, one request per
connection.

Request format:
    {
        "id": str,              # "r" + microsecond clock mod 1e6
        "action": str,          # navigate, click, snapshot, ...
        ...                     # action-specific fields
    }

Response format:
    {
        "success": bool,
        "data": any | None,     # action result
        "error": str | None,    # error message if success is false
    }

Request ids are only used for correlation in logs. They are not unique
across a busy second and nothing depends on them being so.
"""

import json
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

UNKNOWN_ERROR = "Unknown error"


@dataclass
class Response:
    success: bool
    data: Any = None
    error: Optional[str] = None

    @property
    def error_message(self) -> str:
        """Error text to show the user, even when the daemon omitted it."""
        return self.error or UNKNOWN_ERROR

    def to_dict(self) -> Dict[str, Any]:
        return {"success": self.success, "data": self.data, "error": self.error}

    @classmethod
    def failure(cls, error: str) -> "Response":
        """Response-shaped envelope for errors raised before the daemon answered."""
        return cls(success=False, data=None, error=error)


def generate_request_id() -> str:
    """Best-effort request id derived from the wall clock."""
    return f"r{int(time.time() * 1_000_000) % 1_000_000}"


def serialize_request(request: Dict[str, Any]) -> bytes:
    """
    Serialize request to one newline-terminated line.

    Args:
        request: Request dict with at least 'id' and 'action'

    Returns:
        UTF-8 encoded JSON bytes ending in b"\\n"
    """
    return (json.dumps(request) + "\n").encode("utf-8")


def deserialize_request(data: bytes) -> Dict[str, Any]:
    """
    Deserialize request from one line.

    Raises:
        json.JSONDecodeError: If data is not valid JSON
    """
    return json.loads(data.decode("utf-8"))


def serialize_response(response: Response) -> bytes:
    """Serialize response to one newline-terminated line."""
    return (json.dumps(response.to_dict()) + "\n").encode("utf-8")


def deserialize_response(data: bytes) -> Response:
    """
    Deserialize response from one line.

    Args:
        data: UTF-8 encoded JSON bytes

    Returns:
        Response

    Raises:
        ValueError: If data is not JSON or not shaped like a Response
            (json.JSONDecodeError and UnicodeDecodeError are ValueErrors)
    """
    payload = json.loads(data.decode("utf-8"))
    if not isinstance(payload, dict):
        raise ValueError("expected a JSON object")

    success = payload.get("success")
    if not isinstance(success, bool):
        raise ValueError("missing boolean field 'success'")

    error = payload.get("error")
    if error is not None and not isinstance(error, str):
        raise ValueError("field 'error' must be a string or null")

    return Response(success=success, data=payload.get("data"), error=error)
