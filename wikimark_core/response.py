"""Standard JSON envelope returned by every Wikimark route."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from flask import jsonify

ERROR_CODE_BY_STATUS: Dict[int, str] = {
    400: "INVALID_INPUT",
    401: "UNAUTHORIZED",
    403: "UNAUTHORIZED",
    404: "NOT_FOUND",
    405: "INVALID_INPUT",
    413: "PAYLOAD_TOO_LARGE",
    500: "INTERNAL_ERROR",
}


def error_code_for_status(status_code: Optional[int]) -> str:
    return ERROR_CODE_BY_STATUS.get(status_code or 500, "INTERNAL_ERROR")


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class ResponseEnvelope:
    """Container describing the standard API response envelope."""

    success: bool
    code: str
    message: str
    data: Optional[Any]
    timestamp: str

    @classmethod
    def build(
        cls,
        success: bool,
        code: str,
        message: str,
        data: Optional[Any] = None,
    ) -> "ResponseEnvelope":
        return cls(success=success, code=code, message=message, data=data, timestamp=_utc_timestamp())

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_flask_response(self, status_code: int) -> Tuple[Any, int]:
        return jsonify(self.to_dict()), status_code


def success_response(
    message: str,
    data: Optional[Any] = None,
    *,
    code: str = "OK",
    status_code: int = 200,
) -> Tuple[Any, int]:
    return ResponseEnvelope.build(True, code, message, data).to_flask_response(status_code)


def error_response(
    code: str,
    message: str,
    *,
    status_code: int,
) -> Tuple[Any, int]:
    return ResponseEnvelope.build(False, code, message).to_flask_response(status_code)
