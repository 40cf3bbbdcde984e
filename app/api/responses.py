"""Response envelopes shared by the API routers."""
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def success_envelope(data: Dict[str, Any]) -> Dict[str, Any]:
    """Wrap a payload in the success envelope."""
    return {
        "success": True,
        "data": jsonable_encoder(data, by_alias=True),
        "timestamp": utc_now_iso(),
    }


def error_response(status_code: int, code: str, message: str) -> JSONResponse:
    """Build a failure envelope with a stable machine-readable code."""
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": {"code": code, "message": message},
            "timestamp": utc_now_iso(),
        },
    )
