# minigram/core/json.py
"""
Todo lo que sale por la API va dentro del mismo sobre:

    éxito → {"success": true,  "message"?: "...", ...payload}
    error → {"success": false, "message": "..."}
"""
import json
from typing import Any

from fastapi.encoders import jsonable_encoder
from starlette.responses import JSONResponse


def ok(message: str | None = None, **payload: Any) -> dict:
    body: dict[str, Any] = {"success": True}
    if message is not None:
        body["message"] = message
    body.update(payload)
    return body


def fail(message: str) -> dict:
    return {"success": False, "message": message}


class UTF8JSONResponse(JSONResponse):
    """Captions con emojis/acentos viajan tal cual (sin \\uXXXX)."""

    media_type = "application/json; charset=utf-8"

    def render(self, content: Any) -> bytes:
        return json.dumps(
            jsonable_encoder(content),
            ensure_ascii=False,
            allow_nan=False,
            separators=(",", ":"),
        ).encode("utf-8")

    @classmethod
    def error(cls, status_code: int, message: str, headers: dict | None = None) -> "UTF8JSONResponse":
        return cls(status_code=status_code, content=fail(message), headers=headers)
