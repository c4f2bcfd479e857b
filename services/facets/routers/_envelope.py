"""Shared response envelope helpers for routers."""

from __future__ import annotations

import uuid
from typing import Any

from fastapi import Request
from starlette.responses import JSONResponse


def request_id(request: Request) -> str:
    return getattr(request.state, "request_id", str(uuid.uuid4()))


def ok(request: Request, data: Any) -> dict:
    return {"success": True, "data": data, "requestId": request_id(request)}


def error(request: Request, status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": {"code": code, "message": message},
            "requestId": request_id(request),
        },
    )
