"""Response envelope and request helpers shared by the routers."""

from typing import Any

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def ok(data: Any = None, status_code: int = 200, message: str | None = None) -> JSONResponse:
    """Wrap a payload in the success envelope."""
    content = {"success": True, "data": jsonable_encoder(data)}
    if message:
        content["message"] = message
    return JSONResponse(status_code=status_code, content=content)


def get_services(request: Request):
    """Get the service container from app state."""
    return request.app.state.services
