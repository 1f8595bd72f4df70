"""Uniform response envelope.

Every endpoint answers with ``{"code": ..., "msg": ..., "data": ...}``. The
business code is carried in the body; the HTTP status is derived from it, so
clients can rely on either.
"""

from enum import Enum
from typing import Any, Generic, Optional, TypeVar

from fastapi.responses import JSONResponse
from pydantic import BaseModel

T = TypeVar("T")


class BizCode(Enum):
    """Business status codes and their default messages."""

    SUCCESS = (200, "OK")
    BAD_REQUEST = (400, "Bad request")
    UNAUTHORIZED = (401, "Unauthorized")
    FORBIDDEN = (403, "Forbidden")
    NOT_FOUND = (404, "Resource not found")
    SERVER_ERROR = (500, "Internal server error")

    @property
    def code(self) -> int:
        return self.value[0]

    @property
    def message(self) -> str:
        return self.value[1]

    @property
    def status_code(self) -> int:
        # Business codes mirror the HTTP status classes one to one
        return self.value[0]

    @classmethod
    def from_status(cls, status_code: int) -> "BizCode":
        for biz in cls:
            if biz.status_code == status_code:
                return biz
        if status_code < 400:
            return cls.SUCCESS
        if status_code < 500:
            return cls.BAD_REQUEST
        return cls.SERVER_ERROR


class ApiResponse(BaseModel, Generic[T]):
    code: int
    msg: str
    data: Optional[T] = None

    @classmethod
    def new(
        cls, biz: BizCode, msg: Optional[str] = None, data: Any = None
    ) -> "ApiResponse":
        return cls(code=biz.code, msg=msg or biz.message, data=data)

    @classmethod
    def success(cls, data: Any = None, msg: Optional[str] = None) -> "ApiResponse":
        return cls.new(BizCode.SUCCESS, msg, data)

    @classmethod
    def error(cls, biz: BizCode, msg: Optional[str] = None) -> "ApiResponse":
        return cls.new(biz, msg)

    def to_response(self, headers: Optional[dict[str, str]] = None) -> JSONResponse:
        """Render as a JSONResponse whose HTTP status follows the business code."""
        return JSONResponse(
            status_code=BizCode.from_status(self.code).status_code,
            content=self.model_dump(mode="json"),
            headers=headers,
        )
